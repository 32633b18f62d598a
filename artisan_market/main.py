# artisan_market/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# models must be imported before create_all
import artisan_market.data.models  # noqa: F401
from artisan_market.api import register_routers
from artisan_market.api.errors import register_exception_handlers
from artisan_market.data.database import Base, engine
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import APP_NAME, APP_VERSION, ENVIRONMENT, FRONTEND_URL

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info(f"{APP_NAME} {APP_VERSION} started ({ENVIRONMENT})")
    yield
    logger.info(f"{APP_NAME} shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routers(app)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
