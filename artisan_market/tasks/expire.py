# artisan_market/tasks/expire.py
from datetime import datetime, timedelta, timezone

from artisan_market.celery_worker import celery_app
from artisan_market.data.database import SessionLocal
from artisan_market.repos.order_repo import OrderRepo
from artisan_market.utils.logging import get_logger
from artisan_market.utils.settings import ORDER_EXPIRY_SECONDS

logger = get_logger(__name__)


@celery_app.task(name="artisan_market.tasks.expire.expire_pending_orders_task")
def expire_pending_orders_task(max_age_seconds: int = ORDER_EXPIRY_SECONDS):
    """Move orders whose payment session has lapsed from pending to expired."""
    logger.info("Expire pending orders task started")

    db = SessionLocal()
    try:
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=max_age_seconds)
        repo = OrderRepo(db)

        # conditional on status = 'pending', a payment confirmed meanwhile is untouched
        expired = repo.expire_pending_before(cutoff)
        repo.commit()

        logger.info(f"Expired {expired} pending orders older than {cutoff.isoformat()}")
        return {"expired": expired}
    except Exception as e:
        db.rollback()
        logger.warning(f"Expire pending orders failed: {e}")
        raise
    finally:
        db.close()
