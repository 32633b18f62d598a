# artisan_market/api/__init__.py
from fastapi import FastAPI

from artisan_market.api.routers import (
    analytics,
    auctions,
    auth,
    cart,
    cloudinary,
    health,
    orders,
    payment,
    resale,
    sap_analytics,
    shopcards,
    stories,
    subscription,
    users,
)


def register_routers(app: FastAPI):
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(shopcards.router)
    app.include_router(auctions.router)
    app.include_router(auctions.ws_router)
    app.include_router(cart.router)
    app.include_router(payment.router)
    app.include_router(subscription.router)
    app.include_router(orders.router)
    app.include_router(resale.router)
    app.include_router(stories.router)
    app.include_router(cloudinary.router)
    app.include_router(analytics.router)
    app.include_router(sap_analytics.router)
