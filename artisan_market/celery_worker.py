# artisan_market/celery_worker.py
from celery import Celery

from artisan_market.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "artisan_market",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly for the worker to register them
celery_app.conf.imports = (
    "artisan_market.tasks.expire",
    "artisan_market.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "expire-pending-orders": {
        "task": "artisan_market.tasks.expire.expire_pending_orders_task",
        "schedule": 600.0,  # every 10 minutes
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_acks_late = True
