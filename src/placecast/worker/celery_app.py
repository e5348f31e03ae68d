from celery import Celery
from celery.signals import setup_logging

from ..config import settings
from ..logging_config import configure_logging

app = Celery(
    "placecast",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["placecast.worker.tasks"],
)

# One queue per channel so an SMS outage never holds up email, and vice versa.
# Start consumers with e.g. `celery -A placecast.worker.celery_app worker -Q sms-queue`.
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    task_default_queue=settings.email_queue,
    task_routes={
        "placecast.deliver_email": {"queue": settings.email_queue},
        "placecast.deliver_sms": {"queue": settings.sms_queue},
    },
    result_expires=3600,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs) -> None:
    configure_logging(settings)
