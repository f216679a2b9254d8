import logging

from app.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(
    name="app.tasks.notifications.send_notification_email", ignore_result=True
)
def send_notification_email(
    notification_id: str,
    person_id: str | None,
    message: str,
) -> None:
    """Deliver a recorded notification outside the application.

    Placeholder: the notification row is already durable; a real transport
    (email, push) would be plugged in here.
    """
    logger.info(
        "Would deliver notification %s to person %s: %s",
        notification_id,
        person_id,
        message,
    )
