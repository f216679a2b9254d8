import logging

from app.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.events.process_event", ignore_result=True)
def process_event(
    event_type: str,
    entity_type: str,
    entity_id: str,
    actor_id: str | None = None,
    document_id: str | None = None,
    payload: dict | None = None,
) -> None:
    """Central fan-out task for workflow events.

    Every event is logged; recorded notifications are handed to the
    delivery task.
    """
    payload = payload or {}
    logger.info("Processing event %s for %s/%s", event_type, entity_type, entity_id)

    if event_type == "notification.recorded":
        _fanout_delivery(entity_id, payload)


def _fanout_delivery(notification_id: str, payload: dict) -> None:
    try:
        from app.tasks.notifications import send_notification_email

        send_notification_email.delay(
            notification_id=notification_id,
            person_id=payload.get("person_id"),
            message=payload.get("message", ""),
        )
    except Exception as e:
        logger.exception("Failed to fan-out notification delivery: %s", e)
