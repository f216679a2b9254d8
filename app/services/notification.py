from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.document import Notification
from app.services.common import apply_ordering, apply_pagination, coerce_uuid
from app.services.event import EventType, publish_event
from app.services.response import ListResponseMixin

logger = logging.getLogger(__name__)


class Notifications(ListResponseMixin):
    @staticmethod
    def record(
        db: Session,
        person_id: str | uuid.UUID,
        message: str,
        event_type: str,
        entity_type: str,
        entity_id: str | uuid.UUID,
    ) -> Notification:
        """Add a notification to the caller's transaction.

        Does not commit; the enclosing unit of work decides whether the
        notification becomes durable together with the change it documents.
        """
        notification = Notification(
            person_id=coerce_uuid(person_id),
            message=message,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=str(entity_id),
        )
        db.add(notification)
        db.flush()
        logger.info(
            "Recorded notification %s for person %s", notification.id, person_id
        )
        return notification

    @staticmethod
    def announce(notification_id, person_id, message: str) -> None:
        """Queue delivery of an already committed notification."""
        publish_event(
            EventType.notification_recorded,
            entity_type="notification",
            entity_id=notification_id,
            payload={"person_id": str(person_id), "message": message},
        )

    @staticmethod
    def list(
        db: Session,
        person_id: str,
        is_read: bool | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> List[Notification]:
        query = db.query(Notification).filter(
            Notification.person_id == coerce_uuid(person_id)
        )
        if is_read is not None:
            query = query.filter(Notification.is_read == is_read)
        query = apply_ordering(
            query,
            order_by,
            order_dir,
            {"created_at": Notification.created_at},
        )
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def unread_count(db: Session, person_id: str) -> int:
        return (
            db.query(Notification)
            .filter(
                Notification.person_id == coerce_uuid(person_id),
                Notification.is_read.is_(False),
            )
            .count()
        )

    @staticmethod
    def mark_read(db: Session, person_id: str, notification_id: str) -> Notification:
        try:
            notification = db.get(Notification, coerce_uuid(notification_id))
        except ValueError:
            notification = None
        # Someone else's notification is indistinguishable from a missing one.
        if not notification or notification.person_id != coerce_uuid(person_id):
            raise HTTPException(status_code=404, detail="Notification not found")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(notification)
            logger.info("Marked notification %s as read", notification_id)
        return notification


notifications = Notifications()
