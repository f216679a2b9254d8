from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.common import ListResponse
from app.schemas.notification import NotificationRead, UnreadCountResponse
from app.services.auth_dependencies import require_user_auth
from app.services.authorization import Principal
from app.services.notification import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    count = notifications.unread_count(db, str(principal.id))
    return {"count": count}


@router.get("", response_model=ListResponse[NotificationRead])
@router.get("/me", response_model=ListResponse[NotificationRead])
def list_my_notifications(
    is_read: bool | None = None,
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=25, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return notifications.list_response(
        db,
        str(principal.id),
        is_read,
        "created_at",
        order_dir,
        limit,
        offset,
    )


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return notifications.mark_read(db, str(principal.id), notification_id)
