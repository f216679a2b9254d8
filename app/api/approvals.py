from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.common import ListResponse
from app.schemas.document import PendingRequestRead, ResolutionResult
from app.services.approval import approvals
from app.services.auth_dependencies import require_user_auth
from app.services.authorization import Principal

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.get("/requests", response_model=ListResponse[PendingRequestRead])
def list_pending_requests(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return approvals.list_response(db, principal, limit, offset)


@router.post("/requests/{request_id}/approve", response_model=ResolutionResult)
def approve_request(
    request_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return approvals.approve(db, principal, request_id)


@router.post("/requests/{request_id}/reject", response_model=ResolutionResult)
def reject_request(
    request_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return approvals.reject(db, principal, request_id)
