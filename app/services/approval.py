"""Resolution of permission requests by administrators.

Approve and reject each run as one unit of work: the request is claimed with
a conditional update (``WHERE status = 'pending'``) after being read under a
row lock, so of two concurrent resolutions exactly one wins and the other
reports "already processed". The notification documenting a resolution is
written in the same transaction as the state change.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from app.metrics import RESOLUTIONS
from app.models.document import (
    Document,
    DocumentStatus,
    PermissionRequest,
    PermissionType,
    RequestStatus,
)
from app.services.authorization import Principal, decide_resolution, enforce
from app.services.common import apply_pagination, get_for_update_or_404
from app.services.document import Documents
from app.services.event import EventType, publish_event
from app.services.notification import Notifications
from app.services.response import ListResponseMixin
from app.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

ALREADY_PROCESSED = "Request already processed"


class _AlreadyProcessed(Exception):
    """Raised inside a unit of work to roll it back after losing a claim."""


def _result(ok: bool, message: str) -> dict:
    return {"ok": ok, "message": message}


def _load_request(db: Session, request_id: str) -> PermissionRequest:
    return get_for_update_or_404(db, PermissionRequest, request_id, "Request not found")


def _claim(
    db: Session,
    request: PermissionRequest,
    principal: Principal,
    status: RequestStatus,
    clear_staged: bool,
) -> None:
    values = {
        "status": status,
        "decided_by": principal.id,
        "decided_at": datetime.now(timezone.utc),
    }
    if clear_staged:
        values["replace_file_url"] = None
    result = db.execute(
        update(PermissionRequest)
        .where(
            PermissionRequest.id == request.id,
            PermissionRequest.status == RequestStatus.pending,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise _AlreadyProcessed()


def _message(request_type: PermissionType, title: str, verdict: str) -> str:
    return (
        f'Your request {request_type.value.upper()} for document "{title}" '
        f"has been {verdict}"
    )


class Approvals(ListResponseMixin):
    @staticmethod
    def list(
        db: Session,
        principal: Principal,
        limit: int,
        offset: int,
    ) -> list[PermissionRequest]:  # type: ignore[override]
        enforce(decide_resolution(principal))
        stmt = (
            select(PermissionRequest)
            .where(PermissionRequest.status == RequestStatus.pending)
            .options(
                selectinload(PermissionRequest.document).selectinload(
                    Document.creator
                ),
                selectinload(PermissionRequest.requester),
            )
            .order_by(PermissionRequest.created_at.desc())
        )
        return db.scalars(apply_pagination(stmt, limit, offset)).all()

    @staticmethod
    def approve(db: Session, principal: Principal, request_id: str) -> dict:
        enforce(decide_resolution(principal))

        missing_staged_ref = False
        notice = None
        try:
            with unit_of_work(db):
                request = _load_request(db, request_id)
                if request.status != RequestStatus.pending:
                    return _result(False, ALREADY_PROCESSED)
                document = db.get(Document, request.document_id)
                if not document:
                    raise HTTPException(status_code=404, detail="Document not found")

                request_type = request.type
                requester_id = request.requested_by
                title = document.title
                resolved_id = request.id
                document_id = request.document_id

                if request_type == PermissionType.delete:
                    _claim(db, request, principal, RequestStatus.approved, False)
                    notice = Notifications.record(
                        db,
                        requester_id,
                        _message(request_type, title, "APPROVED"),
                        EventType.request_approved.value,
                        "permission_request",
                        request.id,
                    )
                    Documents.remove(db, document)
                    message = "Delete approved & document deleted"
                elif request_type == PermissionType.replace:
                    staged_ref = request.replace_file_url
                    if not staged_ref:
                        # Unstick the document; the request stays pending.
                        document.status = DocumentStatus.active
                        missing_staged_ref = True
                    else:
                        _claim(db, request, principal, RequestStatus.approved, True)
                        document.file_url = staged_ref
                        document.version = Document.version + 1
                        document.status = DocumentStatus.active
                        notice = Notifications.record(
                            db,
                            requester_id,
                            _message(request_type, title, "APPROVED"),
                            EventType.request_approved.value,
                            "permission_request",
                            request.id,
                        )
                        message = "Replace approved & document updated"
                else:
                    _claim(db, request, principal, RequestStatus.approved, False)
                    notice = Notifications.record(
                        db,
                        requester_id,
                        _message(request_type, title, "APPROVED"),
                        EventType.request_approved.value,
                        "permission_request",
                        request.id,
                    )
                    message = "Approved"
                db.flush()
                notice_id = notice.id if notice is not None else None
        except _AlreadyProcessed:
            logger.info("Request %s was resolved concurrently", request_id)
            RESOLUTIONS.labels(type="unknown", outcome="already_processed").inc()
            return _result(False, ALREADY_PROCESSED)

        if missing_staged_ref:
            # The revert above is committed; only now report the failure.
            logger.warning(
                "Request %s has no staged replacement; document %s reverted to active",
                request_id,
                document_id,
            )
            RESOLUTIONS.labels(type="replace", outcome="failed").inc()
            raise HTTPException(
                status_code=400,
                detail="replaceFileUrl is missing on PermissionRequest",
            )

        RESOLUTIONS.labels(type=request_type.value, outcome="approved").inc()
        logger.info(
            "Admin %s approved %s request %s for document %s",
            principal.id,
            request_type.value,
            resolved_id,
            document_id,
        )
        publish_event(
            EventType.request_approved,
            entity_type="permission_request",
            entity_id=resolved_id,
            actor_id=principal.id,
            document_id=document_id,
            payload={"type": request_type.value},
        )
        if notice_id is not None:
            Notifications.announce(
                notice_id, requester_id, _message(request_type, title, "APPROVED")
            )
        return _result(True, message)

    @staticmethod
    def reject(db: Session, principal: Principal, request_id: str) -> dict:
        enforce(decide_resolution(principal))

        try:
            with unit_of_work(db):
                request = _load_request(db, request_id)
                if request.status != RequestStatus.pending:
                    return _result(False, ALREADY_PROCESSED)
                document = db.get(Document, request.document_id)
                if not document:
                    raise HTTPException(status_code=404, detail="Document not found")

                request_type = request.type
                requester_id = request.requested_by
                title = document.title
                resolved_id = request.id
                document_id = request.document_id

                _claim(db, request, principal, RequestStatus.rejected, True)
                document.status = DocumentStatus.active
                notice = Notifications.record(
                    db,
                    requester_id,
                    _message(request_type, title, "REJECTED"),
                    EventType.request_rejected.value,
                    "permission_request",
                    request.id,
                )
                db.flush()
                notice_id = notice.id
        except _AlreadyProcessed:
            logger.info("Request %s was resolved concurrently", request_id)
            RESOLUTIONS.labels(type="unknown", outcome="already_processed").inc()
            return _result(False, ALREADY_PROCESSED)

        RESOLUTIONS.labels(type=request_type.value, outcome="rejected").inc()
        logger.info(
            "Admin %s rejected %s request %s for document %s",
            principal.id,
            request_type.value,
            resolved_id,
            document_id,
        )
        publish_event(
            EventType.request_rejected,
            entity_type="permission_request",
            entity_id=resolved_id,
            actor_id=principal.id,
            document_id=document_id,
            payload={"type": request_type.value},
        )
        Notifications.announce(
            notice_id, requester_id, _message(request_type, title, "REJECTED")
        )
        return _result(True, "Rejected")


approvals = Approvals()
