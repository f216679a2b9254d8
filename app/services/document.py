from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.metrics import REQUESTS_CREATED
from app.models.document import (
    Document,
    DocumentStatus,
    PermissionRequest,
    PermissionType,
    RequestStatus,
)
from app.schemas.document import DocumentCreate, DocumentOverrides
from app.services.authorization import (
    Principal,
    decide_document_change,
    enforce,
)
from app.services.common import apply_ordering, apply_pagination, get_or_404
from app.services.event import EventType, publish_event
from app.services.response import ListResponseMixin
from app.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)

_OVERRIDABLE_FIELDS = ("title", "description", "document_type")


def _ensure_no_pending_request(db: Session, document: Document) -> None:
    pending = db.scalar(
        select(PermissionRequest.id).where(
            PermissionRequest.document_id == document.id,
            PermissionRequest.status == RequestStatus.pending,
        )
    )
    if pending is not None:
        raise HTTPException(
            status_code=409,
            detail="A pending request already exists for this document",
        )


class Documents(ListResponseMixin):
    @staticmethod
    def create(
        db: Session, principal: Principal, payload: DocumentCreate, file_url: str
    ) -> Document:
        if not file_url:
            raise HTTPException(status_code=400, detail="File is required")
        with unit_of_work(db):
            document = Document(
                **payload.model_dump(),
                file_url=file_url,
                version=1,
                status=DocumentStatus.active,
                created_by=principal.id,
            )
            db.add(document)
            db.flush()
        db.refresh(document)
        logger.info("Created document %s", document.id)
        publish_event(
            EventType.document_created,
            entity_type="document",
            entity_id=document.id,
            actor_id=principal.id,
            document_id=document.id,
        )
        return document

    @staticmethod
    def get(db: Session, document_id: str) -> Document:
        return get_or_404(db, Document, document_id, "Document not found")

    @staticmethod
    def list(
        db: Session,
        q: str | None,
        order_by: str,
        order_dir: str,
        limit: int,
        offset: int,
    ) -> list[Document]:  # type: ignore[override]
        stmt = select(Document).options(selectinload(Document.creator))
        term = (q or "").strip()
        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(
                or_(
                    Document.title.ilike(pattern),
                    Document.description.ilike(pattern),
                    Document.document_type.ilike(pattern),
                )
            )
        stmt = apply_ordering(
            stmt,
            order_by,
            order_dir,
            {
                "created_at": Document.created_at,
                "title": Document.title,
                "updated_at": Document.updated_at,
            },
        )
        return db.scalars(apply_pagination(stmt, limit, offset)).all()

    @staticmethod
    def remove(db: Session, document: Document) -> None:
        """Delete ``document`` and every request that references it.

        Must run inside the caller's unit of work. Requests go first so the
        cascade does not depend on the database enforcing ``ON DELETE``.
        """
        document_id = document.id
        db.execute(
            delete(PermissionRequest)
            .where(PermissionRequest.document_id == document_id)
            .execution_options(synchronize_session="fetch")
        )
        db.execute(
            delete(Document)
            .where(Document.id == document_id)
            .execution_options(synchronize_session="fetch")
        )

    # ------------------------------------------------------------------
    # Change requests
    # ------------------------------------------------------------------

    @staticmethod
    def request_delete(
        db: Session, principal: Principal, document_id: str
    ) -> PermissionRequest | None:
        """Stage a delete for approval, or delete outright for admins.

        Returns the created request, or ``None`` when an administrator
        deleted the document directly.
        """
        document = Documents.get(db, document_id)
        decision = enforce(decide_document_change(principal, document, "delete"))

        if decision.is_bypass:
            doc_id = document.id
            with unit_of_work(db):
                Documents.remove(db, document)
            logger.info("Admin %s deleted document %s", principal.id, doc_id)
            publish_event(
                EventType.document_deleted,
                entity_type="document",
                entity_id=doc_id,
                actor_id=principal.id,
                document_id=doc_id,
            )
            return None

        return Documents._stage_request(
            db, principal, document, PermissionType.delete
        )

    @staticmethod
    def request_replace(
        db: Session,
        principal: Principal,
        document_id: str,
        new_file_url: str,
        overrides: DocumentOverrides | None = None,
    ) -> PermissionRequest | Document:
        """Stage a file replacement, or apply it directly for admins.

        Returns the created request for owners and the updated document for
        administrators.
        """
        document = Documents.get(db, document_id)
        decision = enforce(decide_document_change(principal, document, "replace"))
        if not new_file_url:
            raise HTTPException(status_code=400, detail="File is required")

        if not decision.is_bypass:
            return Documents._stage_request(
                db,
                principal,
                document,
                PermissionType.replace,
                replace_file_url=new_file_url,
            )

        _ensure_no_pending_request(db, document)
        data = overrides.model_dump(exclude_none=True) if overrides else {}
        with unit_of_work(db):
            document.file_url = new_file_url
            document.version = Document.version + 1
            document.status = DocumentStatus.active
            for field in _OVERRIDABLE_FIELDS:
                if field in data:
                    setattr(document, field, data[field])
            db.flush()
        db.refresh(document)
        logger.info(
            "Admin %s replaced document %s (v%d)",
            principal.id,
            document.id,
            document.version,
        )
        publish_event(
            EventType.document_replaced,
            entity_type="document",
            entity_id=document.id,
            actor_id=principal.id,
            document_id=document.id,
            payload={"version": document.version},
        )
        return document

    @staticmethod
    def _stage_request(
        db: Session,
        principal: Principal,
        document: Document,
        request_type: PermissionType,
        replace_file_url: str | None = None,
    ) -> PermissionRequest:
        _ensure_no_pending_request(db, document)
        pending_status = (
            DocumentStatus.pending_delete
            if request_type == PermissionType.delete
            else DocumentStatus.pending_replace
        )
        try:
            with unit_of_work(db):
                document.status = pending_status
                request = PermissionRequest(
                    type=request_type,
                    status=RequestStatus.pending,
                    document_id=document.id,
                    requested_by=principal.id,
                    replace_file_url=replace_file_url,
                )
                db.add(request)
                db.flush()
        except IntegrityError:
            # A concurrent request won the partial unique index.
            raise HTTPException(
                status_code=409,
                detail="A pending request already exists for this document",
            )
        db.refresh(request)
        REQUESTS_CREATED.labels(type=request_type.value).inc()
        logger.info(
            "Person %s requested %s of document %s (request %s)",
            principal.id,
            request_type.value,
            request.document_id,
            request.id,
        )
        publish_event(
            EventType.request_created,
            entity_type="permission_request",
            entity_id=request.id,
            actor_id=principal.id,
            document_id=request.document_id,
            payload={"type": request_type.value},
        )
        return request


documents = Documents()
