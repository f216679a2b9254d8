from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.document import DocumentStatus, PermissionType, RequestStatus
from app.models.person import PersonRole


# ---------------------------------------------------------------------------
# Person summary (embedded in document and request payloads)
# ---------------------------------------------------------------------------


class PersonSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: PersonRole


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentBase(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    document_type: str | None = Field(default=None, max_length=120)


class DocumentCreate(DocumentBase):
    pass


class DocumentOverrides(BaseModel):
    """Optional field overrides applied by an administrator replace."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    document_type: str | None = Field(default=None, max_length=120)


class DocumentRead(DocumentBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_url: str
    version: int
    status: DocumentStatus
    created_by: UUID
    creator: PersonSummary | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# PermissionRequest
# ---------------------------------------------------------------------------


class PermissionRequestRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: PermissionType
    status: RequestStatus
    document_id: UUID
    requested_by: UUID
    replace_file_url: str | None = None
    decided_by: UUID | None = None
    decided_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PendingRequestRead(PermissionRequestRead):
    document: DocumentRead
    requester: PersonSummary


# ---------------------------------------------------------------------------
# Workflow outcomes
# ---------------------------------------------------------------------------


class ResolutionResult(BaseModel):
    ok: bool
    message: str


class ChangeRequestOutcome(BaseModel):
    """Result of a delete/replace request.

    Ordinary users get the staged ``request``; administrators bypass the
    workflow and get either the replaced ``document`` or nothing (delete).
    """

    ok: bool = True
    message: str
    request: PermissionRequestRead | None = None
    document: DocumentRead | None = None
