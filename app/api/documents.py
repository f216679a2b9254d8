from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.document import Document
from app.schemas.common import ListResponse
from app.schemas.document import (
    ChangeRequestOutcome,
    DocumentCreate,
    DocumentOverrides,
    DocumentRead,
    PermissionRequestRead,
)
from app.services import document as doc_service
from app.services.auth_dependencies import require_user_auth
from app.services.authorization import Principal, decide_document_change, enforce
from app.services.storage import storage

router = APIRouter(prefix="/documents", tags=["documents"])


async def _store_upload(file: UploadFile | None) -> str:
    if file is None:
        raise HTTPException(status_code=400, detail="File is required")
    data = await file.read()
    return storage.save(file.filename, data)


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


# ------------------------------------------------------------------
# Upload, list, get
# ------------------------------------------------------------------


@router.post("", response_model=DocumentRead, status_code=status.HTTP_201_CREATED)
async def create_document(
    title: str = Form(..., min_length=1, max_length=500),
    description: str | None = Form(default=None),
    document_type: str | None = Form(default=None, max_length=120),
    file: UploadFile | None = File(default=None),
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    file_url = await _store_upload(file)
    payload = DocumentCreate(
        title=title,
        description=_blank_to_none(description),
        document_type=_blank_to_none(document_type),
    )
    return doc_service.documents.create(db, principal, payload, file_url)


@router.get("", response_model=ListResponse[DocumentRead])
def list_documents(
    q: str | None = None,
    order_by: str = Query(default="created_at"),
    order_dir: str = Query(default="desc", pattern="^(asc|desc)$"),
    limit: int = Query(default=10, ge=1, le=50),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return doc_service.documents.list_response(
        db, q, order_by, order_dir, limit, offset
    )


@router.get("/{document_id}", response_model=DocumentRead)
def get_document(
    document_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    return doc_service.documents.get(db, document_id)


# ------------------------------------------------------------------
# Change requests
# ------------------------------------------------------------------


@router.delete("/{document_id}", response_model=ChangeRequestOutcome)
def request_delete(
    document_id: str,
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    request = doc_service.documents.request_delete(db, principal, document_id)
    if request is None:
        return ChangeRequestOutcome(message="Deleted by admin")
    return ChangeRequestOutcome(
        message="Delete requested; waiting for admin approval",
        request=PermissionRequestRead.model_validate(request),
    )


@router.post("/{document_id}/replace", response_model=ChangeRequestOutcome)
async def request_replace(
    document_id: str,
    title: str | None = Form(default=None, max_length=500),
    description: str | None = Form(default=None),
    document_type: str | None = Form(default=None, max_length=120),
    file: UploadFile | None = File(default=None),
    principal: Principal = Depends(require_user_auth),
    db: Session = Depends(get_db),
):
    # Existence and ownership are checked before the upload is stored.
    document = doc_service.documents.get(db, document_id)
    enforce(decide_document_change(principal, document, "replace"))
    file_url = await _store_upload(file)
    overrides = DocumentOverrides(
        title=_blank_to_none(title),
        description=_blank_to_none(description),
        document_type=_blank_to_none(document_type),
    )
    result = doc_service.documents.request_replace(
        db, principal, document_id, file_url, overrides
    )
    if isinstance(result, Document):
        return ChangeRequestOutcome(
            message="Replaced by admin",
            document=DocumentRead.model_validate(result),
        )
    return ChangeRequestOutcome(
        message="Replace requested; waiting for admin approval",
        request=PermissionRequestRead.model_validate(result),
    )
