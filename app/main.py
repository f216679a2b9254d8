import os

from fastapi import Depends, FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.approvals import router as approvals_router
from app.api.deps import require_user_auth
from app.api.documents import router as documents_router
from app.api.notifications import router as notifications_router
from app.config import settings
from app.errors import register_error_handlers
from app.logging import configure_logging

configure_logging()

app = FastAPI(title="Document Approvals API")
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(documents_router, dependencies=[Depends(require_user_auth)])
_include_api_router(approvals_router, dependencies=[Depends(require_user_auth)])
_include_api_router(
    notifications_router, dependencies=[Depends(require_user_auth)]
)

os.makedirs(settings.upload_dir, exist_ok=True)
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir),
    name="uploads",
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
