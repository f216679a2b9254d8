from app.models.person import Person, PersonRole  # noqa: F401
from app.models.document import (  # noqa: F401
    Document,
    DocumentStatus,
    Notification,
    PermissionRequest,
    PermissionType,
    RequestStatus,
)
