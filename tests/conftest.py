import os
import tempfile
import uuid

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="uploads-"))
for _key in ("S3_ENDPOINT_URL", "S3_ACCESS_KEY", "S3_SECRET_KEY"):
    os.environ.pop(_key, None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db import Base, SessionLocal, get_db  # noqa: E402
from app.models.document import Document, DocumentStatus  # noqa: E402
from app.models.person import Person, PersonRole  # noqa: E402
from app.services.auth_dependencies import create_access_token  # noqa: E402
from app.services.authorization import Principal  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    bind = SessionLocal.kw["bind"]
    Base.metadata.create_all(bind)
    yield bind
    Base.metadata.drop_all(bind)


@pytest.fixture()
def db_session(engine):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


def _make_person(db_session, role=PersonRole.user, prefix="user"):
    p = Person(
        email=f"{prefix}-{uuid.uuid4().hex[:8]}@example.com",
        display_name=prefix.title(),
        role=role,
    )
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture()
def person(db_session):
    return _make_person(db_session, prefix="owner")


@pytest.fixture()
def other_person(db_session):
    return _make_person(db_session, prefix="other")


@pytest.fixture()
def admin(db_session):
    return _make_person(db_session, role=PersonRole.admin, prefix="admin")


@pytest.fixture()
def owner_principal(person):
    return Principal(id=person.id, role=person.role)


@pytest.fixture()
def other_principal(other_person):
    return Principal(id=other_person.id, role=other_person.role)


@pytest.fixture()
def admin_principal(admin):
    return Principal(id=admin.id, role=admin.role)


@pytest.fixture()
def document(db_session, person):
    doc = Document(
        title="Quality Manual",
        description="Top-level QMS manual",
        document_type="manual",
        file_url="/uploads/file1.pdf",
        version=1,
        status=DocumentStatus.active,
        created_by=person.id,
    )
    db_session.add(doc)
    db_session.commit()
    db_session.refresh(doc)
    return doc


@pytest.fixture()
def client(db_session):
    from app.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers(person):
    return {"Authorization": f"Bearer {create_access_token(person.id)}"}


@pytest.fixture()
def other_headers(other_person):
    return {"Authorization": f"Bearer {create_access_token(other_person.id)}"}


@pytest.fixture()
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin.id)}"}
