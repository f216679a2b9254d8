"""Bearer-token identity resolution.

Tokens are issued elsewhere; this module only turns a valid token into a
``Principal``. ``create_access_token`` exists for operators and tests.
"""

import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.db import get_db
from app.models.person import Person
from app.services.authorization import Principal

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    person_id: str | uuid.UUID, expires_delta: timedelta | None = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": str(person_id), "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise _unauthorized("Could not validate credentials")


def require_user_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_token(credentials.credentials)
    subject = payload.get("sub")
    try:
        person_id = uuid.UUID(str(subject))
    except ValueError:
        raise _unauthorized("Invalid authentication credentials")
    person = db.get(Person, person_id)
    if person is None or not person.is_active:
        raise _unauthorized("User not found")
    return Principal(id=person.id, role=person.role)
