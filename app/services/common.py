import uuid

from fastapi import HTTPException
from sqlalchemy import select


def coerce_uuid(value):
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _key_or_404(value, detail: str):
    try:
        key = coerce_uuid(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=detail)
    if key is None:
        raise HTTPException(status_code=404, detail=detail)
    return key


def get_or_404(db, model, value, detail: str):
    """Load ``model`` by primary key, raising 404 for unknown or malformed ids."""
    instance = db.get(model, _key_or_404(value, detail))
    if not instance:
        raise HTTPException(status_code=404, detail=detail)
    return instance


def get_for_update_or_404(db, model, value, detail: str):
    """Like ``get_or_404`` but reads the row under ``SELECT ... FOR UPDATE``.

    ``populate_existing`` refreshes an instance already in the session so the
    caller sees the locked row, not a stale identity-map copy.
    """
    instance = db.scalar(
        select(model)
        .where(model.id == _key_or_404(value, detail))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not instance:
        raise HTTPException(status_code=404, detail=detail)
    return instance


def apply_ordering(query, order_by, order_dir, allowed_columns):
    if order_by not in allowed_columns:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid order_by. Allowed: {', '.join(sorted(allowed_columns))}",
        )
    column = allowed_columns[order_by]
    if order_dir == "desc":
        return query.order_by(column.desc())
    return query.order_by(column.asc())


def apply_pagination(query, limit, offset):
    return query.limit(limit).offset(offset)
