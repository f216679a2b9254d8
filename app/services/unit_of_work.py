from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run the enclosed writes as one transaction.

    Commits when the block exits normally (including ``return`` from inside
    it); rolls back and re-raises on any exception, so either every write in
    the block is durable or none is.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
