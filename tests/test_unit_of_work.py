import pytest

from app.models.person import Person
from app.services.unit_of_work import unit_of_work


def _person(email):
    return Person(email=email, display_name="UoW")


class TestUnitOfWork:
    def test_commits_on_success(self, db_session):
        with unit_of_work(db_session):
            p = _person("ok@example.com")
            db_session.add(p)
        db_session.expire_all()
        assert db_session.get(Person, p.id) is not None

    def test_commits_on_return(self, db_session):
        def create():
            with unit_of_work(db_session):
                p = _person("returned@example.com")
                db_session.add(p)
                return p

        p = create()
        db_session.rollback()
        assert db_session.get(Person, p.id) is not None

    def test_rolls_back_on_error(self, db_session):
        with pytest.raises(RuntimeError):
            with unit_of_work(db_session):
                p = _person("boom@example.com")
                db_session.add(p)
                db_session.flush()
                raise RuntimeError("boom")
        assert db_session.get(Person, p.id) is None
