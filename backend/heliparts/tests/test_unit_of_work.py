from __future__ import annotations

import pytest

from heliparts import unit_of_work as uow
from heliparts.apps.fleet import models as fleet_models


def _tail_numbers(db):
    return sorted(h.tail_number for h in db.query(fleet_models.Helicopter).all())


def test_commits_on_success(db_session):
    with uow.unit_of_work(db_session):
        db_session.add(fleet_models.Helicopter(tail_number="N1"))

    db_session.expunge_all()
    assert _tail_numbers(db_session) == ["N1"]
    assert uow.in_unit_of_work(db_session) is False


def test_rolls_back_on_error(db_session):
    with pytest.raises(RuntimeError):
        with uow.unit_of_work(db_session):
            db_session.add(fleet_models.Helicopter(tail_number="N2"))
            db_session.flush()
            raise RuntimeError("boom")

    assert _tail_numbers(db_session) == []
    assert uow.in_unit_of_work(db_session) is False


def test_nested_unit_joins_outer(db_session, monkeypatch):
    commits = []
    real_commit = db_session.commit

    def _counting_commit():
        commits.append(True)
        real_commit()

    monkeypatch.setattr(db_session, "commit", _counting_commit)

    with uow.unit_of_work(db_session):
        with uow.unit_of_work(db_session):
            assert uow.in_unit_of_work(db_session)
            db_session.add(fleet_models.Helicopter(tail_number="N3"))
        assert commits == []
        db_session.add(fleet_models.Helicopter(tail_number="N4"))

    assert commits == [True]
    assert _tail_numbers(db_session) == ["N3", "N4"]


def test_inner_failure_rolls_back_whole_unit(db_session):
    with pytest.raises(ValueError):
        with uow.unit_of_work(db_session):
            db_session.add(fleet_models.Helicopter(tail_number="N5"))
            db_session.flush()
            with uow.unit_of_work(db_session):
                raise ValueError("inner")

    assert _tail_numbers(db_session) == []


class _FakeDialect:
    def __init__(self, name):
        self.name = name


class _FakeBind:
    def __init__(self, name):
        self.dialect = _FakeDialect(name)


class _FakeSession:
    def __init__(self, dialect_name):
        self._bind = _FakeBind(dialect_name)
        self.statements = []

    def get_bind(self):
        return self._bind

    def execute(self, statement):
        self.statements.append(str(statement))


def test_lock_timeout_set_on_postgres(monkeypatch):
    monkeypatch.setattr(uow, "LEDGER_LOCK_TIMEOUT_MS", 1500)
    session = _FakeSession("postgresql")

    uow._apply_lock_timeout(session)

    assert session.statements == ["SET LOCAL lock_timeout = '1500ms'"]


def test_lock_timeout_skipped_elsewhere(monkeypatch):
    monkeypatch.setattr(uow, "LEDGER_LOCK_TIMEOUT_MS", 1500)
    sqlite_session = _FakeSession("sqlite")
    uow._apply_lock_timeout(sqlite_session)
    assert sqlite_session.statements == []

    monkeypatch.setattr(uow, "LEDGER_LOCK_TIMEOUT_MS", 0)
    pg_session = _FakeSession("postgresql")
    uow._apply_lock_timeout(pg_session)
    assert pg_session.statements == []
