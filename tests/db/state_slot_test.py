from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db import models
from db.db import init_db
from db.state_slot import JsonFileStateSlot, SqlStateSlot


def test_sql_slot_is_empty_until_saved(test_session: Session) -> None:
    slot = SqlStateSlot(test_session)

    assert slot.load() is None


def test_sql_slot_overwrites_single_row(test_session: Session) -> None:
    slot = SqlStateSlot(test_session)

    slot.save('{"refs": {}}')
    slot.save('{"refs": {"ETH": {"rate": 1, "resolve_time": 2, "request_id": 3}}}')

    assert slot.load() == '{"refs": {"ETH": {"rate": 1, "resolve_time": 2, "request_id": 3}}}'
    assert test_session.query(models.StateSlotOrm).count() == 1


def test_sql_slots_are_isolated_by_key(test_session: Session) -> None:
    first = SqlStateSlot(test_session, key="first")
    second = SqlStateSlot(test_session, key="second")

    first.save("one")

    assert second.load() is None
    assert first.load() == "one"


def test_json_file_slot_round_trip(tmp_path: Path) -> None:
    slot = JsonFileStateSlot(path=tmp_path / "state" / "refs.json")

    assert slot.load() is None

    slot.save('{"refs": {}}')
    slot.save('{"refs": {"BAND": {"rate": 100, "resolve_time": 200, "request_id": 300}}}')

    assert slot.load() == '{"refs": {"BAND": {"rate": 100, "resolve_time": 200, "request_id": 300}}}'
    assert [p.name for p in (tmp_path / "state").iterdir()] == ["refs.json"]


def test_init_db_reset_removes_existing_file(tmp_path: Path) -> None:
    db_file = tmp_path / "refs.db"
    session = init_db(db_file=db_file)
    SqlStateSlot(session).save("payload")
    session.close()

    reopened = init_db(db_file=db_file)
    assert SqlStateSlot(reopened).load() == "payload"
    reopened.close()

    reset = init_db(db_file=db_file, reset=True)
    assert SqlStateSlot(reset).load() is None
    reset.close()


def test_sql_slot_recovers_after_failed_commit(test_session: Session) -> None:
    slot = SqlStateSlot(test_session)

    with pytest.raises(IntegrityError):
        slot.save(None)  # type: ignore[arg-type]

    assert slot.load() is None
    slot.save('{"refs": {}}')
    assert slot.load() == '{"refs": {}}'


def test_sql_slot_load_sees_commits_from_other_sessions(test_session: Session) -> None:
    slot = SqlStateSlot(test_session)
    slot.save("first")
    assert slot.load() == "first"

    with Session(test_session.get_bind()) as other:
        SqlStateSlot(other).save("second")

    assert slot.load() == "second"
