import json
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.orm import Session

import main as main_module
from db.db import init_db
from main import main


def _run(db_file: Path, *args: str) -> int:
    return main(["--db-file", str(db_file), *args])


def test_cli_relay_and_dump(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_file = tmp_path / "refs.db"

    assert _run(db_file, "init") == 0
    assert (
        _run(
            db_file,
            "relay",
            "--symbol", "ETH", "--rate", "1", "--resolve-time", "2", "--request-id", "3",
            "--symbol", "BAND", "--rate", "100", "--resolve-time", "200", "--request-id", "300",
        )
        == 0
    )
    capsys.readouterr()

    assert _run(db_file, "refs") == 0

    assert json.loads(capsys.readouterr().out) == {
        "refs": {
            "BAND": {"rate": 100, "request_id": 300, "resolve_time": 200},
            "ETH": {"rate": 1, "request_id": 3, "resolve_time": 2},
        }
    }


def test_cli_reference_data(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_file = tmp_path / "refs.db"
    _run(db_file, "init")
    _run(db_file, "relay", "--symbol", "MATIC", "--rate", "112", "--resolve-time", "1625108298", "--request-id", "124")
    capsys.readouterr()

    assert _run(db_file, "reference-data", "MATIC", "USD") == 0

    output = json.loads(capsys.readouterr().out)
    assert output["rate"] == "112000000000"
    assert output["last_updated_base"] == "1625108298"


def test_cli_reports_typed_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_file = tmp_path / "refs.db"
    _run(db_file, "init")

    assert _run(db_file, "relay", "--symbol", "ETH", "--rate", "1") == 1
    assert "DifferentArrayLength" in capsys.readouterr().err

    assert _run(db_file, "reference-data", "DOGE", "USD") == 1
    assert "RefDataNotAvailable" in capsys.readouterr().err


def test_cli_closes_session_after_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    opened: list[Session] = []

    def recording_init_db(*args: Any, **kwargs: Any) -> Session:
        session = init_db(*args, **kwargs)
        opened.append(session)
        return session

    monkeypatch.setattr(main_module, "init_db", recording_init_db)
    db_file = tmp_path / "refs.db"

    assert _run(db_file, "init") == 0
    assert _run(db_file, "refs") == 0
    assert _run(db_file, "reference-data", "DOGE", "USD") == 1
    capsys.readouterr()

    assert len(opened) == 3
    for session in opened:
        assert not session.in_transaction()
