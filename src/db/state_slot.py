from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from sqlalchemy.orm import Session

from db import models

DEFAULT_SLOT_KEY = "config"


class StateSlot(Protocol):
    """Durable single-value storage for one serialized payload."""

    def load(self) -> str | None: ...

    def save(self, payload: str) -> None: ...


class SqlStateSlot(StateSlot):
    def __init__(self, session: Session, *, key: str = DEFAULT_SLOT_KEY) -> None:
        self._session = session
        self.key = key

    def load(self) -> str | None:
        orm_slot = self._session.get(models.StateSlotOrm, self.key, populate_existing=True)
        if orm_slot is None:
            return None
        return orm_slot.payload

    def save(self, payload: str) -> None:
        now = datetime.now(timezone.utc)
        orm_slot = self._session.get(models.StateSlotOrm, self.key)
        if orm_slot is None:
            orm_slot = models.StateSlotOrm(key=self.key, payload=payload, updated_at=now)
            self._session.add(orm_slot)
        else:
            orm_slot.payload = payload
            orm_slot.updated_at = now
        try:
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise


class JsonFileStateSlot(StateSlot):
    def __init__(self, *, path: Path) -> None:
        self.path = path

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def save(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write next to the target so the replace stays on one filesystem.
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["DEFAULT_SLOT_KEY", "JsonFileStateSlot", "SqlStateSlot", "StateSlot"]
