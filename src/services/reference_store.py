from __future__ import annotations

import logging
import threading
from typing import Sequence

from db.state_slot import StateSlot
from domain.errors import DifferentArrayLength, StoreNotInitialized
from domain.reference import RateRecord, ReferenceState

logger = logging.getLogger(__name__)

# Writes are read-modify-write of the whole mapping; one writer at a time per process.
_WRITE_LOCK = threading.Lock()


class ReferenceStore:
    """Latest rate record per symbol, persisted as one serialized mapping."""

    def __init__(self, slot: StateSlot) -> None:
        self._slot = slot

    def initialize(self) -> None:
        with _WRITE_LOCK:
            if self._slot.load() is not None:
                logger.warning("Re-initializing reference store; existing records are discarded")
            self._save(ReferenceState())

    def relay(
        self,
        symbols: Sequence[str],
        rates: Sequence[int],
        resolve_times: Sequence[int],
        request_ids: Sequence[int],
    ) -> None:
        size = len(symbols)
        if len(rates) != size or len(resolve_times) != size or len(request_ids) != size:
            raise DifferentArrayLength(
                {
                    "symbols": size,
                    "rates": len(rates),
                    "resolve_times": len(resolve_times),
                    "request_ids": len(request_ids),
                }
            )

        # Build every record before touching state so a bad value aborts the whole batch.
        records = [
            (symbol, RateRecord(rate=rate, resolve_time=resolve_time, request_id=request_id))
            for symbol, rate, resolve_time, request_id in zip(symbols, rates, resolve_times, request_ids)
        ]

        with _WRITE_LOCK:
            state = self._load()
            for symbol, record in records:
                state.refs[symbol] = record
            self._save(state)
        logger.info("Relayed %d reference records (%d symbols stored)", len(records), len(state.refs))

    def read_all(self) -> dict[str, RateRecord]:
        return dict(self._load().refs)

    def get(self, symbol: str) -> RateRecord | None:
        return self._load().refs.get(symbol)

    def _load(self) -> ReferenceState:
        payload = self._slot.load()
        if payload is None:
            raise StoreNotInitialized()
        return ReferenceState.model_validate_json(payload)

    def _save(self, state: ReferenceState) -> None:
        self._slot.save(state.model_dump_json())


__all__ = ["ReferenceStore"]
