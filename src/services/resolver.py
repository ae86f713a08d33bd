from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable

from domain.errors import CrossRateOverflow, InvalidQuoteRate, RefDataNotAvailable
from domain.reference import E9, E18, NUMERAIRE, U128_MAX, RateSnapshot, ReferenceData

from .reference_store import ReferenceStore

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def wall_clock() -> int:
    return int(datetime.now(timezone.utc).timestamp())


class Resolver:
    """Point and cross-rate queries over a ReferenceStore.

    The numeraire is never read from the store. It resolves to exactly 1.0
    (``E9``) stamped with the clock's current reading, so it is always fresh.
    """

    def __init__(self, store: ReferenceStore, *, clock: Clock = wall_clock) -> None:
        self.store = store
        self.clock = clock

    def get_rate_record(self, symbol: str) -> RateSnapshot:
        if symbol == NUMERAIRE:
            return RateSnapshot(rate=E9, last_update=self.clock())

        record = self.store.get(symbol)
        if record is None or not record.is_resolved:
            logger.debug("No resolved reference data for %s", symbol)
            raise RefDataNotAvailable(symbol)
        return RateSnapshot(rate=record.rate, last_update=record.resolve_time)

    def get_cross_rate(self, base: str, quote: str) -> ReferenceData:
        base_ref = self.get_rate_record(base)
        quote_ref = self.get_rate_record(quote)
        if quote_ref.rate == 0:
            raise InvalidQuoteRate(quote)

        rate = base_ref.rate * E18 // quote_ref.rate
        if rate > U128_MAX:
            raise CrossRateOverflow(base, quote)

        return ReferenceData(
            rate=rate,
            last_updated_base=base_ref.last_update,
            last_updated_quote=quote_ref.last_update,
        )

    def get_cross_rates(self, pairs: Iterable[tuple[str, str]]) -> list[ReferenceData]:
        return [self.get_cross_rate(base, quote) for base, quote in pairs]


__all__ = ["Clock", "Resolver", "wall_clock"]
