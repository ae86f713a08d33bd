from __future__ import annotations


class ReferenceStoreError(Exception):
    kind = "ReferenceStoreError"


class DifferentArrayLength(ReferenceStoreError):
    kind = "DifferentArrayLength"

    def __init__(self, lengths: dict[str, int]) -> None:
        details = ", ".join(f"{name}={size}" for name, size in lengths.items())
        super().__init__(f"Different array length: {details}")
        self.lengths = lengths


class RefDataNotAvailable(ReferenceStoreError):
    kind = "RefDataNotAvailable"

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Ref data is not available for {symbol!r}")
        self.symbol = symbol


class InvalidQuoteRate(ReferenceStoreError):
    kind = "InvalidQuoteRate"

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Quote rate for {symbol!r} is zero")
        self.symbol = symbol


class CrossRateOverflow(ReferenceStoreError):
    kind = "CrossRateOverflow"

    def __init__(self, base: str, quote: str) -> None:
        super().__init__(f"Cross rate {base}/{quote} exceeds 128-bit range")
        self.base = base
        self.quote = quote


class StoreNotInitialized(ReferenceStoreError):
    kind = "StoreNotInitialized"

    def __init__(self) -> None:
        super().__init__("Reference store has not been initialized")


__all__ = [
    "CrossRateOverflow",
    "DifferentArrayLength",
    "InvalidQuoteRate",
    "RefDataNotAvailable",
    "ReferenceStoreError",
    "StoreNotInitialized",
]
