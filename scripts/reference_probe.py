# flake8: noqa E402
# Run via uv for access to dev deps, e.g.:
# uv run scripts/reference_probe.py --symbol MATIC=112 --symbol ETH=2000000000000 --pair MATIC/USD --pair ETH/MATIC
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the src directory is importable when the script is invoked via uv/python directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db.state_slot import JsonFileStateSlot
from domain.errors import ReferenceStoreError
from services.reference_store import ReferenceStore
from services.resolver import Resolver, wall_clock


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Relay rates into a file-backed store and print cross rates.")
    parser.add_argument(
        "--symbol",
        action="append",
        dest="symbols",
        default=[],
        help="SYMBOL=RATE pair (rate scaled by 1e9). Can be repeated.",
    )
    parser.add_argument(
        "--pair",
        action="append",
        dest="pairs",
        default=[],
        help="BASE/QUOTE pair to resolve. Can be repeated; defaults to each symbol against USD.",
    )
    parser.add_argument(
        "--state-file",
        default=str(PROJECT_ROOT / ".cache" / "reference_probe" / "refs.json"),
        help="JSON file holding the store state (default: .cache/reference_probe/refs.json).",
    )
    parser.add_argument("--reset", action="store_true", help="Start from an empty store.")
    return parser.parse_args()


def parse_symbol(raw: str) -> tuple[str, int]:
    symbol, _, rate = raw.partition("=")
    if not symbol or not rate:
        raise ValueError(f"Expected SYMBOL=RATE, got {raw!r}")
    return symbol, int(rate)


def main() -> None:
    args = parse_args()

    slot = JsonFileStateSlot(path=Path(args.state_file))
    store = ReferenceStore(slot)
    if args.reset or slot.load() is None:
        store.initialize()

    entries = [parse_symbol(raw) for raw in args.symbols]
    if entries:
        now = wall_clock()
        store.relay(
            [symbol for symbol, _ in entries],
            [rate for _, rate in entries],
            [now] * len(entries),
            list(range(1, len(entries) + 1)),
        )

    print(f"Using state at {args.state_file}")
    pairs = [tuple(raw.split("/", 1)) for raw in args.pairs] or [(symbol, "USD") for symbol, _ in entries]
    resolver = Resolver(store)
    for base, quote in pairs:
        try:
            data = resolver.get_cross_rate(base, quote)
        except ReferenceStoreError as exc:
            print(f"[{base}/{quote}] {exc.kind}: {exc}")
            continue
        print(f"[{base}/{quote}] rate={data.rate} base_ts={data.last_updated_base} quote_ts={data.last_updated_quote}")


if __name__ == "__main__":
    main()
