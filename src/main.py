from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Sequence

from pydantic import TypeAdapter, ValidationError

from config import config
from db.db import init_db
from db.state_slot import SqlStateSlot
from domain.errors import ReferenceStoreError
from domain.reference import RateRecord
from services.reference_store import ReferenceStore
from services.resolver import Resolver

_REFS_ADAPTER = TypeAdapter(dict[str, RateRecord])


@contextmanager
def open_store(db_file: Path, *, echo: bool = False) -> Generator[ReferenceStore, None, None]:
    session = init_db(echo, db_file=db_file)
    engine = session.get_bind()
    try:
        yield ReferenceStore(SqlStateSlot(session))
    finally:
        session.close()
        engine.dispose()


def run(args: argparse.Namespace) -> str | None:
    with open_store(args.db_file, echo=config().echo_sql) as store:
        return execute(store, args)


def execute(store: ReferenceStore, args: argparse.Namespace) -> str | None:
    if args.command == "init":
        store.initialize()
        return None
    if args.command == "relay":
        store.relay(args.symbols, args.rates, args.resolve_times, args.request_ids)
        return None
    if args.command == "refs":
        refs = _REFS_ADAPTER.dump_python(store.read_all(), mode="json")
        return json.dumps({"refs": refs}, indent=2, sort_keys=True)
    if args.command == "reference-data":
        data = Resolver(store).get_cross_rate(args.base, args.quote)
        return data.model_dump_json(indent=2)
    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain and query the price reference store.")
    parser.add_argument("--db-file", type=Path, default=config().db_file)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init", help="Create an empty store, discarding existing records.")

    relay = subparsers.add_parser("relay", help="Upsert a batch of rate records.")
    relay.add_argument("--symbol", dest="symbols", action="append", default=[])
    relay.add_argument("--rate", dest="rates", type=int, action="append", default=[])
    relay.add_argument("--resolve-time", dest="resolve_times", type=int, action="append", default=[])
    relay.add_argument("--request-id", dest="request_ids", type=int, action="append", default=[])

    subparsers.add_parser("refs", help="Dump every stored record.")

    reference_data = subparsers.add_parser("reference-data", help="Resolve the BASE/QUOTE cross rate.")
    reference_data.add_argument("base")
    reference_data.add_argument("quote")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(level=config().log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = build_parser().parse_args(argv)
    try:
        output = run(args)
    except ReferenceStoreError as exc:
        print(f"{exc.kind}: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 1
    if output is not None:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
