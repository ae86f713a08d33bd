from typing import Annotated, Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from db.state_slot import SqlStateSlot
from services.reference_store import ReferenceStore
from services.resolver import Clock, Resolver, wall_clock


def get_session(request: Request) -> Generator[Session, None, None]:
    with request.app.state.sessionmaker() as session:
        yield session


def get_clock() -> Clock:
    return wall_clock


def get_reference_store(session: Annotated[Session, Depends(get_session)]) -> ReferenceStore:
    return ReferenceStore(SqlStateSlot(session))


def get_resolver(
    store: Annotated[ReferenceStore, Depends(get_reference_store)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> Resolver:
    return Resolver(store, clock=clock)
