from typing import Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.models import Base
from db.state_slot import SqlStateSlot
from services.reference_store import ReferenceStore
from services.resolver import Resolver
from tests.helpers.time_utils import FixedClock

engine: Engine = create_engine(
    "sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
session_factory = sessionmaker(engine)


@pytest.fixture(scope="function")
def test_session() -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture(scope="function", autouse=True)
def reset_db() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture(scope="function")
def store(test_session: Session) -> ReferenceStore:
    reference_store = ReferenceStore(SqlStateSlot(test_session))
    reference_store.initialize()
    return reference_store


@pytest.fixture(scope="function")
def resolver(store: ReferenceStore, clock: FixedClock) -> Resolver:
    return Resolver(store, clock=clock)
