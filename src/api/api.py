import logging
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import sessionmaker

from api.dependencies import get_reference_store, get_resolver
from config import config
from db.db import create_db_engine
from domain.errors import (
    CrossRateOverflow,
    DifferentArrayLength,
    InvalidQuoteRate,
    RefDataNotAvailable,
    ReferenceStoreError,
    StoreNotInitialized,
)
from domain.reference import RateRecord, ReferenceData, Uint64
from services.reference_store import ReferenceStore
from services.resolver import Resolver

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[ReferenceStoreError], int] = {
    DifferentArrayLength: 400,
    RefDataNotAvailable: 404,
    InvalidQuoteRate: 422,
    CrossRateOverflow: 422,
    StoreNotInitialized: 503,
}


class RelayRequest(BaseModel):
    symbols: list[str]
    rates: list[Uint64]
    resolve_times: list[Uint64]
    request_ids: list[Uint64]


class RefsResponse(BaseModel):
    refs: dict[str, RateRecord]


class BulkReferenceDataRequest(BaseModel):
    bases: list[str]
    quotes: list[str]


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = config()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    engine = create_db_engine(settings.db_file, echo=settings.echo_sql)
    fastapi_app.state.sessionmaker = sessionmaker(engine)
    yield
    engine.dispose()


app = FastAPI(lifespan=lifespan)


@app.middleware("http")
async def log_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    start_time = perf_counter()
    response = await call_next(request)
    process_time = perf_counter() - start_time
    logger.debug("Request time: %s %s: %.4fs", request.method, request.url, process_time)
    return response


@app.exception_handler(ReferenceStoreError)
async def reference_store_error_handler(request: Request, exc: ReferenceStoreError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status_code, content={"error": exc.kind, "detail": str(exc)})


@app.post("/init", status_code=204)
def init_store(store: Annotated[ReferenceStore, Depends(get_reference_store)]) -> None:
    store.initialize()


@app.post("/relay", status_code=204)
def relay(body: RelayRequest, store: Annotated[ReferenceStore, Depends(get_reference_store)]) -> None:
    store.relay(body.symbols, body.rates, body.resolve_times, body.request_ids)


@app.get("/refs")
def get_refs(store: Annotated[ReferenceStore, Depends(get_reference_store)]) -> RefsResponse:
    return RefsResponse(refs=store.read_all())


@app.get("/reference-data")
def get_reference_data(base: str, quote: str, resolver: Annotated[Resolver, Depends(get_resolver)]) -> ReferenceData:
    return resolver.get_cross_rate(base, quote)


@app.post("/reference-data/bulk")
def get_reference_data_bulk(
    body: BulkReferenceDataRequest, resolver: Annotated[Resolver, Depends(get_resolver)]
) -> list[ReferenceData]:
    if len(body.bases) != len(body.quotes):
        raise DifferentArrayLength({"bases": len(body.bases), "quotes": len(body.quotes)})
    return resolver.get_cross_rates(zip(body.bases, body.quotes))
