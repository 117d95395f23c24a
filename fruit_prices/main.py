from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile

from .config import Settings, load_settings
from .errors import EmptyInputError
from .loader import decode_csv_bytes, load_records
from .logging_setup import configure_logging
from .models import HealthResponse, RecordItem, RecordsResponse, StatusResponse
from .records import Record, filter_records, normalize_query
from .store import LoadStatus, RecordStore

LOGGER = logging.getLogger(__name__)


def _records_response(
    status: LoadStatus,
    records: List[Record],
    query: Optional[str],
    error: Optional[str] = None,
) -> RecordsResponse:
    filtered = filter_records(records, query)
    return RecordsResponse(
        status=status,
        query=normalize_query(query),
        count=len(filtered),
        total=len(records),
        error=error,
        items=[RecordItem.from_record(r) for r in filtered],
    )


def _status_response(store: RecordStore) -> StatusResponse:
    state = store.state
    return StatusResponse(
        status=state.status,
        generation=store.generation,
        total=len(state.records),
        error=state.error,
    )


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    store = store or RecordStore.from_source(settings.source, timeout=settings.timeout_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.load_on_startup:
            await store.reload()
        yield
        store.cancel()

    app = FastAPI(
        title="fruit-prices",
        description="Searchable fruit price list loaded from a CSV file",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = settings

    @app.get("/health", response_model=HealthResponse)
    def health():
        return {"ok": True}

    @app.get("/status", response_model=StatusResponse)
    def status():
        return _status_response(store)

    @app.get("/records", response_model=RecordsResponse)
    def records(q: Optional[str] = Query(default=None)):
        state = store.state
        if state.status is LoadStatus.FAILED:
            raise HTTPException(status_code=503, detail=state.error)
        return _records_response(state.status, list(state.records), q)

    @app.post("/reload", response_model=StatusResponse)
    async def reload():
        await store.reload()
        return _status_response(store)

    @app.post("/parse", response_model=RecordsResponse)
    async def parse_upload(file: UploadFile = File(...), q: Optional[str] = Query(default=None)):
        if not (file.filename or "").lower().endswith(".csv"):
            raise HTTPException(status_code=422, detail="Only CSV files are supported")

        raw = await file.read()
        try:
            parsed = load_records(decode_csv_bytes(raw))
        except EmptyInputError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        LOGGER.info("parsed upload %s: %d records", file.filename, len(parsed))
        return _records_response(LoadStatus.LOADED, parsed, q)

    return app


app = create_app()
