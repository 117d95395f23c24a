"""
Load state machine for the record set.

State is one of Idle | Loading | Loaded(records) | Failed(error). The search
query is held separately and only shapes the filtered view. Every reload gets
a generation number; a finished load is applied only if no newer reload (or
cancel) happened in the meantime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple

from .errors import FruitPricesError
from .loader import fetch_csv_text, load_records
from .records import Record, filter_records

LOGGER = logging.getLogger(__name__)

TextFetcher = Callable[[], Awaitable[str]]


class LoadStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadState:
    status: LoadStatus
    records: Tuple[Record, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @classmethod
    def idle(cls) -> "LoadState":
        return cls(LoadStatus.IDLE)

    @classmethod
    def loading(cls) -> "LoadState":
        return cls(LoadStatus.LOADING)

    @classmethod
    def loaded(cls, records: List[Record]) -> "LoadState":
        return cls(LoadStatus.LOADED, records=tuple(records))

    @classmethod
    def failed(cls, error: str) -> "LoadState":
        return cls(LoadStatus.FAILED, error=error)


class RecordStore:
    def __init__(self, fetch_text: TextFetcher) -> None:
        self._fetch_text = fetch_text
        self._generation = 0
        self._state = LoadState.idle()
        self.query = ""

    @classmethod
    def from_source(cls, source: str, timeout: float = 10.0) -> "RecordStore":
        async def fetch() -> str:
            return await fetch_csv_text(source, timeout=timeout)

        return cls(fetch)

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    async def reload(self) -> LoadState:
        self._generation += 1
        generation = self._generation
        self._state = LoadState.loading()
        LOGGER.info("loading CSV (generation %d)", generation)

        try:
            text = await self._fetch_text()
            result = LoadState.loaded(load_records(text))
        except FruitPricesError as exc:
            result = LoadState.failed(str(exc) or "Unknown error")

        if generation != self._generation:
            LOGGER.info("discarding superseded load (generation %d, current %d)", generation, self._generation)
            return self._state

        self._state = result
        if result.status is LoadStatus.LOADED:
            LOGGER.info("loaded %d records (generation %d)", len(result.records), generation)
        else:
            LOGGER.error("CSV load failed: %s", result.error)
        return result

    def cancel(self) -> None:
        """Drop whatever load is in flight; a pending Loading state goes back to Idle."""
        self._generation += 1
        if self._state.status is LoadStatus.LOADING:
            self._state = LoadState.idle()

    def view(self, query: Optional[str] = None) -> List[Record]:
        q = self.query if query is None else query
        if self._state.status is not LoadStatus.LOADED:
            return []
        return filter_records(self._state.records, q)
