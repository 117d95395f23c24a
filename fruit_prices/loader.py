"""
Fetch + decode the CSV source and hand the text to the record pipeline.

The parser and record pipeline never do I/O; everything that can block or
fail on transport lives here.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import httpx
from charset_normalizer import from_bytes

from .errors import LoadError
from .parser import parse_csv
from .records import Record, to_records

LOGGER = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"


def decode_csv_bytes(raw: bytes) -> str:
    """
    Decode CSV bytes to text.

    Rules:
    - UTF-8 is expected; a leading BOM is dropped.
    - Anything that is not valid UTF-8 is decoded with charset-normalizer's best guess.
    - If that fails too, decode UTF-8 with replacement characters.
    """
    if raw.startswith(UTF8_BOM):
        raw = raw[len(UTF8_BOM):]

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is not None:
        try:
            text = raw.decode(match.encoding)
            LOGGER.info("CSV is not UTF-8, decoded as %s", match.encoding)
            return text
        except (LookupError, UnicodeDecodeError):
            pass

    LOGGER.warning("CSV encoding could not be detected, decoding UTF-8 with replacement")
    return raw.decode("utf-8", errors="replace")


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


async def _fetch_url(source: str, client: Optional[httpx.AsyncClient], timeout: float) -> bytes:
    headers = {"Cache-Control": "no-store"}
    try:
        if client is not None:
            resp = await client.get(source, headers=headers, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                resp = await owned.get(source, headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise LoadError(f"Failed to load CSV: {exc}") from exc

    if not resp.is_success:
        raise LoadError(f"Failed to load CSV: {resp.status_code} {resp.reason_phrase}")
    return resp.content


def _read_file(source: str) -> bytes:
    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise LoadError(f"Failed to load CSV: {exc.strerror or exc}: {source}") from exc


async def fetch_csv_text(
    source: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> str:
    if is_url(source):
        raw = await _fetch_url(source, client, timeout)
    else:
        raw = await asyncio.to_thread(_read_file, source)
    return decode_csv_bytes(raw)


def load_records(text: str) -> List[Record]:
    return to_records(parse_csv(text))
