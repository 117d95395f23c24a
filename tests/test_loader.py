import asyncio

import httpx
import pytest

from fruit_prices.errors import EmptyInputError, LoadError
from fruit_prices.loader import decode_csv_bytes, fetch_csv_text, is_url, load_records

CSV_TEXT = "Fruit,Form,RetailPrice,RetailPriceUnit\nApples,Fresh,1.5,per pound\n"


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _fetch_with(handler, url="https://example.test/data/Fruit-Prices-2022.csv"):
    async with _client(handler) as client:
        return await fetch_csv_text(url, client=client)


def test_decode_utf8_strips_bom():
    assert decode_csv_bytes(b"\xef\xbb\xbfFruit,Form\n") == "Fruit,Form\n"


def test_decode_non_utf8_uses_detection():
    # Include a Latin-1 character to force non-ASCII handling
    raw = "name,city\nPaul,Montréal\n".encode("latin-1")
    assert "Montréal" in decode_csv_bytes(raw)


def test_is_url():
    assert is_url("https://example.test/a.csv")
    assert is_url("HTTP://example.test/a.csv")
    assert not is_url("data/a.csv")


def test_fetch_url_returns_text():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=CSV_TEXT.encode("utf-8"))

    assert asyncio.run(_fetch_with(handler)) == CSV_TEXT
    assert seen[0].headers["cache-control"] == "no-store"


def test_fetch_url_non_success_status_raises():
    def handler(request):
        return httpx.Response(404)

    with pytest.raises(LoadError, match="Failed to load CSV: 404 Not Found"):
        asyncio.run(_fetch_with(handler))


def test_fetch_url_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LoadError, match="Failed to load CSV"):
        asyncio.run(_fetch_with(handler))


def test_fetch_file(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_bytes(CSV_TEXT.encode("utf-8"))
    assert asyncio.run(fetch_csv_text(str(path))) == CSV_TEXT


def test_fetch_missing_file_raises(tmp_path):
    with pytest.raises(LoadError):
        asyncio.run(fetch_csv_text(str(tmp_path / "missing.csv")))


def test_load_records():
    assert load_records(CSV_TEXT) == [
        {"Fruit": "Apples", "Form": "Fresh", "RetailPrice": "1.5", "RetailPriceUnit": "per pound"}
    ]


def test_load_records_empty_text():
    with pytest.raises(EmptyInputError):
        load_records("")


def test_fetch_url_bad_content_encoding_raises():
    def handler(request):
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

    with pytest.raises(LoadError, match="Failed to load CSV"):
        asyncio.run(_fetch_with(handler))
