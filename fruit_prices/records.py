"""
Record pipeline: header + data rows -> keyed records, query filter, price display.

Missing columns read as empty strings everywhere; the schema comes from the
CSV itself, so nothing here rejects a record.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import EmptyInputError
from .rules import (
    FORM_FIELD,
    FRUIT_FIELD,
    RETAIL_PRICE_FIELD,
    RETAIL_PRICE_UNIT_FIELD,
    SEARCH_FIELDS,
)

Record = Dict[str, str]

# Longest numeric prefix, the way a browser's parseFloat reads it.
_NUMBER_PREFIX_RE = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))"
)
_CENTS = Decimal("0.01")
_WIDE = Context(prec=400)  # any finite float to the cent


def is_blank_row(row: Sequence[str]) -> bool:
    return all((cell or "").strip() == "" for cell in row)


def to_records(rows: Sequence[Sequence[str]]) -> List[Record]:
    """
    Key every non-blank data row by the header row.

    - rows[0] is the header; an empty ``rows`` raises EmptyInputError
    - short rows pad with "", long rows are truncated to the header width
    - duplicate header names: the later column wins
    """
    if not rows:
        raise EmptyInputError()

    header = list(rows[0])
    records: List[Record] = []
    for row in rows[1:]:
        if is_blank_row(row):
            continue
        record: Record = {}
        for i, key in enumerate(header):
            record[key] = row[i] if i < len(row) else ""
        records.append(record)
    return records


def field_value(record: Mapping[str, object], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value)


def normalize_query(query: Optional[str]) -> str:
    return (query or "").strip().lower()


def matches_query(record: Mapping[str, object], query: str) -> bool:
    """``query`` must already be normalized."""
    if not query:
        return True
    return any(query in field_value(record, key).lower() for key in SEARCH_FIELDS)


def filter_records(records: Iterable[Record], query: Optional[str]) -> List[Record]:
    q = normalize_query(query)
    if not q:
        return list(records)
    return [r for r in records if matches_query(r, q)]


def parse_price(raw: str) -> Optional[float]:
    """Numeric prefix of ``raw`` as a float, or None when there is none."""
    m = _NUMBER_PREFIX_RE.match(raw)
    if m is None:
        return None
    return float(m.group(1).replace("Infinity", "inf"))


def format_price(record: Mapping[str, object]) -> str:
    raw = field_value(record, RETAIL_PRICE_FIELD)
    value = parse_price(raw)
    if value is None or not math.isfinite(value):
        return raw
    if abs(value) >= 1e21:
        return repr(value)  # exponent form, as toFixed does past 1e21
    if value == 0:
        value = 0.0  # no "-0.00"
    return str(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP, context=_WIDE))


def format_display(record: Mapping[str, object]) -> str:
    fruit = field_value(record, FRUIT_FIELD)
    form = field_value(record, FORM_FIELD)
    unit = field_value(record, RETAIL_PRICE_UNIT_FIELD)
    label = f"{fruit} ({form})" if form else fruit
    return f"{label}: ${format_price(record)} {unit}"
