"""
Character-level CSV parser.

Rules (v1):
- comma delimiter, double-quote quoting, doubled quotes unescape to one
- LF, CRLF and lone CR all end a row; CRLF counts once
- quoted commas and line breaks are data
- unterminated quotes run to end of input, never an error
"""

from __future__ import annotations

from typing import List

from .rules import DELIMITER, QUOTE

Row = List[str]


def parse_csv(text: str) -> List[Row]:
    rows: List[Row] = []
    row: Row = []
    field: List[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        char = text[i]
        next_char = text[i + 1] if i + 1 < n else ""

        if char == QUOTE:
            if in_quotes and next_char == QUOTE:
                field.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue

        if char == DELIMITER and not in_quotes:
            row.append("".join(field))
            field = []
            i += 1
            continue

        if char in ("\n", "\r") and not in_quotes:
            if char == "\r" and next_char == "\n":
                i += 1
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
            i += 1
            continue

        # stray CR (inside quotes) is dropped
        if char != "\r":
            field.append(char)
        i += 1

    if field or row:
        row.append("".join(field))
        rows.append(row)

    return rows
