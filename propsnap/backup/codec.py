"""Quote-aware codec for the portable tabular (CSV) rendering of a collection.

Decoding is a single pass over the text: double-quoted fields may contain the
delimiter, newlines and doubled quotes (``""`` -> ``"``). CRLF and bare CR are
normalised to LF first. The first row is the header; shorter rows are padded
with nulls and longer rows truncated to the header length.

Every decoded field is coerced: empty -> None, ``true``/``false`` (any case) ->
bool, integer/decimal literals -> int/float, anything else stays a string.
Integers with a leading zero (postal codes, phone numbers) stay strings.
"""

import json
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

_NUMERIC = re.compile(r"^-?(0|[1-9]\d*)(\.\d+)?$")

DELIMITER = ","


def coerce_value(token: str) -> Any:
    """Turn one raw field into a portable value."""
    if token == "":
        return None
    lowered = token.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    match = _NUMERIC.match(token)
    if match:
        return float(token) if match.group(2) else int(token)
    return token


def iter_rows(text: str, delimiter: str = DELIMITER) -> Iterator[List[str]]:
    """Yield raw rows (lists of field strings) from tabular text."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if text.startswith("\ufeff"):
        text = text[1:]

    row: List[str] = []
    chars: List[str] = []
    in_quotes = False
    field_quoted = False
    i, n = 0, len(text)

    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and text[i + 1] == '"':
                    chars.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                chars.append(ch)
        elif ch == '"':
            in_quotes = True
            field_quoted = True
        elif ch == delimiter:
            row.append("".join(chars))
            chars, field_quoted = [], False
        elif ch == "\n":
            if row or chars or field_quoted:
                row.append("".join(chars))
                yield row
            row, chars, field_quoted = [], [], False
        else:
            chars.append(ch)
        i += 1

    if row or chars or field_quoted:
        row.append("".join(chars))
        yield row


def iter_records(text: str, delimiter: str = DELIMITER) -> Iterator[Dict[str, Any]]:
    """Lazily decode tabular text into portable rows keyed by the header."""
    rows = iter_rows(text, delimiter)
    header = next(rows, None)
    if header is None:
        return
    columns = [name.strip() for name in header]
    width = len(columns)

    for raw in rows:
        if len(raw) < width:
            raw = raw + [""] * (width - len(raw))
        yield {column: coerce_value(value) for column, value in zip(columns, raw[:width])}


def decode_table(text: str, delimiter: str = DELIMITER) -> List[Dict[str, Any]]:
    return list(iter_records(text, delimiter))


def _plain_number(value: Any) -> str:
    """Positional notation for floats and Decimals; the decoder does not read exponents."""
    number = value if isinstance(value, Decimal) else Decimal(repr(value))
    if not number.is_finite():
        return str(value)
    return format(number, "f")


def encode_value(value: Any, delimiter: str = DELIMITER) -> str:
    """Render one value as a tabular field, quoting when needed."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"

    force_quotes = False
    if isinstance(value, int):
        text = str(value)
    elif isinstance(value, (float, Decimal)):
        text = _plain_number(value)
    elif isinstance(value, (datetime, date)):
        text = value.isoformat()
    elif isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, ensure_ascii=False, default=str)
        force_quotes = True
    else:
        text = str(value)

    if force_quotes or any(c in text for c in (delimiter, '"', "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def table_columns(rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Union of row keys in first-seen order."""
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def encode_table(
    rows: Sequence[Dict[str, Any]],
    columns: Optional[Sequence[str]] = None,
    delimiter: str = DELIMITER,
) -> str:
    """Render rows as tabular text. No rows and no columns yields an empty string."""
    if columns is None:
        columns = table_columns(rows)
    if not columns:
        return ""

    lines = [delimiter.join(encode_value(column, delimiter) for column in columns)]
    for row in rows:
        lines.append(delimiter.join(encode_value(row.get(column), delimiter) for column in columns))
    return "\n".join(lines)
