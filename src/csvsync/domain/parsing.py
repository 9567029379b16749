"""Parsing of delimited header and data lines.

A header line yields the ordered list of field names used for every data line of
the same file. Names are normalized to item names: quotes and dots are dropped,
whitespace and punctuation become ``_`` and the key prefix ``_`` is prepended.
Blank header cells produce ``None`` so that the matching data column is ignored.

Data lines are split on the delimiter outside of double-quoted spans. A span only
opens at the start of a cell; a quote inside an unquoted cell is plain text.
Each cell loses one layer of surrounding quotes and is trimmed. Cells beyond the
header width are dropped; missing trailing cells are recorded as empty values.

Lines are expected to be decoded with ``errors="surrogateescape"``. A line that
still carries undecodable bytes fails on its own instead of failing the file.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from csvsync.domain.errors import MalformedHeaderError, RecordParseError
from csvsync.domain.model import DEFAULT_DELIMITER, ImportRecord
from csvsync.domain.model.records import to_item_name

if TYPE_CHECKING:
    from collections.abc import Sequence

_QUOTE = '"'
# lone surrogates left behind by the "surrogateescape" error handler
_UNDECODABLE = re.compile("[\udc80-\udcff]")
_REPLACEMENT = "\ufffd"

type FieldList = list[str | None]


def normalize_field_name(cell: str) -> str | None:
    """Return the item name for a header cell, or ``None`` for a blank cell."""

    return to_item_name(cell)


def has_undecodable_bytes(line: str) -> bool:
    return _UNDECODABLE.search(line) is not None


def printable(line: str) -> str:
    """Return ``line`` with undecodable bytes shown as U+FFFD, safe for logs."""

    return _UNDECODABLE.sub(_REPLACEMENT, line)


def parse_header(line: str, delimiter: str = DEFAULT_DELIMITER) -> FieldList:
    header = line.lstrip("\ufeff").rstrip("\r\n")
    if has_undecodable_bytes(header):
        raise MalformedHeaderError(
            "Header contains bytes that are invalid in the configured encoding",
            line=1,
            data=printable(header),
        )
    if delimiter not in header:
        raise MalformedHeaderError(
            f"File format not supported, fields must be separated by '{delimiter}'",
            line=1,
            data=header,
        )
    try:
        cells = split_line(header, delimiter)
    except RecordParseError as exc:
        raise MalformedHeaderError(str(exc.args[0]), line=1, data=header) from exc
    fields = [normalize_field_name(cell) for cell in cells]
    if not any(fields):
        raise MalformedHeaderError(
            "File format not supported, first line must contain the item names",
            line=1,
            data=header,
        )
    return fields


def split_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    cells: list[str] = []
    current: list[str] = []
    enclosed = False
    started = False
    quoted = False
    for char in line:
        if quoted:
            if char == _QUOTE:
                quoted = False
            current.append(char)
        elif char == delimiter:
            cells.append(_clean_cell("".join(current)))
            current = []
            enclosed = started = False
        else:
            if char == _QUOTE and (enclosed or not started):
                enclosed = quoted = True
            started = started or not char.isspace()
            current.append(char)
    if quoted:
        raise RecordParseError("Unbalanced quotes in data line", data=line)
    cells.append(_clean_cell("".join(current)))
    return cells


def _clean_cell(cell: str) -> str:
    value = cell.strip()
    if len(value) >= 2 and value.startswith(_QUOTE) and value.endswith(_QUOTE):  # noqa: PLR2004
        value = value[1:-1].strip()
    return value


def parse_record(
    line: str,
    fields: Sequence[str | None],
    *,
    record_type: str,
    key_field: str,
    delimiter: str = DEFAULT_DELIMITER,
    line_number: int | None = None,
) -> ImportRecord:
    """Build an :class:`ImportRecord` from one data line."""

    if has_undecodable_bytes(line):
        raise RecordParseError(
            "Line contains bytes that are invalid in the configured encoding",
            line=line_number,
            data=printable(line),
        )
    try:
        cells = split_line(line.rstrip("\r\n"), delimiter)
    except RecordParseError as exc:
        raise RecordParseError(str(exc.args[0]), line=line_number, data=line) from exc

    values = dict.fromkeys(columns_of(fields), "")
    # zip stops at the shorter side: extra cells are dropped, missing ones stay empty
    for name, cell in zip(fields, cells, strict=False):
        if name is None:
            continue
        values[name] = cell

    return ImportRecord(
        record_type=record_type,
        business_key=values.get(key_field, ""),
        fields=values,
        line=line_number,
    )


def columns_of(fields: Sequence[str | None]) -> list[str]:
    """Return the tracked column names of a header, skipping ignored cells."""

    return [name for name in fields if name is not None]
