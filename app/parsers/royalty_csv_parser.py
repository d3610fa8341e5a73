"""
app/parsers/royalty_csv_parser.py

Parses raw royalty export text into headers and string-keyed rows.

The whole file is materialized before aggregation starts: the summary flow
walks the rows twice (title collection, then aggregation).
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


class CSVParseError(ValueError):
    """
    Raised when the CSV text cannot be tokenized at all.
    """


@dataclass(frozen=True)
class ParsedCSV:
    """
    Header list plus one ordered ``{header: value}`` dict per data line.

    Short lines produce rows with missing keys; consumers treat a missing
    key as an empty string.
    """

    headers: tuple[str, ...]
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return len(self.rows)


def parse_royalty_csv(content: str) -> ParsedCSV:
    """
    Parse CSV text. The first non-empty line is the header row.
    """

    if content.startswith(_BOM):
        content = content[len(_BOM):]

    reader = csv.reader(io.StringIO(content, newline=""))
    headers: tuple[str, ...] | None = None
    rows: list[dict[str, str]] = []
    surplus_lines = 0

    try:
        for record in reader:
            if not record:
                continue
            if headers is None:
                headers = dedupe_headers(record)
                continue
            if len(record) > len(headers):
                surplus_lines += 1
            rows.append(
                {header: value for header, value in zip(headers, record)}
            )
    except csv.Error as exc:
        raise CSVParseError(f"Invalid CSV format: {exc}") from exc

    if surplus_lines:
        logger.debug(
            "CSV parse dropped surplus cells lines=%s header_width=%s",
            surplus_lines,
            len(headers or ()),
        )

    return ParsedCSV(headers=headers or (), rows=rows)


def dedupe_headers(raw_headers: list[str]) -> tuple[str, ...]:
    """
    Trim headers and suffix repeated names with ``_1``, ``_2``, ...

    ``["Net", " Net ", ""]`` -> ``("Net", "Net_1", "")``.
    """

    used: set[str] = set()
    occurrences: dict[str, int] = {}
    result: list[str] = []

    for raw in raw_headers:
        name = raw.strip()
        if name in used:
            count = occurrences.get(name, 0) + 1
            candidate = f"{name}_{count}"
            while candidate in used:
                count += 1
                candidate = f"{name}_{count}"
            occurrences[name] = count
            name = candidate
        used.add(name)
        result.append(name)

    return tuple(result)
