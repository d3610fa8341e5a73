"""
app/validators/royalty_row_validator.py

Row-level value parsing for royalty CSV rows.

Only a missing song title makes a row unusable; every other value degrades
silently: bad numbers become 0, bad dates become month "Unknown", missing
territory/platform become "Unknown".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping

from app.domain.money import parse_decimal

if TYPE_CHECKING:
    from app.mappers.royalty_column_mapper import ColumnMapping

UNKNOWN_LABEL = "Unknown"

MONTH_LABELS: tuple[str, ...] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d.%m.%Y",
    "%d-%b-%Y",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%Y-%m",
    "%b %Y",
    "%B %Y",
    "%b-%y",
    "%Y%m%d",
)

_LEADING_INTEGER = re.compile(r"^[+-]?\d+")
_INTEGER_NOISE = re.compile(r"[,\s]")


@dataclass(frozen=True)
class ParsedRoyaltyRow:
    """
    Canonical, typed view of one raw royalty row.
    """

    song_title: str
    territory: str
    source: str
    month: str
    usage_count: int
    gross: Decimal
    net: Decimal
    iswc: str | None = None
    composer: str | None = None


class RoyaltyRowValidator:
    """
    Parses mapped royalty rows. Never raises on malformed values.
    """

    def song_title(self, raw_row: Mapping[str, str | None], mapping: ColumnMapping) -> str:
        return mapping.value(raw_row, "song_title").strip()

    def parse_row(
        self,
        raw_row: Mapping[str, str | None],
        mapping: ColumnMapping,
    ) -> ParsedRoyaltyRow:
        """
        Extract every canonical value from one raw row.
        """

        return ParsedRoyaltyRow(
            song_title=self.song_title(raw_row, mapping),
            territory=self._label_or_unknown(mapping.value(raw_row, "territory")),
            source=self._label_or_unknown(mapping.value(raw_row, "source")),
            month=parse_month_label(mapping.value(raw_row, "date")),
            usage_count=parse_usage_count(mapping.value(raw_row, "usage_count")),
            gross=parse_decimal(mapping.value(raw_row, "gross")),
            net=parse_decimal(mapping.value(raw_row, "net")),
            iswc=self._optional_text(mapping.value(raw_row, "iswc")),
            composer=self._optional_text(mapping.value(raw_row, "composer")),
        )

    @staticmethod
    def _label_or_unknown(value: str) -> str:
        stripped = value.strip()
        return stripped if stripped else UNKNOWN_LABEL

    @staticmethod
    def _optional_text(value: str) -> str | None:
        stripped = value.strip()
        return stripped or None


def parse_usage_count(value: Any) -> int:
    """
    Parse a usage count to a non-negative int.

    Leading digits are honoured (``"12.7"`` -> 12, ``"1,204"`` -> 1204);
    anything non-numeric or negative yields 0.
    """

    if value is None:
        return 0
    cleaned = _INTEGER_NOISE.sub("", str(value))
    match = _LEADING_INTEGER.match(cleaned)
    if match is None:
        return 0
    return max(0, int(match.group()))


def parse_date(value: Any) -> datetime | None:
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def parse_month_label(value: Any) -> str:
    """
    ``"2024-02-14"`` -> ``"Feb"``; unparseable or missing -> ``"Unknown"``.
    """

    parsed = parse_date(value)
    if parsed is None:
        return UNKNOWN_LABEL
    return MONTH_LABELS[parsed.month - 1]
