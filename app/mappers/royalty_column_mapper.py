"""
app/mappers/royalty_column_mapper.py

Column mapping from arbitrary royalty export headers to canonical fields.

Resolution order per field:
    1. exact, case-sensitive match against the field's variation list
    2. case-insensitive match against the same list
    3. usage_count only: the first blank header (some distributors ship the
       usage column unlabeled between "Source" and "Gross")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from app.validators.mapping_validator import MappingValidator

logger = logging.getLogger(__name__)

CANONICAL_FIELDS: tuple[str, ...] = (
    "song_title",
    "iswc",
    "composer",
    "date",
    "territory",
    "source",
    "usage_count",
    "gross",
    "admin_percent",
    "net",
)

REQUIRED_CANONICAL_FIELDS: tuple[str, ...] = ("song_title",)

COLUMN_VARIATIONS: dict[str, tuple[str, ...]] = {
    "song_title": ("Song Title", "song title", "title", "Title", "SongTitle", "song_title"),
    "iswc": ("ISWC", "iswc", "Iswc", "ISWC Code", "iswc_code"),
    "composer": (
        "Composer",
        "composer",
        "Composer Name",
        "Song Composer(s)",
        "Song Composers",
        "composer_name",
    ),
    "date": ("Date", "date", "Broadcast Date", "broadcast_date", "BroadcastDate"),
    "territory": ("Territory", "territory", "Country", "country", "Region"),
    "source": (
        "Source",
        "source",
        "Platform",
        "platform",
        "Exploitation Source",
        "exploitation_source",
    ),
    "usage_count": (
        "Usage Count",
        "usage count",
        "Usage Cou",
        "Usage",
        "usage",
        "usage_count",
        "UsageCount",
    ),
    "gross": ("Gross", "gross", "Gross Amount", "gross_amount", "GrossAmount"),
    "admin_percent": (
        "Admin %",
        "admin %",
        "Admin Percent",
        "admin_percent",
        "AdminPercent",
        "Admin",
    ),
    "net": ("Net", "net", "Net Amount", "net_amount", "NetAmount"),
}


class MatchStrategy:
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    BLANK_HEADER = "blank_header"


@dataclass(frozen=True)
class ColumnMapping:
    """
    Resolved mapping between canonical field names and source CSV headers.

    Every canonical field is present as a key; unbound fields map to None.
    """

    canonical_to_source: dict[str, str | None]
    source_headers: tuple[str, ...]
    match_strategies: dict[str, str]

    def source_for(self, canonical_field: str) -> str | None:
        return self.canonical_to_source.get(canonical_field)

    def value(self, raw_row: Mapping[str, str | None], canonical_field: str) -> str:
        """
        Raw value for a canonical field, or "" when unbound or missing.
        """

        source_column = self.source_for(canonical_field)
        if source_column is None:
            return ""
        return raw_row.get(source_column) or ""


class RoyaltyColumnMapper:
    """
    Maps incoming royalty CSV headers to canonical fields.
    """

    def __init__(
        self,
        *,
        variations: Mapping[str, Sequence[str]] | None = None,
        validator: MappingValidator | None = None,
    ) -> None:
        variation_map = variations or COLUMN_VARIATIONS
        self._variations: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in variation_map.items()
        }
        self._validator = validator or MappingValidator(required_fields=REQUIRED_CANONICAL_FIELDS)

    def build_mapping(self, headers: Sequence[str]) -> ColumnMapping:
        """
        Resolve the canonical field to source header mapping for one file.

        Raises SchemaMappingError when a required field stays unbound or one
        header is claimed by more than one field.
        """

        header_set = set(headers)
        lowered_lookup: dict[str, str] = {}
        for header in headers:
            lowered = header.strip().lower()
            if lowered not in lowered_lookup:
                lowered_lookup[lowered] = header

        mapping: dict[str, str | None] = {}
        strategies: dict[str, str] = {}

        for canonical_field in CANONICAL_FIELDS:
            candidates = self._variations.get(canonical_field, ())
            mapping[canonical_field] = None

            exact = next((candidate for candidate in candidates if candidate in header_set), None)
            if exact is not None:
                mapping[canonical_field] = exact
                strategies[canonical_field] = MatchStrategy.EXACT
                continue

            for candidate in candidates:
                match = lowered_lookup.get(candidate.lower())
                if match is not None:
                    mapping[canonical_field] = match
                    strategies[canonical_field] = MatchStrategy.CASE_INSENSITIVE
                    break

        if mapping["usage_count"] is None:
            blank = next((header for header in headers if not header.strip()), None)
            if blank is not None:
                mapping["usage_count"] = blank
                strategies["usage_count"] = MatchStrategy.BLANK_HEADER
                logger.info("Auto-detected blank header %r as usage_count", blank)

        self._validator.validate(mapping)

        return ColumnMapping(
            canonical_to_source=mapping,
            source_headers=tuple(headers),
            match_strategies=strategies,
        )
