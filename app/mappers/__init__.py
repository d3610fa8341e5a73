"""
app/mappers package marker.
"""

from app.mappers.royalty_column_mapper import (
    CANONICAL_FIELDS,
    COLUMN_VARIATIONS,
    REQUIRED_CANONICAL_FIELDS,
    ColumnMapping,
    MatchStrategy,
    RoyaltyColumnMapper,
)

__all__ = [
    "CANONICAL_FIELDS",
    "COLUMN_VARIATIONS",
    "REQUIRED_CANONICAL_FIELDS",
    "ColumnMapping",
    "MatchStrategy",
    "RoyaltyColumnMapper",
]
