"""
app/validators package marker.
"""

from app.validators.mapping_validator import (
    REQUIRED_FIELD_UNMAPPED,
    SHARED_SOURCE_COLUMN,
    MappingErrorDetail,
    MappingValidator,
    SchemaMappingError,
)
from app.validators.royalty_row_validator import (
    MONTH_LABELS,
    UNKNOWN_LABEL,
    ParsedRoyaltyRow,
    RoyaltyRowValidator,
    parse_month_label,
    parse_usage_count,
)

__all__ = [
    "REQUIRED_FIELD_UNMAPPED",
    "SHARED_SOURCE_COLUMN",
    "MONTH_LABELS",
    "UNKNOWN_LABEL",
    "MappingErrorDetail",
    "MappingValidator",
    "ParsedRoyaltyRow",
    "RoyaltyRowValidator",
    "SchemaMappingError",
    "parse_month_label",
    "parse_usage_count",
]
