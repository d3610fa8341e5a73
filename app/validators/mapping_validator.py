"""
app/validators/mapping_validator.py

Checks a resolved royalty column mapping before any row is read.

Two problems stop a file:

    required_field_unmapped   a required canonical field found no header
    shared_source_column      one header feeds several canonical fields,
                              e.g. custom variations listing "Amount" for both
                              gross and net, which would double count it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

REQUIRED_FIELD_UNMAPPED = "required_field_unmapped"
SHARED_SOURCE_COLUMN = "shared_source_column"


@dataclass(frozen=True)
class MappingErrorDetail:
    code: str
    message: str
    canonical_fields: tuple[str, ...] = ()
    source_column: str | None = None


class SchemaMappingError(ValueError):
    """
    Raised when a royalty file's headers cannot be mapped safely.
    """

    def __init__(self, errors: Sequence[MappingErrorDetail]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(error.message for error in self.errors))

    @property
    def missing_fields(self) -> tuple[str, ...]:
        return tuple(
            name
            for error in self.errors
            if error.code == REQUIRED_FIELD_UNMAPPED
            for name in error.canonical_fields
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "canonical_fields": list(error.canonical_fields),
                    "source_column": error.source_column,
                }
                for error in self.errors
            ],
        }


@dataclass(frozen=True)
class MappingValidator:
    required_fields: tuple[str, ...] = field(default=("song_title",))

    def validate(self, mapping: Mapping[str, str | None]) -> None:
        errors = [
            MappingErrorDetail(
                code=REQUIRED_FIELD_UNMAPPED,
                message=f"No column found for required field '{name}'.",
                canonical_fields=(name,),
            )
            for name in self.required_fields
            if mapping.get(name) is None
        ]

        fields_by_column: dict[str, list[str]] = {}
        for name, column in mapping.items():
            if column is not None:
                fields_by_column.setdefault(column, []).append(name)

        errors.extend(
            MappingErrorDetail(
                code=SHARED_SOURCE_COLUMN,
                message=f"Column {column!r} is mapped to {', '.join(names)}.",
                canonical_fields=tuple(names),
                source_column=column,
            )
            for column, names in fields_by_column.items()
            if len(names) > 1
        )

        if errors:
            raise SchemaMappingError(errors)
