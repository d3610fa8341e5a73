from __future__ import annotations

import unittest

from app.validators.mapping_validator import (
    REQUIRED_FIELD_UNMAPPED,
    SHARED_SOURCE_COLUMN,
    MappingValidator,
    SchemaMappingError,
)


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()

    def test_accepts_title_only_mapping(self) -> None:
        self.validator.validate({"song_title": "Song Title", "net": None, "gross": None})

    def test_unbound_title_is_reported_as_missing(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate({"song_title": None, "net": "Net"})

        self.assertEqual(ctx.exception.missing_fields, ("song_title",))
        self.assertEqual([error.code for error in ctx.exception.errors], [REQUIRED_FIELD_UNMAPPED])
        self.assertIn("song_title", str(ctx.exception))

    def test_header_shared_by_two_fields_is_rejected(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate({"song_title": "Title", "gross": "Amount", "net": "Amount"})

        [error] = ctx.exception.errors
        self.assertEqual(error.code, SHARED_SOURCE_COLUMN)
        self.assertEqual(error.source_column, "Amount")
        self.assertEqual(error.canonical_fields, ("gross", "net"))
        self.assertEqual(ctx.exception.missing_fields, ())

    def test_every_problem_is_listed(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.validator.validate({"song_title": None, "gross": "Amount", "net": "Amount"})

        payload = ctx.exception.to_dict()
        self.assertEqual(
            [error["code"] for error in payload["errors"]],
            [REQUIRED_FIELD_UNMAPPED, SHARED_SOURCE_COLUMN],
        )
        self.assertEqual(payload["errors"][1]["canonical_fields"], ["gross", "net"])

    def test_custom_required_fields(self) -> None:
        validator = MappingValidator(required_fields=("song_title", "net"))

        with self.assertRaises(SchemaMappingError) as ctx:
            validator.validate({"song_title": "Title", "net": None})

        self.assertEqual(ctx.exception.missing_fields, ("net",))


if __name__ == "__main__":
    unittest.main()
