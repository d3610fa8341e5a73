from __future__ import annotations

import unittest

from app.mappers.royalty_column_mapper import (
    CANONICAL_FIELDS,
    COLUMN_VARIATIONS,
    MatchStrategy,
    RoyaltyColumnMapper,
)
from app.validators.mapping_validator import SchemaMappingError


class TestRoyaltyColumnMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = RoyaltyColumnMapper()

    def test_maps_standard_distributor_headers(self) -> None:
        headers = [
            "Song Title",
            "ISWC",
            "Composer",
            "Date",
            "Territory",
            "Source",
            "Usage Count",
            "Gross",
            "Admin %",
            "Net",
        ]

        mapping = self.mapper.build_mapping(headers)

        self.assertEqual(mapping.source_for("song_title"), "Song Title")
        self.assertEqual(mapping.source_for("usage_count"), "Usage Count")
        self.assertEqual(mapping.source_for("admin_percent"), "Admin %")
        self.assertEqual(mapping.match_strategies["net"], MatchStrategy.EXACT)
        self.assertEqual(set(mapping.canonical_to_source), set(CANONICAL_FIELDS))

    def test_alternate_names_resolve(self) -> None:
        headers = ["title", "Country", "Platform", "Usage", "Gross Amount", "Net Amount", "Broadcast Date"]

        mapping = self.mapper.build_mapping(headers)

        self.assertEqual(mapping.source_for("song_title"), "title")
        self.assertEqual(mapping.source_for("territory"), "Country")
        self.assertEqual(mapping.source_for("source"), "Platform")
        self.assertEqual(mapping.source_for("gross"), "Gross Amount")
        self.assertEqual(mapping.source_for("date"), "Broadcast Date")

    def test_case_insensitive_fallback(self) -> None:
        mapping = self.mapper.build_mapping(["SONG TITLE", "NET", "TERRITORY"])

        self.assertEqual(mapping.source_for("song_title"), "SONG TITLE")
        self.assertEqual(mapping.source_for("net"), "NET")
        self.assertEqual(mapping.match_strategies["song_title"], MatchStrategy.CASE_INSENSITIVE)

    def test_unmatched_optional_fields_are_none(self) -> None:
        mapping = self.mapper.build_mapping(["Song Title"])

        self.assertIsNone(mapping.source_for("net"))
        self.assertEqual(mapping.value({"Song Title": "A"}, "net"), "")

    def test_blank_header_becomes_usage_count(self) -> None:
        mapping = self.mapper.build_mapping(["Song Title", "Source", "", "Gross", "Net"])

        self.assertEqual(mapping.source_for("usage_count"), "")
        self.assertEqual(mapping.match_strategies["usage_count"], MatchStrategy.BLANK_HEADER)
        self.assertEqual(mapping.value({"Song Title": "A", "": "42"}, "usage_count"), "42")

    def test_named_usage_column_wins_over_blank_header(self) -> None:
        mapping = self.mapper.build_mapping(["Song Title", "", "Usage Count"])

        self.assertEqual(mapping.source_for("usage_count"), "Usage Count")

    def test_missing_song_title_raises_structured_error(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.build_mapping(["Territory", "Net"])

        self.assertEqual(ctx.exception.missing_fields, ("song_title",))
        codes = {error.code for error in ctx.exception.errors}
        self.assertIn("required_field_unmapped", codes)

    def test_overlapping_custom_variations_are_rejected(self) -> None:
        variations = dict(COLUMN_VARIATIONS, gross=("Amount",), net=("Amount",))
        mapper = RoyaltyColumnMapper(variations=variations)

        with self.assertRaises(SchemaMappingError) as ctx:
            mapper.build_mapping(["Song Title", "Amount"])

        [error] = ctx.exception.errors
        self.assertEqual(error.code, "shared_source_column")
        self.assertEqual(error.canonical_fields, ("gross", "net"))


if __name__ == "__main__":
    unittest.main()
