"""
app/parsers package marker.
"""

from app.parsers.royalty_csv_parser import CSVParseError, ParsedCSV, dedupe_headers, parse_royalty_csv

__all__ = [
    "CSVParseError",
    "ParsedCSV",
    "dedupe_headers",
    "parse_royalty_csv",
]
