"""Shared failure messages for royalty summary error handling."""

# Fatal preconditions: the run stops before any row is processed.
NO_DATA_ROWS = "No data rows found in CSV"
MISSING_SONG_TITLE_COLUMN = "Missing required column: Song Title"

# Per-row failures: the row is excluded and reported in failed_rows.
MISSING_SONG_TITLE = "Missing song title"
TRACK_NOT_FOUND = "Track not found: {title}"


def batch_failed(batch_number: int, message: str) -> str:
    return f"Batch {batch_number} failed: {message}"


def cancelled_before(stage: str) -> str:
    return f"Processing cancelled before {stage}"
