"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


@dataclass(frozen=True)
class RoyaltySummarySettings:
    """
    Runtime settings for the royalty summary engine.

    batch_size:           summary rows per upsert statement.
    distribution_places:  fractional digits kept on distribution shares.
    monthly_places:       fractional digits kept on monthly amounts.
    amount_places:        fractional digits kept on persisted totals and rates.
    log_failed_rows:      emit a WARNING per excluded CSV row.
    """

    batch_size: int = 100
    distribution_places: int = 6
    monthly_places: int = 2
    amount_places: int = 10
    log_failed_rows: bool = True


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface settings.
    """

    title: str = "Royalty Summary API"
    upload_history_limit: int = 20


@lru_cache(maxsize=1)
def get_royalty_summary_settings() -> RoyaltySummarySettings:
    """
    Return cached summary engine settings from environment variables.
    """

    return RoyaltySummarySettings(
        batch_size=max(1, _get_int_env("ROYALTY_SUMMARY_BATCH_SIZE", 100)),
        distribution_places=max(0, _get_int_env("ROYALTY_SUMMARY_DISTRIBUTION_PLACES", 6)),
        monthly_places=max(0, _get_int_env("ROYALTY_SUMMARY_MONTHLY_PLACES", 2)),
        amount_places=max(0, _get_int_env("ROYALTY_SUMMARY_AMOUNT_PLACES", 10)),
        log_failed_rows=_get_bool_env("ROYALTY_SUMMARY_LOG_FAILED_ROWS", True),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    """
    Return cached HTTP settings.
    """

    return APISettings(
        upload_history_limit=max(1, _get_int_env("UPLOAD_HISTORY_DEFAULT_LIMIT", 20)),
    )
