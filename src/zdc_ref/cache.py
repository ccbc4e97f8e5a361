"""AIRAC-aware caching of chart catalogs.

AIRAC (Aeronautical Information Regulation And Control) cycles are 28 days
and follow a predictable schedule. Chart catalogs are cached per cycle, so a
new cycle starts with an empty cache.
"""

import hashlib
import json
import re
from dataclasses import asdict
from datetime import date, timedelta
from pathlib import Path

from zdc_ref import config
from zdc_ref.charts import ChartInfo

# AIRAC epoch: Cycle 2501 effective date
# All AIRAC cycles can be calculated from this reference point
AIRAC_EPOCH = date(2025, 1, 23)
CYCLE_DAYS = 28
CYCLES_PER_YEAR = 13


def get_current_airac_cycle(today: date | None = None) -> tuple[str, date, date]:
    """Calculate current AIRAC cycle and its date boundaries.

    Returns:
        Tuple of (cycle_id, start_date, end_date)
        Example: ("2512", date(2025, 11, 27), date(2025, 12, 24))
    """
    today = today or date.today()
    days_since_epoch = (today - AIRAC_EPOCH).days
    cycle_number = days_since_epoch // CYCLE_DAYS  # 0-indexed from 2501

    year = 2025 + (cycle_number // CYCLES_PER_YEAR)
    cycle_in_year = (cycle_number % CYCLES_PER_YEAR) + 1
    cycle_id = f"{year % 100:02d}{cycle_in_year:02d}"

    start_date = AIRAC_EPOCH + timedelta(days=cycle_number * CYCLE_DAYS)
    end_date = start_date + timedelta(days=CYCLE_DAYS - 1)

    return cycle_id, start_date, end_date


def _sanitize_filename(name: str) -> str:
    """Sanitize a string for use as a filename."""
    safe = re.sub(r"[^\w\-.]", "_", name)
    safe = re.sub(r"_+", "_", safe)
    return safe.strip("_")


def _source_key(base: str) -> str:
    """Short stable directory name for a catalog service base URL."""
    return hashlib.sha256(base.strip().rstrip("/").encode()).hexdigest()[:12]


def get_chart_list_cache_path(airport: str, airac: str, base: str) -> Path:
    """Cache path for an airport's chart catalog in a given cycle.

    Catalogs from different services are kept apart, since their relative
    PDF paths only resolve against the base they came from.
    """
    return (
        config.CACHE_DIR
        / "charts"
        / _sanitize_filename(airac)
        / _source_key(base)
        / f"{_sanitize_filename(airport.upper())}.json"
    )


def get_cached_chart_list(
    airport: str, airac: str, base: str
) -> list[ChartInfo] | None:
    """Retrieve a cached chart catalog.

    Returns:
        List of charts if cached, None otherwise
    """
    cache_path = get_chart_list_cache_path(airport, airac, base)
    if not cache_path.exists():
        return None
    try:
        with open(cache_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [ChartInfo(**entry) for entry in data["charts"]]
    except (OSError, json.JSONDecodeError, KeyError, TypeError):
        return None


def cache_chart_list(
    airport: str, charts: list[ChartInfo], airac: str, base: str
) -> None:
    """Cache a chart catalog. Write failures are ignored."""
    cache_path = get_chart_list_cache_path(airport, airac, base)
    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        with open(cache_path, "w", encoding="utf-8") as f:
            json.dump({"charts": [asdict(chart) for chart in charts]}, f)
    except OSError:
        pass
