"""Centralized configuration for ZDC Reference CLI."""

import os
from pathlib import Path

# =============================================================================
# Cache Settings
# =============================================================================
CACHE_DIR = Path.home() / ".zdc-ref" / "cache"

# =============================================================================
# Chart Catalog API
# =============================================================================
DEFAULT_CHARTS_API_BASE = "https://api-v2.aviationapi.com/v2"
USER_AGENT = "ZDC-Chart-CLI/1.0"

# =============================================================================
# Other APIs
# =============================================================================
AWC_API_URL = "https://aviationweather.gov/api/data"
PREFERRED_ROUTES_URL = "https://api.aviationapi.com/v1/preferred-routes/search"

# Seconds
API_TIMEOUT = 10
PDF_TIMEOUT = 30

# =============================================================================
# Chart Matching
# =============================================================================
# Empirically chosen and interdependent: the type bonus can lift a chart over
# the minimum score or into the ambiguity band.
MIN_MATCH_SCORE = 0.2
TYPE_MATCH_BONUS = 0.15
AMBIGUITY_THRESHOLD = 0.15

# How many catalog entries to show when nothing matched
NO_MATCH_HINT_LIMIT = 12


def charts_api_base() -> str:
    """Chart catalog base URL, overridable with ZDC_CHARTS_BASE."""
    return os.environ.get("ZDC_CHARTS_BASE", DEFAULT_CHARTS_API_BASE)


def pubs_config_path() -> Path:
    """Location of the pubs alias file (ZDC_CONFIG, XDG, then ~/.config)."""
    override = os.environ.get("ZDC_CONFIG")
    if override:
        return Path(override)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "zdc" / "pubs.toml"
    return Path.home() / ".config" / "zdc" / "pubs.toml"
