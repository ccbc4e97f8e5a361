"""Publication aliases: short names mapped to document URLs.

The alias table lives in a TOML file owned by the user::

    [pubs]
    the_fox = "https://example.com/the_fox"

The file is only ever read. Without one, a small built-in table is used.
"""

import tomllib
from pathlib import Path

DEFAULT_PUBS = {
    "the_fox": "https://example.com/the_fox",
    "green_dragon": "https://example.com/green_dragon",
}


class ConfigError(Exception):
    """The pubs file exists but can't be used."""


def load_pubs(path: Path) -> dict[str, str]:
    """
    Load the alias -> URL table.

    Args:
        path: Location of the pubs TOML file

    Returns:
        The [pubs] table, or the default table if the file doesn't exist.

    Raises:
        ConfigError: if the file can't be read or parsed
    """
    if not path.exists():
        return dict(DEFAULT_PUBS)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse config {path}: {e}") from e

    pubs = data.get("pubs", {})
    if not isinstance(pubs, dict):
        raise ConfigError(f"failed to parse config {path}: [pubs] must be a table")
    return {str(alias): str(url) for alias, url in pubs.items()}


def normalize_alias(alias: str) -> str:
    """'Green Dragon' and 'green-dragon' both become 'green_dragon'."""
    return alias.lower().replace("-", "_").replace(" ", "_")


def find_pub(pubs: dict[str, str], alias: str) -> str | None:
    """Look up an alias, ignoring case and separator differences."""
    normalized = {normalize_alias(key): url for key, url in pubs.items()}
    return normalized.get(normalize_alias(alias))
