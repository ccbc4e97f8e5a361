"""FAA preferred route lookup via AviationAPI."""

import json
import urllib.error
import urllib.parse
import urllib.request

from .config import API_TIMEOUT, PREFERRED_ROUTES_URL, USER_AGENT


class RoutesAPIError(Exception):
    """The routes API answered with an error or could not be reached."""


def normalize_route_airport(code: str) -> str:
    """The routes API wants FAA identifiers: KIAD -> IAD."""
    code = code.strip()
    if code[:1] in ("K", "k"):
        code = code[1:]
    return code.upper()


def fetch_preferred_routes(origin: str, destination: str) -> list:
    """
    Fetch preferred routes between two airports.

    Args:
        origin: Departure airport (FAA or ICAO)
        destination: Arrival airport (FAA or ICAO)

    Returns:
        List of route rows as returned by the API.

    Raises:
        RoutesAPIError: on HTTP errors or network failures
    """
    query = urllib.parse.urlencode(
        {
            "origin": normalize_route_airport(origin),
            "dest": normalize_route_airport(destination),
        }
    )
    url = f"{PREFERRED_ROUTES_URL}?{query}"
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    try:
        with urllib.request.urlopen(request, timeout=API_TIMEOUT) as response:
            data = json.loads(response.read().decode())
    except urllib.error.HTTPError as e:
        detail = e.read().decode(errors="replace")
        raise RoutesAPIError(f"api error {e.code}: {detail}") from e
    except urllib.error.URLError as e:
        raise RoutesAPIError(f"Error fetching routes: {e.reason}") from e
    except TimeoutError as e:
        raise RoutesAPIError("Error fetching routes: timed out") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RoutesAPIError(f"Error parsing routes response: {e}") from e

    return data if isinstance(data, list) else [data]


def route_columns(rows: list) -> list[str]:
    """Sorted union of the fields present in the rows."""
    columns = set()
    for row in rows:
        if isinstance(row, dict):
            columns.update(row.keys())
        else:
            columns.add("value")
    return sorted(columns)


def format_cell(value: object) -> str:
    """Render a JSON value as a table cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, list):
        return ", ".join(json.dumps(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def route_rows(rows: list, columns: list[str]) -> list[list[str]]:
    """Rows as lists of cells in column order."""
    table = []
    for row in rows:
        if isinstance(row, dict):
            table.append([format_cell(row.get(column)) for column in columns])
        else:
            table.append([format_cell(row)])
    return table
