"""METAR/TAF lookup via the AviationWeather.gov data API."""

import json
import math
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .config import API_TIMEOUT, AWC_API_URL, USER_AGENT

INHG_PER_HPA = 0.029529983071445


class WeatherAPIError(Exception):
    """The weather API answered with an error or could not be reached."""


@dataclass
class MetarSummary:
    """Display fields extracted from a decoded METAR."""

    station: str
    time: str
    wind: str
    visibility: str
    temperature: str
    altimeter: str
    flight_category: str
    clouds: str
    raw_text: str = ""


@dataclass
class TafPeriod:
    """One forecast group of a TAF."""

    period: str
    wind: str
    visibility: str
    weather: str
    altimeter: str
    clouds: str


@dataclass
class TafSummary:
    """Display fields extracted from a decoded TAF."""

    station: str
    issued: str
    valid_from: str
    valid_to: str
    raw_text: str = ""
    periods: list[TafPeriod] = field(default_factory=list)


def fetch_awc(endpoint: str, ids: str, fmt: str = "json") -> object:
    """
    Fetch a product from the AviationWeather data API.

    Args:
        endpoint: API product, e.g. "metar" or "taf"
        ids: Station identifier(s), e.g. "KIAD"
        fmt: "json" or "raw"

    Returns:
        Decoded JSON, or the response text for the raw format.

    Raises:
        WeatherAPIError: on HTTP errors or network failures
    """
    query = urllib.parse.urlencode({"ids": ids, "format": fmt})
    url = f"{AWC_API_URL}/{endpoint}?{query}"
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    try:
        with urllib.request.urlopen(request, timeout=API_TIMEOUT) as response:
            body = response.read().decode()
    except urllib.error.HTTPError as e:
        detail = e.read().decode(errors="replace")
        raise WeatherAPIError(f"api error {e.code}: {detail}") from e
    except urllib.error.URLError as e:
        raise WeatherAPIError(f"Error fetching {endpoint}: {e.reason}") from e
    except TimeoutError as e:
        raise WeatherAPIError(f"Error fetching {endpoint}: timed out") from e
    except UnicodeDecodeError as e:
        raise WeatherAPIError(f"Error parsing {endpoint} response: {e}") from e

    if fmt == "raw":
        return body
    # No data for the station comes back as an empty body
    if not body.strip():
        return []
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise WeatherAPIError(f"Error parsing {endpoint} response: {e}") from e


def into_list(value: object) -> list:
    """Flatten an API payload into a list of reports."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        if "data" in value:
            data = value["data"]
            return data if isinstance(data, list) else [data]
        return [value]
    return [value]


def fetch_reports(endpoint: str, station: str) -> list[dict]:
    """Fetch decoded reports for a station, keeping only report objects."""
    return [r for r in into_list(fetch_awc(endpoint, station)) if isinstance(r, dict)]


# --- Field extraction ---


def round_half_away(value: float) -> int:
    """Round like a pilot would: 2.5 -> 3, -2.5 -> -3."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_str_field(report: dict, key: str) -> str | None:
    """Read a field as display text; numbers are stringified."""
    value = report.get(key)
    if isinstance(value, str):
        return value
    if _is_number(value):
        return _format_number(value)
    return None


def _get_float(report: dict, key: str) -> float | None:
    value = report.get(key)
    return float(value) if _is_number(value) else None


def format_unix(ts: int) -> str:
    """Format a unix timestamp as 'YYYY-MM-DD HH:MM UTC'."""
    try:
        dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return str(ts)
    return dt.strftime("%Y-%m-%d %H:%M UTC")


def _get_time(report: dict, key: str) -> str:
    value = report.get(key)
    if _is_number(value):
        return format_unix(int(value))
    return ""


def c_to_f(celsius: float) -> float:
    return celsius * 9.0 / 5.0 + 32.0


def format_wind(report: dict) -> str:
    """Wind as '270 12 kt G20 kt'; missing parts are left out."""
    parts = []
    wdir = report.get("wdir")
    if isinstance(wdir, str):
        parts.append(wdir)
    elif isinstance(wdir, int) and not isinstance(wdir, bool):
        parts.append(str(wdir))
    speed = _get_float(report, "wspd")
    if speed is not None:
        parts.append(f"{round_half_away(speed)} kt")
    gust = _get_float(report, "wgst")
    if gust is not None:
        parts.append(f"G{round_half_away(gust)} kt")
    return " ".join(parts)


def format_temperature(report: dict) -> str:
    temp = _get_float(report, "temp")
    dewp = _get_float(report, "dewp")
    if temp is None:
        return ""
    if dewp is None:
        return f"{temp:.1f}°C ({round_half_away(c_to_f(temp))}°F)"
    return (
        f"{temp:.1f}°C/{dewp:.1f}°C "
        f"({round_half_away(c_to_f(temp))}°F/{round_half_away(c_to_f(dewp))}°F)"
    )


def format_altimeter(report: dict) -> str:
    """Altimeter in both units. Values of 50 and up are hPa, below are inHg."""
    altim = _get_float(report, "altim")
    if altim is None:
        return ""
    if altim >= 50.0:
        return f"{altim:.1f} hPa ({altim * INHG_PER_HPA:.2f} inHg)"
    return f"{altim:.2f} inHg ({altim / INHG_PER_HPA:.1f} hPa)"


def format_clouds(report: dict) -> str:
    """Cloud layers as 'FEW050, BKN250'."""
    layers = report.get("clouds")
    if not isinstance(layers, list):
        return ""
    formatted = []
    for layer in layers:
        if not isinstance(layer, dict):
            continue
        cover = layer.get("cover")
        cover = cover if isinstance(cover, str) else ""
        base = layer.get("base")
        formatted.append(f"{cover}{_format_number(base)}" if _is_number(base) else cover)
    return ", ".join(formatted)


def summarize_metar(report: dict) -> MetarSummary:
    """Extract display fields from a decoded METAR."""
    return MetarSummary(
        station=get_str_field(report, "icaoId")
        or get_str_field(report, "station_id")
        or "",
        time=get_str_field(report, "reportTime") or _get_time(report, "obsTime"),
        wind=format_wind(report),
        visibility=get_str_field(report, "visib") or "",
        temperature=format_temperature(report),
        altimeter=format_altimeter(report),
        flight_category=get_str_field(report, "fltCat") or "",
        clouds=format_clouds(report),
        raw_text=get_str_field(report, "rawOb")
        or get_str_field(report, "raw_text")
        or "",
    )


def summarize_taf(report: dict, station: str = "") -> TafSummary:
    """Extract display fields from a decoded TAF."""
    periods = []
    forecasts = report.get("fcsts")
    if isinstance(forecasts, list):
        for fcst in forecasts:
            if not isinstance(fcst, dict):
                continue
            time_from = _get_time(fcst, "timeFrom")
            time_to = _get_time(fcst, "timeTo")
            periods.append(
                TafPeriod(
                    period=f"{time_from} - {time_to}" if time_from or time_to else "",
                    wind=format_wind(fcst),
                    visibility=get_str_field(fcst, "visib") or "",
                    weather=get_str_field(fcst, "wxString") or "",
                    altimeter=format_altimeter(fcst),
                    clouds=format_clouds(fcst),
                )
            )

    return TafSummary(
        station=get_str_field(report, "icaoId") or station,
        issued=get_str_field(report, "issueTime") or "",
        valid_from=_get_time(report, "validTimeFrom"),
        valid_to=_get_time(report, "validTimeTo"),
        raw_text=get_str_field(report, "rawTAF") or "",
        periods=periods,
    )
