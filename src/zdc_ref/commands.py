"""Shared command implementations for the CLI."""

import json
import os
import re
import sys
import tempfile
import webbrowser
from pathlib import Path

import click

from .cache import cache_chart_list, get_cached_chart_list, get_current_airac_cycle
from .charts import (
    ChartInfo,
    ChartMatch,
    ChartQuery,
    chart_type_from_code,
    download_and_merge_pdfs,
    fetch_charts_from_api,
    lookup_chart_with_pages,
    page_urls,
)
from .config import NO_MATCH_HINT_LIMIT, charts_api_base, pubs_config_path
from .display import (
    display_chart_hint,
    display_chart_list,
    display_chart_matches,
    display_metar,
    display_pubs,
    display_routes,
    display_taf,
)
from .input import is_interactive, prompt_single_choice
from .pubs import ConfigError, find_pub, load_pubs
from .routes import (
    RoutesAPIError,
    fetch_preferred_routes,
    normalize_route_airport,
    route_columns,
    route_rows,
)
from .weather import WeatherAPIError, fetch_reports, summarize_metar, summarize_taf

CHART_TYPE_ALIASES = {
    "SID": "DP",
    "APP": "IAP",
    "TAXI": "APD",
}

VALID_CHART_TYPES = {"DP", "STAR", "IAP", "APD"}


def debug(message: str, verbose: bool) -> None:
    """Print a diagnostic line to stderr when running with --verbose."""
    if verbose:
        click.echo(message, err=True)


def with_k_prefix(airport: str) -> str | None:
    """ICAO form of a 3-letter US identifier: IAD -> KIAD.

    Returns None when the code doesn't look like one.
    """
    airport = airport.strip().upper()
    if len(airport) == 3 and not airport.startswith("K"):
        return f"K{airport}"
    return None


def prompt_chart_choice(matches: tuple[ChartMatch, ...]) -> ChartInfo | None:
    """Prompt user to select from numbered chart matches."""
    idx = prompt_single_choice(len(matches))
    if idx is not None:
        return matches[idx - 1].chart
    return None


def sanitize_chart_filename(airport: str, chart_name: str) -> str:
    """Convert chart name to a clean filename.

    Example: ("IAD", "ILS OR LOC RWY 01R") -> "ZDC_IAD_ILS_OR_LOC_RWY_01R.pdf"
    """
    name = re.sub(r"\s*\([^)]*\)", "", chart_name)
    name = re.sub(r"[^\w\s-]", "", name)
    name = re.sub(r"\s+", "_", name.strip()).strip("_")
    return f"ZDC_{airport.upper()}_{name}.pdf"


# --- Charts ---


def fetch_chart_catalog(
    airport: str,
    base: str,
    airac: str | None = None,
    use_cache: bool = True,
    verbose: bool = False,
) -> list[ChartInfo]:
    """Fetch an airport's chart catalog, retrying once with a K prefix.

    Catalogs are cached per AIRAC cycle; ``airac`` picks the cycle key.
    """
    airport = airport.strip().upper()
    airac = airac or get_current_airac_cycle()[0]

    if use_cache:
        cached = get_cached_chart_list(airport, airac, base)
        if cached:
            debug(f"using cached charts for {airport} (AIRAC {airac})", verbose)
            return cached

    debug(f"GET {base.rstrip('/')}/charts?airport={airport}", verbose)
    charts = fetch_charts_from_api(airport, base)

    k_airport = with_k_prefix(airport)
    if not charts and k_airport:
        debug(f"retry GET {base.rstrip('/')}/charts?airport={k_airport}", verbose)
        charts = fetch_charts_from_api(k_airport, base)

    if charts:
        cache_chart_list(airport, charts, airac, base)
    return charts


def open_chart_pdf(
    pdf_urls: list[str],
    airport: str,
    chart_name: str,
    merge: bool = False,
    verbose: bool = False,
) -> str | None:
    """Open a chart in the system browser.

    Multi-page charts are merged into one temp PDF when ``merge`` is set;
    otherwise the first page is opened and the rest are listed. If no
    browser can be started, every page URL is printed instead.

    Returns:
        The opened URL or file path, or None if nothing was opened.
    """
    if merge and len(pdf_urls) > 1:
        click.echo(f"Chart has {len(pdf_urls)} pages, merging...")
        temp_path = os.path.join(
            tempfile.gettempdir(), sanitize_chart_filename(airport, chart_name)
        )
        if download_and_merge_pdfs(pdf_urls, temp_path):
            target = Path(temp_path).as_uri()
        else:
            click.echo("Failed to merge chart pages, opening first page", err=True)
            target = pdf_urls[0]
    else:
        target = pdf_urls[0]

    debug(f"Opening {target}", verbose)
    try:
        opened = webbrowser.open(target)
    except webbrowser.Error as e:
        click.echo(f"failed to open: {e}", err=True)
        opened = False

    if not opened:
        for url in pdf_urls:
            click.echo(url)
        return None

    click.echo(f"Opening chart: {chart_name}")
    if target == pdf_urls[0] and len(pdf_urls) > 1:
        click.echo(f"  Continued on {len(pdf_urls) - 1} more page(s):")
        for url in pdf_urls[1:]:
            click.echo(f"  {url}")
    return target


def do_chart_lookup(
    airport: str,
    query_str: str,
    link_only: bool = False,
    auto_open: bool = True,
    airac: str | None = None,
    use_cache: bool = True,
    merge: bool = False,
    verbose: bool = False,
) -> list[str] | None:
    """Resolve a chart and open it, or print its page URLs.

    Args:
        airport: Airport code (e.g., "IAD")
        query_str: Free-text chart reference (e.g., "CNDEL5", "ILS 1R")
        link_only: Print the page URLs instead of opening the chart
        auto_open: False behaves like link_only (--no-open)
        airac: AIRAC cycle used as cache key (passed through)
        use_cache: Read the cached catalog if there is one
        merge: Merge multi-page charts into one PDF before opening
        verbose: Print diagnostics to stderr

    Returns the page URLs of the resolved chart, None if nothing was resolved.
    """
    base = charts_api_base()
    debug(f"charts base: {base}", verbose)
    debug(f"airport arg: {airport}", verbose)
    debug(f"query tokens: {query_str.split()}", verbose)

    charts = fetch_chart_catalog(airport, base, airac, use_cache, verbose)
    if not charts:
        click.echo(f"No charts found for {airport.upper()}", err=True)
        return None

    parsed = ChartQuery.parse(airport, query_str)
    print_only = link_only or not auto_open
    if not print_only:
        click.echo(f"Looking up: {parsed.airport} - {parsed.chart_name}")
        if parsed.chart_type.value != "unknown":
            click.echo(f"  Detected type: {parsed.chart_type.value.upper()}")

    pdf_urls, chart, matches = lookup_chart_with_pages(charts, parsed, base)

    if chart is None:
        if not matches:
            click.echo(f"No chart matching '{query_str}' at {parsed.airport}", err=True)
            display_chart_hint(charts, base, NO_MATCH_HINT_LIMIT)
            return None

        display_chart_matches(matches, base)
        if not is_interactive():
            click.echo("Refine your query or pass a more specific string.")
            return None
        chart = prompt_chart_choice(matches)
        if chart is None:
            return None
        pdf_urls = page_urls(charts, chart, base)

    if print_only:
        for url in pdf_urls:
            click.echo(url)
        return pdf_urls

    open_chart_pdf(pdf_urls, parsed.airport, chart.chart_name, merge, verbose)
    return pdf_urls


def do_list_charts(
    airport: str,
    chart_type: str | None = None,
    airac: str | None = None,
    use_cache: bool = True,
    verbose: bool = False,
) -> None:
    """List charts for an airport, optionally filtered by type.

    Args:
        airport: Airport code (e.g., "IAD")
        chart_type: Optional chart type filter (DP, STAR, IAP, APD or aliases)
    """
    airport = airport.upper()

    filter_type = None
    if chart_type:
        chart_type = chart_type.upper()
        filter_type = CHART_TYPE_ALIASES.get(chart_type, chart_type)
        if filter_type not in VALID_CHART_TYPES:
            click.echo(
                f"Unknown chart type: {chart_type}. "
                f"Valid types: DP/SID, STAR, IAP/APP, APD/TAXI",
                err=True,
            )
            return

    charts = fetch_chart_catalog(airport, charts_api_base(), airac, use_cache, verbose)

    # Records from catalogs without codes are typed by name
    if filter_type and charts:
        wanted = chart_type_from_code(filter_type)
        charts = [c for c in charts if c.chart_type == wanted]

    if not charts:
        if filter_type:
            click.echo(f"No {filter_type} charts found for {airport}")
        else:
            click.echo(f"No charts found for {airport}")
        return

    display_chart_list(airport, charts, filter_type)


# --- Weather ---


def fetch_station_reports(
    endpoint: str, station: str, verbose: bool = False
) -> tuple[str, list[dict]]:
    """Fetch reports for a station, retrying once with a K prefix.

    Returns:
        Tuple of (station actually queried, reports)
    """
    station = station.strip().upper()
    try:
        debug(f"GET {endpoint} {station}", verbose)
        reports = fetch_reports(endpoint, station)
        k_station = with_k_prefix(station)
        if not reports and k_station:
            station = k_station
            debug(f"retry GET {endpoint} {station}", verbose)
            reports = fetch_reports(endpoint, station)
    except WeatherAPIError as e:
        raise click.ClickException(str(e)) from e
    return station, reports


def do_metar_lookup(
    station: str, raw: bool = False, as_json: bool = False, verbose: bool = False
) -> None:
    """Show the current METAR for a station."""
    station, reports = fetch_station_reports("metar", station, verbose)
    if not reports:
        click.echo(f"No METAR data found for {station}", err=True)
        return
    if as_json:
        click.echo(json.dumps(reports, indent=2))
        return

    for report in reports:
        metar = summarize_metar(report)
        if not metar.raw_text and raw:
            click.echo(json.dumps(report, indent=2))
            click.echo()
        display_metar(metar)


def do_taf_lookup(
    station: str, raw: bool = False, as_json: bool = False, verbose: bool = False
) -> None:
    """Show the current TAF for a station."""
    station, reports = fetch_station_reports("taf", station, verbose)
    if not reports:
        click.echo(f"No TAF data found for {station}", err=True)
        return
    if as_json:
        click.echo(json.dumps(reports, indent=2))
        return

    for report in reports:
        taf = summarize_taf(report, station)
        if not taf.raw_text and raw:
            click.echo(json.dumps(report, indent=2))
            click.echo()
        display_taf(taf)


def do_weather_lookup(
    station: str, raw: bool = False, as_json: bool = False, verbose: bool = False
) -> None:
    """METAR followed by TAF."""
    do_metar_lookup(station, raw, as_json, verbose)
    click.echo()
    do_taf_lookup(station, raw, as_json, verbose)


# --- Routes ---


def do_route_lookup(
    origin: str, destination: str, raw: bool = False, verbose: bool = False
) -> None:
    """Show FAA preferred routes between two airports."""
    origin = normalize_route_airport(origin)
    destination = normalize_route_airport(destination)
    debug(f"GET preferred routes {origin} -> {destination}", verbose)

    try:
        rows = fetch_preferred_routes(origin, destination)
    except RoutesAPIError as e:
        raise click.ClickException(str(e)) from e

    if not rows:
        click.echo(f"No preferred routes found for {origin} -> {destination}")
        return
    if raw:
        click.echo(json.dumps(rows, indent=2))
        return

    columns = route_columns(rows)
    display_routes(columns, route_rows(rows, columns))


# --- Pubs ---


def _load_pubs(path: Path) -> dict[str, str]:
    try:
        return load_pubs(path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def do_list_pubs() -> None:
    """List configured publication aliases."""
    path = pubs_config_path()
    display_pubs(_load_pubs(path), path)


def do_pub_lookup(alias: str, auto_open: bool = True) -> None:
    """Open (or print) the URL configured for a publication alias.

    Exits with status 2 for unknown aliases.
    """
    url = find_pub(_load_pubs(pubs_config_path()), alias)
    if url is None:
        click.echo(f"Unknown pub '{alias}'. Run --list to see aliases.", err=True)
        sys.exit(2)

    if not auto_open:
        click.echo(url)
        return
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error:
        opened = False
    if not opened:
        click.echo(url)
