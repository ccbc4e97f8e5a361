"""Chart lookup functionality: catalog parsing, fuzzy matching, page stitching."""

import io
import json
import re
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from enum import Enum

import click

from .config import (
    AMBIGUITY_THRESHOLD,
    API_TIMEOUT,
    DEFAULT_CHARTS_API_BASE,
    MIN_MATCH_SCORE,
    PDF_TIMEOUT,
    TYPE_MATCH_BONUS,
    USER_AGENT,
)
from .fuzzy import covers_all_tokens, normalized_levenshtein, tokenize

CONT_MARKER = ", CONT."

# Sort key for continuation pages whose number can't be parsed
UNKNOWN_PAGE_INDEX = 999

# Airports whose procedures are named after the field rather than the code,
# e.g. "IAD5" is published as "DULLES FIVE"
AIRPORT_NAMES = {
    "IAD": "DULLES",
    "DCA": "WASHINGTON",
    "BWI": "BALTIMORE",
    "RIC": "RICHMOND",
    "ORF": "NORFOLK",
    "RDU": "RALEIGH",
    "OAK": "OAKLAND",
}

NUMBER_WORDS = {
    "1": "ONE",
    "2": "TWO",
    "3": "THREE",
    "4": "FOUR",
    "5": "FIVE",
    "6": "SIX",
    "7": "SEVEN",
    "8": "EIGHT",
    "9": "NINE",
}

NAME_ALIASES = {
    "TAXI": "AIRPORT DIAGRAM",
}

PROCEDURE_SUFFIX_RE = re.compile(r"^([A-Z]+)(\d)$")

# Catalog category -> chart code for the primary API shape
CATEGORY_CODES = {
    "airport_diagram": "APD",
    "departure": "DP",
    "arrival": "STAR",
    "approach": "IAP",
    "general": "GEN",
}

PRIMARY_NAME_KEYS = ("chart_name", "title", "name", "chartTitle", "chart_title")
PRIMARY_PATH_KEYS = (
    "pdf_url",
    "pdf",
    "pdf_path",
    "pdf_name",
    "file",
    "filename",
    "href",
    "link",
)
FALLBACK_NAME_KEYS = ("chart_name", "title", "name")
FALLBACK_PATH_KEYS = ("pdf_url", "pdf", "pdf_path", "pdf_name", "file", "filename")
FALLBACK_FAA_KEYS = ("faa_ident", "faa", "ident")
FALLBACK_ICAO_KEYS = ("icao_ident", "icao")

ABSOLUTE_SCHEMES = ("http://", "https://", "file://")
API_VERSION_RE = re.compile(r"/v[12](?=/|$)")


class ChartType(Enum):
    """Types of aviation charts."""

    SID = "sid"  # Standard Instrument Departure
    STAR = "star"  # Standard Terminal Arrival Route
    IAP = "iap"  # Instrument Approach Procedure
    APD = "apd"  # Airport Diagram
    UNKNOWN = "unknown"


CODE_TYPES = {
    "DP": ChartType.SID,
    "STAR": ChartType.STAR,
    "IAP": ChartType.IAP,
    "APD": ChartType.APD,
}

# Checked in order; a name like "ILS RWY 12" would otherwise hit several families
TYPE_KEYWORDS = (
    (ChartType.IAP, ("ILS", "LOC", "VOR", "RNAV", "RNP", "GPS", "NDB", "RWY")),
    (ChartType.APD, ("DIAGRAM",)),
    (ChartType.STAR, ("ARRIVAL", "ARR", "STAR")),
    (ChartType.SID, ("DEPARTURE", "DEP", "SID")),
)


def normalize_chart_name(name: str, airport: str | None = None) -> str:
    """
    Normalize chart name for matching.

    Examples:
        CNDEL5 -> CNDEL FIVE
        IAD5 (airport IAD) -> DULLES FIVE
        TAXI -> AIRPORT DIAGRAM
        ILS 12 -> ILS 12 (left as-is)
    """
    text = name.strip().upper()

    if text in NAME_ALIASES:
        return NAME_ALIASES[text]

    match = PROCEDURE_SUFFIX_RE.match(text)
    if match:
        base, digit = match.group(1), match.group(2)
        if airport and base == airport.strip().upper():
            base = AIRPORT_NAMES.get(base, base)
        return f"{base} {NUMBER_WORDS.get(digit, digit)}"

    return text


def chart_type_from_code(code: str) -> ChartType:
    """Map a catalog chart code (DP, STAR, IAP, APD) to a ChartType."""
    return CODE_TYPES.get(code.strip().upper(), ChartType.UNKNOWN)


def infer_chart_type(name: str) -> ChartType:
    """Infer the chart type from naming conventions."""
    upper = name.upper()
    for chart_type, keywords in TYPE_KEYWORDS:
        if any(keyword in upper for keyword in keywords):
            return chart_type
    return ChartType.UNKNOWN


@dataclass(frozen=True)
class ChartQuery:
    """Normalized chart query."""

    airport: str
    chart_name: str
    chart_type: ChartType = ChartType.UNKNOWN

    @classmethod
    def parse(cls, airport: str, text: str) -> "ChartQuery":
        """Build a query from an airport code and free text like 'CNDEL5'."""
        chart_name = normalize_chart_name(text, airport)
        return cls(
            airport=airport.strip().upper(),
            chart_name=chart_name,
            chart_type=infer_chart_type(chart_name),
        )


@dataclass(frozen=True)
class ChartInfo:
    """Chart information from the API."""

    chart_name: str
    chart_code: str
    pdf_path: str
    faa_ident: str = ""
    icao_ident: str = ""

    @property
    def chart_type(self) -> ChartType:
        """Chart type from the code, or from the name when there is no code."""
        if self.chart_code.strip():
            return chart_type_from_code(self.chart_code)
        return infer_chart_type(self.chart_name)

    @property
    def is_continuation(self) -> bool:
        return CONT_MARKER in self.chart_name


@dataclass(frozen=True)
class ChartMatch:
    """A chart match with similarity score.

    ``similarity`` is the raw name similarity; ``score`` adds the type bonus.
    """

    chart: ChartInfo
    score: float
    similarity: float = 0.0


# --- Catalog parsing ---


def _first_str(item: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str):
            return value
    return None


def _iter_objects(items: list):
    return (item for item in items if isinstance(item, dict))


def _fallback_record(item: dict) -> ChartInfo:
    return ChartInfo(
        chart_name=_first_str(item, FALLBACK_NAME_KEYS) or "",
        chart_code="",
        pdf_path=_first_str(item, FALLBACK_PATH_KEYS) or "",
        faa_ident=_first_str(item, FALLBACK_FAA_KEYS) or "",
        icao_ident=_first_str(item, FALLBACK_ICAO_KEYS) or "",
    )


def parse_chart_catalog(data: object) -> list[ChartInfo]:
    """
    Extract chart records from a chart catalog response.

    The primary shape is ``{"charts": {"approach": [...], ...}}`` with an
    optional ``airport_data`` block supplying default identifiers. Older or
    third-party services return either a plain list of records or a map of
    lists; those records carry no chart code.

    Args:
        data: Decoded JSON response

    Returns:
        List of ChartInfo objects in response order.
    """
    charts: list[ChartInfo] = []

    if isinstance(data, dict) and isinstance(data.get("charts"), dict):
        airport_data = data.get("airport_data")
        if not isinstance(airport_data, dict):
            airport_data = {}
        top_faa = _first_str(airport_data, ("faa_ident",)) or ""
        top_icao = _first_str(airport_data, ("icao_ident",)) or ""

        for category, records in data["charts"].items():
            if not isinstance(records, list):
                continue
            chart_code = CATEGORY_CODES.get(category, category.upper())
            for item in _iter_objects(records):
                charts.append(
                    ChartInfo(
                        chart_name=_first_str(item, PRIMARY_NAME_KEYS) or "",
                        chart_code=chart_code,
                        pdf_path=_first_str(item, PRIMARY_PATH_KEYS) or "",
                        faa_ident=_first_str(item, ("faa_ident",)) or top_faa,
                        icao_ident=_first_str(item, ("icao_ident",)) or top_icao,
                    )
                )
        return charts

    if isinstance(data, list):
        charts.extend(_fallback_record(item) for item in _iter_objects(data))
    elif isinstance(data, dict):
        for value in data.values():
            if isinstance(value, list):
                charts.extend(_fallback_record(item) for item in _iter_objects(value))

    return charts


def fetch_charts_from_api(
    airport: str, base: str = DEFAULT_CHARTS_API_BASE
) -> list[ChartInfo]:
    """
    Fetch charts for an airport from the charts API.

    Args:
        airport: FAA or ICAO airport identifier (e.g., "IAD" or "KIAD")
        base: API base URL

    Returns:
        List of ChartInfo objects for the airport. Empty when the service
        has nothing for the airport or cannot be reached.
    """
    url = f"{base.rstrip('/')}/charts?airport={airport.strip().upper()}"
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

    try:
        with urllib.request.urlopen(request, timeout=API_TIMEOUT) as response:
            data = json.loads(response.read().decode())
    except urllib.error.HTTPError:
        # Unknown airports come back as 404
        return []
    except (urllib.error.URLError, TimeoutError) as e:
        # Read timeouts surface from read(), outside urlopen's URLError wrapping
        click.echo(f"Error fetching charts from API: {e}", err=True)
        return []
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        click.echo(f"Error parsing API response: {e}", err=True)
        return []

    return parse_chart_catalog(data)


# --- Matching ---


def _is_exact(score: float) -> bool:
    return abs(score - 1.0) < sys.float_info.epsilon


def find_chart_by_name(
    charts: list[ChartInfo],
    query: ChartQuery,
    ambiguity_threshold: float = AMBIGUITY_THRESHOLD,
    min_score: float = MIN_MATCH_SCORE,
    type_bonus: float = TYPE_MATCH_BONUS,
) -> tuple[ChartInfo | None, tuple[ChartMatch, ...]]:
    """
    Find a chart by name using fuzzy matching.

    Args:
        charts: List of charts to search
        query: The normalized chart query
        ambiguity_threshold: Score difference threshold for ambiguous matches
        min_score: Matches at or below this score are dropped
        type_bonus: Added when the chart type matches the query's type

    Returns:
        Tuple of (best_match, matches).
        If ambiguous or nothing matched, best_match is None and matches holds
        the candidates to choose from (possibly empty).
    """
    if not charts:
        return None, ()

    chart_name_upper = query.chart_name.upper()
    query_tokens = tokenize(chart_name_upper)

    # Continuation pages are picked up later by find_all_chart_pages
    matches: list[ChartMatch] = []
    for chart in charts:
        if chart.is_continuation:
            continue
        similarity = normalized_levenshtein(chart_name_upper, chart.chart_name.upper())
        score = similarity

        # Helps prioritize IAPs when the user searches for "RNAV 4R" etc.
        if (
            query.chart_type != ChartType.UNKNOWN
            and chart.chart_type == query.chart_type
        ):
            score += type_bonus

        if score > min_score:
            matches.append(ChartMatch(chart=chart, score=score, similarity=similarity))

    if not matches:
        return None, ()

    matches.sort(key=lambda m: m.score, reverse=True)
    ranked = tuple(matches)
    best_match = ranked[0]

    if _is_exact(best_match.score):
        return best_match.chart, ranked

    # A chart named exactly like the query wins even when another chart's
    # type bonus ranks it higher
    for m in ranked:
        if _is_exact(m.similarity):
            return m.chart, ranked

    # Handles "ILS 28R" style queries where only one chart has every term
    if len(query_tokens) > 1:
        full_matches = tuple(
            m for m in ranked if covers_all_tokens(query_tokens, m.chart.chart_name)
        )
        if len(full_matches) == 1:
            return full_matches[0].chart, ranked
        if full_matches:
            return None, full_matches

    if len(ranked) > 1:
        second_score = ranked[1].score
        if best_match.score - second_score < ambiguity_threshold:
            close_matches = tuple(
                m for m in ranked if m.score >= best_match.score - ambiguity_threshold
            )
            return None, close_matches

    return best_match.chart, ranked


def base_chart_name(chart_name: str) -> str:
    """Strip a ", CONT.n" suffix from a chart name."""
    return chart_name.split(CONT_MARKER, 1)[0]


def _page_index(suffix: str) -> int:
    try:
        index = int(suffix.strip())
    except ValueError:
        return UNKNOWN_PAGE_INDEX
    return index if index >= 0 else UNKNOWN_PAGE_INDEX


def find_all_chart_pages(
    charts: list[ChartInfo],
    base_chart: ChartInfo,
) -> list[ChartInfo]:
    """
    Find all pages of a chart (main page + continuation pages).

    Args:
        charts: List of all charts for the airport
        base_chart: The chart to find pages for (a continuation page works too)

    Returns:
        List of ChartInfo objects for all pages, sorted by page order.
        The base chart is first, followed by CONT.1, CONT.2, etc. Pages with
        an unreadable number come last.
    """
    base_name = base_chart_name(base_chart.chart_name)
    prefix = f"{base_name}{CONT_MARKER}"

    pages = []
    for chart in charts:
        if chart.chart_name == base_name:
            pages.append((0, chart))
        elif chart.chart_name.startswith(prefix):
            pages.append((_page_index(chart.chart_name[len(prefix):]), chart))

    pages.sort(key=lambda x: x[0])
    return [chart for _, chart in pages]


def absolute_pdf_url(base: str, pdf_path: str) -> str:
    """
    Turn a catalog PDF path into a full URL.

    Examples (base "https://api-v2.aviationapi.com/v2"):
        "https://aeronav.faa.gov/x.PDF" -> unchanged
        "//cdn.example.com/x.pdf" -> "https://cdn.example.com/x.pdf"
        "/charts/x.pdf" -> "https://api-v2.aviationapi.com/charts/x.pdf"
        "x.pdf" -> "https://api-v2.aviationapi.com/v2/x.pdf"
    """
    path = pdf_path.strip()
    if path.startswith(ABSOLUTE_SCHEMES):
        return path
    if path.startswith("//"):
        return f"https:{path}"

    base = base.rstrip("/")
    if path.startswith("/"):
        # API version prefixes aren't part of the document host
        version = API_VERSION_RE.search(base)
        domain_root = base[: version.start()] if version else base
        return f"{domain_root.rstrip('/')}{path}"

    return f"{base}/{path}"


def lookup_chart_with_pages(
    charts: list[ChartInfo],
    query: ChartQuery,
    base: str = DEFAULT_CHARTS_API_BASE,
) -> tuple[list[str] | None, ChartInfo | None, tuple[ChartMatch, ...]]:
    """
    Match a chart and collect the URLs of all its pages.

    Args:
        charts: The airport's chart catalog
        query: The normalized chart query
        base: API base URL used to resolve relative PDF paths

    Returns:
        Tuple of (pdf_urls, matched_chart, matches).
        - pdf_urls: URLs for all pages (None if not found/ambiguous)
        - matched_chart: The matched chart (None if not found/ambiguous)
        - matches: Ranked candidates for display
    """
    chart, matches = find_chart_by_name(charts, query)
    if not chart:
        return None, None, matches

    return page_urls(charts, chart, base), chart, matches


def page_urls(charts: list[ChartInfo], chart: ChartInfo, base: str) -> list[str]:
    """Absolute URLs of every page of a chart, in reading order."""
    return [
        absolute_pdf_url(base, page.pdf_path)
        for page in find_all_chart_pages(charts, chart)
    ]


# --- PDF download ---


def download_pdf(url: str) -> bytes | None:
    """Download a PDF, returning None on network errors."""
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=PDF_TIMEOUT) as response:
            return response.read()
    except (urllib.error.URLError, TimeoutError) as e:
        click.echo(f"Error downloading {url}: {e}", err=True)
        return None


def download_and_merge_pdfs(pdf_urls: list[str], output_path: str) -> bool:
    """
    Download multiple PDFs and merge them into one file.

    Args:
        pdf_urls: List of PDF URLs to download and merge, in page order
        output_path: Path to save the merged PDF

    Returns:
        True if successful, False otherwise.
    """
    from pypdf import PdfReader, PdfWriter
    from pypdf.errors import PdfReadError

    if not pdf_urls:
        return False

    writer = PdfWriter()
    for url in pdf_urls:
        pdf_data = download_pdf(url)
        if pdf_data is None:
            return False
        try:
            reader = PdfReader(io.BytesIO(pdf_data))
        except PdfReadError as e:
            click.echo(f"Error reading {url}: {e}", err=True)
            return False
        for page in reader.pages:
            writer.add_page(page)

    with open(output_path, "wb") as f:
        writer.write(f)

    return True
