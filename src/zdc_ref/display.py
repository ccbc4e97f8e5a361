"""Display and formatting functions for CLI output."""

from pathlib import Path

import click

from .charts import ChartInfo, ChartMatch, absolute_pdf_url
from .weather import MetarSummary, TafSummary


def print_table_header(title: str, header: str) -> None:
    """Print standard table header with title and column headers."""
    click.echo()
    click.echo("=" * 80)
    click.echo(title)
    click.echo("=" * 80)
    click.echo(header)
    click.echo("-" * 80)


def print_table_footer(count: int, item_name: str) -> None:
    """Print standard table footer with count."""
    click.echo(f"\nTotal: {count} {item_name}")
    click.echo()


def print_columns(headers: list[str], rows: list[list[str]]) -> None:
    """Print rows left-aligned under headers, each column as wide as its content."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))

    def fmt(cells: list[str]) -> str:
        padded = [
            f"{cell:<{widths[i]}}" for i, cell in enumerate(cells[: len(widths)])
        ]
        return "  ".join(padded).rstrip()

    click.echo(fmt(headers))
    click.echo("  ".join("-" * w for w in widths))
    for row in rows:
        click.echo(fmt(row))


def display_chart_matches(
    matches: tuple[ChartMatch, ...] | list[ChartMatch], base: str
) -> None:
    """Display numbered list of matching charts, best first."""
    click.echo("\nMultiple possible charts (no strong match):")
    click.echo("-" * 80)
    for i, match in enumerate(matches, start=1):
        chart = match.chart
        type_str = chart.chart_code if chart.chart_code else "?"
        click.echo(
            f"  [{i}] [{type_str:<4}] {chart.chart_name} (score: {match.score:.2f})"
        )
        click.echo(f"        {absolute_pdf_url(base, chart.pdf_path)}")
    click.echo()


def display_chart_hint(charts: list[ChartInfo], base: str, limit: int) -> None:
    """Show the first few catalog entries when nothing matched."""
    print_table_header(
        "AVAILABLE CHARTS", f"{'Idx':<5} {'Type':<6} Title / Likely PDF"
    )
    for i, chart in enumerate(charts[:limit]):
        type_str = chart.chart_code if chart.chart_code else "?"
        click.echo(f"{i:<5} {type_str:<6} {chart.chart_name}")
        click.echo(f"{'':<12} {absolute_pdf_url(base, chart.pdf_path)}")
    if len(charts) > limit:
        click.echo(f"\nShowing {limit} of {len(charts)} charts (use 'zdc list')")
    click.echo("\nRefine your query or pass a more specific string.")


def display_chart_list(
    airport: str, charts: list[ChartInfo], filter_type: str | None
) -> None:
    """List an airport's charts, optionally already filtered to one type."""
    if filter_type:
        click.echo(f"\n{filter_type} charts for {airport}:")
    else:
        click.echo(f"\nAvailable charts for {airport}:")
    click.echo("-" * 40)
    for chart in charts:
        if filter_type:
            click.echo(f"  {chart.chart_name}")
        else:
            type_str = chart.chart_code if chart.chart_code else "?"
            click.echo(f"  [{type_str:<4}] {chart.chart_name}")


def display_metar(metar: MetarSummary) -> None:
    """Display a METAR: raw text, then the decoded fields."""
    if metar.raw_text:
        click.echo(metar.raw_text)
        click.echo()
    print_columns(
        ["Station", "Time", "Wind", "Vis", "Temp/Dew", "Alt", "FlightCat", "Clouds"],
        [
            [
                metar.station,
                metar.time,
                metar.wind,
                metar.visibility,
                metar.temperature,
                metar.altimeter,
                metar.flight_category,
                metar.clouds,
            ]
        ],
    )


def display_taf(taf: TafSummary) -> None:
    """Display a TAF: raw text, header line, then one row per forecast period."""
    if taf.raw_text:
        click.echo(taf.raw_text)
        click.echo()
    click.echo(
        f"{taf.station}  issued: {taf.issued}  valid: {taf.valid_from} - {taf.valid_to}"
    )
    print_columns(
        ["Period", "Wind", "Vis", "Wx", "Alt", "Clouds"],
        [
            [p.period, p.wind, p.visibility, p.weather, p.altimeter, p.clouds]
            for p in taf.periods
        ],
    )


def display_routes(columns: list[str], rows: list[list[str]]) -> None:
    """Display preferred routes as a table."""
    print_columns(columns, rows)
    print_table_footer(len(rows), "route(s)")


def display_pubs(pubs: dict[str, str], path: Path) -> None:
    """Display configured publication aliases."""
    click.echo(f"Available pubs (from {path}):")
    for alias, url in pubs.items():
        click.echo(f" - {alias} -> {url}")
