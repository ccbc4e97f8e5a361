"""CLI interface for ZDC Reference lookups."""

import click

from .commands import (
    do_chart_lookup,
    do_list_charts,
    do_list_pubs,
    do_metar_lookup,
    do_pub_lookup,
    do_route_lookup,
    do_taf_lookup,
    do_weather_lookup,
)


@click.group(invoke_without_command=True)
@click.version_option("0.1.2", prog_name="zdc")
@click.option("--verbose", "-v", is_flag=True, help="Print diagnostics to stderr")
@click.option(
    "--no-open", is_flag=True, help="Print URLs instead of opening a browser"
)
@click.option("--pubs", "-p", "pub", default=None, help="Open a publication by alias")
@click.option("--list", "-l", "list_pubs", is_flag=True, help="List publication aliases")
@click.pass_context
def main(ctx, verbose: bool, no_open: bool, pub: str | None, list_pubs: bool):
    """ZDC Reference CLI - charts, weather and routes for vZDC controllers.

    Examples:

        zdc chart IAD CNDEL5     - Open the CNDEL FIVE departure

        zdc chart IAD ILS 1R -l  - Print the PDF URL(s) only

        zdc list IAD STAR        - List IAD arrivals

        zdc weather DCA          - METAR and TAF for DCA

        zdc route IAD BOS        - FAA preferred routes

        zdc -p the_fox           - Open a configured publication
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["auto_open"] = not no_open

    if verbose:
        click.echo("vZDC initialized", err=True)

    if list_pubs:
        do_list_pubs()
        ctx.exit()

    if pub:
        do_pub_lookup(pub, auto_open=not no_open)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("airport")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--link", "-l", "link_only", is_flag=True, help="Print PDF URL(s) only"
)
@click.option("--airac", default=None, help="AIRAC cycle, e.g. 2512 (optional)")
@click.option("--no-cache", is_flag=True, help="Bypass cache and fetch fresh data")
@click.option("--merge", is_flag=True, help="Merge multi-page charts into one PDF")
@click.pass_context
def chart(
    ctx,
    airport: str,
    query: tuple[str, ...],
    link_only: bool,
    airac: str | None,
    no_cache: bool,
    merge: bool,
):
    """Look up a chart and open the PDF.

    Chart names are fuzzy-matched, so "CNDEL5" finds "CNDEL FIVE" and
    "TAXI" finds the airport diagram. Continuation pages (CONT.1, CONT.2)
    are included in order.

    \b
    Examples:
      chart IAD CNDEL5       - CNDEL FIVE departure
      chart IAD IAD5         - DULLES FIVE (airport code expanded)
      chart DCA ILS 1        - ILS approach to runway 1
      chart BWI TAXI -l      - Airport diagram URL
    """
    do_chart_lookup(
        airport,
        " ".join(query),
        link_only=link_only,
        auto_open=ctx.obj["auto_open"],
        airac=airac,
        use_cache=not no_cache,
        merge=merge,
        verbose=ctx.obj["verbose"],
    )


@main.command("list")
@click.argument("airport")
@click.argument("chart_type", required=False, default=None)
@click.option("--airac", default=None, help="AIRAC cycle, e.g. 2512 (optional)")
@click.option("--no-cache", is_flag=True, help="Bypass cache and fetch fresh data")
@click.pass_context
def list_cmd(
    ctx, airport: str, chart_type: str | None, airac: str | None, no_cache: bool
):
    """List charts for an airport.

    Optionally filter by type. Type aliases: SID=DP, APP=IAP, TAXI=APD.

    \b
    Examples:
      list IAD               - All IAD charts
      list IAD SID           - IAD departure procedures
      list DCA APP           - DCA instrument approaches
    """
    do_list_charts(
        airport,
        chart_type,
        airac=airac,
        use_cache=not no_cache,
        verbose=ctx.obj["verbose"],
    )


@main.command()
@click.argument("station")
@click.option("--raw", is_flag=True, help="Show the JSON report if it has no raw text")
@click.option("--json", "as_json", is_flag=True, help="Print the API response as JSON")
@click.pass_context
def metar(ctx, station: str, raw: bool, as_json: bool):
    """Current METAR for a station (e.g., metar IAD)."""
    do_metar_lookup(station, raw=raw, as_json=as_json, verbose=ctx.obj["verbose"])


@main.command()
@click.argument("station")
@click.option("--raw", is_flag=True, help="Show the JSON report if it has no raw text")
@click.option("--json", "as_json", is_flag=True, help="Print the API response as JSON")
@click.pass_context
def taf(ctx, station: str, raw: bool, as_json: bool):
    """Current TAF for a station (e.g., taf IAD)."""
    do_taf_lookup(station, raw=raw, as_json=as_json, verbose=ctx.obj["verbose"])


@main.command()
@click.argument("station")
@click.option("--raw", is_flag=True, help="Show the JSON report if it has no raw text")
@click.option("--json", "as_json", is_flag=True, help="Print the API response as JSON")
@click.pass_context
def weather(ctx, station: str, raw: bool, as_json: bool):
    """METAR and TAF for a station."""
    do_weather_lookup(station, raw=raw, as_json=as_json, verbose=ctx.obj["verbose"])


@main.command()
@click.argument("origin")
@click.argument("destination")
@click.option("--raw", is_flag=True, help="Print the API response as JSON")
@click.pass_context
def route(ctx, origin: str, destination: str, raw: bool):
    """FAA preferred routes between two airports (e.g., route IAD BOS)."""
    do_route_lookup(origin, destination, raw=raw, verbose=ctx.obj["verbose"])


if __name__ == "__main__":
    main()
