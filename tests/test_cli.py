import pytest
from click.testing import CliRunner

from zdc_ref import commands, config
from zdc_ref.charts import ChartInfo
from zdc_ref.cli import main

BASE = "https://charts.example.com/v2"

IAD_CATALOG = [
    ChartInfo("AIRPORT DIAGRAM", "APD", "/files/apd.pdf", "IAD", "KIAD"),
    ChartInfo("CNDEL FIVE", "DP", "/files/cndel5.pdf", "IAD", "KIAD"),
    ChartInfo("CNDEL FIVE, CONT.1", "DP", "/files/cndel5-1.pdf", "IAD", "KIAD"),
    ChartInfo("DULLES FIVE", "DP", "dulles5.pdf", "IAD", "KIAD"),
    ChartInfo("ILS OR LOC RWY 1", "IAP", "//cdn.example.com/ils1.pdf", "IAD", "KIAD"),
    ChartInfo("ILS OR LOC RWY 19", "IAP", "https://cdn.example.com/ils19.pdf"),
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep tests off the network, the browser and the real cache."""
    monkeypatch.setattr(config, "CACHE_DIR", tmp_path / "cache")
    monkeypatch.setenv("ZDC_CHARTS_BASE", BASE)
    monkeypatch.setenv("ZDC_CONFIG", str(tmp_path / "pubs.toml"))
    monkeypatch.setattr(commands, "is_interactive", lambda: False)
    opened = []
    monkeypatch.setattr(
        commands.webbrowser, "open", lambda url: opened.append(url) or True
    )
    return opened


@pytest.fixture
def catalog_calls(monkeypatch):
    """Serve IAD_CATALOG for the airport codes listed in `served`."""
    calls = []
    served = {"IAD"}

    def fake_fetch(airport, base):
        calls.append((airport, base))
        return list(IAD_CATALOG) if airport in served else []

    monkeypatch.setattr(commands, "fetch_charts_from_api", fake_fetch)
    return calls, served


def test_chart_link_prints_every_page(runner, catalog_calls):
    result = runner.invoke(main, ["chart", "iad", "CNDEL5", "--link"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "https://charts.example.com/files/cndel5.pdf",
        "https://charts.example.com/files/cndel5-1.pdf",
    ]
    assert catalog_calls[0] == [("IAD", BASE)]


def test_airport_code_procedure_name(runner, catalog_calls):
    result = runner.invoke(main, ["--no-open", "chart", "IAD", "IAD5"])

    assert result.exit_code == 0
    assert result.output.strip() == "https://charts.example.com/v2/dulles5.pdf"


def test_chart_opens_first_page_in_browser(runner, catalog_calls, isolated):
    result = runner.invoke(main, ["chart", "IAD", "taxi"])

    assert result.exit_code == 0
    assert isolated == ["https://charts.example.com/files/apd.pdf"]
    assert "Opening chart: AIRPORT DIAGRAM" in result.output
    assert "Detected type: APD" in result.output


def test_multi_page_chart_lists_remaining_pages(runner, catalog_calls, isolated):
    result = runner.invoke(main, ["chart", "IAD", "CNDEL", "FIVE"])

    assert result.exit_code == 0
    assert isolated == ["https://charts.example.com/files/cndel5.pdf"]
    assert "https://charts.example.com/files/cndel5-1.pdf" in result.output


def test_browser_failure_prints_urls(runner, catalog_calls, monkeypatch):
    monkeypatch.setattr(commands.webbrowser, "open", lambda url: False)

    result = runner.invoke(main, ["chart", "IAD", "ILS", "OR", "LOC", "RWY", "19"])

    assert result.exit_code == 0
    assert "https://cdn.example.com/ils19.pdf" in result.output.splitlines()


def test_retries_with_k_prefix(runner, catalog_calls):
    calls, served = catalog_calls
    served.clear()
    served.add("KIAD")

    result = runner.invoke(main, ["chart", "IAD", "CNDEL5", "-l", "--no-cache"])

    assert result.exit_code == 0
    assert [airport for airport, _ in calls] == ["IAD", "KIAD"]
    assert "https://charts.example.com/files/cndel5.pdf" in result.output


def test_no_retry_for_icao_codes(runner, catalog_calls):
    calls, served = catalog_calls
    served.clear()

    result = runner.invoke(main, ["chart", "KIAD", "CNDEL5", "-l"])

    assert result.exit_code == 0
    assert [airport for airport, _ in calls] == ["KIAD"]
    assert "No charts found for KIAD" in result.output


def test_catalog_is_cached_per_cycle(runner, catalog_calls):
    calls, _ = catalog_calls

    runner.invoke(main, ["chart", "IAD", "CNDEL5", "-l", "--airac", "2512"])
    runner.invoke(main, ["chart", "IAD", "CNDEL5", "-l", "--airac", "2512"])
    runner.invoke(main, ["chart", "IAD", "CNDEL5", "-l", "--airac", "2512", "--no-cache"])

    assert len(calls) == 2


def test_cache_is_not_shared_between_services(runner, catalog_calls, monkeypatch):
    calls, _ = catalog_calls
    other = "https://mirror.example.com/v2"

    runner.invoke(main, ["chart", "IAD", "DULLES5", "-l", "--airac", "2512"])
    monkeypatch.setenv("ZDC_CHARTS_BASE", other)
    result = runner.invoke(main, ["chart", "IAD", "DULLES5", "-l", "--airac", "2512"])

    assert calls == [("IAD", BASE), ("IAD", other)]
    assert result.output.strip() == f"{other}/dulles5.pdf"


def test_ambiguous_query_shows_candidates(runner, catalog_calls, isolated):
    result = runner.invoke(main, ["chart", "IAD", "ILS", "1"])

    assert result.exit_code == 0
    assert "Multiple possible charts" in result.output
    assert "ILS OR LOC RWY 1" in result.output
    assert "ILS OR LOC RWY 19" in result.output
    assert "https://cdn.example.com/ils1.pdf" in result.output
    assert isolated == []


def test_ambiguous_query_prompts_when_interactive(runner, catalog_calls, monkeypatch):
    monkeypatch.setattr(commands, "is_interactive", lambda: True)
    monkeypatch.setattr(commands, "prompt_single_choice", lambda count: 2)

    result = runner.invoke(main, ["chart", "IAD", "ILS", "1", "--link"])

    assert result.exit_code == 0
    # Candidates are ranked; RWY 1 is the closer name
    assert result.output.splitlines()[-1] == "https://cdn.example.com/ils19.pdf"


def test_list_filters_by_type_alias(runner, catalog_calls):
    result = runner.invoke(main, ["list", "IAD", "SID"])

    assert result.exit_code == 0
    assert "DP charts for IAD" in result.output
    assert "DULLES FIVE" in result.output
    assert "AIRPORT DIAGRAM" not in result.output


def test_list_rejects_unknown_type(runner, catalog_calls):
    result = runner.invoke(main, ["list", "IAD", "FOO"])

    assert "Unknown chart type: FOO" in result.output
    assert catalog_calls[0] == []


def test_metar_retries_with_k_prefix(runner, monkeypatch):
    calls = []

    def fake_reports(endpoint, station):
        calls.append((endpoint, station))
        if station == "KDCA":
            return [{"icaoId": "KDCA", "rawOb": "KDCA 181152Z 18005KT", "wspd": 5}]
        return []

    monkeypatch.setattr(commands, "fetch_reports", fake_reports)

    result = runner.invoke(main, ["metar", "dca"])

    assert result.exit_code == 0
    assert calls == [("metar", "DCA"), ("metar", "KDCA")]
    assert "KDCA 181152Z 18005KT" in result.output
    assert "5 kt" in result.output


def test_weather_api_error_exits_nonzero(runner, monkeypatch):
    def failing(endpoint, station):
        raise commands.WeatherAPIError("api error 500: boom")

    monkeypatch.setattr(commands, "fetch_reports", failing)

    result = runner.invoke(main, ["taf", "KIAD"])

    assert result.exit_code == 1
    assert "api error 500: boom" in result.output


def test_route_table(runner, monkeypatch):
    monkeypatch.setattr(
        commands,
        "fetch_preferred_routes",
        lambda origin, dest: [{"route": "IAD J6 BOS", "altitude": 170}],
    )

    result = runner.invoke(main, ["route", "KIAD", "KBOS"])

    assert result.exit_code == 0
    assert "altitude" in result.output
    assert "IAD J6 BOS" in result.output
    assert "Total: 1 route(s)" in result.output


def test_list_pubs(runner):
    result = runner.invoke(main, ["--list"])

    assert result.exit_code == 0
    assert "the_fox -> https://example.com/the_fox" in result.output


def test_pub_lookup_prints_url(runner):
    result = runner.invoke(main, ["--no-open", "-p", "Green Dragon"])

    assert result.exit_code == 0
    assert result.output.strip() == "https://example.com/green_dragon"


def test_unknown_pub_exits_with_2(runner):
    result = runner.invoke(main, ["-p", "prancing_pony"])

    assert result.exit_code == 2
    assert "Unknown pub 'prancing_pony'" in result.output
