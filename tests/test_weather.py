import pytest

from zdc_ref.weather import (
    format_altimeter,
    format_unix,
    into_list,
    round_half_away,
    summarize_metar,
    summarize_taf,
)


METAR = {
    "icaoId": "KIAD",
    "reportTime": "2026-10-18 12:00:00",
    "obsTime": 1792324800,
    "wdir": 270,
    "wspd": 12,
    "wgst": 20,
    "visib": "10+",
    "temp": 15.0,
    "dewp": 5.5,
    "altim": 1013.2,
    "fltCat": "VFR",
    "clouds": [{"cover": "FEW", "base": 5000}, {"cover": "CLR"}],
    "rawOb": "KIAD 181200Z 27012G20KT 10SM FEW050 15/06 A2992",
}


def test_into_list_shapes():
    assert into_list([{"a": 1}]) == [{"a": 1}]
    assert into_list({"data": [{"a": 1}, {"b": 2}]}) == [{"a": 1}, {"b": 2}]
    assert into_list({"data": {"a": 1}}) == [{"a": 1}]
    assert into_list({"a": 1}) == [{"a": 1}]
    assert into_list("text") == ["text"]
    assert into_list(None) == []


def test_summarize_metar_fields():
    metar = summarize_metar(METAR)

    assert metar.station == "KIAD"
    assert metar.time == "2026-10-18 12:00:00"
    assert metar.wind == "270 12 kt G20 kt"
    assert metar.visibility == "10+"
    assert metar.temperature == "15.0°C/5.5°C (59°F/42°F)"
    assert metar.altimeter == "1013.2 hPa (29.92 inHg)"
    assert metar.flight_category == "VFR"
    assert metar.clouds == "FEW5000, CLR"
    assert metar.raw_text.startswith("KIAD 181200Z")


def test_summarize_metar_falls_back_to_obs_time_and_station_id():
    metar = summarize_metar({"station_id": "KDCA", "obsTime": 0, "visib": 10})

    assert metar.station == "KDCA"
    assert metar.time == "1970-01-01 00:00 UTC"
    assert metar.visibility == "10"
    assert metar.wind == ""
    assert metar.temperature == ""
    assert metar.altimeter == ""
    assert metar.clouds == ""


def test_temperature_without_dew_point():
    assert summarize_metar({"temp": -2.5}).temperature == "-2.5°C (28°F)"


def test_altimeter_in_inches():
    assert format_altimeter({"altim": 29.92}) == "29.92 inHg (1013.2 hPa)"


@pytest.mark.parametrize("value, expected", [(2.5, 3), (-2.5, -3), (2.4, 2), (0.0, 0)])
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


def test_format_unix():
    assert format_unix(3600) == "1970-01-01 01:00 UTC"


def test_summarize_taf_periods():
    report = {
        "icaoId": "KIAD",
        "issueTime": "2026-10-18T11:30:00Z",
        "validTimeFrom": 0,
        "validTimeTo": 86400,
        "rawTAF": "TAF KIAD 181130Z ...",
        "fcsts": [
            {
                "timeFrom": 0,
                "timeTo": 3600,
                "wdir": "VRB",
                "wspd": 3,
                "visib": 6.0,
                "wxString": "-RA",
                "clouds": [{"cover": "BKN", "base": 2500}],
            },
            {"wspd": 10.5},
        ],
    }

    taf = summarize_taf(report)

    assert taf.station == "KIAD"
    assert taf.valid_from == "1970-01-01 00:00 UTC"
    assert taf.valid_to == "1970-01-02 00:00 UTC"
    first, second = taf.periods
    assert first.period == "1970-01-01 00:00 UTC - 1970-01-01 01:00 UTC"
    assert first.wind == "VRB 3 kt"
    assert first.visibility == "6"
    assert first.weather == "-RA"
    assert first.clouds == "BKN2500"
    assert second.period == ""
    assert second.wind == "11 kt"


def test_summarize_taf_uses_queried_station_when_missing():
    assert summarize_taf({}, "KDCA").station == "KDCA"
