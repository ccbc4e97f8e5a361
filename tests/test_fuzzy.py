import pytest

from zdc_ref.fuzzy import covers_all_tokens, levenshtein, normalized_levenshtein, tokenize


def test_levenshtein_counts_edits():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("ABC", "ABC") == 0


def test_normalized_levenshtein_bounds():
    assert normalized_levenshtein("CNDEL FIVE", "CNDEL FIVE") == 1.0
    assert normalized_levenshtein("ABC", "XYZ") == 0.0
    assert normalized_levenshtein("", "") == 1.0


def test_normalized_levenshtein_scales_by_longer_string():
    # Four inserted characters out of ten
    assert normalized_levenshtein("ILS 12", "ILS RWY 12") == pytest.approx(0.6)


def test_tokenize_splits_on_punctuation():
    assert tokenize("rnav (gps) rwy 1") == ["RNAV", "GPS", "RWY", "1"]
    assert tokenize("ILS RWY 12, CONT.1") == ["ILS", "RWY", "12", "CONT", "1"]


def test_covers_all_tokens_accepts_substrings():
    assert covers_all_tokens(["ILS", "1"], "ILS OR LOC RWY 19")
    assert not covers_all_tokens(["ILS", "1"], "RNAV (GPS) RWY 1")
    assert covers_all_tokens([], "ANYTHING")
