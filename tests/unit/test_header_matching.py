from __future__ import annotations

import pytest
from rapidfuzz.distance import Levenshtein

from hscode_import.services.header_matching import (
    SUGGESTION_THRESHOLD,
    best_suggestion,
    levenshtein,
    normalize_header,
)


@pytest.mark.parametrize(
    "raw",
    ["HS Code", "hs_code", "HS-CODE", "  hs code  ", "Hs\tCode", "HS__CODE", "h-s c_o d e"],
)
def test_normalize_header_insensitive_to_case_space_separators(raw):
    assert normalize_header(raw) == "HSCODE"


@pytest.mark.parametrize("raw", ["", "VAT", "  Total  Tax-Incidence ", "a_b-c d", "ÄIT", "ক খ"])
def test_normalize_header_idempotent(raw):
    once = normalize_header(raw)
    assert normalize_header(once) == once


def test_normalize_header_none_and_non_strings():
    assert normalize_header(None) == ""
    assert normalize_header(2024) == "2024"
    assert normalize_header("") == ""


def test_levenshtein_reference_values():
    assert levenshtein("", "") == 0
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("VAT", "VATT") == 1
    assert levenshtein("TTI", "TTII") == 1
    assert levenshtein("flaw", "lawn") == 2


@pytest.mark.parametrize("s", ["", "a", "HSCODE", "DESCRIPTION"])
def test_levenshtein_identity(s):
    assert levenshtein(s, s) == 0


@pytest.mark.parametrize(
    "a,b",
    [
        ("HSCODE", "HSCOD"),
        ("DESCRIPTION", "DISCRIPTON"),
        ("AIT", "VAT"),
        ("SUNDAY", "SATURDAY"),
        ("", "TTI"),
        ("RD", "CD"),
    ],
)
def test_levenshtein_symmetric_and_matches_reference_implementation(a, b):
    assert levenshtein(a, b) == levenshtein(b, a)
    assert levenshtein(a, b) == Levenshtein.distance(a, b)


def test_best_suggestion_within_threshold():
    assert best_suggestion("VAT", ["VATT", "Description", "CD"]) == "VATT"


def test_best_suggestion_beyond_threshold():
    assert best_suggestion("VAT", ["Something", "Else"]) is None


def test_best_suggestion_returns_raw_candidate_not_normalized():
    assert best_suggestion("HSCode", ["hs  cod", "Description"]) == "hs  cod"


def test_best_suggestion_tie_goes_to_first_candidate():
    # both at distance 1 from "VAT"
    assert best_suggestion("VAT", ["VATX", "XVAT"]) == "VATX"
    assert best_suggestion("VAT", ["XVAT", "VATX"]) == "XVAT"


def test_best_suggestion_empty_or_none_candidates():
    assert best_suggestion("VAT", []) is None
    assert best_suggestion("VAT", None) is None


def test_best_suggestion_threshold_is_configurable():
    assert SUGGESTION_THRESHOLD == 2
    # "TTI" vs "TOTALTI": distance 4
    assert best_suggestion("TTI", ["Total TI"]) is None
    assert best_suggestion("TTI", ["Total TI"], threshold=4) == "Total TI"
    assert best_suggestion("VAT", ["VATT"], threshold=0) is None


def test_best_suggestion_exact_match_distance_zero():
    assert best_suggestion("HSCode", ["CD", "hs-code"], threshold=0) == "hs-code"
