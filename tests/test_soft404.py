# File: tests/test_soft404.py
from dataclasses import replace

import pytest

from migration_checker.classifier.soft404 import DEFAULT_RULES, check_soft404

LONG_TEXT = "Welcome to our product catalogue, browse the latest arrivals. " * 12


def test_error_page_served_with_200_is_flagged():
    result = check_soft404("Sorry, this page could not be found.", "404 Error", 200)
    assert result.is_soft404
    assert result.confidence == 1.0
    assert result.reasons[0] == 'Title matches error pattern: "404 Error"'
    assert "Body contains error indicator" in result.reasons


@pytest.mark.parametrize("status", [404, 500, 301, 204])
def test_only_status_200_is_scored(status):
    result = check_soft404("Sorry, this page could not be found.", "404 Error", status)
    assert not result.is_soft404
    assert result.confidence == 0
    assert result.reasons == []


def test_regular_page_is_not_flagged():
    result = check_soft404(LONG_TEXT, "Products", 200)
    assert not result.is_soft404
    assert result.confidence == 0
    assert result.reasons == []


def test_empty_page_reaches_threshold_on_length_alone():
    result = check_soft404("", None, 200)
    assert result.is_soft404
    assert result.confidence == pytest.approx(0.5)
    assert len(result.reasons) == 2


def test_body_weight_is_capped():
    body = LONG_TEXT + " 404 page not found"
    result = check_soft404(body, "Products", 200)
    # three body patterns match but the body term stops at 0.5
    assert result.confidence == pytest.approx(0.5)
    assert result.is_soft404


def test_confidence_never_exceeds_one():
    result = check_soft404("oops 404 page not found", "Oops! Page Not Found", 200)
    assert 0 <= result.confidence <= 1.0


def test_extra_patterns_and_threshold():
    rules = DEFAULT_RULES.with_extra_patterns(title=[r"under\s+construction"])
    assert check_soft404(LONG_TEXT, "Under Construction", 200).confidence == 0
    scored = check_soft404(LONG_TEXT, "Under Construction", 200, rules)
    assert scored.confidence == pytest.approx(0.4)
    assert not scored.is_soft404

    lenient = replace(rules, threshold=0.4)
    assert check_soft404(LONG_TEXT, "Under Construction", 200, lenient).is_soft404
    # defaults are untouched
    assert len(DEFAULT_RULES.title_patterns) == len(rules.title_patterns) - 1
