"""Tests for the rest window countdown."""

from __future__ import annotations

import pytest

from liftcoach.workouts.rest import RestWindow, format_clock, remaining_seconds


def test_remaining_rounds_up():
    window = RestWindow.open(90, now=0)
    assert window.remaining(0) == 90
    assert window.remaining(1) == 90
    assert window.remaining(999) == 90
    assert window.remaining(1000) == 89
    assert window.remaining(89_001) == 1


def test_remaining_never_negative():
    window = RestWindow.open(30, now=0)
    assert window.remaining(30_000) == 0
    assert window.remaining(120_000) == 0
    assert window.is_over(30_000)


def test_zero_duration_is_immediately_over():
    window = RestWindow.open(0, now=10)
    assert window.is_over(10)
    assert window.progress(10) == 1.0


def test_progress():
    window = RestWindow.open(100, now=0)
    assert window.progress(0) == 0.0
    assert window.progress(50_000) == pytest.approx(0.5)
    assert window.progress(500_000) == 1.0


@pytest.mark.parametrize(
    ("ends_at", "now", "expected"),
    [(10_000, 0, 10), (10_000, 9_001, 1), (10_000, 10_000, 0), (10_000, 10_500, 0)],
)
def test_remaining_seconds(ends_at, now, expected):
    assert remaining_seconds(ends_at, now) == expected


@pytest.mark.parametrize(("seconds", "text"), [(0, "0:00"), (5, "0:05"), (65, "1:05"), (120, "2:00"), (-3, "0:00")])
def test_format_clock(seconds, text):
    assert format_clock(seconds) == text
