"""Tests for the cooldown tracker, backoff policies and capture tools."""

import random
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from kickdex.core.backoff import DELIVERY_BACKOFF, RECONNECT_BACKOFF, BackoffPolicy
from kickdex.core.cooldown import CooldownTracker
from kickdex.core.types import CaptureTool, CatchOutcome, CatchResult

START = datetime(2024, 1, 1, 12, 0, 0)


def test_first_attempt_is_not_on_cooldown():
    tracker = CooldownTracker(5)

    assert tracker.hit("ash", START) is False
    assert tracker.remaining("ash", START + timedelta(seconds=2)) == pytest.approx(3)


def test_attempt_inside_window_is_rejected_and_refreshes():
    tracker = CooldownTracker(5)
    tracker.hit("ash", START)

    assert tracker.hit("ash", START + timedelta(seconds=4)) is True
    assert tracker.hit("ash", START + timedelta(seconds=8)) is True
    assert tracker.hit("ash", START + timedelta(seconds=13)) is False


def test_prune_drops_elapsed_entries():
    tracker = CooldownTracker(5)
    tracker.hit("ash", START)
    tracker.hit("misty", START + timedelta(seconds=3))

    assert tracker.prune(START + timedelta(seconds=6)) == 1
    assert len(tracker) == 1
    assert tracker.remaining("misty", START + timedelta(seconds=6)) == pytest.approx(2)

    tracker.clear()
    assert len(tracker) == 0


def test_reconnect_backoff_schedule():
    policy = BackoffPolicy(initial=1.0, multiplier=2.0, cap=30.0, max_exponent=6)

    assert [policy.delay(n) for n in range(1, 8)] == [2, 4, 8, 16, 30, 30, 30]


def test_reconnect_backoff_jitter_stays_under_cap():
    rng = random.Random(7)
    delays = [RECONNECT_BACKOFF.delay(n, rng) for n in range(1, 12)]

    assert all(0 < d <= 30 for d in delays)
    assert 2 <= delays[0] < 2.5
    assert delays == sorted(delays)


@pytest.mark.parametrize("cap", [30.0, 64.0, 120.0, 300.0])
def test_reconnect_backoff_grows_to_configured_cap(cap):
    policy = replace(RECONNECT_BACKOFF, cap=cap)

    for seed in range(20):
        rng = random.Random(seed)
        delays = [policy.delay(n, rng) for n in range(1, 15)]

        assert delays == sorted(delays)
        assert delays[-1] == cap
        assert max(delays) <= cap


def test_max_exponent_still_limits_growth():
    policy = BackoffPolicy(initial=1.0, multiplier=2.0, cap=1000.0, max_exponent=3)

    assert [policy.delay(n) for n in range(1, 6)] == [2, 4, 8, 8, 8]


def test_delivery_backoff_schedule():
    assert [DELIVERY_BACKOFF.delay(n) for n in range(1, 6)] == [1, 2, 4, 8, 8]


@pytest.mark.parametrize(
    ("text", "expected"),
    [(None, CaptureTool.POKEBALL), ("", CaptureTool.POKEBALL),
     ("pokeball", CaptureTool.POKEBALL), ("Great", CaptureTool.GREATBALL),
     ("ULTRABALL", CaptureTool.ULTRABALL), ("ultra-ball", CaptureTool.ULTRABALL)],
)
def test_capture_tool_parse(text, expected):
    assert CaptureTool.parse(text) is expected


def test_capture_tool_parse_rejects_unknown():
    with pytest.raises(ValueError):
        CaptureTool.parse("masterball")


def test_capture_tool_modifiers():
    assert [t.modifier for t in CaptureTool] == [1.0, 1.5, 2.0]


def test_catch_result_ok():
    assert CatchResult(CatchOutcome.OK).ok
    assert not CatchResult.failure(CatchOutcome.COOLDOWN).ok
