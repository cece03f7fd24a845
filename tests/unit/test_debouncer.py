from __future__ import annotations

import asyncio

import pytest

from chat_relay.client.debouncer import TypingState, TypingDebouncer

from tests.unit.fakes import FakeClock, FakeScheduler


def _debouncer() -> tuple[TypingDebouncer, list[str], FakeScheduler, FakeClock]:
    emitted: list[str] = []
    scheduler = FakeScheduler()
    clock = FakeClock()
    debouncer = TypingDebouncer(emitted.append, now_fn=clock, schedule_fn=scheduler)
    return debouncer, emitted, scheduler, clock


def test_burst_of_keystrokes_emits_one_start() -> None:
    debouncer, emitted, scheduler, clock = _debouncer()
    for i in range(1, 20):
        debouncer.input_changed("h" * i)
        clock.advance(0.05)
    assert emitted == ["typing"]
    assert debouncer.state is TypingState.TYPING
    assert len(scheduler.pending) == 19


def test_watchdog_delay_is_quiet_period_plus_slack() -> None:
    debouncer, _emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("a")
    assert scheduler.pending[0][0] == pytest.approx(1.21)


def test_quiet_period_emits_exactly_one_stop() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    for text in ("a", "ab", "abc"):
        debouncer.input_changed(text)
    scheduler.fire_all()
    assert emitted == ["typing", "stop typing"]
    assert debouncer.state is TypingState.IDLE


def test_stale_watchdogs_are_noops() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("a")
    debouncer.input_changed("ab")
    # First check was armed before the second keystroke.
    scheduler.fire_oldest()
    assert emitted == ["typing"]
    assert debouncer.is_typing
    scheduler.fire_oldest()
    assert emitted == ["typing", "stop typing"]


def test_clearing_input_stops_immediately_and_watchdog_stays_quiet() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("a")
    debouncer.input_changed("")
    assert emitted == ["typing", "stop typing"]
    scheduler.fire_all()
    assert emitted == ["typing", "stop typing"]


def test_whitespace_only_input_counts_as_empty() -> None:
    debouncer, emitted, _scheduler, _clock = _debouncer()
    debouncer.input_changed("   ")
    debouncer.input_changed(None)
    assert emitted == []


def test_retyping_after_clear_starts_a_new_burst() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("a")
    debouncer.input_changed("")
    debouncer.input_changed("b")
    scheduler.fire_oldest()
    assert emitted == ["typing", "stop typing", "typing"]
    scheduler.fire_all()
    assert emitted == ["typing", "stop typing", "typing", "stop typing"]


def test_send_forces_stop() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("hello")
    debouncer.message_sent()
    assert emitted == ["typing", "stop typing"]
    scheduler.fire_all()
    debouncer.message_sent()
    assert emitted == ["typing", "stop typing"]


def test_reset_goes_idle_silently() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    debouncer.input_changed("a")
    debouncer.reset()
    scheduler.fire_all()
    assert emitted == ["typing"]
    assert debouncer.state is TypingState.IDLE


def test_last_activity_follows_clock() -> None:
    debouncer, _emitted, _scheduler, clock = _debouncer()
    assert debouncer.last_activity is None
    clock.advance(3.0)
    debouncer.input_changed("a")
    assert debouncer.last_activity == 3.0


def test_watchdog_currency_ignores_the_clock() -> None:
    debouncer, emitted, scheduler, _clock = _debouncer()
    # Clock never moves: both keystrokes share a timestamp yet the first watchdog is still stale.
    debouncer.input_changed("a")
    debouncer.input_changed("ab")
    scheduler.fire_oldest()
    assert emitted == ["typing"]
    scheduler.fire_oldest()
    assert emitted == ["typing", "stop typing"]


@pytest.mark.asyncio
async def test_real_loop_timer_emits_stop_after_quiet_period() -> None:
    emitted: list[str] = []
    debouncer = TypingDebouncer(emitted.append, timeout_s=0.02, slack_s=0.005)
    debouncer.input_changed("a")
    debouncer.input_changed("ab")
    await asyncio.sleep(0.1)
    assert emitted == ["typing", "stop typing"]
