"""
Unit tests for the lead countdown timer.
"""
import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from leads.services.countdown import Countdown

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class TestCountdownTick:
    """Tests for Countdown.tick."""

    def test_label_follows_clock(self):
        clock = FakeClock()
        countdown = Countdown(NOW + timedelta(hours=2, minutes=15, seconds=3), clock=clock)

        assert countdown.tick() == '2h 15m 3s remaining'
        clock.advance(seconds=4)
        assert countdown.tick() == '2h 14m 59s remaining'
        assert countdown.label == '2h 14m 59s remaining'
        assert countdown.expired is False

    def test_stalled_ticks_catch_up(self):
        clock = FakeClock()
        countdown = Countdown(NOW + timedelta(minutes=10), clock=clock)
        countdown.tick()

        clock.advance(minutes=3, seconds=30)

        assert countdown.tick() == '0h 6m 30s remaining'

    def test_expiry_fires_once(self):
        clock = FakeClock()
        on_expire = Mock()
        countdown = Countdown(NOW + timedelta(seconds=1), clock=clock, on_expire=on_expire)

        countdown.tick()
        clock.advance(seconds=1)
        assert countdown.tick() == 'Expired'
        clock.advance(seconds=5)
        assert countdown.tick() == 'Expired'

        assert countdown.expired is True
        on_expire.assert_called_once_with()

    def test_expiry_without_callback(self):
        countdown = Countdown(NOW, clock=FakeClock())
        assert countdown.tick() == 'Expired'
        assert countdown.expired is True


class TestCountdownTimer:
    """Tests for the background ticking thread."""

    def test_start_on_expired_lead_does_not_run(self):
        on_expire = Mock()
        countdown = Countdown(NOW - timedelta(seconds=1), clock=FakeClock(), on_expire=on_expire)

        countdown.start()

        assert countdown.running is False
        assert countdown.label == 'Expired'
        on_expire.assert_called_once_with()

    def test_timer_stops_itself_at_expiry(self):
        clock = FakeClock()
        expired = threading.Event()
        countdown = Countdown(
            NOW + timedelta(seconds=30),
            clock=clock,
            on_expire=expired.set,
            interval=0.01,
        )

        countdown.start()
        assert countdown.running is True
        clock.advance(seconds=30)

        assert expired.wait(timeout=5)
        countdown.cancel()
        assert countdown.running is False
        assert countdown.label == 'Expired'

    def test_cancel_stops_ticking(self):
        clock = FakeClock()
        on_expire = Mock()
        countdown = Countdown(NOW + timedelta(hours=1), clock=clock, on_expire=on_expire, interval=0.01)

        countdown.start()
        countdown.cancel()
        clock.advance(hours=2)

        assert countdown.running is False
        assert countdown.label == '1h 0m 0s remaining'
        on_expire.assert_not_called()

    def test_context_manager_cancels(self):
        clock = FakeClock()
        with Countdown(NOW + timedelta(hours=1), clock=clock, interval=0.01) as countdown:
            assert countdown.running is True
        assert countdown.running is False

    def test_start_twice_keeps_one_thread(self):
        countdown = Countdown(NOW + timedelta(hours=1), clock=FakeClock(), interval=0.01)
        countdown.start()
        thread = countdown._thread
        countdown.start()
        assert countdown._thread is thread
        countdown.cancel()
