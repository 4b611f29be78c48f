"""Tests for leadrank.ranking.pacing — fixed-delay pacer and rate-limit detection."""
import pytest

from leadrank.ranking.pacing import FixedDelayPacer, is_rate_limit_error


class TestIsRateLimitError:

    @pytest.mark.parametrize('message', [
        'Rate limit reached for model llama-3.3-70b-versatile',
        'Error code: 429 - too many requests',
        'rate_limit_exceeded',
    ])
    def test_detects_markers(self, message):
        assert is_rate_limit_error(message) is True

    @pytest.mark.parametrize('message', [None, '', 'Connection reset by peer', 'Invalid API key'])
    def test_other_errors(self, message):
        assert is_rate_limit_error(message) is False

    def test_custom_markers(self):
        assert is_rate_limit_error('quota exhausted', markers=['quota']) is True
        assert is_rate_limit_error('rate limit', markers=['quota']) is False


class TestFixedDelayPacer:

    def test_defaults_from_config(self):
        pacer = FixedDelayPacer(sleep=lambda s: None)
        assert pacer.call_delay == 2.0
        assert pacer.rate_limit_delay == 5.0

    def test_normal_delay(self):
        slept = []
        pacer = FixedDelayPacer(call_delay=2, rate_limit_delay=5, sleep=slept.append)
        assert pacer.after_call() == 2
        assert slept == [2.0]

    def test_rate_limit_delay(self):
        slept = []
        pacer = FixedDelayPacer(call_delay=2, rate_limit_delay=5, sleep=slept.append)
        pacer.after_call(rate_limited=True)
        pacer.after_call()
        assert slept == [5.0, 2.0]
        assert pacer.total_slept == 7.0

    def test_zero_delay_skips_sleep(self):
        slept = []
        pacer = FixedDelayPacer(call_delay=0, rate_limit_delay=0, sleep=slept.append)
        pacer.after_call()
        assert slept == []

    def test_uses_time_sleep_by_default(self, no_sleep):
        FixedDelayPacer(call_delay=1.5, rate_limit_delay=5).after_call()
        no_sleep.assert_called_once_with(1.5)
