"""Tests for wait/retry policies."""

from prguard_core.retry import DISCOVERY_POLICY, NO_WAIT, PAGE_COURTESY_POLICY, RetryPolicy


class TestRetryPolicy:
    def test_fixed_delay(self):
        sleeps = []
        RetryPolicy(delay=3.0, sleep=sleeps.append).wait(2)
        assert sleeps == [3.0]

    def test_backoff_overrides_delay(self):
        sleeps = []
        policy = RetryPolicy(delay=3.0, backoff=lambda attempt: 2**attempt, sleep=sleeps.append)
        policy.wait(2)
        policy.wait(3)
        assert sleeps == [4.0, 8.0]

    def test_zero_or_negative_delay_does_not_sleep(self):
        sleeps = []
        RetryPolicy(delay=0, sleep=sleeps.append).wait(2)
        RetryPolicy(backoff=lambda attempt: -1, sleep=sleeps.append).wait(2)
        assert sleeps == []

    def test_no_wait(self):
        assert NO_WAIT.max_attempts == 1
        assert NO_WAIT.delay_for(5) == 0.0

    def test_defaults(self):
        assert (DISCOVERY_POLICY.max_attempts, DISCOVERY_POLICY.delay) == (2, 10.0)
        assert PAGE_COURTESY_POLICY.delay == 2.0
