"""Tests for the retry policy."""

import pytest

from keycloak_discovery.utils.retry import BackoffType, RetryPolicy


class TestFixedPolicy:
    """Fixed-interval retries used for address resolution."""

    def test_fixed_interval_never_grows(self):
        policy = RetryPolicy.fixed(30, 5.0)

        assert policy.backoff_type == BackoffType.FIXED
        assert {policy.calculate_delay(n) for n in range(1, 31)} == {5.0}

    def test_should_retry_bounds_total_attempts(self):
        policy = RetryPolicy.fixed(30, 5.0)

        assert policy.should_retry(29)
        assert not policy.should_retry(30)

    def test_single_attempt_policy(self):
        policy = RetryPolicy.fixed(1, 0.0)

        assert not policy.should_retry(1)
        assert policy.calculate_delay(1) == 0.0


class TestExponentialPolicy:
    """Backoff used for directory registration retries."""

    def test_doubles_until_capped(self):
        policy = RetryPolicy.exponential(initial_delay=1.0, max_delay=10.0, jitter=False)

        delays = [policy.calculate_delay(n) for n in range(1, 7)]

        assert delays == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]

    def test_jitter_stays_within_ten_percent(self):
        policy = RetryPolicy.exponential(initial_delay=4.0, max_delay=4.0, jitter=True)

        for _ in range(50):
            assert 3.6 <= policy.calculate_delay(1) <= 4.4

    def test_long_outage_does_not_overflow(self):
        policy = RetryPolicy.exponential(initial_delay=1.0, max_delay=10.0, jitter=False)

        assert policy.calculate_delay(10_000) == 10.0

    def test_retries_until_stopped(self):
        policy = RetryPolicy.exponential(initial_delay=1.0, max_delay=10.0)

        assert policy.should_retry(1_000_000)


class TestValidation:

    def test_linear_backoff(self):
        policy = RetryPolicy(max_retries=5, backoff_type=BackoffType.LINEAR, initial_delay=2.0, max_delay=5.0)

        assert [policy.calculate_delay(n) for n in (1, 2, 3)] == [2.0, 4.0, 5.0]

    def test_zero_attempt_has_no_delay(self):
        assert RetryPolicy.fixed(3, 5.0).calculate_delay(0) == 0.0

    @pytest.mark.parametrize("kwargs", [
        {"max_retries": 0},
        {"max_retries": 3, "initial_delay": -1.0},
        {"max_retries": 3, "initial_delay": 10.0, "max_delay": 5.0},
    ])
    def test_invalid_policies_rejected(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)
