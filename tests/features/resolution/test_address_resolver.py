"""Tests for self-address resolution."""

import logging

import pytest

from keycloak_discovery.core.exceptions import AddressResolutionExhaustedError, NameLookupError
from keycloak_discovery.features.resolution.adapters.static_name_resolver import StaticNameResolver
from keycloak_discovery.features.resolution.services.address_resolver import AddressResolver
from keycloak_discovery.utils.retry import RetryPolicy


class TestAddressResolver:
    """Fixed-interval retries and deterministic selection."""

    @pytest.mark.asyncio
    async def test_resolves_on_first_attempt(self, sleep_recorder):
        resolver = AddressResolver(StaticNameResolver({"kc-0": ["10.0.0.10"]}), sleep=sleep_recorder)

        resolved = await resolver.resolve("kc-0")

        assert resolved.address == "10.0.0.10"
        assert resolved.attempts == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_exhausts_after_thirty_failures(self, flaky_name_resolver, sleep_recorder):
        names = flaky_name_resolver(["10.0.0.12"], failures=30)
        resolver = AddressResolver(names, RetryPolicy.fixed(30, 5.0), sleep=sleep_recorder)

        with pytest.raises(AddressResolutionExhaustedError) as exc_info:
            await resolver.resolve("keycloak-2")

        assert exc_info.value.attempts == 30
        assert isinstance(exc_info.value.last_error, NameLookupError)
        assert names.calls == 30
        # Fixed interval, no sleep after the final attempt
        assert sleep_recorder.delays == [5.0] * 29

    @pytest.mark.asyncio
    async def test_succeeds_after_fewer_than_max_failures(self, flaky_name_resolver, sleep_recorder):
        names = flaky_name_resolver(["10.0.0.12"], failures=29)
        resolver = AddressResolver(names, RetryPolicy.fixed(30, 5.0), sleep=sleep_recorder)

        resolved = await resolver.resolve("keycloak-2")

        assert resolved.address == "10.0.0.12"
        assert resolved.attempts == 30
        assert sleep_recorder.delays == [5.0] * 29

    @pytest.mark.asyncio
    async def test_retries_are_logged_as_warnings(self, flaky_name_resolver, sleep_recorder, caplog):
        names = flaky_name_resolver(["10.0.0.12"], failures=2)
        resolver = AddressResolver(names, RetryPolicy.fixed(5, 5.0), sleep=sleep_recorder)

        with caplog.at_level(logging.WARNING):
            await resolver.resolve("keycloak-2")

        retries = [r for r in caplog.records if "not ready" in r.getMessage()]
        assert len(retries) == 2
        assert all(r.levelno == logging.WARNING for r in retries)

    @pytest.mark.asyncio
    async def test_unroutable_answers_count_as_failed_attempts(self, sleep_recorder):
        names = StaticNameResolver({"kc-0": ["127.0.0.1"]})
        resolver = AddressResolver(names, RetryPolicy.fixed(3, 5.0), sleep=sleep_recorder)

        with pytest.raises(AddressResolutionExhaustedError):
            await resolver.resolve("kc-0")

        assert len(sleep_recorder.delays) == 2

    @pytest.mark.asyncio
    async def test_loopback_allowed_when_configured(self, sleep_recorder):
        names = StaticNameResolver({"kc-0": ["127.0.0.1"]})
        resolver = AddressResolver(names, allow_loopback=True, sleep=sleep_recorder)

        assert (await resolver.resolve("kc-0")).address == "127.0.0.1"

    @pytest.mark.asyncio
    async def test_selection_is_stable_across_answer_order(self, sleep_recorder):
        names = StaticNameResolver({"kc-0": ["10.0.0.20", "fd00::5", "10.0.0.3"]})
        resolver = AddressResolver(names, sleep=sleep_recorder)

        first = await resolver.resolve("kc-0")
        names.set("kc-0", "fd00::5", "10.0.0.3", "10.0.0.20")
        second = await resolver.resolve("kc-0")

        assert first.address == second.address == "10.0.0.3"
        assert first.candidates == ("10.0.0.3", "10.0.0.20", "fd00::5")

    @pytest.mark.asyncio
    async def test_from_settings(self, clean_env, sleep_recorder):
        from keycloak_discovery.config.settings import MembershipSettings

        settings = MembershipSettings(max_resolve_retries=2, resolve_retry_interval=1.5)
        resolver = AddressResolver.from_settings(
            settings, name_resolver=StaticNameResolver(), sleep=sleep_recorder
        )

        with pytest.raises(AddressResolutionExhaustedError):
            await resolver.resolve("missing")

        assert sleep_recorder.delays == [1.5]
