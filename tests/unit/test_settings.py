"""Tests for membership settings."""

import pytest
from pydantic import ValidationError

from keycloak_discovery.config.constants import MembershipState
from keycloak_discovery.config.settings import MembershipSettings


class TestMembershipSettings:
    """Environment-driven configuration."""

    def test_defaults(self, clean_env):
        settings = MembershipSettings()

        assert settings.node_name is None
        assert settings.node_port == 7800
        assert settings.max_resolve_retries == 30
        assert settings.resolve_retry_interval == 5.0
        assert settings.refresh_period == 10.0
        assert settings.staleness_window == 30.0
        assert settings.directory_table == "keycloak_directory"
        assert settings.deregister_on_shutdown is True

    def test_reads_prefixed_environment(self, clean_env):
        clean_env.setenv("KC_DISCOVERY_NODE_NAME", "kc-3")
        clean_env.setenv("KC_DISCOVERY_NODE_PORT", "7900")
        clean_env.setenv("KC_DISCOVERY_REFRESH_PERIOD", "5")
        clean_env.setenv("KC_DISCOVERY_ALLOW_LOOPBACK", "true")

        settings = MembershipSettings()

        assert settings.node_name == "kc-3"
        assert settings.node_port == 7900
        assert settings.refresh_period == 5.0
        assert settings.allow_loopback is True

    def test_database_url_falls_back_to_generic_variable(self, clean_env):
        clean_env.setenv("DATABASE_URL", "postgresql://kc@db/keycloak")

        assert MembershipSettings().database_url == "postgresql://kc@db/keycloak"

    def test_prefixed_database_url(self, clean_env):
        clean_env.setenv("KC_DISCOVERY_DATABASE_URL", "postgresql://kc@directory/keycloak")

        assert MembershipSettings().database_url == "postgresql://kc@directory/keycloak"

    def test_refresh_must_be_shorter_than_window(self, clean_env):
        with pytest.raises(ValidationError):
            MembershipSettings(refresh_period=30.0, staleness_window=30.0)

    def test_pool_bounds_validated(self, clean_env):
        with pytest.raises(ValidationError):
            MembershipSettings(db_pool_min_size=5, db_pool_max_size=2)

    def test_port_range_validated(self, clean_env):
        with pytest.raises(ValidationError):
            MembershipSettings(node_port=70000)

    def test_resolve_target_prefers_hostname(self, clean_env):
        assert MembershipSettings(node_name="kc-0").resolve_target == "kc-0"
        assert MembershipSettings(
            node_name="kc-0", node_hostname="kc-0.internal"
        ).resolve_target == "kc-0.internal"

    def test_pool_config(self, clean_env):
        settings = MembershipSettings(db_pool_min_size=2, db_pool_max_size=6, db_command_timeout=3.0)

        assert settings.pool_config == {"min_size": 2, "max_size": 6, "command_timeout": 3.0}


class TestMembershipState:

    @pytest.mark.parametrize("state,member", [
        (MembershipState.INIT, False),
        (MembershipState.RESOLVING, False),
        (MembershipState.REGISTERING, False),
        (MembershipState.ACTIVE, True),
        (MembershipState.REFRESHING, True),
        (MembershipState.FAILED, False),
        (MembershipState.STOPPED, False),
    ])
    def test_membership(self, state, member):
        assert state.is_member is member

    def test_terminal_states(self):
        assert {s for s in MembershipState if s.is_terminal} == {
            MembershipState.FAILED, MembershipState.STOPPED,
        }
