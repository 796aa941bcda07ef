"""Membership configuration for keycloak-discovery.

All options can be supplied through the environment (prefix
``KC_DISCOVERY_``) or a ``.env`` file. The execution environment provides the
node's logical name and assigned port; everything else has a tunable default.
"""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DirectoryTable, MembershipDefaults, ResolutionDefaults


class MembershipSettings(BaseSettings):
    """Settings for a node's membership agent and directory store."""

    model_config = SettingsConfigDict(
        env_prefix="KC_DISCOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Node identity (supplied by the execution environment)
    node_name: Optional[str] = Field(default=None, description="Logical node name")
    node_port: int = Field(
        default=MembershipDefaults.NODE_PORT, ge=1, le=65535,
        description="Externally reachable port assigned to this node",
    )
    node_hostname: Optional[str] = Field(
        default=None, description="Name to resolve; defaults to node_name"
    )
    incarnation: Optional[int] = Field(
        default=None, ge=1, description="Pinned incarnation instead of allocating one"
    )

    # Address resolution
    max_resolve_retries: int = Field(default=ResolutionDefaults.MAX_RETRIES, ge=1)
    resolve_retry_interval: float = Field(default=ResolutionDefaults.RETRY_INTERVAL_SECONDS, ge=0)
    resolve_timeout: float = Field(default=ResolutionDefaults.LOOKUP_TIMEOUT_SECONDS, gt=0)
    allow_loopback: bool = Field(default=False, description="Accept loopback addresses (development)")

    # Membership timing
    refresh_period: float = Field(default=MembershipDefaults.REFRESH_PERIOD, gt=0)
    staleness_window: float = Field(default=MembershipDefaults.STALENESS_WINDOW, gt=0)
    prune_incarnation_grace: float = Field(default=MembershipDefaults.PRUNE_INCARNATION_GRACE, ge=0)
    prune_every_cycles: int = Field(default=MembershipDefaults.PRUNE_EVERY_CYCLES, ge=1)
    stability_cycles: int = Field(default=MembershipDefaults.STABILITY_CYCLES, ge=1)
    store_retry_initial_delay: float = Field(default=MembershipDefaults.STORE_RETRY_INITIAL_DELAY, gt=0)
    deregister_on_shutdown: bool = Field(default=True)

    # Directory database
    database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("KC_DISCOVERY_DATABASE_URL", "DATABASE_URL", "database_url"),
    )
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_max_size: int = Field(default=4, ge=1)
    db_command_timeout: float = Field(default=10.0, gt=0)
    directory_schema: str = Field(default=DirectoryTable.DEFAULT_SCHEMA)
    directory_table: str = Field(default=DirectoryTable.DEFAULT_TABLE)

    # Hand-over to the application layer
    view_file: Optional[str] = Field(default=None, description="File receiving initial_hosts")
    status_host: str = Field(default="0.0.0.0")
    status_port: Optional[int] = Field(default=None, ge=1, le=65535)

    @model_validator(mode="after")
    def validate_timing(self) -> "MembershipSettings":
        """Refresh must be materially shorter than the staleness window."""
        if self.refresh_period >= self.staleness_window:
            raise ValueError("refresh_period must be shorter than staleness_window")
        if self.db_pool_max_size < self.db_pool_min_size:
            raise ValueError("db_pool_max_size must be greater than or equal to db_pool_min_size")
        return self

    @property
    def resolve_target(self) -> Optional[str]:
        """Name handed to the address resolver."""
        return self.node_hostname or self.node_name

    @property
    def pool_config(self) -> dict:
        return {
            "min_size": self.db_pool_min_size,
            "max_size": self.db_pool_max_size,
            "command_timeout": self.db_command_timeout,
        }


@lru_cache()
def get_settings() -> MembershipSettings:
    """Get cached membership settings."""
    return MembershipSettings()
