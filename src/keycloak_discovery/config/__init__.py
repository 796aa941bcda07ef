"""Configuration for keycloak-discovery."""

from .constants import (
    DirectoryTable,
    MembershipDefaults,
    MembershipState,
    ResolutionDefaults,
)
from .logging_config import LoggingConfig, setup_logging
from .settings import MembershipSettings, get_settings

__all__ = [
    "DirectoryTable",
    "MembershipDefaults",
    "MembershipState",
    "ResolutionDefaults",
    "LoggingConfig",
    "setup_logging",
    "MembershipSettings",
    "get_settings",
]
