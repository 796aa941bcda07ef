"""Version information for keycloak-discovery."""

__version__ = "0.1.0"
