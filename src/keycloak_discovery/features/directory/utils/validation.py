"""Identifier validation for directory table names."""

import re

from ....core.exceptions import InvalidIdentifierError

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")
_MAX_IDENTIFIER_LENGTH = 63


def validate_identifier(identifier: str) -> str:
    """Validate a schema or table name before it is interpolated into SQL."""
    if not identifier:
        raise InvalidIdentifierError(identifier, "cannot be empty")
    if len(identifier) > _MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(identifier, f"longer than {_MAX_IDENTIFIER_LENGTH} characters")
    if not _IDENTIFIER.match(identifier):
        raise InvalidIdentifierError(
            identifier, "only lowercase letters, digits and underscores are allowed"
        )
    return identifier
