"""Directory utility modules."""

from .error_handling import directory_operation
from .queries import parse_row_count
from .validation import validate_identifier

__all__ = ["directory_operation", "parse_row_count", "validate_identifier"]
