"""Status API response models."""

from .health_response import HealthResponse
from .member_response import MemberResponse
from .view_response import ViewResponse

__all__ = ["HealthResponse", "MemberResponse", "ViewResponse"]
