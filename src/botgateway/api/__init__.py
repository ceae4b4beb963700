"""
Bot Gateway HTTP API.
"""

from .app import create_app
from .models import ErrorResponse, HealthResponse

__all__ = [
    "create_app",
    "ErrorResponse",
    "HealthResponse",
]
