"""
API models for error and health responses.
"""

from typing import Dict

from pydantic import Field

from ..shared.models.base import BaseModel


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    message: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    services: Dict[str, str] = Field(default_factory=dict, description="Individual service status")
    timestamp: str = Field(..., description="Check timestamp")
