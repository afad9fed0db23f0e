"""
Shared response envelope.
"""
from typing import Optional

from pydantic import BaseModel, Field


class EnvelopeResponse(BaseModel):
    """Every response carries ``success`` and an optional human-readable message."""

    success: bool = Field(True, description="Whether the request succeeded")
    message: Optional[str] = Field(None, description="Human-readable status message")
