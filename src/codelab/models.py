"""Pydantic models for request and response bodies.

These models express the structure of the HTTP API.  The response always
carries all four result fields; ``error`` is serialised as ``null`` on
success.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ExecuteRequest(BaseModel):
    """Request body for executing a snippet."""

    language: str = Field(..., min_length=1, description="Language id, e.g. 'python' or 'cpp'.")
    code: str = Field(..., description="Source code to execute. May be empty.")


class ExecuteResponse(BaseModel):
    """Response body for code execution."""

    success: bool
    output: str = ""
    stderr: str = ""
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned when a request is rejected before execution."""

    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class LanguagesResponse(BaseModel):
    languages: List[str] = Field(default_factory=list)
