"""
schemas/common.py

- Shared schemas reused across the project
- Pydantic v2
- Contents:
  1) Standard error response: ErrorDetail, ErrorResponse
  2) Plain message responses: MessageResponse
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


# =========================================================
# 1) Standard error response
# =========================================================

class ErrorDetail(BaseModel):
    """Smallest unit carrying an error code/message"""
    code: str = Field(..., description="Error code (e.g. VALIDATION_ERROR, NOT_FOUND)")
    message: str = Field(..., description="Short user-facing message")

class ErrorResponse(BaseModel):
    """
    Standard error response returned by the global error handlers
    - middlewares/error_handler.py renders every failure with this schema
    """
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Response creation time (UTC)"
    )
    latency_ms: Optional[int] = Field(
        default=None, ge=0, description="Request processing time (ms), when known"
    )
    trace_id: Optional[str] = Field(
        default=None, description="Request id (copied from X-Request-ID)"
    )

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) Message responses
# =========================================================

class MessageResponse(BaseModel):
    message: str

    model_config = ConfigDict(extra="ignore")
