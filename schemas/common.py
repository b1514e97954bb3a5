"""
schemas/common.py

Shared response schemas (Pydantic v2)
- standard error body: ErrorDetail, ErrorResponse
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, ConfigDict


class ErrorDetail(BaseModel):
    """Error code / message pair"""
    code: str = Field(..., description="error code (e.g. NOT_FOUND, CONFIGURATION_ERROR)")
    message: str = Field(..., description="human readable message")

class ErrorResponse(BaseModel):
    """
    Standard error body returned by middlewares/error_handler.py
    - same {"success": false, "error": {...}} envelope the routers use
    """
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="response timestamp (UTC)"
    )

    model_config = ConfigDict(extra="ignore")
