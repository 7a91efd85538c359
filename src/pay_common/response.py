"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,
    "message": "Payment method created successfully",
    "data": { ... },          // null on error
    "error": null,            // short error name on failure
    "pagination": { ... },    // list endpoints only
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.pay_common.pagination import Page


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ApiResponse(BaseModel):
    success: bool = True
    message: str | None = None
    data: Any = None
    error: str | None = None
    code: int = 0
    pagination: Pagination | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, message: str | None = None) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)


def paginated_response(
    page: Page[Any], data: Any, message: str | None = None
) -> ApiResponse:
    resp = success_response(data, message)
    resp.pagination = Pagination(
        page=page.page, limit=page.limit, total=page.total, pages=page.pages
    )
    return resp


def error_response(code: int, message: str, error: str | None = None) -> ApiResponse:
    return ApiResponse(success=False, code=code, message=message, error=error, data=None)
