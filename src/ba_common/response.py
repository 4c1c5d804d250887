"""Unified API response wrapper.

All read endpoints return this format:
{
    "code": 0,           // 0=success, non-0=AppError code
    "message": "success",
    "data": { ... },     // null on error
    "height": 1234,      // ledger height the data was read at (null on error)
    "request_id": "..."
}
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    height: int | None = None
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None, height: int | None = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data, height=height)


def error_response(code: int, message: str) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None)
