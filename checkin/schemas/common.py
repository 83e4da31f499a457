"""Common schemas for pagination, errors, and responses"""

from typing import Any

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Offset pagination metadata in response"""
    limit: int
    offset: int
    total: int
    has_more: bool


class ErrorDetail(BaseModel):
    """Error detail structure"""
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: ErrorDetail


class MessageResponse(BaseModel):
    """Simple message response"""
    message: str


def build_pagination(limit: int, offset: int, total: int) -> PaginationMeta:
    return PaginationMeta(
        limit=limit,
        offset=offset,
        total=total,
        has_more=offset + limit < total,
    )
