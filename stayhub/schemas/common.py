"""Schemas shared across resources."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class Pagination(BaseModel):
    """Page position returned alongside every paginated list."""

    current_page: int
    total_pages: int
    total_count: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit > 0 else 0
        return cls(current_page=page, total_pages=total_pages, total_count=total)
