"""Shared API dependencies, a single import point for all routers::

    from stayhub.api.deps import get_db, get_current_user, admin_only
"""

from fastapi import Query

from stayhub.auth.dependencies import (
    admin_only,
    customer_or_admin,
    get_current_user,
    get_optional_user,
    require_roles,
)
from stayhub.config import settings
from stayhub.database import get_db


class PageParams:
    """``page``/``limit`` query parameters, clamped to the configured maximum."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.default_page_size, ge=1),
    ) -> None:
        self.page = page
        self.limit = min(limit, settings.max_page_size)


__all__ = [
    "get_db",
    "get_current_user",
    "get_optional_user",
    "require_roles",
    "admin_only",
    "customer_or_admin",
    "PageParams",
]
