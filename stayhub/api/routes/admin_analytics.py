"""Admin analytics router: dashboards and raw analytics exports."""

import uuid
from datetime import date, datetime, time
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stayhub.api.deps import admin_only, get_db
from stayhub.models.user import User
from stayhub.services import analytics_service, exports
from stayhub.services.periods import DEFAULT_PERIOD

router = APIRouter(prefix="/api/admin/analytics", tags=["admin: analytics"])


@router.get("/dashboard")
async def business_dashboard(
    period: str = Query(DEFAULT_PERIOD),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.business_dashboard(db, period)


@router.get("/user-behavior")
async def user_behavior(
    period: str = Query(DEFAULT_PERIOD),
    action: str | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
    hotel_id: uuid.UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.behavior_analytics(db, period, action, user_id, hotel_id)


@router.get("/hotel-performance")
async def hotel_performance(
    period: str = Query(DEFAULT_PERIOD),
    hotel_id: uuid.UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.hotel_performance(db, period, hotel_id)


@router.get("/search")
async def search_analytics(
    period: str = Query(DEFAULT_PERIOD),
    search_query: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.search_analytics(db, period, search_query)


@router.get("/recommendations")
async def recommendation_analytics(
    period: str = Query(DEFAULT_PERIOD),
    algorithm: str | None = Query(None),
    user_id: uuid.UUID | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
) -> dict[str, Any]:
    return await analytics_service.recommendation_analytics(db, period, algorithm, user_id)


@router.get("/export")
async def export_analytics(
    type: str = Query(..., description="user_behavior, hotel_metrics, search_analytics or recommendations"),
    format: str = Query("json", pattern="^(json|csv)$"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    limit: int = Query(1000, ge=1, le=10_000),
    db: AsyncSession = Depends(get_db),
    _: User = Depends(admin_only),
):
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time.max) if end_date else None
    rows = await analytics_service.export_records(db, type, start, end, limit)
    if format == "csv":
        return exports.csv_response(rows, type)
    return exports.json_export("Analytics data exported successfully", "data", rows, type=type)
