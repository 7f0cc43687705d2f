"""Report API routes."""

import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mediacost.db.session import get_db
from mediacost.schemas.schemas import (
    CANNOT_CALCULATE_LABEL,
    OverviewListResponse,
    ReportSummaryResponse,
)
from mediacost.services.report_store import report_store

router = APIRouter(prefix="/v1/reports", tags=["Reports"])


@router.get(
    "/summary",
    response_model=ReportSummaryResponse,
    summary="Report summary",
    description="Get the scalar values stored by the last report run.",
)
async def get_summary(db: AsyncSession = Depends(get_db)):
    """
    Get report values.

    `totalcost` is null when the conversion cost cannot be calculated because
    no presets are configured; `totalcost_display` spells that out.
    """
    values = await report_store.get_values(db)
    total = values.get("totalcost")
    if "totalcost" in values and total is None:
        display = CANNOT_CALCULATE_LABEL
    else:
        display = f"{float(total or 0):.3f}"
    return ReportSummaryResponse(values=values, totalcost_display=display)


@router.get(
    "/overview",
    response_model=OverviewListResponse,
    summary="Overview report",
    description="Get a paginated list of per-file overview rows.",
)
async def list_overview(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db),
):
    """List overview rows ordered by content hash."""
    rows, total = await report_store.list_overview(db, page, page_size)
    return OverviewListResponse(
        rows=rows,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
    )
