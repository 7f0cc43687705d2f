"""Pydantic schemas for report rows and API responses."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


CANNOT_CALCULATE_LABEL = "cannot calculate"


# ============== Report Schemas ==============


class OverviewRow(BaseModel):
    """One file in the overview report."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    contenthash: str
    type: str
    format: Optional[str] = None
    resolution: str
    duration: float = Field(..., description="Seconds, rounded to 3 decimals")
    filesize: int
    cost: Optional[float] = Field(None, description="USD rounded to 3 decimals, null if it cannot be calculated")
    status: str
    files: int = Field(..., description="Number of file instances sharing this content")
    timecreated: Optional[datetime] = None
    timecompleted: Optional[datetime] = None


class OverviewListResponse(BaseModel):
    """Paginated overview rows."""

    rows: list[OverviewRow]
    total: int
    page: int
    page_size: int
    total_pages: int


class ReportSummaryResponse(BaseModel):
    """Scalar report values from the last report run."""

    values: dict[str, Optional[Union[float, str]]]
    totalcost_display: str


# ============== Health & Misc Schemas ==============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    redis: str

