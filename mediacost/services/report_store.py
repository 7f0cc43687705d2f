"""Persistence of report values and the overview table."""

import logging
from typing import Optional, Sequence, Union

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediacost.db.models import ReportOverview, ReportValue
from mediacost.schemas.schemas import OverviewRow

logger = logging.getLogger(__name__)

ReportScalar = Optional[Union[int, float, str]]

FINISHED_LABEL = "Finished"


class ReportStore:
    """Writes and reads report output. Each write is its own transaction."""

    async def upsert_value(self, db: AsyncSession, name: str, value: ReportScalar):
        """
        Store a named value, updating the existing row for the name if there is one.

        Rolls back and re-raises on failure, leaving the previous value in place.
        """
        stored = None if value is None else str(value)
        try:
            result = await db.execute(select(ReportValue).where(ReportValue.name == name))
            record = result.scalar_one_or_none()
            if record:
                record.value = stored
            else:
                db.add(ReportValue(name=name, value=stored))
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error(f"Failed to store report value {name}")
            raise

    async def replace_overview(self, db: AsyncSession, rows: Sequence[OverviewRow]):
        """
        Replace the whole overview table with the given rows.

        Delete and insert share one transaction so readers never see an empty table.
        """
        try:
            await db.execute(delete(ReportOverview))
            if rows:
                await db.execute(insert(ReportOverview), [row.model_dump() for row in rows])
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error("Failed to replace overview report, previous rows kept")
            raise
        logger.info(f"Overview report replaced with {len(rows)} rows")

    async def get_values(self, db: AsyncSession) -> dict[str, ReportScalar]:
        """All stored values; numeric strings come back as floats."""
        result = await db.execute(select(ReportValue).order_by(ReportValue.name))
        values = {}
        for record in result.scalars().all():
            values[record.name] = _parse_value(record.value)
        return values

    async def list_overview(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[OverviewRow], int]:
        """
        List overview rows ordered by content hash.

        Returns:
            Tuple of (rows, total_count)
        """
        total = (await db.execute(select(func.count()).select_from(ReportOverview))).scalar() or 0
        result = await db.execute(
            select(ReportOverview)
            .order_by(ReportOverview.contenthash)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = [OverviewRow.model_validate(r) for r in result.scalars().all()]
        return rows, total

    async def count_finished(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count()).select_from(ReportOverview).where(ReportOverview.status == FINISHED_LABEL)
        )
        return result.scalar() or 0

    async def sum_overview_cost(self, db: AsyncSession) -> float:
        """Total cost of everything in the overview, 0 when empty."""
        result = await db.execute(select(func.sum(ReportOverview.cost)))
        total = result.scalar()
        return 0.0 if total is None else round(float(total), 3)


def _parse_value(value: Optional[str]) -> ReportScalar:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return value


# Singleton instance
report_store = ReportStore()
