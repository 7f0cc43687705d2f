"""Tests for report persistence."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediacost.db.models import ReportOverview, ReportValue
from mediacost.schemas.schemas import OverviewRow
from mediacost.services import report_store as report_store_module
from mediacost.services.report_store import ReportStore


def overview_row(contenthash: str, cost=0.1, status="Finished") -> OverviewRow:
    return OverviewRow(
        contenthash=contenthash,
        type="Video",
        format="mp4",
        resolution="1280 X 720",
        duration=60.0,
        filesize=2048,
        cost=cost,
        status=status,
        files=1,
    )


@pytest.mark.asyncio
async def test_upsert_value(db_session: AsyncSession):
    """Test values are inserted once and then updated in place."""
    store = ReportStore()

    await store.upsert_value(db_session, "totalfiles", 10)
    await store.upsert_value(db_session, "totalfiles", 12)
    await store.upsert_value(db_session, "totalcost", None)

    records = (await db_session.execute(select(ReportValue).order_by(ReportValue.name))).scalars().all()
    assert [(r.name, r.value) for r in records] == [("totalcost", None), ("totalfiles", "12")]
    assert await store.get_values(db_session) == {"totalcost": None, "totalfiles": 12.0}


@pytest.mark.asyncio
async def test_replace_overview(db_session: AsyncSession):
    """Test the overview holds exactly the latest rows."""
    store = ReportStore()

    await store.replace_overview(db_session, [overview_row("a"), overview_row("b")])
    await store.replace_overview(db_session, [overview_row("c", cost=None, status="Error")])

    rows, total = await store.list_overview(db_session)
    assert total == 1
    assert rows[0].contenthash == "c"
    assert rows[0].cost is None


@pytest.mark.asyncio
async def test_replace_overview_with_nothing(db_session: AsyncSession):
    """Test an empty run clears stale rows."""
    store = ReportStore()
    await store.replace_overview(db_session, [overview_row("a")])
    await store.replace_overview(db_session, [])

    assert (await db_session.execute(select(ReportOverview))).scalars().all() == []
    assert await store.sum_overview_cost(db_session) == 0.0
    assert await store.count_finished(db_session) == 0


@pytest.mark.asyncio
async def test_replace_overview_rolls_back(db_session: AsyncSession, monkeypatch):
    """Test a failed insert keeps the previous rows."""
    store = ReportStore()
    await store.replace_overview(db_session, [overview_row("a"), overview_row("b")])

    def broken_insert(*args, **kwargs):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(report_store_module, "insert", broken_insert)

    with pytest.raises(RuntimeError):
        await store.replace_overview(db_session, [overview_row("c")])

    rows, total = await store.list_overview(db_session)
    assert total == 2
    assert [r.contenthash for r in rows] == ["a", "b"]


@pytest.mark.asyncio
async def test_overview_aggregates(db_session: AsyncSession):
    """Test finished count and cost sum skip uncalculated costs."""
    store = ReportStore()
    await store.replace_overview(
        db_session,
        [
            overview_row("a", cost=0.205),
            overview_row("b", cost=0.024, status="File Missing"),
            overview_row("c", cost=None, status="In Progress"),
        ],
    )

    assert await store.count_finished(db_session) == 1
    assert await store.sum_overview_cost(db_session) == 0.229


@pytest.mark.asyncio
async def test_list_overview_pages(db_session: AsyncSession):
    """Test overview pagination is ordered by content hash."""
    store = ReportStore()
    await store.replace_overview(db_session, [overview_row(h) for h in ("d", "a", "c", "b", "e")])

    rows, total = await store.list_overview(db_session, page=2, page_size=2)
    assert total == 5
    assert [r.contenthash for r in rows] == ["c", "d"]
