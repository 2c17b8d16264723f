import pytest
from sqlalchemy import select

from app.db.models import Genre
from app.db.paging import paged_query


async def _seed(db, count):
    db.add_all([Genre(name=f"genre-{i}") for i in range(count)])
    await db.commit()


@pytest.mark.asyncio
async def test_paged_query_applies_offset_and_limit(db_session):
    await _seed(db_session, 5)

    page = await paged_query(db_session, select(Genre).order_by(Genre.id), offset="1", limit="2")

    assert page["offset"] == 1
    assert page["limit"] == 2
    assert [g.name for g in page["items"]] == ["genre-1", "genre-2"]


@pytest.mark.asyncio
async def test_paged_query_defaults_on_garbage(db_session):
    await _seed(db_session, 12)

    page = await paged_query(db_session, select(Genre).order_by(Genre.id), offset="x", limit=None)

    assert (page["offset"], page["limit"]) == (0, 10)
    assert len(page["items"]) == 10
