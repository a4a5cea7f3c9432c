"""Tests for TagSnapshotRepository (append-only)."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from adops.models.common import TagItemType
from adops.repositories.tags import TagSnapshotRepository


async def _append(repo: TagSnapshotRepository, version: int, **overrides):
    values = {
        "client_id": "c1",
        "item_type": TagItemType.PLACEMENT,
        "item_id": "p1",
        "tactic_id": "t1",
        "version": version,
        "table_data": {"PL_Label": f"v{version}"},
    }
    values.update(overrides)
    return await repo.append(**values)


class TestAppend:
    @pytest.mark.anyio
    async def test_append_and_list(self, db_session: AsyncSession) -> None:
        repo = TagSnapshotRepository(db_session)
        row = await _append(repo, 1, tactic_metrics={"TC_Media_Budget": 100})
        assert row.snapshot_id is not None
        assert row.item_type == "placement"

        rows = await repo.list_for_item("c1", TagItemType.PLACEMENT, "p1")
        assert len(rows) == 1
        assert rows[0].table_data == {"PL_Label": "v1"}
        assert rows[0].tactic_metrics == {"TC_Media_Budget": 100}

    @pytest.mark.anyio
    async def test_list_is_chronological_and_scoped(self, db_session: AsyncSession) -> None:
        repo = TagSnapshotRepository(db_session)
        await _append(repo, 2)
        await _append(repo, 1)
        await _append(repo, 1, item_id="p2")
        await _append(repo, 1, client_id="c2")
        await _append(repo, 1, item_type=TagItemType.CREATIVE)

        rows = await repo.list_for_item("c1", TagItemType.PLACEMENT, "p1")
        assert [r.version for r in rows] == [1, 2]

    @pytest.mark.anyio
    async def test_count_and_latest_version(self, db_session: AsyncSession) -> None:
        repo = TagSnapshotRepository(db_session)
        assert await repo.count_for_item("c1", TagItemType.PLACEMENT, "p1") == 0
        assert await repo.latest_version("c1", TagItemType.PLACEMENT, "p1") == 0

        await _append(repo, 1)
        await _append(repo, 2)
        assert await repo.count_for_item("c1", TagItemType.PLACEMENT, "p1") == 2
        assert await repo.latest_version("c1", TagItemType.PLACEMENT, "p1") == 2


class TestDelete:
    @pytest.mark.anyio
    async def test_delete_removes_whole_history(self, db_session: AsyncSession) -> None:
        repo = TagSnapshotRepository(db_session)
        await _append(repo, 1)
        await _append(repo, 2)
        await _append(repo, 1, item_id="p2")

        assert await repo.delete_for_item("c1", TagItemType.PLACEMENT, "p1") == 2
        assert await repo.list_for_item("c1", TagItemType.PLACEMENT, "p1") == []
        assert await repo.count_for_item("c1", TagItemType.PLACEMENT, "p2") == 1

    @pytest.mark.anyio
    async def test_delete_nothing(self, db_session: AsyncSession) -> None:
        repo = TagSnapshotRepository(db_session)
        assert await repo.delete_for_item("c1", TagItemType.CREATIVE, "ghost") == 0
