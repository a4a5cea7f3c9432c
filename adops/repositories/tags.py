"""CM360 tag snapshot repository (append-only).

Snapshots are never updated. ``delete_for_item`` removes an item's whole
history at once.
"""

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from adops.db.tables import TagSnapshotRow
from adops.models.common import TagItemType, new_uuid7, utc_now


class TagSnapshotRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self,
        *,
        client_id: str,
        item_type: TagItemType,
        item_id: str,
        tactic_id: str,
        version: int,
        table_data: dict[str, Any],
        tactic_metrics: dict[str, Any] | None = None,
    ) -> TagSnapshotRow:
        row = TagSnapshotRow(
            snapshot_id=new_uuid7(),
            client_id=client_id,
            item_type=item_type.value,
            item_id=item_id,
            tactic_id=tactic_id,
            version=version,
            table_data=table_data,
            tactic_metrics=tactic_metrics,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def list_for_item(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> list[TagSnapshotRow]:
        """All snapshots of one item, oldest first."""
        result = await self._session.execute(
            select(TagSnapshotRow)
            .where(
                TagSnapshotRow.client_id == client_id,
                TagSnapshotRow.item_type == item_type.value,
                TagSnapshotRow.item_id == item_id,
            )
            .order_by(TagSnapshotRow.version)
        )
        return list(result.scalars().all())

    async def count_for_item(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(TagSnapshotRow)
            .where(
                TagSnapshotRow.client_id == client_id,
                TagSnapshotRow.item_type == item_type.value,
                TagSnapshotRow.item_id == item_id,
            )
        )
        return result.scalar_one()

    async def latest_version(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> int:
        """Highest version stored for the item, 0 when it has none."""
        result = await self._session.execute(
            select(func.max(TagSnapshotRow.version)).where(
                TagSnapshotRow.client_id == client_id,
                TagSnapshotRow.item_type == item_type.value,
                TagSnapshotRow.item_id == item_id,
            )
        )
        return result.scalar_one_or_none() or 0

    async def delete_for_item(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> int:
        """Delete every snapshot of one item; returns the number removed."""
        result = await self._session.execute(
            delete(TagSnapshotRow).where(
                TagSnapshotRow.client_id == client_id,
                TagSnapshotRow.item_type == item_type.value,
                TagSnapshotRow.item_id == item_id,
            )
        )
        await self._session.flush()
        return result.rowcount or 0
