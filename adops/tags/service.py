"""CM360 tag lifecycle: create, confirm, read history, cancel.

State per item: NONE (no snapshot) -> CREATED -> CHANGED when live values
drift -> CREATED again once ``confirm_applied`` appends a fresh snapshot.
``cancel_tags`` drops the whole history and returns the item to NONE.

Tactic metrics are tracked as their own item (``TagItemType.METRICS``)
keyed by the tactic id.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from adops.db.tables import TagSnapshotRow
from adops.models.common import TagItemType
from adops.models.hierarchy import HierarchyEntity
from adops.models.tags import CM360TagData, CM360TagHistory
from adops.repositories.tags import TagSnapshotRepository
from adops.tags.detection import build_tag_history, history_key

logger = logging.getLogger(__name__)


def clean_values(data: Mapping[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values recursively; nested mappings left empty are dropped."""
    cleaned: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            nested = clean_values(value)
            if nested:
                cleaned[key] = nested
        else:
            cleaned[key] = value
    return cleaned


def _to_tag(row: TagSnapshotRow) -> CM360TagData:
    return CM360TagData(
        type=TagItemType(row.item_type),
        item_id=row.item_id,
        tactic_id=row.tactic_id,
        table_data=row.table_data or {},
        tactic_metrics=row.tactic_metrics,
        created_at=row.created_at,
        version=row.version,
    )


class CM360TagService:
    def __init__(self, snapshots: TagSnapshotRepository) -> None:
        self._snapshots = snapshots

    async def create_tag(
        self,
        client_id: str,
        item_type: TagItemType,
        item_id: str,
        tactic_id: str,
        table_data: Mapping[str, Any],
        tactic_metrics: Mapping[str, Any] | None = None,
    ) -> CM360TagData:
        """Append the next snapshot of an item.

        The first tag created under a tactic also seeds the tactic metrics
        history with version 1. Later metrics versions only come from an
        explicit confirmation.
        """
        tag = await self._append(
            client_id, item_type, item_id, tactic_id, table_data, tactic_metrics,
        )

        if item_type != TagItemType.METRICS and tactic_metrics:
            existing = await self._snapshots.count_for_item(
                client_id, TagItemType.METRICS, tactic_id,
            )
            if existing == 0:
                await self._append(
                    client_id, TagItemType.METRICS, tactic_id, tactic_id, {}, tactic_metrics,
                )
                logger.info("Seeded metrics tag for tactic %s", tactic_id)

        return tag

    async def confirm_applied(
        self,
        client_id: str,
        item_type: TagItemType,
        item_id: str,
        tactic_id: str,
        current: Mapping[str, Any],
    ) -> CM360TagData:
        """Record the item's current values as what the ad server now holds."""
        if item_type == TagItemType.METRICS:
            return await self._append(
                client_id, item_type, item_id, tactic_id, {}, current,
            )
        return await self._append(client_id, item_type, item_id, tactic_id, current, None)

    async def list_tags(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> list[CM360TagData]:
        rows = await self._snapshots.list_for_item(client_id, item_type, item_id)
        return [_to_tag(row) for row in rows]

    async def get_history(
        self,
        client_id: str,
        item_type: TagItemType,
        item_id: str,
        current: HierarchyEntity | Mapping[str, Any] | None,
    ) -> CM360TagHistory:
        tags = await self.list_tags(client_id, item_type, item_id)
        return build_tag_history(item_type, item_id, tags, current)

    async def get_tactic_histories(
        self,
        client_id: str,
        tactic_id: str,
        placements: Sequence[HierarchyEntity],
        creatives: Mapping[str, Sequence[HierarchyEntity]],
        tactic: HierarchyEntity | Mapping[str, Any] | None = None,
    ) -> dict[str, CM360TagHistory]:
        """Histories of every tagged item under a tactic, keyed by ``history_key``.

        Items without snapshots are left out. The metrics history is
        included when ``tactic`` carries the live metrics.
        """
        histories: dict[str, CM360TagHistory] = {}

        if tactic is not None:
            metrics = await self.get_history(client_id, TagItemType.METRICS, tactic_id, tactic)
            if metrics.tags:
                histories[history_key(TagItemType.METRICS, tactic_id)] = metrics

        for placement in placements:
            history = await self.get_history(
                client_id, TagItemType.PLACEMENT, placement.id, placement,
            )
            if history.tags:
                histories[history_key(TagItemType.PLACEMENT, placement.id)] = history

            for creative in creatives.get(placement.id, ()):
                history = await self.get_history(
                    client_id, TagItemType.CREATIVE, creative.id, creative,
                )
                if history.tags:
                    histories[history_key(TagItemType.CREATIVE, creative.id)] = history

        return histories

    async def cancel_tags(
        self, client_id: str, item_type: TagItemType, item_id: str,
    ) -> int:
        deleted = await self._snapshots.delete_for_item(client_id, item_type, item_id)
        logger.info("Deleted %d %s tags for %s", deleted, item_type.value, item_id)
        return deleted

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _append(
        self,
        client_id: str,
        item_type: TagItemType,
        item_id: str,
        tactic_id: str,
        table_data: Mapping[str, Any],
        tactic_metrics: Mapping[str, Any] | None,
    ) -> CM360TagData:
        version = await self._snapshots.latest_version(client_id, item_type, item_id) + 1
        row = await self._snapshots.append(
            client_id=client_id,
            item_type=item_type,
            item_id=item_id,
            tactic_id=tactic_id,
            version=version,
            table_data=clean_values(table_data),
            tactic_metrics=clean_values(tactic_metrics) if tactic_metrics is not None else None,
        )
        return _to_tag(row)
