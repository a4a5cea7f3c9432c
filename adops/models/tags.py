"""CM360 tag snapshot models.

``CM360TagData`` is one immutable snapshot of what was pushed to the ad
server. ``CM360TagHistory`` is derived on read by comparing the latest
snapshot with the item's live values and is never stored.
"""

from typing import Any

from pydantic import Field

from adops.models.common import AdOpsBase, TagItemType, UTCTimestamp


class CM360TagData(AdOpsBase):
    """One snapshot of an item's tag fields."""

    type: TagItemType
    item_id: str = Field(alias="itemId")
    tactic_id: str = Field(alias="tactiqueId")
    table_data: dict[str, Any] = Field(default_factory=dict, alias="tableData")
    tactic_metrics: dict[str, Any] | None = Field(default=None, alias="tactiqueMetrics")
    created_at: UTCTimestamp = Field(alias="createdAt")
    version: int = Field(ge=1)

    def recorded_values(self) -> dict[str, Any]:
        """Field values this snapshot records: metrics for the tactic, table data otherwise."""
        if self.type == TagItemType.METRICS:
            return self.tactic_metrics or {}
        return self.table_data


class ChangeSet(AdOpsBase):
    has_changes: bool = False
    changed_fields: list[str] = Field(default_factory=list)


class CM360TagHistory(AdOpsBase):
    """Snapshots of one item (oldest first) with the live change state."""

    item_id: str = Field(alias="itemId")
    type: TagItemType
    tags: list[CM360TagData] = Field(default_factory=list)
    latest_tag: CM360TagData | None = Field(default=None, alias="latestTag")
    has_changes: bool = Field(default=False, alias="hasChanges")
    changed_fields: list[str] = Field(default_factory=list, alias="changedFields")


class FieldHistoryEntry(AdOpsBase):
    value: Any = None
    timestamp: UTCTimestamp
    version: int


class FieldHistory(AdOpsBase):
    """Current value of one field and its snapshotted values, newest first."""

    current: Any = None
    history: list[FieldHistoryEntry] = Field(default_factory=list)
