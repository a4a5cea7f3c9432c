"""Change detection between live item values and the latest tag snapshot.

Every detector uses the same comparison: ``None``, a missing field and
``''`` are one empty value; anything else compares with ``!=``.

Read-only projections; nothing here touches storage.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from adops.models.common import TagFilter, TagItemType, TagStatus
from adops.models.hierarchy import HierarchyEntity
from adops.models.tags import (
    ChangeSet,
    CM360TagData,
    CM360TagHistory,
    FieldHistory,
    FieldHistoryEntry,
)

PLACEMENT_TAG_FIELDS: tuple[str, ...] = (
    "PL_Label",
    "PL_Tag_Type",
    "PL_Tag_Start_Date",
    "PL_Tag_End_Date",
    "PL_Rotation_Type",
    "PL_Floodlight",
    "PL_Third_Party_Measurement",
    "PL_VPAID",
    "PL_Tag_1",
    "PL_Tag_2",
    "PL_Tag_3",
)

CREATIVE_TAG_FIELDS: tuple[str, ...] = (
    "CR_Label",
    "CR_Tag_Start_Date",
    "CR_Tag_End_Date",
    "CR_Rotation_Weight",
    "CR_Tag_5",
    "CR_Tag_6",
)

METRICS_TAG_FIELDS: tuple[str, ...] = (
    "TC_Media_Budget",
    "TC_Buy_Currency",
    "TC_CM360_Rate",
    "TC_CM360_Volume",
    "TC_Buy_Type",
)

CHECKED_FIELDS: dict[TagItemType, tuple[str, ...]] = {
    TagItemType.PLACEMENT: PLACEMENT_TAG_FIELDS,
    TagItemType.CREATIVE: CREATIVE_TAG_FIELDS,
    TagItemType.METRICS: METRICS_TAG_FIELDS,
}

_EMPTY = object()


def _normalize(value: Any) -> Any:
    if value is None or value == "":
        return _EMPTY
    return value


def values_differ(current: Any, snapshot: Any) -> bool:
    return _normalize(current) != _normalize(snapshot)


def history_key(item_type: TagItemType, item_id: str) -> str:
    """Key of an item in a tactic's history map, e.g. ``placement-abc``."""
    return f"{item_type.value}-{item_id}"


def read_fields(
    item: HierarchyEntity | Mapping[str, Any] | None,
    fields: Iterable[str],
) -> dict[str, Any]:
    """Pick ``fields`` out of an entity model or a plain mapping."""
    if item is None:
        return {name: None for name in fields}
    if isinstance(item, HierarchyEntity):
        return {name: item.field(name) for name in fields}
    return {name: item.get(name) for name in fields}


# ---------------------------------------------------------------------------
# Detectors
# ---------------------------------------------------------------------------


def detect_changes(
    current: Mapping[str, Any],
    snapshot: Mapping[str, Any] | None,
) -> ChangeSet:
    """Compare every field of ``current`` against ``snapshot``."""
    snapshot = snapshot or {}
    changed = [
        name for name in current
        if values_differ(current.get(name), snapshot.get(name))
    ]
    return ChangeSet(has_changes=bool(changed), changed_fields=changed)


def detect_item_changes(
    item_type: TagItemType,
    current: HierarchyEntity | Mapping[str, Any] | None,
    latest_tag: CM360TagData | None,
) -> ChangeSet:
    """Compare the checked fields of one item against its latest snapshot.

    An item with no snapshot has no changes.
    """
    if latest_tag is None:
        return ChangeSet()
    return detect_changes(
        read_fields(current, CHECKED_FIELDS[item_type]), latest_tag.recorded_values(),
    )


def detect_metrics_changes(
    current_metrics: HierarchyEntity | Mapping[str, Any] | None,
    metrics_history: CM360TagHistory | None,
) -> ChangeSet:
    """Compare a tactic's CM360 metrics against its latest metrics snapshot."""
    if current_metrics is None or metrics_history is None:
        return ChangeSet()
    latest = metrics_history.latest_tag
    if latest is None or latest.tactic_metrics is None:
        return ChangeSet()
    return detect_changes(
        read_fields(current_metrics, METRICS_TAG_FIELDS), latest.tactic_metrics,
    )


# ---------------------------------------------------------------------------
# History projections
# ---------------------------------------------------------------------------


def get_field_history(
    field_name: str,
    tags: Sequence[CM360TagData],
    current_value: Any,
) -> FieldHistory:
    """Values one field took across snapshots, newest first.

    Snapshots that do not record the field are left out.
    """
    entries: list[FieldHistoryEntry] = []
    for tag in tags:
        if field_name in tag.table_data:
            value = tag.table_data[field_name]
        elif tag.tactic_metrics and field_name in tag.tactic_metrics:
            value = tag.tactic_metrics[field_name]
        else:
            continue
        entries.append(
            FieldHistoryEntry(value=value, timestamp=tag.created_at, version=tag.version)
        )
    entries.sort(key=lambda entry: entry.version, reverse=True)
    return FieldHistory(current=current_value, history=entries)


def build_tag_history(
    item_type: TagItemType,
    item_id: str,
    tags: Sequence[CM360TagData],
    current: HierarchyEntity | Mapping[str, Any] | None,
) -> CM360TagHistory:
    ordered = sorted(tags, key=lambda tag: tag.version)
    latest = ordered[-1] if ordered else None
    changes = detect_item_changes(item_type, current, latest)
    return CM360TagHistory(
        item_id=item_id,
        type=item_type,
        tags=ordered,
        latest_tag=latest,
        has_changes=changes.has_changes,
        changed_fields=changes.changed_fields,
    )


# ---------------------------------------------------------------------------
# Statuses
# ---------------------------------------------------------------------------


def tag_status(history: CM360TagHistory | None) -> TagStatus:
    if history is None or history.latest_tag is None:
        return TagStatus.NONE
    return TagStatus.CHANGED if history.has_changes else TagStatus.CREATED


def calculate_tactic_status(
    histories: Mapping[str, CM360TagHistory],
    placement_ids: Sequence[str],
    creative_ids: Mapping[str, Sequence[str]],
    metrics_history: CM360TagHistory | None = None,
) -> TagStatus:
    """Roll the statuses of a tactic's placements and creatives up.

    ``histories`` is keyed by ``history_key``. When ``metrics_history`` is
    given, the tactic metrics count too: a change there marks the tactic
    changed, and the tactic is only fully created once metrics are tagged.
    """
    keys: list[str] = []
    for placement_id in placement_ids:
        keys.append(history_key(TagItemType.PLACEMENT, placement_id))
        for creative_id in creative_ids.get(placement_id, ()):
            keys.append(history_key(TagItemType.CREATIVE, creative_id))

    if not keys:
        return TagStatus.NONE

    statuses = [tag_status(histories.get(key)) for key in keys]
    tagged = sum(1 for status in statuses if status != TagStatus.NONE)
    changed = any(status == TagStatus.CHANGED for status in statuses)

    metrics_required = metrics_history is not None
    metrics_status = tag_status(metrics_history)
    metrics_tagged = metrics_status != TagStatus.NONE

    if tagged == 0 and not metrics_tagged:
        return TagStatus.NONE
    if changed or metrics_status == TagStatus.CHANGED:
        return TagStatus.CHANGED
    if tagged == len(keys) and (metrics_tagged or not metrics_required):
        return TagStatus.CREATED
    return TagStatus.PARTIAL


def filter_by_status(
    statuses: Mapping[str, TagStatus],
    tag_filter: TagFilter,
) -> list[str]:
    """Keys whose status passes ``tag_filter``; ``changed`` also keeps partial."""
    if tag_filter == TagFilter.ALL:
        return list(statuses)
    if tag_filter == TagFilter.CHANGED:
        accepted = {TagStatus.CHANGED, TagStatus.PARTIAL}
    else:
        accepted = {TagStatus(tag_filter.value)}
    return [key for key, status in statuses.items() if status in accepted]
