"""Shared types, enums, and base models used across AdOps domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class TaxonomyFormat(StrEnum):
    """Output format of a ``[name:format]`` variable token."""

    CODE = "code"
    DISPLAY_FR = "display_fr"
    DISPLAY_EN = "display_en"
    UTM = "utm"
    CUSTOM_UTM = "custom_utm"
    CUSTOM_CODE = "custom_code"
    OPEN = "open"


class FieldSource(StrEnum):
    """Where a taxonomy variable takes its value from."""

    CAMPAIGN = "campaign"
    TACTIQUE = "tactique"
    PLACEMENT = "placement"
    MANUAL = "manual"


class TaxonomyType(StrEnum):
    """The three template sets an item can reference."""

    TAGS = "tags"
    PLATFORM = "platform"
    MEDIAOCEAN = "mediaocean"


class ParentType(StrEnum):
    """Hierarchy level that received moved items."""

    CAMPAIGN = "campaign"
    TACTIC = "tactic"
    PLACEMENT = "placement"


class TagItemType(StrEnum):
    """Field group a CM360 tag snapshot belongs to."""

    PLACEMENT = "placement"
    CREATIVE = "creative"
    METRICS = "metrics"


class TagStatus(StrEnum):
    """CM360 tag lifecycle state of one item."""

    NONE = "none"
    CREATED = "created"
    CHANGED = "changed"
    PARTIAL = "partial"


class TagFilter(StrEnum):
    """List filter applied on top of tag statuses."""

    ALL = "all"
    CREATED = "created"
    CHANGED = "changed"
    NONE = "none"


# --- Base model ---


class AdOpsBase(BaseModel):
    """Base model with common configuration for all AdOps Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "ser_json_timedelta": "iso8601",
        "protected_namespaces": (),
    }
