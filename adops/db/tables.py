"""SQLAlchemy ORM table models for the AdOps taxonomy service.

Uses FlexJSON (JSONB on Postgres, JSON on SQLite) for document bodies.

Categories:
- MUTABLE: DocumentRow (path-addressed document store; field patches
           and batched commits)
- IMMUTABLE: TagSnapshotRow (append-only CM360 tag history)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from adops.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


# ---------------------------------------------------------------------------
# Document store (mutable)
# ---------------------------------------------------------------------------


class DocumentRow(Base):
    """One document of the hierarchical store, addressed by its full path.

    ``collection_path`` is the path without the trailing document id, so a
    collection scan is a single indexed equality filter.
    """

    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(1024), primary_key=True)
    collection_path: Mapped[str] = mapped_column(String(1024), nullable=False, index=True)
    doc_id: Mapped[str] = mapped_column(String(255), nullable=False)
    data = mapped_column(FlexJSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# CM360 tags (append-only)
# ---------------------------------------------------------------------------


class TagSnapshotRow(Base):
    """Append-only snapshot of what was pushed to the ad server for one item."""

    __tablename__ = "cm360_tags"
    __table_args__ = (
        UniqueConstraint(
            "client_id", "item_type", "item_id", "version",
            name="uq_cm360_tags_item_version",
        ),
    )

    snapshot_id: Mapped[UUID] = mapped_column(primary_key=True)
    client_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    item_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tactic_id: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    table_data = mapped_column(FlexJSON, nullable=False)
    tactic_metrics = mapped_column(FlexJSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
