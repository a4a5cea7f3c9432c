"""Initial schema: document store and CM360 tag snapshots.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Document store (MUTABLE) --
    op.create_table(
        "documents",
        sa.Column("path", sa.String(1024), primary_key=True),
        sa.Column("collection_path", sa.String(1024), nullable=False),
        sa.Column("doc_id", sa.String(255), nullable=False),
        sa.Column("data", JSONB, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_documents_collection_path", "documents", ["collection_path"],
    )

    # -- CM360 tags (IMMUTABLE, append-only) --
    op.create_table(
        "cm360_tags",
        sa.Column("snapshot_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("client_id", sa.String(255), nullable=False),
        sa.Column("item_type", sa.String(20), nullable=False),
        sa.Column("item_id", sa.String(255), nullable=False),
        sa.Column("tactic_id", sa.String(255), nullable=False),
        sa.Column("version", sa.Integer, nullable=False),
        sa.Column("table_data", JSONB, nullable=False),
        sa.Column("tactic_metrics", JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "client_id", "item_type", "item_id", "version",
            name="uq_cm360_tags_item_version",
        ),
    )
    op.create_index("ix_cm360_tags_client_id", "cm360_tags", ["client_id"])
    op.create_index("ix_cm360_tags_item_id", "cm360_tags", ["item_id"])


def downgrade() -> None:
    op.drop_index("ix_cm360_tags_item_id", table_name="cm360_tags")
    op.drop_index("ix_cm360_tags_client_id", table_name="cm360_tags")
    op.drop_table("cm360_tags")
    op.drop_index("ix_documents_collection_path", table_name="documents")
    op.drop_table("documents")
