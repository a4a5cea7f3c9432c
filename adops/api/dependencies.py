"""FastAPI dependency injection factories.

Repository factories take AsyncSession via Depends(get_async_session).
Background work gets its own session through ``session_scope`` since it
outlives the request that scheduled it.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from adops.db.session import get_async_session, session_scope
from adops.models.common import ParentType
from adops.moves.background import BackgroundTasks
from adops.moves.coordinator import RegenerateFn
from adops.repositories.documents import DocumentRepository
from adops.repositories.tags import TagSnapshotRepository
from adops.repositories.taxonomy import TaxonomyLookupRepository
from adops.tags.service import CM360TagService
from adops.taxonomy.bulk import MoveParent, MoveRegenerationResult, TaxonomyTreeUpdater
from adops.taxonomy.regenerator import TaxonomyRegenerator

# ---------------------------------------------------------------------------
# Documents / taxonomy
# ---------------------------------------------------------------------------


async def get_document_repo(
    session: AsyncSession = Depends(get_async_session),
) -> DocumentRepository:
    return DocumentRepository(session)


async def get_lookup_repo(
    documents: DocumentRepository = Depends(get_document_repo),
) -> TaxonomyLookupRepository:
    return TaxonomyLookupRepository(documents)


async def get_regenerator(
    lookups: TaxonomyLookupRepository = Depends(get_lookup_repo),
) -> TaxonomyRegenerator:
    return TaxonomyRegenerator(templates=lookups, lookups=lookups)


# ---------------------------------------------------------------------------
# CM360 tags
# ---------------------------------------------------------------------------


async def get_tag_snapshot_repo(
    session: AsyncSession = Depends(get_async_session),
) -> TagSnapshotRepository:
    return TagSnapshotRepository(session)


async def get_tag_service(
    snapshots: TagSnapshotRepository = Depends(get_tag_snapshot_repo),
) -> CM360TagService:
    return CM360TagService(snapshots)


# ---------------------------------------------------------------------------
# Moves / background work
# ---------------------------------------------------------------------------


async def _regenerate_tree(
    parent_type: ParentType, parent: MoveParent, *, force_regeneration: bool,
) -> MoveRegenerationResult:
    """Bulk regeneration in a session of its own, committed on success."""
    async with session_scope() as session:
        documents = DocumentRepository(session)
        lookups = TaxonomyLookupRepository(documents)
        updater = TaxonomyTreeUpdater(
            documents, TaxonomyRegenerator(templates=lookups, lookups=lookups),
        )
        return await updater.update_taxonomies(
            parent_type, parent, force_regeneration=force_regeneration,
        )


async def regenerate_after_move(
    parent_type: ParentType, parent: MoveParent,
) -> MoveRegenerationResult:
    return await _regenerate_tree(parent_type, parent, force_regeneration=True)


async def regenerate_after_edit(
    parent_type: ParentType, parent: MoveParent,
) -> MoveRegenerationResult:
    return await _regenerate_tree(parent_type, parent, force_regeneration=False)


def get_move_regenerate_fn() -> RegenerateFn:
    return regenerate_after_move


def get_edit_regenerate_fn() -> RegenerateFn:
    return regenerate_after_edit


def get_background_tasks(request: Request) -> BackgroundTasks:
    return request.app.state.background_tasks
