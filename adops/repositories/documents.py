"""Path-addressed document store over the ``documents`` table.

Documents are plain JSON objects. Reads return the stored body with the
document id under ``"id"``. Repositories flush but never commit; the
session dependency (or the caller owning the session) commits.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from adops.db.tables import DocumentRow
from adops.models.common import utc_now
from adops.repositories.paths import split_path

logger = logging.getLogger(__name__)


def _to_document(row: DocumentRow) -> dict[str, Any]:
    return {**(row.data or {}), "id": row.doc_id}


class DocumentRepository:
    """Get, scan, set, patch and delete documents by path.

    One ``AsyncSession`` cannot run two statements at once, so every
    session operation goes through ``_lock``. Callers may fan reads out
    with ``asyncio.gather``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._lock = asyncio.Lock()

    async def get(self, path: str) -> dict[str, Any] | None:
        async with self._lock:
            row = await self._session.get(DocumentRow, path)
        return _to_document(row) if row is not None else None

    async def list_collection(
        self, collection_path: str, **equals: Any,
    ) -> list[dict[str, Any]]:
        """Documents directly under ``collection_path``, ordered by id.

        Keyword arguments are equality filters on top-level fields.
        """
        async with self._lock:
            result = await self._session.execute(
                select(DocumentRow)
                .where(DocumentRow.collection_path == collection_path)
                .order_by(DocumentRow.doc_id)
            )
            rows = list(result.scalars().all())

        documents = [_to_document(row) for row in rows]
        if not equals:
            return documents
        return [
            doc for doc in documents
            if all(doc.get(key) == value for key, value in equals.items())
        ]

    async def set(self, path: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create or replace the document at ``path``."""
        collection_path, doc_id = split_path(path)
        body = {key: value for key, value in data.items() if key != "id"}
        now = utc_now()
        async with self._lock:
            row = await self._session.get(DocumentRow, path)
            if row is None:
                row = DocumentRow(
                    path=path,
                    collection_path=collection_path,
                    doc_id=doc_id,
                    data=body,
                    created_at=now,
                    updated_at=now,
                )
                self._session.add(row)
            else:
                row.data = body
                row.updated_at = now
            await self._session.flush()
        return _to_document(row)

    async def update(self, path: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Merge ``patch`` into the top-level fields of an existing document.

        Raises KeyError when no document exists at ``path``.
        """
        async with self._lock:
            row = await self._session.get(DocumentRow, path)
            if row is None:
                msg = f"Document {path} not found."
                raise KeyError(msg)
            body = {key: value for key, value in patch.items() if key != "id"}
            row.data = {**(row.data or {}), **body}
            row.updated_at = utc_now()
            await self._session.flush()
        return _to_document(row)

    async def delete(self, path: str) -> bool:
        async with self._lock:
            row = await self._session.get(DocumentRow, path)
            if row is None:
                return False
            await self._session.delete(row)
            await self._session.flush()
        return True

    def batch(self) -> "WriteBatch":
        return WriteBatch(self)


class WriteBatch:
    """Staged field patches applied together by ``commit()``.

    Nothing touches the session until ``commit()``. All staged patches are
    applied within the caller's transaction, so a failure leaves the
    transaction to be rolled back as a whole.
    """

    def __init__(self, documents: DocumentRepository) -> None:
        self._documents = documents
        self._updates: list[tuple[str, dict[str, Any]]] = []

    def __len__(self) -> int:
        return len(self._updates)

    def update(self, path: str, patch: dict[str, Any]) -> None:
        self._updates.append((path, patch))

    async def commit(self) -> int:
        """Apply every staged patch; returns the number applied."""
        if not self._updates:
            return 0
        for path, patch in self._updates:
            await self._documents.update(path, patch)
        count = len(self._updates)
        self._updates.clear()
        logger.info("Committed batch of %d document updates", count)
        return count
