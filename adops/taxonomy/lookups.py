"""Lookup sources and the per-pass read-through cache.

``LookupSource`` and ``TemplateSource`` are the storage contracts the
resolver depends on. ``TaxonomyLookupRepository`` implements both over
the document store.

``LookupCache`` lives for exactly one regeneration pass. Misses are
cached as ``None`` so a missing shortcode is read once per pass.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from adops.models.taxonomy import Shortcode, TaxonomyTemplate

logger = logging.getLogger(__name__)


class LookupSource(ABC):
    """Shortcode and custom-code reads."""

    @abstractmethod
    async def get_shortcode(self, shortcode_id: str) -> Shortcode | None: ...

    @abstractmethod
    async def get_custom_code(self, client_id: str, shortcode_id: str) -> str | None: ...


class TemplateSource(ABC):
    """Taxonomy template reads."""

    @abstractmethod
    async def get_template(
        self, client_id: str, taxonomy_id: str,
    ) -> TaxonomyTemplate | None: ...


class LookupCache:
    """Read-through cache over a ``LookupSource`` for one resolution pass.

    Lookups run under a lock so concurrent level generations asking for
    the same key still issue a single read. A failed read is logged and
    cached as a miss.
    """

    def __init__(self, source: LookupSource) -> None:
        self._source = source
        self._shortcodes: dict[str, Shortcode | None] = {}
        self._custom_codes: dict[str, str | None] = {}
        self._lock = asyncio.Lock()

    async def shortcode(self, shortcode_id: str) -> Shortcode | None:
        async with self._lock:
            if shortcode_id in self._shortcodes:
                return self._shortcodes[shortcode_id]
            try:
                value = await self._source.get_shortcode(shortcode_id)
            except Exception:
                logger.warning("Shortcode %s lookup failed", shortcode_id, exc_info=True)
                value = None
            self._shortcodes[shortcode_id] = value
            return value

    async def custom_code(self, client_id: str, shortcode_id: str) -> str | None:
        key = f"{client_id}__{shortcode_id}"
        async with self._lock:
            if key in self._custom_codes:
                return self._custom_codes[key]
            try:
                value = await self._source.get_custom_code(client_id, shortcode_id)
            except Exception:
                logger.warning(
                    "Custom code lookup failed (client=%s, shortcode=%s)",
                    client_id, shortcode_id, exc_info=True,
                )
                value = None
            self._custom_codes[key] = value
            return value
