"""Taxonomy regeneration for placements (levels 1-4) and creatives (levels 5-6).

Each call builds a fresh ``LookupCache``, so shortcode reads are shared
across the three template sets and every level of one item but never
across items. The three template sets and their levels are generated
concurrently.

The result is a field patch ready to be merged into the item document:

    PL_Tag_1..4, PL_Plateforme_1..4, PL_MO_1..4
    PL_Generated_Taxonomies = {"tags": ..., "platform": ..., "mediaocean": ...}
    updatedAt

(``CR_`` and levels 5-6 for creatives.)
"""

import asyncio
import logging
from typing import Any

from adops.models.common import TaxonomyType, utc_now
from adops.models.hierarchy import Campaign, Creative, Placement, Tactic
from adops.taxonomy.fields import (
    CREATIVE_LEVELS,
    CREATIVE_TEMPLATE_FIELDS,
    OUTPUT_FIELD_NAMES,
    PLACEMENT_LEVELS,
    PLACEMENT_TEMPLATE_FIELDS,
)
from adops.taxonomy.lookups import LookupCache, LookupSource, TemplateSource
from adops.taxonomy.resolver import ResolutionContext, generate_level_string

logger = logging.getLogger(__name__)

GENERATED_SEPARATOR = "|"


def build_taxonomy_patch(
    prefix: str,
    levels: tuple[int, ...],
    chains: dict[TaxonomyType, list[str]],
) -> dict[str, Any]:
    """Lay generated level strings out as document fields."""
    patch: dict[str, Any] = {}
    for taxonomy_type in TaxonomyType:
        infix = OUTPUT_FIELD_NAMES[taxonomy_type]
        for level, value in zip(levels, chains[taxonomy_type]):
            patch[f"{prefix}_{infix}_{level}"] = value

    patch[f"{prefix}_Generated_Taxonomies"] = {
        taxonomy_type.value: GENERATED_SEPARATOR.join(
            value for value in chains[taxonomy_type] if value
        )
        for taxonomy_type in TaxonomyType
    }
    patch["updatedAt"] = utc_now().isoformat()
    return patch


class TaxonomyRegenerator:
    """Regenerates the taxonomy strings of one placement or creative."""

    def __init__(self, templates: TemplateSource, lookups: LookupSource) -> None:
        self._templates = templates
        self._lookups = lookups

    async def regenerate_placement(
        self,
        client_id: str,
        placement: Placement,
        campaign: Campaign | None,
        tactic: Tactic | None,
        *,
        force_regeneration: bool = False,
    ) -> dict[str, Any]:
        context = ResolutionContext(
            client_id=client_id,
            campaign=campaign,
            tactic=tactic,
            placement=placement,
            caches=LookupCache(self._lookups),
            force_regeneration=force_regeneration,
        )
        template_ids = {
            taxonomy_type: placement.field(field_name)
            for taxonomy_type, field_name in PLACEMENT_TEMPLATE_FIELDS.items()
        }
        chains = await self._generate_all(
            client_id, template_ids, PLACEMENT_LEVELS, context, is_creative=False,
        )
        return build_taxonomy_patch("PL", PLACEMENT_LEVELS, chains)

    async def regenerate_creative(
        self,
        client_id: str,
        creative: Creative,
        campaign: Campaign | None,
        tactic: Tactic | None,
        placement: Placement | None,
        *,
        force_regeneration: bool = False,
    ) -> dict[str, Any]:
        context = ResolutionContext(
            client_id=client_id,
            campaign=campaign,
            tactic=tactic,
            placement=placement,
            creative=creative,
            caches=LookupCache(self._lookups),
            force_regeneration=force_regeneration,
        )
        template_ids = {
            taxonomy_type: creative.field(field_name)
            for taxonomy_type, field_name in CREATIVE_TEMPLATE_FIELDS.items()
        }
        chains = await self._generate_all(
            client_id, template_ids, CREATIVE_LEVELS, context, is_creative=True,
        )
        return build_taxonomy_patch("CR", CREATIVE_LEVELS, chains)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _generate_all(
        self,
        client_id: str,
        template_ids: dict[TaxonomyType, str | None],
        levels: tuple[int, ...],
        context: ResolutionContext,
        *,
        is_creative: bool,
    ) -> dict[TaxonomyType, list[str]]:
        types = list(template_ids)
        results = await asyncio.gather(*(
            self._generate_type(client_id, template_ids[t], levels, context, is_creative)
            for t in types
        ))
        return dict(zip(types, results))

    async def _generate_type(
        self,
        client_id: str,
        taxonomy_id: str | None,
        levels: tuple[int, ...],
        context: ResolutionContext,
        is_creative: bool,
    ) -> list[str]:
        if not taxonomy_id:
            return [""] * len(levels)

        template = await self._templates.get_template(client_id, taxonomy_id)
        if template is None:
            logger.warning(
                "Taxonomy %s not found for client %s", taxonomy_id, client_id,
            )
            return [""] * len(levels)

        values = await asyncio.gather(*(
            generate_level_string(template.level(level), context, is_creative)
            for level in levels
        ))
        return list(values)
