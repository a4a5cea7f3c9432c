"""FastAPI taxonomy endpoints.

POST /{client_id}/taxonomies/preview       resolve one template
POST /{client_id}/taxonomies/validate      list and check template variables
POST /{client_id}/placements/regenerate    placement field patch (levels 1-4)
POST /{client_id}/creatives/regenerate     creative field patch (levels 5-6)
POST /{client_id}/taxonomies/after-move    schedule forced regeneration under a moved node
POST /{client_id}/taxonomies/after-edit    schedule regeneration under an edited node

Regeneration endpoints return the patch; persisting it is up to the caller.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from adops.api.dependencies import (
    get_background_tasks,
    get_edit_regenerate_fn,
    get_lookup_repo,
    get_move_regenerate_fn,
    get_regenerator,
)
from adops.models.common import ParentType
from adops.models.hierarchy import Campaign, Creative, Placement, Tactic
from adops.models.taxonomy import ParsedTaxonomyStructure
from adops.moves.background import BackgroundTasks
from adops.moves.coordinator import RegenerateFn
from adops.repositories.taxonomy import TaxonomyLookupRepository
from adops.taxonomy.bulk import MoveParent
from adops.taxonomy.lookups import LookupCache
from adops.taxonomy.parser import parse_taxonomy_structure
from adops.taxonomy.regenerator import TaxonomyRegenerator
from adops.taxonomy.resolver import ResolutionContext, generate_level_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/clients", tags=["taxonomies"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class PreviewRequest(BaseModel):
    template: str
    campaign: Campaign | None = None
    tactic: Tactic | None = None
    placement: Placement | None = None
    creative: Creative | None = None
    is_creative: bool = False
    force_regeneration: bool = False


class PreviewResponse(BaseModel):
    value: str


class ValidateRequest(BaseModel):
    template: str
    level: int = Field(default=1, ge=1, le=6)


class RegeneratePlacementRequest(BaseModel):
    placement: Placement
    campaign: Campaign | None = None
    tactic: Tactic | None = None
    force_regeneration: bool = False


class RegenerateCreativeRequest(BaseModel):
    creative: Creative
    placement: Placement | None = None
    campaign: Campaign | None = None
    tactic: Tactic | None = None
    force_regeneration: bool = False


class RegenerateResponse(BaseModel):
    fields: dict[str, Any]


class SubtreeRegenerationRequest(BaseModel):
    parent_type: ParentType
    parent_id: str = Field(min_length=1)
    campaign_id: str | None = None
    name: str = ""


class SubtreeRegenerationResponse(BaseModel):
    status: str
    task: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/{client_id}/taxonomies/preview", response_model=PreviewResponse)
async def preview_taxonomy(
    client_id: str,
    body: PreviewRequest,
    lookups: TaxonomyLookupRepository = Depends(get_lookup_repo),
) -> PreviewResponse:
    context = ResolutionContext(
        client_id=client_id,
        campaign=body.campaign,
        tactic=body.tactic,
        placement=body.placement,
        creative=body.creative,
        caches=LookupCache(lookups),
        force_regeneration=body.force_regeneration,
    )
    value = await generate_level_string(body.template, context, body.is_creative)
    return PreviewResponse(value=value)


@router.post(
    "/{client_id}/taxonomies/validate",
    response_model=ParsedTaxonomyStructure,
)
async def validate_taxonomy(client_id: str, body: ValidateRequest) -> ParsedTaxonomyStructure:
    return parse_taxonomy_structure(body.template, body.level)


@router.post("/{client_id}/placements/regenerate", response_model=RegenerateResponse)
async def regenerate_placement(
    client_id: str,
    body: RegeneratePlacementRequest,
    regenerator: TaxonomyRegenerator = Depends(get_regenerator),
) -> RegenerateResponse:
    patch = await regenerator.regenerate_placement(
        client_id,
        body.placement,
        body.campaign,
        body.tactic,
        force_regeneration=body.force_regeneration,
    )
    return RegenerateResponse(fields=patch)


@router.post("/{client_id}/creatives/regenerate", response_model=RegenerateResponse)
async def regenerate_creative(
    client_id: str,
    body: RegenerateCreativeRequest,
    regenerator: TaxonomyRegenerator = Depends(get_regenerator),
) -> RegenerateResponse:
    patch = await regenerator.regenerate_creative(
        client_id,
        body.creative,
        body.campaign,
        body.tactic,
        body.placement,
        force_regeneration=body.force_regeneration,
    )
    return RegenerateResponse(fields=patch)


def _schedule_tree_regeneration(
    client_id: str,
    body: SubtreeRegenerationRequest,
    background: BackgroundTasks,
    regenerate: RegenerateFn,
    trigger: str,
) -> SubtreeRegenerationResponse:
    if body.parent_type != ParentType.CAMPAIGN and not body.campaign_id:
        raise HTTPException(
            status_code=422,
            detail=f"campaign_id is required when parent_type is {body.parent_type.value}.",
        )

    parent = MoveParent(
        id=body.parent_id,
        client_id=client_id,
        campaign_id=body.campaign_id,
        name=body.name,
    )
    task = background.spawn(
        f"taxonomy-regeneration:{trigger}:{client_id}:{body.parent_type.value}:{body.parent_id}",
        regenerate(body.parent_type, parent),
    )
    logger.info("Scheduled taxonomy regeneration %s", task.get_name())
    return SubtreeRegenerationResponse(status="scheduled", task=task.get_name())


@router.post(
    "/{client_id}/taxonomies/after-move",
    status_code=202,
    response_model=SubtreeRegenerationResponse,
)
async def regenerate_after_move(
    client_id: str,
    body: SubtreeRegenerationRequest,
    background: BackgroundTasks = Depends(get_background_tasks),
    regenerate: RegenerateFn = Depends(get_move_regenerate_fn),
) -> SubtreeRegenerationResponse:
    return _schedule_tree_regeneration(client_id, body, background, regenerate, "move")


@router.post(
    "/{client_id}/taxonomies/after-edit",
    status_code=202,
    response_model=SubtreeRegenerationResponse,
)
async def regenerate_after_edit(
    client_id: str,
    body: SubtreeRegenerationRequest,
    background: BackgroundTasks = Depends(get_background_tasks),
    regenerate: RegenerateFn = Depends(get_edit_regenerate_fn),
) -> SubtreeRegenerationResponse:
    """Regenerate descendants of an edited node, keeping stored manual values."""
    return _schedule_tree_regeneration(client_id, body, background, regenerate, "edit")
