"""FastAPI CM360 tag endpoints.

POST   /{client_id}/tags                                            create a tag snapshot
POST   /{client_id}/tags/{item_type}/{item_id}/confirm              confirm current values
POST   /{client_id}/tags/{item_type}/{item_id}/history              history + change state
POST   /{client_id}/tags/{item_type}/{item_id}/fields/{field}/history  one field's values
DELETE /{client_id}/tags/{item_type}/{item_id}                      cancel all tags

History endpoints are POST because they compare against live values the
caller sends in the body.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field

from adops.api.dependencies import get_tag_service
from adops.models.common import TagItemType, TagStatus
from adops.models.tags import CM360TagData, CM360TagHistory, FieldHistory
from adops.tags.detection import get_field_history, tag_status
from adops.tags.service import CM360TagService

router = APIRouter(prefix="/v1/clients", tags=["cm360-tags"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateTagRequest(BaseModel):
    item_type: TagItemType
    item_id: str = Field(min_length=1)
    tactic_id: str = Field(min_length=1)
    table_data: dict[str, Any] = Field(default_factory=dict)
    tactic_metrics: dict[str, Any] | None = None


class ConfirmTagRequest(BaseModel):
    tactic_id: str = Field(min_length=1)
    current: dict[str, Any] = Field(default_factory=dict)


class HistoryRequest(BaseModel):
    current: dict[str, Any] | None = None


class FieldHistoryRequest(BaseModel):
    current_value: Any = None


class TagHistoryResponse(BaseModel):
    status: TagStatus
    history: CM360TagHistory


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/{client_id}/tags", status_code=201, response_model=CM360TagData)
async def create_tag(
    client_id: str,
    body: CreateTagRequest,
    service: CM360TagService = Depends(get_tag_service),
) -> CM360TagData:
    return await service.create_tag(
        client_id,
        body.item_type,
        body.item_id,
        body.tactic_id,
        body.table_data,
        body.tactic_metrics,
    )


@router.post(
    "/{client_id}/tags/{item_type}/{item_id}/confirm",
    status_code=201,
    response_model=CM360TagData,
)
async def confirm_tag(
    client_id: str,
    item_type: TagItemType,
    item_id: str,
    body: ConfirmTagRequest,
    service: CM360TagService = Depends(get_tag_service),
) -> CM360TagData:
    return await service.confirm_applied(
        client_id, item_type, item_id, body.tactic_id, body.current,
    )


@router.post(
    "/{client_id}/tags/{item_type}/{item_id}/history",
    response_model=TagHistoryResponse,
)
async def get_tag_history(
    client_id: str,
    item_type: TagItemType,
    item_id: str,
    body: HistoryRequest,
    service: CM360TagService = Depends(get_tag_service),
) -> TagHistoryResponse:
    history = await service.get_history(client_id, item_type, item_id, body.current)
    return TagHistoryResponse(status=tag_status(history), history=history)


@router.post(
    "/{client_id}/tags/{item_type}/{item_id}/fields/{field}/history",
    response_model=FieldHistory,
)
async def get_tag_field_history(
    client_id: str,
    item_type: TagItemType,
    item_id: str,
    field: str,
    body: FieldHistoryRequest,
    service: CM360TagService = Depends(get_tag_service),
) -> FieldHistory:
    tags = await service.list_tags(client_id, item_type, item_id)
    return get_field_history(field, tags, body.current_value)


@router.delete("/{client_id}/tags/{item_type}/{item_id}", status_code=204)
async def cancel_tags(
    client_id: str,
    item_type: TagItemType,
    item_id: str,
    service: CM360TagService = Depends(get_tag_service),
) -> Response:
    deleted = await service.cancel_tags(client_id, item_type, item_id)
    if deleted == 0:
        raise HTTPException(
            status_code=404,
            detail=f"No CM360 tags for {item_type.value} {item_id}.",
        )
    return Response(status_code=204)
