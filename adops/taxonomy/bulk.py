"""Taxonomy regeneration of every placement and creative under a node.

After an edit to a campaign, tactic or placement its descendants are
regenerated keeping their stored manual values. After a move, items must
stop carrying tag fragments from their old parent, so the regeneration
runs with ``force_regeneration``. Patches are written in one batch.

The store cannot look descendants up directly, so the whole campaign
tree is walked level by level. Each level is read sequentially.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from adops.models.common import AdOpsBase, ParentType
from adops.models.hierarchy import Campaign, Creative, Placement, Tactic
from adops.repositories import paths
from adops.repositories.documents import DocumentRepository, WriteBatch
from adops.taxonomy.regenerator import TaxonomyRegenerator

logger = logging.getLogger(__name__)


class MoveParent(AdOpsBase):
    """The node whose placements and creatives are regenerated."""

    id: str
    client_id: str = Field(alias="clientId")
    campaign_id: str | None = Field(default=None, alias="campaignId")
    name: str = ""


@dataclass
class MoveRegenerationResult:
    updated_paths: list[str] = field(default_factory=list)
    skipped_paths: list[str] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated_paths)


def _in_scope(
    parent_type: ParentType, parent_id: str, tactic_id: str, placement_id: str,
) -> bool:
    if parent_type == ParentType.CAMPAIGN:
        return True
    if parent_type == ParentType.TACTIC:
        return tactic_id == parent_id
    return placement_id == parent_id


class TaxonomyTreeUpdater:
    def __init__(
        self, documents: DocumentRepository, regenerator: TaxonomyRegenerator,
    ) -> None:
        self._documents = documents
        self._regenerator = regenerator

    async def update_taxonomies_after_move(
        self, parent_type: ParentType, parent: MoveParent,
    ) -> MoveRegenerationResult:
        return await self.update_taxonomies(parent_type, parent, force_regeneration=True)

    async def update_taxonomies(
        self,
        parent_type: ParentType,
        parent: MoveParent,
        *,
        force_regeneration: bool = False,
    ) -> MoveRegenerationResult:
        """Regenerate every placement and creative under ``parent``.

        An entity whose regeneration fails is logged and left out of the
        batch. Raises ValueError when the campaign cannot be identified;
        a failing batch commit propagates.
        """
        client_id = parent.client_id
        if parent_type == ParentType.CAMPAIGN:
            campaign_id = parent.id
        elif parent.campaign_id:
            campaign_id = parent.campaign_id
        else:
            msg = (
                f"Cannot regenerate taxonomies under {parent_type.value} {parent.id}: "
                "campaign id is missing."
            )
            raise ValueError(msg)

        result = MoveRegenerationResult()
        campaign_data = await self._documents.get(paths.campaign_path(client_id, campaign_id))
        if campaign_data is None:
            logger.error("Campaign %s not found for client %s", campaign_id, client_id)
            return result
        campaign = Campaign.model_validate(campaign_data)

        batch = self._documents.batch()
        versions = await self._documents.list_collection(
            paths.versions_collection(client_id, campaign_id),
        )
        for version in versions:
            version_path = paths.join_path(
                paths.versions_collection(client_id, campaign_id), version["id"],
            )
            onglets_path = paths.onglets_collection(version_path)
            for onglet in await self._documents.list_collection(onglets_path):
                sections_path = paths.sections_collection(
                    paths.join_path(onglets_path, onglet["id"]),
                )
                for section in await self._documents.list_collection(sections_path):
                    tactiques_path = paths.tactiques_collection(
                        paths.join_path(sections_path, section["id"]),
                    )
                    for tactic_data in await self._documents.list_collection(tactiques_path):
                        await self._walk_tactic(
                            client_id,
                            paths.join_path(tactiques_path, tactic_data["id"]),
                            tactic_data,
                            campaign,
                            parent_type,
                            parent.id,
                            batch,
                            result,
                            force_regeneration,
                        )

        if len(batch) == 0:
            logger.info("No taxonomies to regenerate under %s %s", parent_type.value, parent.id)
            return result

        await batch.commit()
        logger.info(
            "Regenerated %d taxonomies under %s %s (%d skipped)",
            result.updated_count, parent_type.value, parent.id, len(result.skipped_paths),
        )
        return result

    async def _walk_tactic(
        self,
        client_id: str,
        tactic_path: str,
        tactic_data: dict[str, Any],
        campaign: Campaign,
        parent_type: ParentType,
        parent_id: str,
        batch: WriteBatch,
        result: MoveRegenerationResult,
        force_regeneration: bool,
    ) -> None:
        tactic: Tactic | None = None
        placements_path = paths.placements_collection(tactic_path)
        for placement_data in await self._documents.list_collection(placements_path):
            placement_id = placement_data["id"]
            placement_path = paths.join_path(placements_path, placement_id)
            if not _in_scope(parent_type, parent_id, tactic_data["id"], placement_id):
                continue

            placement: Placement | None = None
            try:
                tactic = tactic or Tactic.model_validate(tactic_data)
                placement = Placement.model_validate(placement_data)
                patch = await self._regenerator.regenerate_placement(
                    client_id, placement, campaign, tactic,
                    force_regeneration=force_regeneration,
                )
            except Exception:
                logger.exception("Failed to regenerate placement %s", placement_id)
                result.skipped_paths.append(placement_path)
            else:
                batch.update(placement_path, patch)
                result.updated_paths.append(placement_path)

            creatifs_path = paths.creatifs_collection(placement_path)
            for creative_data in await self._documents.list_collection(creatifs_path):
                creative_path = paths.join_path(creatifs_path, creative_data["id"])
                try:
                    tactic = tactic or Tactic.model_validate(tactic_data)
                    placement = placement or Placement.model_validate(placement_data)
                    creative = Creative.model_validate(creative_data)
                    patch = await self._regenerator.regenerate_creative(
                        client_id, creative, campaign, tactic, placement,
                        force_regeneration=force_regeneration,
                    )
                except Exception:
                    logger.exception("Failed to regenerate creative %s", creative_data["id"])
                    result.skipped_paths.append(creative_path)
                else:
                    batch.update(creative_path, patch)
                    result.updated_paths.append(creative_path)
