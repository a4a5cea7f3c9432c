"""Seed script: load a demo client into the AdOps document store.

Creates:
1. Shortcodes (publishers, markets) and one client custom code
2. Two taxonomies for the demo client (placement tags, creative tags)
3. A campaign tree: one version / onglet / section, two tactics, a
   placement under each tactic and a creative under the first placement

Idempotent: skips everything if the demo campaign already exists.

Usage:
    python -m scripts.seed              # against DATABASE_URL from .env
    pytest tests/scripts/test_seed.py   # against aiosqlite in-memory
"""

import asyncio
import sys
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from adops.repositories import paths
from adops.repositories.documents import DocumentRepository

DEMO_CLIENT_ID = "demo-client"
DEMO_CAMPAIGN_ID = "campaign-spring"
DEMO_VERSION_ID = "version-1"
DEMO_ONGLET_ID = "onglet-1"
DEMO_SECTION_ID = "section-digital"

DEMO_SHORTCODES: dict[str, dict[str, Any]] = {
    "sc-google": {
        "SH_Code": "GOOG",
        "SH_Display_Name_FR": "Google",
        "SH_Display_Name_EN": "Google",
        "SH_Default_UTM": "google",
    },
    "sc-meta": {
        "SH_Code": "META",
        "SH_Display_Name_FR": "Meta",
        "SH_Display_Name_EN": "Meta",
        "SH_Default_UTM": "facebook",
    },
    "sc-qc": {
        "SH_Code": "QC",
        "SH_Display_Name_FR": "Québec",
        "SH_Display_Name_EN": "Quebec",
    },
    "sc-video": {
        "SH_Code": "VID",
        "SH_Display_Name_FR": "Vidéo",
        "SH_Display_Name_EN": "Video",
        "SH_Default_UTM": "video",
    },
}

DEMO_CUSTOM_CODES: dict[str, dict[str, Any]] = {
    "custom-google": {"shortcodeId": "sc-google", "customCode": "GGL"},
}

PLACEMENT_TAXONOMY_ID = "taxonomy-placement-tags"
CREATIVE_TAXONOMY_ID = "taxonomy-creative-tags"

DEMO_TAXONOMIES: dict[str, dict[str, Any]] = {
    PLACEMENT_TAXONOMY_ID: {
        "NA_Display_Name": "Placement tags",
        "NA_Name_Level_1": "[CA_Campaign_Identifier:open]_[TC_Publisher:code]",
        "NA_Name_Level_2": "<[TC_Publisher:utm]-[PL_Market_Details:code]>",
        "NA_Name_Level_3": "[PL_Label:open]",
        "NA_Name_Level_4": "",
    },
    CREATIVE_TAXONOMY_ID: {
        "NA_Display_Name": "Creative tags",
        "NA_Name_Level_5": "[TC_Publisher:custom_code]_[CR_Label:open]",
        "NA_Name_Level_6": "<[CR_Version:open]|[PL_Format:display_en]>",
    },
}


def demo_tactic_path(tactic_id: str) -> str:
    version_path = paths.join_path(
        paths.versions_collection(DEMO_CLIENT_ID, DEMO_CAMPAIGN_ID), DEMO_VERSION_ID,
    )
    onglet_path = paths.join_path(paths.onglets_collection(version_path), DEMO_ONGLET_ID)
    section_path = paths.join_path(paths.sections_collection(onglet_path), DEMO_SECTION_ID)
    return paths.join_path(paths.tactiques_collection(section_path), tactic_id)


def demo_placement_path(tactic_id: str, placement_id: str) -> str:
    return paths.join_path(paths.placements_collection(demo_tactic_path(tactic_id)), placement_id)


def demo_creative_path(tactic_id: str, placement_id: str, creative_id: str) -> str:
    return paths.join_path(
        paths.creatifs_collection(demo_placement_path(tactic_id, placement_id)), creative_id,
    )


async def seed_lookups(documents: DocumentRepository) -> int:
    """Shortcodes, custom codes and taxonomies. Returns the number of documents written."""
    count = 0
    for shortcode_id, data in DEMO_SHORTCODES.items():
        await documents.set(paths.shortcode_path(shortcode_id), data)
        count += 1
    for custom_id, data in DEMO_CUSTOM_CODES.items():
        await documents.set(
            paths.join_path(paths.custom_codes_collection(DEMO_CLIENT_ID), custom_id), data,
        )
        count += 1
    for taxonomy_id, data in DEMO_TAXONOMIES.items():
        await documents.set(paths.taxonomy_path(DEMO_CLIENT_ID, taxonomy_id), data)
        count += 1
    return count


async def seed_campaign_tree(documents: DocumentRepository) -> list[str]:
    """The demo campaign hierarchy. Returns the placement and creative paths."""
    await documents.set(
        paths.campaign_path(DEMO_CLIENT_ID, DEMO_CAMPAIGN_ID),
        {"CA_Name": "Spring launch", "CA_Campaign_Identifier": "SPRING26", "CA_Year": 2026},
    )
    version_path = paths.join_path(
        paths.versions_collection(DEMO_CLIENT_ID, DEMO_CAMPAIGN_ID), DEMO_VERSION_ID,
    )
    await documents.set(version_path, {"name": "Version 1"})
    onglet_path = paths.join_path(paths.onglets_collection(version_path), DEMO_ONGLET_ID)
    await documents.set(onglet_path, {"ON_Name": "Main"})
    await documents.set(
        paths.join_path(paths.sections_collection(onglet_path), DEMO_SECTION_ID),
        {"SECTION_Name": "Digital"},
    )

    await documents.set(demo_tactic_path("tactic-search"), {
        "TC_Label": "Search",
        "TC_Publisher": "sc-google",
        "TC_Media_Budget": 25000,
        "TC_Buy_Currency": "CAD",
    })
    await documents.set(demo_tactic_path("tactic-social"), {
        "TC_Label": "Social",
        "TC_Publisher": "sc-meta",
    })

    item_paths = [
        demo_placement_path("tactic-search", "placement-search-qc"),
        demo_placement_path("tactic-social", "placement-social-qc"),
        demo_creative_path("tactic-search", "placement-search-qc", "creative-search-a"),
    ]
    await documents.set(item_paths[0], {
        "PL_Label": "Search QC",
        "PL_Market_Details": "sc-qc",
        "PL_Format": "sc-video",
        "PL_Taxonomy_Tags": PLACEMENT_TAXONOMY_ID,
    })
    await documents.set(item_paths[1], {
        "PL_Label": "Social QC",
        "PL_Market_Details": "sc-qc",
        "PL_Taxonomy_Tags": PLACEMENT_TAXONOMY_ID,
    })
    await documents.set(item_paths[2], {
        "CR_Label": "Banner A",
        "CR_Version": "v1",
        "CR_Taxonomy_Tags": CREATIVE_TAXONOMY_ID,
    })
    return item_paths


async def seed_demo(session: AsyncSession) -> dict:
    """Idempotent demo seed.

    Returns dict with keys: created (bool), client_id, campaign_id and,
    when created, lookup_count and item_paths.
    """
    documents = DocumentRepository(session)
    existing = await documents.get(paths.campaign_path(DEMO_CLIENT_ID, DEMO_CAMPAIGN_ID))
    if existing is not None:
        return {"created": False, "client_id": DEMO_CLIENT_ID, "campaign_id": DEMO_CAMPAIGN_ID}

    lookup_count = await seed_lookups(documents)
    item_paths = await seed_campaign_tree(documents)
    return {
        "created": True,
        "client_id": DEMO_CLIENT_ID,
        "campaign_id": DEMO_CAMPAIGN_ID,
        "lookup_count": lookup_count,
        "item_paths": item_paths,
    }


# ---------------------------------------------------------------------------
# CLI entry point: python -m scripts.seed
# ---------------------------------------------------------------------------


async def _run_seed() -> None:
    """Run the seed against the real database (idempotent)."""
    from adops.db.session import session_scope

    async with session_scope() as session:
        result = await seed_demo(session)

    if not result["created"]:
        print(f"Demo data already seeded (campaign {DEMO_CAMPAIGN_ID} exists). Skipping.")
        return

    print("Seed complete.")
    print(f"  Client:       {result['client_id']}")
    print(f"  Campaign:     {result['campaign_id']}")
    print(f"  Lookups:      {result['lookup_count']} documents")
    for item_path in result["item_paths"]:
        print(f"  Item:         {item_path}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
    sys.exit(0)
