"""Fixtures for taxonomy resolution tests: an in-memory lookup source and
a context factory with a small campaign > tactic > placement > creative chain.
"""

from collections import Counter

import pytest

from adops.models.hierarchy import Campaign, Creative, Placement, Tactic
from adops.models.taxonomy import Shortcode, TaxonomyTemplate
from adops.taxonomy.lookups import LookupCache, LookupSource, TemplateSource
from adops.taxonomy.resolver import ResolutionContext

CLIENT_ID = "client-1"


class InMemoryTaxonomySource(LookupSource, TemplateSource):
    """Dict-backed source; ``reads`` counts every read keyed by ``(kind, key)``."""

    def __init__(
        self,
        *,
        shortcodes: dict[str, Shortcode] | None = None,
        custom_codes: dict[tuple[str, str], str] | None = None,
        templates: dict[tuple[str, str], TaxonomyTemplate] | None = None,
    ) -> None:
        self._shortcodes = dict(shortcodes or {})
        self._custom_codes = dict(custom_codes or {})
        self._templates = dict(templates or {})
        self.reads: Counter[tuple[str, str]] = Counter()

    async def get_shortcode(self, shortcode_id: str) -> Shortcode | None:
        self.reads[("shortcode", shortcode_id)] += 1
        return self._shortcodes.get(shortcode_id)

    async def get_custom_code(self, client_id: str, shortcode_id: str) -> str | None:
        self.reads[("custom_code", f"{client_id}__{shortcode_id}")] += 1
        return self._custom_codes.get((client_id, shortcode_id))

    async def get_template(
        self, client_id: str, taxonomy_id: str,
    ) -> TaxonomyTemplate | None:
        self.reads[("template", f"{client_id}__{taxonomy_id}")] += 1
        return self._templates.get((client_id, taxonomy_id))


SHORTCODES = {
    "shortcode123": Shortcode(
        id="shortcode123",
        SH_Code="GOOG",
        SH_Display_Name_FR="Google",
        SH_Display_Name_EN="Google (EN)",
        SH_Default_UTM="google",
    ),
    "sc-meta": Shortcode(id="sc-meta", SH_Code="META", SH_Display_Name_FR="Méta"),
    "sc-qc": Shortcode(
        id="sc-qc", SH_Code="QC", SH_Display_Name_FR="Québec", SH_Display_Name_EN="Quebec",
    ),
}

CUSTOM_CODES = {(CLIENT_ID, "shortcode123"): "GGL"}

TEMPLATES = {
    (CLIENT_ID, "tax-tags"): TaxonomyTemplate(
        id="tax-tags",
        NA_Name_Level_1="[TC_Publisher:display_fr]",
        NA_Name_Level_2="<[PL_Market_Details:code]_[PL_Device:open]>",
        NA_Name_Level_3="[PL_Label:open]",
        NA_Name_Level_4="",
        NA_Name_Level_5="[CR_Label:open]",
        NA_Name_Level_6="<[CR_Version:open]-[TC_Publisher:code]>",
    ),
    (CLIENT_ID, "tax-platform"): TaxonomyTemplate(
        id="tax-platform",
        NA_Name_Level_1="[TC_Publisher:utm]",
        NA_Name_Level_2="[PL_Market_Details:display_en]",
        NA_Name_Level_3="",
        NA_Name_Level_4="x",
        NA_Name_Level_5="[TC_Publisher:custom_code]",
        NA_Name_Level_6="",
    ),
}


@pytest.fixture
def source() -> InMemoryTaxonomySource:
    return InMemoryTaxonomySource(
        shortcodes=dict(SHORTCODES),
        custom_codes=dict(CUSTOM_CODES),
        templates=dict(TEMPLATES),
    )


@pytest.fixture
def campaign() -> Campaign:
    return Campaign(id="camp-1", CA_Campaign_Identifier="SPRING26", CA_Year=2026)


@pytest.fixture
def tactic() -> Tactic:
    return Tactic(id="tac-1", TC_Publisher="shortcode123", TC_Media_Budget=1500)


@pytest.fixture
def placement() -> Placement:
    return Placement(
        id="pl-1",
        PL_Label="Search QC",
        PL_Market_Details="sc-qc",
        PL_Taxonomy_Tags="tax-tags",
        PL_Taxonomy_Platform="tax-platform",
    )


@pytest.fixture
def creative() -> Creative:
    return Creative(
        id="cr-1",
        CR_Label="Banner A",
        CR_Version="v1",
        CR_Taxonomy_Tags="tax-tags",
        CR_Taxonomy_Platform="tax-platform",
    )


@pytest.fixture
def make_context(source, campaign, tactic, placement):
    def _make(**overrides: object) -> ResolutionContext:
        values: dict[str, object] = {
            "client_id": CLIENT_ID,
            "campaign": campaign,
            "tactic": tactic,
            "placement": placement,
            "caches": LookupCache(source),
        }
        values.update(overrides)
        return ResolutionContext(**values)

    return _make
