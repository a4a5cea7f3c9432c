"""Tests for AdOps Pydantic models and settings.

Covers: hierarchy field access, alias handling, template levels, tag
snapshot validation, and settings defaults.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from adops.config.settings import Environment, Settings
from adops.models.common import TagItemType, new_uuid7, utc_now
from adops.models.hierarchy import Creative, Placement, Tactic, TaxonomyValue
from adops.models.tags import CM360TagData
from adops.models.taxonomy import CustomCode, TaxonomyTemplate
from adops.taxonomy.bulk import MoveParent


class TestCommon:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_uuid7_version(self) -> None:
        assert new_uuid7().version == 7


class TestHierarchy:
    def test_declared_and_extra_fields(self) -> None:
        tactic = Tactic(id="t1", TC_Publisher="sc-google", TC_Custom_Dim_9="x")
        assert tactic.field("TC_Publisher") == "sc-google"
        assert tactic.field("TC_Custom_Dim_9") == "x"
        assert tactic.field("TC_Nothing") is None

    def test_taxonomy_values_by_alias(self) -> None:
        placement = Placement.model_validate({
            "PL_Taxonomy_Values": {
                "PL_Market": {"format": "open", "openValue": "MTL"},
                "PL_Format": {"format": "code", "shortcodeId": "sc-video"},
            },
        })
        market = placement.PL_Taxonomy_Values["PL_Market"]
        assert market.is_open is True
        assert market.open_value == "MTL"
        assert placement.PL_Taxonomy_Values["PL_Format"].shortcode_id == "sc-video"

    def test_plain_value(self) -> None:
        value = TaxonomyValue(format="code", value=3)
        assert value.is_open is False
        assert value.value == 3

    def test_creative_defaults(self) -> None:
        creative = Creative(id="c1")
        assert creative.CR_Taxonomy_Values == {}
        assert creative.CR_Tag_5 is None


class TestTaxonomyModels:
    def test_level_lookup(self) -> None:
        template = TaxonomyTemplate(NA_Name_Level_3="[PL_Label:open]")
        assert template.level(3) == "[PL_Label:open]"
        assert template.level(1) == ""

    @pytest.mark.parametrize("level", [0, 7])
    def test_level_out_of_range(self, level: int) -> None:
        with pytest.raises(ValueError, match="between 1 and 6"):
            TaxonomyTemplate().level(level)

    def test_custom_code_alias(self) -> None:
        code = CustomCode.model_validate({"shortcodeId": "sc-1", "customCode": "X"})
        assert (code.shortcode_id, code.custom_code) == ("sc-1", "X")


class TestTagData:
    def test_version_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CM360TagData(
                type=TagItemType.PLACEMENT, item_id="p1", tactic_id="t1",
                created_at=datetime.now(tz=timezone.utc), version=0,
            )

    def test_recorded_values(self) -> None:
        now = datetime.now(tz=timezone.utc)
        placement = CM360TagData(
            type="placement", itemId="p1", tactiqueId="t1",
            tableData={"PL_Label": "A"}, createdAt=now, version=1,
        )
        metrics = CM360TagData(
            type="metrics", itemId="t1", tactiqueId="t1",
            tactiqueMetrics={"TC_Media_Budget": 5}, createdAt=now, version=1,
        )
        assert placement.recorded_values() == {"PL_Label": "A"}
        assert metrics.recorded_values() == {"TC_Media_Budget": 5}


class TestMoveParent:
    def test_accepts_both_spellings(self) -> None:
        by_alias = MoveParent.model_validate({"id": "t1", "clientId": "c1", "campaignId": "k1"})
        by_name = MoveParent(id="t1", client_id="c1", campaign_id="k1")
        assert by_alias == by_name


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.MOVE_LOCK_TIMEOUT_SECONDS > 0
        assert settings.REFRESH_TIMEOUT_SECONDS > 0

    def test_rejects_non_positive_timeouts(self) -> None:
        with pytest.raises(ValidationError):
            Settings(MOVE_LOCK_TIMEOUT_SECONDS=0)

    def test_is_production(self) -> None:
        assert Settings(ENVIRONMENT="prod").is_production is True
        assert Settings(ENVIRONMENT=Environment.DEV).is_production is False
