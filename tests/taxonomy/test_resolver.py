"""Tests for variable resolution and level-string generation."""

import logging

import pytest

from adops.models.hierarchy import Creative, Placement, Tactic, TaxonomyValue
from adops.taxonomy.resolver import generate_level_string, resolve_variable


class TestResolveVariableFromHierarchy:
    @pytest.mark.anyio
    async def test_tactic_shortcode_display_name(self, make_context) -> None:
        value = await resolve_variable("TC_Publisher", "display_fr", make_context())
        assert value == "Google"

    @pytest.mark.anyio
    async def test_custom_code_for_client(self, make_context) -> None:
        assert await resolve_variable("TC_Publisher", "custom_code", make_context()) == "GGL"

    @pytest.mark.anyio
    async def test_custom_utm_without_custom_code_falls_back(self, make_context) -> None:
        assert await resolve_variable("PL_Market_Details", "custom_utm", make_context()) == "QC"

    @pytest.mark.anyio
    async def test_open_format_returns_raw_text(self, make_context) -> None:
        assert await resolve_variable("CA_Campaign_Identifier", "open", make_context()) == "SPRING26"

    @pytest.mark.anyio
    async def test_non_string_value_is_stringified(self, make_context) -> None:
        assert await resolve_variable("TC_Media_Budget", "code", make_context()) == "1500"

    @pytest.mark.anyio
    @pytest.mark.parametrize("raw,expected", [
        (True, "true"),
        (False, "false"),
        (1500.0, "1500"),
        (12.5, "12.5"),
        (0, "0"),
    ])
    async def test_scalar_rendering(self, make_context, raw, expected: str) -> None:
        context = make_context(tactic=Tactic(TC_Market=raw))
        assert await resolve_variable("TC_Market", "open", context) == expected

    @pytest.mark.anyio
    async def test_whole_float_in_code_format_renders_as_integer(self, make_context) -> None:
        context = make_context(tactic=Tactic(TC_Media_Budget=1500.0))
        assert await resolve_variable("TC_Media_Budget", "code", context) == "1500"

    @pytest.mark.anyio
    async def test_missing_value_is_empty(self, make_context) -> None:
        assert await resolve_variable("PL_Device", "code", make_context()) == ""

    @pytest.mark.anyio
    async def test_unknown_shortcode_is_empty(self, make_context) -> None:
        context = make_context(tactic=Tactic(TC_Publisher="does-not-exist"))
        assert await resolve_variable("TC_Publisher", "code", context) == ""

    @pytest.mark.anyio
    async def test_missing_parent_is_empty(self, make_context) -> None:
        context = make_context(campaign=None)
        assert await resolve_variable("CA_Campaign_Identifier", "open", context) == ""

    @pytest.mark.anyio
    async def test_client_defined_field(self, make_context) -> None:
        context = make_context(tactic=Tactic(TC_Custom_Region="Est"))
        assert await resolve_variable("TC_Custom_Region", "open", context) == "Est"

    @pytest.mark.anyio
    async def test_unknown_variable_logs_and_is_empty(self, make_context, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="adops.taxonomy.resolver"):
            assert await resolve_variable("XX_Mystery", "open", make_context()) == ""
        assert "XX_Mystery" in caplog.text


class TestManualVariables:
    @pytest.mark.anyio
    async def test_creative_variable_reads_creative(self, make_context, creative) -> None:
        context = make_context(creative=creative)
        assert await resolve_variable("CR_Label", "open", context, is_creative=True) == "Banner A"

    @pytest.mark.anyio
    async def test_creative_variable_outside_creative_reads_placement(
        self, make_context, creative,
    ) -> None:
        context = make_context(
            creative=creative, placement=Placement(CR_Label="From placement"),
        )
        assert await resolve_variable("CR_Label", "open", context) == "From placement"


class TestStoredOverrides:
    @pytest.mark.anyio
    async def test_open_override_wins_over_hierarchy(self, make_context) -> None:
        placement = Placement(
            PL_Market_Details="sc-qc",
            PL_Taxonomy_Values={"PL_Market_Details": TaxonomyValue(format="open", open_value="FOO")},
        )
        context = make_context(placement=placement)
        assert await resolve_variable("PL_Market_Details", "display_fr", context) == "FOO"

    @pytest.mark.anyio
    async def test_force_regeneration_bypasses_override(self, make_context) -> None:
        placement = Placement(
            PL_Market_Details="sc-qc",
            PL_Taxonomy_Values={"PL_Market_Details": TaxonomyValue(format="open", open_value="FOO")},
        )
        context = make_context(placement=placement, force_regeneration=True)
        assert await resolve_variable("PL_Market_Details", "display_fr", context) == "Québec"

    @pytest.mark.anyio
    async def test_shortcode_override_is_formatted(self, make_context) -> None:
        placement = Placement(
            PL_Taxonomy_Values={
                "PL_Market_Details": TaxonomyValue(shortcode_id="sc-meta", value="META"),
            },
        )
        context = make_context(placement=placement)
        # No English name: falls back to French.
        assert await resolve_variable("PL_Market_Details", "display_en", context) == "Méta"

    @pytest.mark.anyio
    async def test_plain_override_value(self, make_context) -> None:
        placement = Placement(
            PL_Label="Real", PL_Taxonomy_Values={"PL_Label": TaxonomyValue(value="Stored")},
        )
        context = make_context(placement=placement)
        assert await resolve_variable("PL_Label", "open", context) == "Stored"

    @pytest.mark.anyio
    async def test_open_override_without_value_is_empty(self, make_context) -> None:
        placement = Placement(
            PL_Label="Real", PL_Taxonomy_Values={"PL_Label": TaxonomyValue(format="open")},
        )
        assert await resolve_variable("PL_Label", "open", make_context(placement=placement)) == ""

    @pytest.mark.anyio
    async def test_parent_variables_ignore_override_map(self, make_context) -> None:
        placement = Placement(
            PL_Taxonomy_Values={"TC_Publisher": TaxonomyValue(format="open", open_value="X")},
        )
        context = make_context(placement=placement)
        assert await resolve_variable("TC_Publisher", "display_fr", context) == "Google"

    @pytest.mark.anyio
    async def test_creative_override_map_used_for_creatives(self, make_context) -> None:
        creative = Creative(
            CR_Label="Banner",
            CR_Taxonomy_Values={"CR_Label": TaxonomyValue(format="open", open_value="OVR")},
        )
        context = make_context(creative=creative)
        assert await resolve_variable("CR_Label", "open", context, is_creative=True) == "OVR"

    @pytest.mark.anyio
    async def test_override_map_accepts_stored_aliases(self, make_context) -> None:
        placement = Placement.model_validate({
            "PL_Taxonomy_Values": {
                "PL_Label": {"format": "open", "openValue": "Aliased"},
            },
        })
        assert await resolve_variable("PL_Label", "code", make_context(placement=placement)) == "Aliased"


class TestGenerateLevelString:
    @pytest.mark.anyio
    async def test_simple_variable(self, make_context) -> None:
        assert await generate_level_string("[TC_Publisher:display_fr]", make_context()) == "Google"

    @pytest.mark.anyio
    async def test_literals_are_kept(self, make_context) -> None:
        value = await generate_level_string(
            "[CA_Campaign_Identifier:open]_[TC_Publisher:code]-end", make_context(),
        )
        assert value == "SPRING26_GOOG-end"

    @pytest.mark.anyio
    async def test_group_drops_empty_member(self, make_context) -> None:
        context = make_context(placement=Placement(PL_Label="X"))
        assert await generate_level_string("<[PL_Label:open]_[PL_Device:open]>", context) == "X"

    @pytest.mark.anyio
    async def test_group_joins_members(self, make_context) -> None:
        context = make_context(placement=Placement(PL_Label="X", PL_Device="Y"))
        value = await generate_level_string("<[PL_Label:open]_[PL_Device:open]>", context)
        assert value == "X_Y"

    @pytest.mark.anyio
    async def test_group_keeps_whitespace_member(self, make_context) -> None:
        placement = Placement(
            PL_Label="L",
            PL_Taxonomy_Values={"PL_Device": TaxonomyValue(format="open", open_value=" ")},
        )
        context = make_context(placement=placement)
        value = await generate_level_string("<[PL_Label:open]_[PL_Device:open]>", context)
        assert value == "L_ "

    @pytest.mark.anyio
    @pytest.mark.parametrize("delimiter", ["_", " | ", "--", ""])
    async def test_fully_empty_group_collapses(self, make_context, delimiter: str) -> None:
        context = make_context(placement=Placement())
        template = f"a<[PL_Label:open]{delimiter}[PL_Device:open]>b"
        assert await generate_level_string(template, context) == "ab"

    @pytest.mark.anyio
    async def test_group_drops_placeholder_looking_values(self, make_context) -> None:
        context = make_context(placement=Placement(PL_Label="[raw]", PL_Device="D"))
        assert await generate_level_string("<[PL_Label:open]_[PL_Device:open]>", context) == "D"

    @pytest.mark.anyio
    async def test_group_with_shortcodes(self, make_context) -> None:
        value = await generate_level_string(
            "<[TC_Publisher:code]_[PL_Device:code]_[PL_Market_Details:code]>", make_context(),
        )
        assert value == "GOOG_QC"

    @pytest.mark.anyio
    async def test_malformed_tokens_are_literal(self, make_context) -> None:
        value = await generate_level_string("[oops]<[TC_Publisher:code]", make_context())
        assert value == "[oops]<GOOG"

    @pytest.mark.anyio
    async def test_empty_template(self, make_context) -> None:
        assert await generate_level_string("", make_context()) == ""

    @pytest.mark.anyio
    async def test_shortcode_read_once_per_pass(self, make_context, source) -> None:
        context = make_context()
        await generate_level_string(
            "[TC_Publisher:code]-[TC_Publisher:display_fr]-<[TC_Publisher:utm]>", context,
        )
        await generate_level_string("[TC_Publisher:custom_code]", context)
        assert source.reads[("shortcode", "shortcode123")] == 1
        assert source.reads[("custom_code", "client-1__shortcode123")] == 1

    @pytest.mark.anyio
    async def test_missing_shortcode_read_once_per_pass(self, make_context, source) -> None:
        context = make_context(tactic=Tactic(TC_Publisher="ghost"))
        value = await generate_level_string("[TC_Publisher:code][TC_Publisher:utm]", context)
        assert value == ""
        assert source.reads[("shortcode", "ghost")] == 1
