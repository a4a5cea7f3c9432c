"""Taxonomy configuration models: templates, shortcodes, custom codes."""

from pydantic import ConfigDict, Field

from adops.models.common import AdOpsBase, FieldSource, TaxonomyFormat

LEVEL_COUNT = 6


class TaxonomyTemplate(AdOpsBase):
    """A client's taxonomy: up to six level templates."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    NA_Display_Name: str = ""
    NA_Description: str = ""
    NA_Standard: bool = False
    NA_Name_Level_1: str = ""
    NA_Name_Level_2: str = ""
    NA_Name_Level_3: str = ""
    NA_Name_Level_4: str = ""
    NA_Name_Level_5: str = ""
    NA_Name_Level_6: str = ""
    NA_Name_Level_1_Title: str = ""
    NA_Name_Level_2_Title: str = ""
    NA_Name_Level_3_Title: str = ""
    NA_Name_Level_4_Title: str = ""
    NA_Name_Level_5_Title: str = ""
    NA_Name_Level_6_Title: str = ""

    def level(self, number: int) -> str:
        """Template string for level ``number`` (1-based)."""
        if not 1 <= number <= LEVEL_COUNT:
            msg = f"Taxonomy level must be between 1 and {LEVEL_COUNT}, got {number}."
            raise ValueError(msg)
        return getattr(self, f"NA_Name_Level_{number}") or ""


class Shortcode(AdOpsBase):
    """Globally shared lookup entry."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    SH_Code: str = ""
    SH_Display_Name_FR: str = ""
    SH_Display_Name_EN: str | None = None
    SH_Default_UTM: str | None = None


class CustomCode(AdOpsBase):
    """Client-scoped override of a shortcode's textual value."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    shortcode_id: str = Field(alias="shortcodeId")
    custom_code: str = Field(default="", alias="customCode")


# ---------------------------------------------------------------------------
# Template analysis
# ---------------------------------------------------------------------------


class ParsedTaxonomyVariable(AdOpsBase):
    """One variable found in a template, with every format it is used in."""

    variable: str
    formats: list[TaxonomyFormat | str] = Field(default_factory=list)
    source: FieldSource | None = None
    level: int = 1
    is_valid: bool = True
    error_message: str | None = None


class ParsedTaxonomyStructure(AdOpsBase):
    """Variables and validation errors of one template."""

    variables: list[ParsedTaxonomyVariable] = Field(default_factory=list)
    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
