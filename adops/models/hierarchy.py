"""Media plan hierarchy models: Campaign, Tactic, Placement, Creative.

Known fields are declared so the resolver reads them through typed
attributes. Fields a client defines in its own templates (custom
dimensions and the like) land in ``model_extra`` and are read through the
same ``field()`` accessor.
"""

from typing import Any

from pydantic import ConfigDict, Field

from adops.models.common import AdOpsBase

# Values stored on hierarchy documents are free-form scalars.
FieldValue = str | int | float | bool | None


class TaxonomyValue(AdOpsBase):
    """Manual value stored on a placement/creative for one taxonomy variable.

    Three shapes are accepted: an open value (``format == "open"``), a
    shortcode reference, or a plain value.
    """

    format: str | None = None
    open_value: str | None = Field(default=None, alias="openValue")
    shortcode_id: str | None = Field(default=None, alias="shortcodeId")
    value: FieldValue = None

    @property
    def is_open(self) -> bool:
        return self.format == "open"


class HierarchyEntity(AdOpsBase):
    """Common base for hierarchy documents."""

    model_config = ConfigDict(extra="allow")

    id: str = ""

    def field(self, name: str) -> Any:
        """Return a declared or client-defined field, ``None`` if absent."""
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name)


class Campaign(HierarchyEntity):
    CA_Name: FieldValue = None
    CA_Campaign_Identifier: FieldValue = None
    CA_Division: FieldValue = None
    CA_Quarter: FieldValue = None
    CA_Year: FieldValue = None
    CA_Custom_Dim_1: FieldValue = None
    CA_Custom_Dim_2: FieldValue = None
    CA_Custom_Dim_3: FieldValue = None
    CA_Billing_ID: FieldValue = None
    CA_PO: FieldValue = None
    CA_Currency: FieldValue = None
    CA_Start_Date: FieldValue = None
    CA_End_Date: FieldValue = None


class Tactic(HierarchyEntity):
    TC_Label: FieldValue = None
    TC_Publisher: FieldValue = None
    TC_Objective: FieldValue = None
    TC_LOB: FieldValue = None
    TC_Media_Type: FieldValue = None
    TC_Buying_Method: FieldValue = None
    TC_Inventory: FieldValue = None
    TC_Market: FieldValue = None
    TC_Language: FieldValue = None
    TC_Format: FieldValue = None
    TC_Placement: FieldValue = None
    TC_Custom_Dim_1: FieldValue = None
    TC_Custom_Dim_2: FieldValue = None
    TC_Custom_Dim_3: FieldValue = None
    TC_Start_Date: FieldValue = None
    TC_End_Date: FieldValue = None
    # CM360 metrics
    TC_Media_Budget: FieldValue = None
    TC_Buy_Currency: FieldValue = None
    TC_CM360_Rate: FieldValue = None
    TC_CM360_Volume: FieldValue = None
    TC_Buy_Type: FieldValue = None


class Placement(HierarchyEntity):
    PL_Label: FieldValue = None
    PL_Taxonomy_Tags: str | None = None
    PL_Taxonomy_Platform: str | None = None
    PL_Taxonomy_MediaOcean: str | None = None
    PL_Taxonomy_Values: dict[str, TaxonomyValue] = Field(default_factory=dict)
    PL_Tag_Type: FieldValue = None
    PL_Tag_Start_Date: FieldValue = None
    PL_Tag_End_Date: FieldValue = None
    PL_Rotation_Type: FieldValue = None
    PL_Floodlight: FieldValue = None
    PL_Third_Party_Measurement: FieldValue = None
    PL_VPAID: FieldValue = None
    PL_Tag_1: FieldValue = None
    PL_Tag_2: FieldValue = None
    PL_Tag_3: FieldValue = None
    PL_Tag_4: FieldValue = None


class Creative(HierarchyEntity):
    CR_Label: FieldValue = None
    CR_Taxonomy_Tags: str | None = None
    CR_Taxonomy_Platform: str | None = None
    CR_Taxonomy_MediaOcean: str | None = None
    CR_Taxonomy_Values: dict[str, TaxonomyValue] = Field(default_factory=dict)
    CR_Tag_Start_Date: FieldValue = None
    CR_Tag_End_Date: FieldValue = None
    CR_Rotation_Weight: FieldValue = None
    CR_Tag_5: FieldValue = None
    CR_Tag_6: FieldValue = None
