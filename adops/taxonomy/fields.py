"""Static configuration of taxonomy variables.

Maps every known variable to the hierarchy level it is read from, and
lists the entity fields each taxonomy type reads and writes.
"""

from adops.models.common import FieldSource, TaxonomyFormat, TaxonomyType

_CAMPAIGN_VARIABLES = (
    "CA_Campaign_Identifier",
    "CA_Division",
    "CA_Quarter",
    "CA_Year",
    "CA_Custom_Dim_1",
    "CA_Custom_Dim_2",
    "CA_Custom_Dim_3",
    "CA_Billing_ID",
    "CA_PO",
    "CA_Budget",
    "CA_Currency",
    "CA_Start_Date",
    "CA_End_Date",
)

_TACTIQUE_VARIABLES = (
    "TC_Publisher",
    "TC_Objective",
    "TC_LOB",
    "TC_Media_Type",
    "TC_Buying_Method",
    "TC_Custom_Dim_1",
    "TC_Custom_Dim_2",
    "TC_Custom_Dim_3",
    "TC_Inventory",
    "TC_Market",
    "TC_Language",
    "TC_Media_Objective",
    "TC_Kpi",
    "TC_Unit_Type",
    "TC_Budget",
    "TC_Currency",
    "TC_Billing_ID",
    "TC_PO",
    "TC_Start_Date",
    "TC_End_Date",
    "TC_Format",
    "TC_Placement",
)

_PLACEMENT_VARIABLES = (
    "PL_Label",
    "PL_Audience_Behaviour",
    "PL_Audience_Demographics",
    "PL_Audience_Engagement",
    "PL_Audience_Interest",
    "PL_Audience_Other",
    "PL_Creative_Grouping",
    "PL_Device",
    "PL_Channel",
    "PL_Format",
    "PL_Language",
    "PL_Market_Details",
    "PL_Product",
    "PL_Segment_Open",
    "PL_Tactic_Category",
    "PL_Targeting",
    "PL_Placement_Location",
    "PL_Custom_Dim_1",
    "PL_Custom_Dim_2",
    "PL_Custom_Dim_3",
)

_MANUAL_VARIABLES = (
    "CR_Label",
    "CR_Audience",
    "CR_CTA",
    "CR_Format_Details",
    "CR_Offer",
    "CR_Plateform_Name",
    "CR_Primary_Product",
    "CR_URL",
    "CR_Version",
    "CR_Custom_Dim_1",
    "CR_Custom_Dim_2",
    "CR_Custom_Dim_3",
)

VARIABLE_SOURCES: dict[str, FieldSource] = {
    **{name: FieldSource.CAMPAIGN for name in _CAMPAIGN_VARIABLES},
    **{name: FieldSource.TACTIQUE for name in _TACTIQUE_VARIABLES},
    **{name: FieldSource.PLACEMENT for name in _PLACEMENT_VARIABLES},
    **{name: FieldSource.MANUAL for name in _MANUAL_VARIABLES},
}

# Client-defined variables outside the table are placed by prefix.
_PREFIX_SOURCES: tuple[tuple[str, FieldSource], ...] = (
    ("CA_", FieldSource.CAMPAIGN),
    ("TC_", FieldSource.TACTIQUE),
    ("PL_", FieldSource.PLACEMENT),
    ("CR_", FieldSource.MANUAL),
)

SHORTCODE_FORMATS: frozenset[TaxonomyFormat] = frozenset(
    fmt for fmt in TaxonomyFormat if fmt != TaxonomyFormat.OPEN
)

PLACEMENT_LEVELS: tuple[int, ...] = (1, 2, 3, 4)
CREATIVE_LEVELS: tuple[int, ...] = (5, 6)

# Entity field holding the template-set id, per taxonomy type.
PLACEMENT_TEMPLATE_FIELDS: dict[TaxonomyType, str] = {
    TaxonomyType.TAGS: "PL_Taxonomy_Tags",
    TaxonomyType.PLATFORM: "PL_Taxonomy_Platform",
    TaxonomyType.MEDIAOCEAN: "PL_Taxonomy_MediaOcean",
}
CREATIVE_TEMPLATE_FIELDS: dict[TaxonomyType, str] = {
    TaxonomyType.TAGS: "CR_Taxonomy_Tags",
    TaxonomyType.PLATFORM: "CR_Taxonomy_Platform",
    TaxonomyType.MEDIAOCEAN: "CR_Taxonomy_MediaOcean",
}

# Output field infix, e.g. PL_Tag_1, PL_Plateforme_1, PL_MO_1.
OUTPUT_FIELD_NAMES: dict[TaxonomyType, str] = {
    TaxonomyType.TAGS: "Tag",
    TaxonomyType.PLATFORM: "Plateforme",
    TaxonomyType.MEDIAOCEAN: "MO",
}


def get_field_source(variable_name: str) -> FieldSource | None:
    """Source of ``variable_name``, or ``None`` for an unknown variable."""
    source = VARIABLE_SOURCES.get(variable_name)
    if source is not None:
        return source
    for prefix, prefix_source in _PREFIX_SOURCES:
        if variable_name.startswith(prefix):
            return prefix_source
    return None


def is_known_variable(variable_name: str) -> bool:
    return get_field_source(variable_name) is not None


def is_creative_variable(variable_name: str) -> bool:
    return variable_name.startswith("CR_")


def format_requires_shortcode(fmt: str) -> bool:
    """True when ``fmt`` is rendered from a shortcode document."""
    return fmt in SHORTCODE_FORMATS
