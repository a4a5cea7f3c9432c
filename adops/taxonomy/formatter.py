"""Render a shortcode in one of the taxonomy output formats."""

from adops.models.common import TaxonomyFormat
from adops.models.taxonomy import Shortcode


def format_shortcode_value(
    shortcode: Shortcode | None,
    custom_code: str | None,
    fmt: str,
) -> str:
    """Return the representation of ``shortcode`` requested by ``fmt``.

    Fallbacks: EN display → FR display; UTM → code; custom formats →
    the client's custom code first. Unknown formats render the FR display
    name. A missing shortcode always renders as ``''``.
    """
    if not shortcode:
        return ""

    if fmt == TaxonomyFormat.CODE:
        return shortcode.SH_Code or ""
    if fmt == TaxonomyFormat.DISPLAY_FR:
        return shortcode.SH_Display_Name_FR or ""
    if fmt == TaxonomyFormat.DISPLAY_EN:
        return shortcode.SH_Display_Name_EN or shortcode.SH_Display_Name_FR or ""
    if fmt == TaxonomyFormat.UTM:
        return shortcode.SH_Default_UTM or shortcode.SH_Code or ""
    if fmt == TaxonomyFormat.CUSTOM_UTM:
        return custom_code or shortcode.SH_Default_UTM or shortcode.SH_Code or ""
    if fmt == TaxonomyFormat.CUSTOM_CODE:
        return custom_code or shortcode.SH_Code or ""
    return shortcode.SH_Display_Name_FR or ""
