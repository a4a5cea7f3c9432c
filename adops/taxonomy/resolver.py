"""Variable resolution and level-string generation.

A variable is resolved in this order:

1. Unless ``force_regeneration`` is set, a manual value stored on the
   item (``PL_Taxonomy_Values`` / ``CR_Taxonomy_Values``) wins for
   placement-level and manual variables.
2. Otherwise the value is read from the hierarchy level the variable
   belongs to.
3. Empty values render as ``''``; string values requested in a shortcode
   format are treated as shortcode ids and rendered through the cache.

The only I/O goes through ``context.caches``.
"""

import logging
from dataclasses import dataclass
from typing import Any

from adops.models.common import FieldSource
from adops.models.hierarchy import Campaign, Creative, Placement, Tactic, TaxonomyValue
from adops.taxonomy.fields import (
    format_requires_shortcode,
    get_field_source,
    is_creative_variable,
)
from adops.taxonomy.formatter import format_shortcode_value
from adops.taxonomy.lookups import LookupCache
from adops.taxonomy.parser import Group, Literal, Variable, parse_template

logger = logging.getLogger(__name__)

_PARENT_SOURCES = frozenset({FieldSource.CAMPAIGN, FieldSource.TACTIQUE})


@dataclass(frozen=True)
class ResolutionContext:
    """Everything one resolution pass reads from."""

    client_id: str
    campaign: Campaign | None
    tactic: Tactic | None
    placement: Placement | None
    caches: LookupCache
    creative: Creative | None = None
    force_regeneration: bool = False


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _stringify(value: Any) -> str:
    """Render a scalar as tag text: ``true``/``false``, ``1500`` for ``1500.0``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


async def _render_shortcode(shortcode_id: str, fmt: str, context: ResolutionContext) -> str:
    shortcode = await context.caches.shortcode(shortcode_id)
    if shortcode is None:
        return ""
    custom_code = await context.caches.custom_code(context.client_id, shortcode_id)
    return format_shortcode_value(shortcode, custom_code, fmt)


def _stored_value(
    variable_name: str,
    source: FieldSource | None,
    context: ResolutionContext,
    is_creative: bool,
) -> TaxonomyValue | None:
    if source in _PARENT_SOURCES:
        return None
    if is_creative and context.creative is not None:
        return context.creative.CR_Taxonomy_Values.get(variable_name)
    if context.placement is not None:
        return context.placement.PL_Taxonomy_Values.get(variable_name)
    return None


async def _resolve_stored(
    stored: TaxonomyValue, fmt: str, context: ResolutionContext,
) -> str:
    if stored.is_open:
        return stored.open_value or ""
    if stored.shortcode_id:
        return await _render_shortcode(stored.shortcode_id, fmt, context)
    return "" if _is_empty(stored.value) else _stringify(stored.value)


def _source_value(
    variable_name: str,
    source: FieldSource | None,
    context: ResolutionContext,
    is_creative: bool,
) -> Any:
    if source == FieldSource.CAMPAIGN:
        return context.campaign.field(variable_name) if context.campaign else None
    if source == FieldSource.TACTIQUE:
        return context.tactic.field(variable_name) if context.tactic else None
    if source == FieldSource.PLACEMENT:
        return context.placement.field(variable_name) if context.placement else None
    if source == FieldSource.MANUAL:
        if is_creative and is_creative_variable(variable_name) and context.creative:
            return context.creative.field(variable_name)
        return context.placement.field(variable_name) if context.placement else None

    logger.warning("Unknown source for taxonomy variable %s", variable_name)
    return None


async def resolve_variable(
    variable_name: str,
    fmt: str,
    context: ResolutionContext,
    is_creative: bool = False,
) -> str:
    """Resolve one ``[variable_name:fmt]`` token to its text."""
    source = get_field_source(variable_name)

    if not context.force_regeneration:
        stored = _stored_value(variable_name, source, context, is_creative)
        if stored is not None:
            return await _resolve_stored(stored, fmt, context)

    raw_value = _source_value(variable_name, source, context, is_creative)
    if _is_empty(raw_value):
        return ""

    if isinstance(raw_value, str) and format_requires_shortcode(fmt):
        return await _render_shortcode(raw_value, fmt, context)

    return _stringify(raw_value)


async def _resolve_group(group: Group, context: ResolutionContext, is_creative: bool) -> str:
    values: list[str] = []
    for variable in group.variables:
        resolved = await resolve_variable(variable.name, variable.format, context, is_creative)
        # Unresolved placeholders and empty values are dropped so no delimiter dangles.
        if resolved and not resolved.startswith("["):
            values.append(resolved)
    return group.delimiter.join(values)


async def generate_level_string(
    template: str,
    context: ResolutionContext,
    is_creative: bool = False,
) -> str:
    """Expand one level template against ``context``.

    Segments are resolved sequentially, in template order.
    """
    if not template:
        return ""

    parts: list[str] = []
    for node in parse_template(template):
        if isinstance(node, Literal):
            parts.append(node.text)
        elif isinstance(node, Variable):
            parts.append(await resolve_variable(node.name, node.format, context, is_creative))
        else:
            parts.append(await _resolve_group(node, context, is_creative))
    return "".join(parts)
