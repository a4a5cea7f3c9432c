"""Taxonomy template parser.

A template is a sequence of three kinds of segment:

- literal text, copied verbatim;
- a variable ``[name:format]``;
- a group ``<...>`` holding variables separated by a delimiter, which
  collapses entirely when none of its variables resolves.

``parse_template`` turns a template into a flat tuple of nodes. Anything
that does not form a complete token (an unclosed ``<`` or ``[``, ``[]``,
a bracket without ``name:format``) is kept as literal text.

Deterministic, no I/O.
"""

from dataclasses import dataclass
from functools import lru_cache

from adops.models.common import TaxonomyFormat
from adops.models.taxonomy import (
    ParsedTaxonomyStructure,
    ParsedTaxonomyVariable,
)
from adops.taxonomy.fields import get_field_source, is_known_variable

_VALID_FORMATS = frozenset(fmt.value for fmt in TaxonomyFormat)


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Variable:
    name: str
    format: str


@dataclass(frozen=True)
class Group:
    """A ``<...>`` cluster; ``raw`` is the content between the angle brackets."""

    variables: tuple[Variable, ...]
    delimiter: str
    raw: str


Node = Literal | Variable | Group


def _parse_variable(inner: str) -> Variable | None:
    """Parse the content of ``[...]`` as ``name:format``."""
    name, sep, fmt = inner.partition(":")
    if not sep or not name or not fmt:
        return None
    return Variable(name=name, format=fmt)


def _scan_brackets(text: str) -> list[tuple[int, int, Variable]]:
    """Locate variable tokens in ``text`` as (start, end, variable)."""
    found: list[tuple[int, int, Variable]] = []
    pos = 0
    while True:
        start = text.find("[", pos)
        if start == -1:
            return found
        end = text.find("]", start + 1)
        if end == -1:
            return found
        variable = _parse_variable(text[start + 1:end])
        if variable is None:
            pos = start + 1
            continue
        found.append((start, end + 1, variable))
        pos = end + 1


def _parse_group(inner: str) -> Node:
    tokens = _scan_brackets(inner)
    if not tokens:
        return Literal(inner)
    delimiter = ""
    if len(tokens) >= 2:
        delimiter = inner[tokens[0][1]:tokens[1][0]].rstrip()
    return Group(
        variables=tuple(variable for _, _, variable in tokens),
        delimiter=delimiter,
        raw=inner,
    )


@lru_cache(maxsize=1024)
def parse_template(template: str) -> tuple[Node, ...]:
    """Split ``template`` into literal, variable and group nodes, in order."""
    nodes: list[Node] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            nodes.append(Literal("".join(literal)))
            literal.clear()

    pos = 0
    length = len(template)
    while pos < length:
        char = template[pos]
        if char == "<":
            end = template.find(">", pos + 1)
            if end != -1:
                flush()
                nodes.append(_parse_group(template[pos + 1:end]))
                pos = end + 1
                continue
        elif char == "[":
            end = template.find("]", pos + 1)
            if end > pos + 1:
                variable = _parse_variable(template[pos + 1:end])
                if variable is not None:
                    flush()
                    nodes.append(variable)
                else:
                    literal.append(template[pos:end + 1])
                pos = end + 1
                continue
        literal.append(char)
        pos += 1

    flush()
    return tuple(nodes)


def iter_variables(template: str) -> list[Variable]:
    """Every variable of ``template`` in order of appearance, groups included."""
    variables: list[Variable] = []
    for node in parse_template(template):
        if isinstance(node, Variable):
            variables.append(node)
        elif isinstance(node, Group):
            variables.extend(node.variables)
    return variables


# ---------------------------------------------------------------------------
# Structure analysis
# ---------------------------------------------------------------------------


def _validate_variable(variable: Variable) -> str | None:
    if not is_known_variable(variable.name):
        return f"Unknown variable: {variable.name}"
    if variable.format not in _VALID_FORMATS:
        allowed = ", ".join(sorted(_VALID_FORMATS))
        return f"Format {variable.format} is not supported. Allowed formats: {allowed}"
    return None


def parse_taxonomy_structure(template: str, level: int = 1) -> ParsedTaxonomyStructure:
    """List the variables of a template and validate each one.

    A variable used with several formats appears once with all its formats.
    """
    result = ParsedTaxonomyStructure()
    if not template or not template.strip():
        result.is_valid = False
        result.errors.append("Taxonomy structure is empty.")
        return result

    by_name: dict[str, ParsedTaxonomyVariable] = {}
    seen: set[tuple[str, str]] = set()
    for variable in iter_variables(template):
        key = (variable.name, variable.format)
        if key in seen:
            continue
        seen.add(key)

        error = _validate_variable(variable)
        existing = by_name.get(variable.name)
        if existing is not None:
            if variable.format not in existing.formats:
                existing.formats.append(variable.format)
        else:
            parsed = ParsedTaxonomyVariable(
                variable=variable.name,
                formats=[variable.format],
                source=get_field_source(variable.name),
                level=level,
                is_valid=error is None,
                error_message=error,
            )
            by_name[variable.name] = parsed
            result.variables.append(parsed)

        if error is not None:
            result.is_valid = False
            result.errors.append(f"{variable.name}: {error}")

    return result


def extract_unique_variables(
    structures: dict[str, ParsedTaxonomyStructure],
) -> list[ParsedTaxonomyVariable]:
    """Merge variables across structures, unioning their formats."""
    unique: dict[str, ParsedTaxonomyVariable] = {}
    for structure in structures.values():
        for variable in structure.variables:
            existing = unique.get(variable.variable)
            if existing is None:
                unique[variable.variable] = variable.model_copy(deep=True)
                continue
            for fmt in variable.formats:
                if fmt not in existing.formats:
                    existing.formats.append(fmt)
    return list(unique.values())
