"""
Template Renderer

Renders scanned templates against property maps.

Two modes:
- Page: one output per row. Lines whose placeholders resolve empty are
  dropped together with the table-row separator that follows them, so a
  wiki infobox only shows rows the data actually fills in.
- Aggregate: the table row between the first ``|-`` and the next ``|-`` or
  ``|}`` is repeated once per data row, producing one overview page.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..localization import LocalizationIndex
from .scanner import Placeholder, TemplateLine, scan

logger = logging.getLogger(__name__)


ROW_SEPARATOR = "|-"
TABLE_END = "|}"

EMPTY_ARRAY = "[]"
ZERO_COST = "None x0"

# cost1..cost4 pair with ct1..ct4 on the same line
COST_KEY = re.compile(r'^cost.*\d$')
QUANTITY_KEY = re.compile(r'^ct.*\d$')


class TemplateError(Exception):
    """Template does not have the structure a render mode needs."""
    def __init__(self, message: str, name: str = "<template>"):
        self.name = name
        super().__init__(f"{name}: {message}")


# =============================================================================
# EMPTINESS POLICY
# =============================================================================

def is_quantity_key(key: str) -> bool:
    return key.startswith("ct")


def is_empty_value(value: Optional[str], key: str = "") -> bool:
    """
    True when a property value should suppress its template line.

    Empty means blank, "None", "N/A", "[]", a zero-quantity cost string, or
    "0"/"0.00" for quantity keys (ct1, ct2, ...).
    """
    if value is None or not value.strip():
        return True
    lowered = value.strip().lower()
    if lowered in ("none", "n/a", EMPTY_ARRAY):
        return True
    if ZERO_COST in value:
        return True
    if is_quantity_key(key) and value in ("0", "0.00"):
        return True
    return False


# =============================================================================
# TEMPLATE
# =============================================================================

@dataclass
class Template:
    """A scanned template. Rendering never mutates it."""
    name: str
    lines: List[TemplateLine]

    @classmethod
    def parse(cls, text: str, name: str = "<template>") -> "Template":
        return cls(name=name, lines=scan(text))

    def row_fragment(self) -> Tuple[int, int]:
        """
        Locate the repeatable row of an aggregate template.

        Returns (start, end): the fragment is lines[start:end], with the
        opening separator at start - 1.
        """
        start = -1
        for i, line in enumerate(self.lines):
            if start == -1:
                if line.is_row_separator:
                    start = i + 1
            elif line.is_row_separator or line.is_table_end:
                return start, i

        raise TemplateError("could not find a |- delimited row in the template", self.name)


def substitute_line(line: TemplateLine, properties: Mapping[str, str]) -> str:
    """Render one line; unknown keys are left as written."""
    parts = []
    for segment in line.segments:
        if isinstance(segment, Placeholder) and segment.key in properties:
            parts.append(properties[segment.key])
        else:
            parts.append(segment.text)
    return "".join(parts)


def localize_properties(properties: Mapping[str, str],
                        localization: Optional[LocalizationIndex]) -> Dict[str, str]:
    """Copy of properties with every value passed through the index."""
    if localization is None:
        return dict(properties)
    return {key: localization.localize(value) for key, value in properties.items()}


def should_drop_line(line: TemplateLine, properties: Mapping[str, str]) -> bool:
    """Decide whether a line's placeholders resolve empty."""
    keys = line.placeholders
    if not keys:
        return False

    cost_key = next((k for k in keys if COST_KEY.match(k)), None)
    quantity_key = next((k for k in keys if QUANTITY_KEY.match(k)), None)
    if cost_key is not None and quantity_key is not None:
        return (is_empty_value(properties.get(cost_key, ""), cost_key)
                or is_empty_value(properties.get(quantity_key, ""), quantity_key))

    return any(
        key in properties and is_empty_value(properties[key], key)
        for key in keys
    )


# =============================================================================
# RENDER MODES
# =============================================================================

def render_page(template: Template, properties: Mapping[str, str],
                localization: Optional[LocalizationIndex] = None) -> str:
    """Render one row's page."""
    values = localize_properties(properties, localization)
    lines = template.lines
    out = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if should_drop_line(line, values):
            if i + 1 < len(lines) and lines[i + 1].is_row_separator:
                i += 1
        else:
            out.append(substitute_line(line, values))
        i += 1

    return "\n".join(out)


def render_fragment(template: Template, properties: Mapping[str, str],
                    localization: Optional[LocalizationIndex] = None) -> str:
    """Render the repeatable row of an aggregate template for one data row."""
    start, end = template.row_fragment()
    values = localize_properties(properties, localization)
    return "\n".join(substitute_line(line, values) for line in template.lines[start:end])


def render_aggregate(template: Template, rows: Iterable[Mapping[str, str]],
                     localization: Optional[LocalizationIndex] = None) -> str:
    """
    Render all rows into one page.

    The output is the template header, then ``|-`` and the rendered row for
    each data row, then the template footer from its closing ``|}``.
    """
    start, end = template.row_fragment()

    out = [line.raw for line in template.lines[:start - 1]]
    for properties in rows:
        out.append(ROW_SEPARATOR)
        out.append(render_fragment(template, properties, localization))

    footer = next((i for i in range(end, len(template.lines))
                   if template.lines[i].is_table_end), None)
    if footer is None:
        out.append(TABLE_END)
    else:
        out.extend(line.raw for line in template.lines[footer:])

    return "\n".join(out)
