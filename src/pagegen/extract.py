"""
Field Extractor

Turns the raw values of a DataTable row into the canonical strings that get
substituted into templates. Dispatch is driven by the declared type from the
struct definition, normalized into a closed set of field kinds.

Nothing raises out of this module: a value that cannot be converted becomes
the "N/A" sentinel (or an empty string for arrays) and a warning is logged.
"""

import logging
import re
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Mapping, Optional

from .localization import LocalizationIndex
from .schema import StructField
from .values import ftext_string, is_ftext, is_number, stringify

logger = logging.getLogger(__name__)


NOT_AVAILABLE = "N/A"

# Array fields whose elements are localization keys
LOCALIZED_ARRAY_FIELDS = {"tooltiptags"}

# TArray<FName>, TSet<FString>, Container<T>; TSoftObjectPtr<T> is not a container
CONTAINER_TYPE = re.compile(r'^(TArray|TSet|Container)<.+>$', re.IGNORECASE)


class FieldKind(Enum):
    """Supported kinds of struct fields."""
    FLOAT = auto()
    INT = auto()
    BYTE = auto()
    BOOL = auto()
    NAME = auto()
    STRING = auto()
    ARRAY = auto()
    COLOR = auto()
    GENERIC = auto()     # Unknown type names: best-effort conversion


KIND_BY_TYPE: Dict[str, FieldKind] = {
    "float": FieldKind.FLOAT,
    "double": FieldKind.FLOAT,
    "int": FieldKind.INT,
    "int32": FieldKind.INT,
    "int64": FieldKind.INT,
    "uint": FieldKind.INT,
    "uint32": FieldKind.INT,
    "uint64": FieldKind.INT,
    "byte": FieldKind.BYTE,
    "uint8": FieldKind.BYTE,
    "bool": FieldKind.BOOL,
    "boolean": FieldKind.BOOL,
    "fname": FieldKind.NAME,
    "name": FieldKind.NAME,
    "string": FieldKind.STRING,
    "fstring": FieldKind.STRING,
    "ftext": FieldKind.STRING,
    "text": FieldKind.STRING,
    "fcolor": FieldKind.COLOR,
    "flinearcolor": FieldKind.COLOR,
    "color": FieldKind.COLOR,
}


def field_kind(declared_type: str) -> FieldKind:
    """Normalize a declared type name into a FieldKind."""
    declared_type = declared_type.strip()
    if CONTAINER_TYPE.match(declared_type):
        return FieldKind.ARRAY
    return KIND_BY_TYPE.get(declared_type.lower(), FieldKind.GENERIC)


class ConversionError(Exception):
    """A raw value does not fit its declared kind."""
    def __init__(self, field_name: str, kind: FieldKind, value: Any):
        self.field_name = field_name
        self.kind = kind
        super().__init__(f"{field_name}: cannot read {type(value).__name__} as {kind.name}")


# =============================================================================
# CONVERTERS
# =============================================================================

def _as_float(value: Any) -> Optional[str]:
    if is_number(value):
        return f"{float(value):.2f}"
    return None


def _as_int(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return None


def _as_bool(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value)
    return None


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if is_ftext(value):
        return ftext_string(value)
    return None


def convert_float(value, field_name, localization):
    return _as_float(value)


def convert_int(value, field_name, localization):
    return _as_int(value)


def convert_byte(value, field_name, localization):
    # Byte enums export as their member name
    if isinstance(value, str):
        return value
    return _as_int(value)


def convert_bool(value, field_name, localization):
    return _as_bool(value)


def convert_name(value, field_name, localization):
    return _as_text(value)


def convert_string(value, field_name, localization):
    return _as_text(value)


def convert_color(value, field_name, localization):
    if isinstance(value, dict):
        hex_value = value.get("Hex")
        if isinstance(hex_value, str) and hex_value:
            return hex_value
        if all(c in value for c in ("R", "G", "B", "A")):
            return "(R={R},G={G},B={B},A={A})".format(**value)
    text = stringify(value)
    return text or None


def convert_array(value, field_name, localization):
    if not isinstance(value, list):
        # Some exports flatten arrays to "[a, b]"
        text = stringify(value)
        if text.startswith('[') and text.endswith(']'):
            return text.strip('[]').strip()
        return text

    items = []
    for element in value:
        text = _as_text(element)
        if text is None:
            text = stringify(element)
        if not text or text == "None":
            continue
        items.append(text)

    if localization is not None and field_name.lower() in LOCALIZED_ARRAY_FIELDS:
        items = [localization.localize(item) for item in items]

    return ", ".join(items)


def convert_generic(value, field_name, localization):
    """Try string, name, float, integer, boolean, byte, then any text form."""
    for attempt in (_as_text, _as_float, _as_int, _as_bool):
        text = attempt(value)
        if text is not None:
            return text
    return stringify(value)


Converter = Callable[[Any, str, Optional[LocalizationIndex]], Optional[str]]

CONVERTERS: Dict[FieldKind, Converter] = {
    FieldKind.FLOAT: convert_float,
    FieldKind.INT: convert_int,
    FieldKind.BYTE: convert_byte,
    FieldKind.BOOL: convert_bool,
    FieldKind.NAME: convert_name,
    FieldKind.STRING: convert_string,
    FieldKind.ARRAY: convert_array,
    FieldKind.COLOR: convert_color,
    FieldKind.GENERIC: convert_generic,
}


# =============================================================================
# PUBLIC API
# =============================================================================

def extract_value(row: Mapping[str, Any], field_name: str, declared_type: str,
                  localization: Optional[LocalizationIndex] = None) -> str:
    """
    Extract one field of a row as its canonical string.

    Missing or unconvertible values give "N/A"; arrays give "" instead.
    """
    kind = field_kind(declared_type)
    fallback = "" if kind is FieldKind.ARRAY else NOT_AVAILABLE

    try:
        if field_name not in row or row[field_name] is None:
            return fallback

        value = row[field_name]
        text = CONVERTERS[kind](value, field_name, localization)
        if text is None:
            raise ConversionError(field_name, kind, value)
        return text
    except Exception as e:
        logger.warning(f"Error getting {kind.name.lower()} value for {field_name}: {e}")
        return fallback


def extract_properties(row: Mapping[str, Any], fields: List[StructField],
                       localization: Optional[LocalizationIndex] = None) -> Dict[str, str]:
    """Build the property map for one row from its struct fields."""
    return {
        f.template_key: extract_value(row, f.name, f.declared_type, localization)
        for f in fields
    }


def extract_generic_properties(row: Mapping[str, Any]) -> Dict[str, str]:
    """Fallback without a struct definition: every property, lower-cased key."""
    properties = {}
    for name, value in row.items():
        try:
            properties[name.lower()] = stringify(value)
        except Exception as e:
            logger.warning(f"Error extracting property {name}: {e}")
            properties[name.lower()] = NOT_AVAILABLE
    return properties
