"""
Localization Index

Maps raw source text to its localized display text, built once from the
game's language table (``/Game/Data/TextDB/Loc_En`` for English).

Each language table row is keyed by the raw text and stores the display text
in a ``Text`` (or ``Value``) member. The stored value comes in several
shapes, so the shape is decided once when the index is built:

    TextValue            exported FText           {"Text": {"SourceString": "Wheat", ...}}
    StringPropertyValue  string property object   {"Text": {"Value": "Wheat"}}
    RawValue             anything else            {"Text": "Wheat"}

Other languages work by pointing the configuration at another table
(``Loc_De`` for German).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from .values import ftext_string, is_ftext, stringify

logger = logging.getLogger(__name__)


# Members holding the display text on a language table row, in priority order
TEXT_MEMBERS = ("Text", "Value")

# Members a string property object may carry its value under
STRING_PROPERTY_MEMBERS = ("Value", "Text", "Content")


@dataclass(frozen=True)
class TextValue:
    """Display text taken from an FText."""
    text: str

    def resolve(self) -> Optional[str]:
        return self.text


@dataclass(frozen=True)
class StringPropertyValue:
    """Display text taken from a string property object."""
    value: str

    def resolve(self) -> Optional[str]:
        return self.value


@dataclass(frozen=True)
class RawValue:
    """Any other stored value; resolves to its textual form."""
    value: Any

    def resolve(self) -> Optional[str]:
        if self.value is None:
            return None
        return stringify(self.value)


LocalizedPayload = Union[TextValue, StringPropertyValue, RawValue]


def _member(row_value: Any, members: Tuple[str, ...]) -> Any:
    if not isinstance(row_value, dict):
        return None
    for member in members:
        if row_value.get(member) is not None:
            return row_value[member]
    return None


def payload_for_row(row_value: Any) -> Optional[LocalizedPayload]:
    """
    Decide which payload variant a language table row carries.

    Resolution order: FText, string property object, direct string,
    any stored value. Returns None when the row holds nothing usable.
    """
    if isinstance(row_value, str):
        return RawValue(row_value)

    stored = _member(row_value, TEXT_MEMBERS)
    if stored is None:
        return None

    if is_ftext(stored):
        text = ftext_string(stored)
        if text is not None:
            return TextValue(text)

    if isinstance(stored, dict):
        for member in STRING_PROPERTY_MEMBERS:
            value = stored.get(member)
            if isinstance(value, str):
                return StringPropertyValue(value)

    return RawValue(stored)


class LocalizationIndex:
    """
    Read-only lookup from raw text to localized text.

    Usage:
        index = LocalizationIndex.from_rows(provider.load_table(path))
        found, text = index.lookup("Crop_Wheat_Name")
    """

    def __init__(self, entries: Optional[Dict[str, LocalizedPayload]] = None):
        self._entries: Dict[str, LocalizedPayload] = dict(entries or {})

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[str, Any]]) -> "LocalizationIndex":
        """Index (row name, row value) pairs on their exact row name."""
        entries = {}
        unusable = 0
        for key, row_value in rows:
            payload = payload_for_row(row_value)
            if payload is None:
                unusable += 1
                continue
            entries[key] = payload

        if unusable:
            logger.debug(f"{unusable} language rows had no text value")
        logger.info(f"Localization index built with {len(entries)} entries")
        return cls(entries)

    @classmethod
    def empty(cls) -> "LocalizationIndex":
        """Index that never finds anything."""
        return cls()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def lookup(self, key: str) -> Tuple[bool, str]:
        """Return (found, localized text); text is empty when not found."""
        payload = self._entries.get(key)
        if payload is None:
            return False, ""

        text = payload.resolve()
        if text is None:
            return False, ""
        return True, text

    def localize(self, value: str) -> str:
        """Localized text for value if indexed, else value unchanged."""
        found, text = self.lookup(value)
        return text if found else value
