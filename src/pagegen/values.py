"""
Exported Value Shapes

Helpers for the value shapes found in JSON exports of DataTable rows.

Primitive properties export as JSON scalars. A few engine types export as
objects:

    FText          {"Namespace": "", "Key": "...", "SourceString": "Wheat", "LocalizedString": "Wheat"}
                   {"CultureInvariantString": "Wheat"}
    FColor         {"R": 255, "G": 128, "B": 0, "A": 255, "Hex": "FF8000"}
    Soft object    {"AssetPathName": "/Game/UI/Icons/Icon_wheat.Icon_wheat", "SubPathString": ""}
    Object ref     {"ObjectName": "Texture2D'Icon_wheat'", "ObjectPath": "/Game/UI/Icons/Icon_wheat.0"}
"""

from typing import Any, Optional


FTEXT_MEMBERS = ("LocalizedString", "SourceString", "CultureInvariantString")


def is_number(value: Any) -> bool:
    """True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_ftext(value: Any) -> bool:
    """True for an exported FText object."""
    return isinstance(value, dict) and any(m in value for m in FTEXT_MEMBERS)


def ftext_string(value: dict) -> Optional[str]:
    """Display string of an exported FText, or None if it carries none."""
    for member in FTEXT_MEMBERS:
        text = value.get(member)
        if isinstance(text, str):
            return text
    return None


def asset_reference(value: Any) -> Optional[str]:
    """Asset path carried by a soft/hard object reference, if any."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for member in ("AssetPathName", "ObjectPath"):
            path = value.get(member)
            if isinstance(path, str) and path and path != "None":
                return path
    return None


def stringify(value: Any) -> str:
    """
    Best-effort text form of any exported value.

    Mirrors how the engine types print themselves: FText as its string,
    references as their path, numbers with two decimals, lists as
    comma-joined items.
    """
    if value is None:
        return "N/A"
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value
    if is_number(value):
        return f"{value:.2f}" if isinstance(value, float) else str(value)
    if isinstance(value, list):
        return ", ".join(stringify(item) for item in value)
    if isinstance(value, dict):
        if is_ftext(value):
            text = ftext_string(value)
            if text is not None:
                return text
        path = asset_reference(value)
        if path is not None:
            return path
        if "AssetPathName" in value or "ObjectPath" in value:
            # Null reference
            return "None"
        parts = [f"{k}={stringify(v)}" for k, v in value.items()]
        return "(" + ",".join(parts) + ")"
    return str(value)
