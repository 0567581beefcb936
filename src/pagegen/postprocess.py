"""
Table Post-Processors

Named, table-specific derivations applied to a row's property map after
extraction. A table config selects one by name (``postprocess: buildings_costs``).
"""

from typing import Callable, Dict, MutableMapping

PropertyMap = MutableMapping[str, str]

MAX_COST_SLOTS = 4


def building_with_icon(properties: PropertyMap, size: str = "64px") -> str:
    """Wiki file link to the icon followed by the building name."""
    name = properties.get("stringKey", "Unknown")
    icon = properties.get("icon", "")
    if icon and icon != "N/A":
        return f"[[File:{icon}.png|{size}]] {name}"
    return name


def buildings_costs(properties: PropertyMap) -> PropertyMap:
    """
    Combine cost1..4 / ct1..4 into constructionCost and add buildingWithIcon.

    constructionCost reads "Wood x5, Stone x2", or "None" when the building
    costs nothing.
    """
    costs = []
    for i in range(1, MAX_COST_SLOTS + 1):
        cost = properties.get(f"cost{i}")
        count = properties.get(f"ct{i}")
        if not cost or cost in ("N/A", "None"):
            continue
        if not count or count in ("N/A", "0", "0.00"):
            continue
        costs.append(f"{cost} x{count}")

    properties["constructionCost"] = ", ".join(costs) if costs else "None"
    properties["buildingWithIcon"] = building_with_icon(properties)
    return properties


POSTPROCESSORS: Dict[str, Callable[[PropertyMap], PropertyMap]] = {
    "buildings_costs": buildings_costs,
}


def get_postprocessor(name: str) -> Callable[[PropertyMap], PropertyMap]:
    """Look up a post-processor by name; KeyError lists the known names."""
    try:
        return POSTPROCESSORS[name]
    except KeyError:
        known = ", ".join(sorted(POSTPROCESSORS))
        raise KeyError(f"Unknown post-processor {name!r} (known: {known})") from None
