"""
Struct Definition Reader

Parses the lightweight struct definitions that describe a DataTable row:

    ---@class FCropMasterSyncData
    ---@field StringKey FName
    ---@field GrowthTime float
    ---@field TooltipTags TArray<FName>

Only ``---@field`` lines matter; everything else is ignored.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


# ---@field <Name> <Type>
FIELD_LINE = re.compile(r'---@field\s+(\w+)\s+(\S+)')


@dataclass(frozen=True)
class StructField:
    """One field of a row struct."""
    name: str               # Property name as stored in the table ("GrowthTime")
    declared_type: str      # Type token from the definition ("float", "TArray<FName>")
    template_key: str       # Placeholder key used in templates ("growthTime")


def to_template_key(field_name: str) -> str:
    """Lower-case only the first character: GrowthTime -> growthTime."""
    if not field_name:
        return field_name
    return field_name[0].lower() + field_name[1:]


def parse_struct_source(content: str, source: str = "<string>") -> List[StructField]:
    """
    Parse struct definition text into an ordered list of fields.

    A field name declared twice keeps its first declaration so template
    keys stay unique.
    """
    fields = []
    seen = set()

    for line in content.splitlines():
        match = FIELD_LINE.search(line)
        if not match:
            continue

        name, declared_type = match.groups()
        key = to_template_key(name)
        if key in seen:
            logger.warning(f"Duplicate field {name} in {source}, keeping first declaration")
            continue

        seen.add(key)
        fields.append(StructField(name=name, declared_type=declared_type, template_key=key))

    return fields


def parse_struct_definition(path: Union[str, Path]) -> List[StructField]:
    """
    Parse a struct definition file.

    A missing file yields an empty list so the caller can fall back to
    generic extraction.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning(f"Struct definition file not found: {path}")
        return []

    content = path.read_text(encoding='utf-8')
    fields = parse_struct_source(content, str(path))
    logger.debug(f"Parsed {len(fields)} fields from {path}")
    return fields


def find_struct_definition(struct_dir: Union[str, Path], struct_name: str) -> Path:
    """Path of the definition file for a struct name."""
    return Path(struct_dir) / f"{struct_name}.txt"
