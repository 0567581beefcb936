"""
Generator Configuration

Loads configuration from a YAML file, layered over defaults and then
environment variable overrides. Also holds the registry of tables to
render (template -> DataTable, output folder, struct definition).
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .postprocess import POSTPROCESSORS

logger = logging.getLogger(__name__)


# Configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path("pagegen.yaml"),
    Path.home() / ".pagegen" / "config.yaml",
]

PAGES = "pages"
AGGREGATE = "aggregate"
MODES = (PAGES, AGGREGATE)


class ConfigError(Exception):
    """Invalid configuration."""


@dataclass
class TableConfig:
    """One template rendered from one DataTable."""

    template_name: str              # File in the template dir ("CropsTemplate.txt")
    table_path: str                 # Game path of the DataTable
    output_folder: str              # Folder under the output dir
    struct_name: str                # Struct definition file stem
    mode: str = PAGES               # "pages": one file per row, "aggregate": one file per table
    postprocess: Optional[str] = None       # Name in pagegen.postprocess.POSTPROCESSORS
    required_fields: List[str] = field(default_factory=list)    # Aggregate rows missing these are skipped
    extract_icons: bool = False     # Export each row's icon texture as PNG

    @property
    def is_aggregate(self) -> bool:
        return self.mode == AGGREGATE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableConfig":
        if not isinstance(data, dict):
            raise ConfigError(f"Table entry must be a mapping, got {type(data).__name__}")

        missing = [k for k in ("template_name", "table_path", "output_folder", "struct_name")
                   if not data.get(k)]
        if missing:
            raise ConfigError(f"Table entry {data.get('template_name', '?')} missing: {', '.join(missing)}")

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigError(f"Table entry {data['template_name']} has unknown keys: {', '.join(sorted(unknown))}")

        entry = cls(**data)
        name = entry.template_name

        for key in ("template_name", "table_path", "output_folder", "struct_name"):
            if not isinstance(getattr(entry, key), str):
                raise ConfigError(f"Table entry {name}: {key} must be a string")

        if entry.mode not in MODES:
            raise ConfigError(f"Table entry {name}: mode must be one of {MODES}, got {entry.mode!r}")

        if entry.postprocess is not None:
            if not isinstance(entry.postprocess, str):
                raise ConfigError(f"Table entry {name}: postprocess must be a name")
            if entry.postprocess not in POSTPROCESSORS:
                raise ConfigError(f"Table entry {name}: unknown postprocess {entry.postprocess!r} "
                                  f"(known: {', '.join(sorted(POSTPROCESSORS))})")

        # A single YAML scalar means one field
        required = entry.required_fields
        if required is None:
            required = []
        elif isinstance(required, str):
            required = [required]
        if not isinstance(required, list) or not all(isinstance(f, str) and f for f in required):
            raise ConfigError(f"Table entry {name}: required_fields must be a list of field names")
        entry.required_fields = list(required)

        entry.extract_icons = _table_flag(name, "extract_icons", entry.extract_icons)
        return entry

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =========================================================================
# DEFAULT TABLE REGISTRY
# =========================================================================

DEFAULT_TABLES: List[TableConfig] = [
    TableConfig(
        "CropsTemplate.txt",
        "/Game/Data/AssetLookups/Crops.Crops",
        "Crops",
        "FCropMasterSyncData",
    ),
    TableConfig(
        "TechUnlocksV2Template.txt",
        "/Game/Data/AssetLookups/TechUnlocksV2.TechUnlocksV2",
        "TechUnlocksV2",
        "FTechUnlock_V2",
    ),
    TableConfig(
        "BuildingsTemplate.txt",
        "/Game/Data/GridactorDefs_Sync.GridactorDefs_Sync",
        "Buildings",
        "FGridActorDefinition_MasterSyncFormat",
    ),
    TableConfig(
        "ResourcesTemplate.txt",
        "/Game/Data/AssetLookups/ResourceLookup.ResourceLookup",
        "Resources",
        "FResourceDef",
        mode=AGGREGATE,
        extract_icons=True,
    ),
    TableConfig(
        "BuildingsOverviewTemplate.txt",
        "/Game/Data/GridactorDefs_Sync.GridactorDefs_Sync",
        "BuildingsOverview",
        "FGridActorDefinition_MasterSyncFormat",
        mode=AGGREGATE,
        postprocess="buildings_costs",
        required_fields=["description", "stringKey"],
        extract_icons=True,
    ),
]


DEFAULT_CONFIG: Dict[str, Any] = {
    "export_root": "exports",
    "template_dir": "PageTemplates",
    "output_dir": "Output",
    "struct_dir": "StructDefinitions",
    "overwrite": True,
    # Other languages: /Game/Data/TextDB/Loc_De etc. Empty disables localization.
    "language_table": "/Game/Data/TextDB/Loc_En",
}

ENV_OVERRIDES = {
    "PAGEGEN_EXPORT_ROOT": "export_root",
    "PAGEGEN_TEMPLATE_DIR": "template_dir",
    "PAGEGEN_OUTPUT_DIR": "output_dir",
    "PAGEGEN_STRUCT_DIR": "struct_dir",
    "PAGEGEN_OVERWRITE": "overwrite",
}

PATH_KEYS = ("export_root", "template_dir", "output_dir", "struct_dir")


TRUE_WORDS = ("1", "true", "yes", "on")
FALSE_WORDS = ("0", "false", "no", "off", "")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_WORDS


def _table_flag(table: str, key: str, value: Any) -> bool:
    """Read a yes/no table setting; anything else is a config error."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
    raise ConfigError(f"Table entry {table}: {key} must be true or false, got {value!r}")


class GeneratorConfig:
    """Configuration for a generator run."""

    def __init__(self, config_path: Optional[Path] = None, env: Optional[Dict[str, str]] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        # Load from file if found
        self._load_config(config_path)

        # Override with environment variables
        self._apply_env_overrides(os.environ if env is None else env)

        self._tables = self._load_tables(self._config.get("tables"))

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        if explicit_path is not None:
            explicit_path = Path(explicit_path)
            if not explicit_path.is_file():
                raise ConfigError(f"Config file not found: {explicit_path}")
            search_paths = [explicit_path]
        else:
            search_paths = CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if not config_path.is_file():
                continue
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

            if not isinstance(user_config, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping")

            # Relative paths in a config file are relative to that file
            for key in PATH_KEYS:
                if key in user_config and user_config[key] is not None:
                    user_config[key] = str(config_path.parent / Path(user_config[key]).expanduser())

            self._config.update(user_config)
            self._config_path = config_path
            logger.debug(f"Loaded config from {config_path}")
            return

    def _apply_env_overrides(self, env) -> None:
        """Apply environment variable overrides."""
        for env_var, config_key in ENV_OVERRIDES.items():
            if env_var in env:
                self._config[config_key] = env[env_var]

    @staticmethod
    def _load_tables(entries: Optional[List[Dict[str, Any]]]) -> List[TableConfig]:
        if entries is None:
            return [TableConfig(**t.to_dict()) for t in DEFAULT_TABLES]
        if not isinstance(entries, list):
            raise ConfigError("'tables' must be a list of table entries")
        return [TableConfig.from_dict(e) for e in entries]

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def export_root(self) -> Path:
        """Root of the asset tool's JSON/image exports."""
        return Path(self._config["export_root"])

    @property
    def template_dir(self) -> Path:
        return Path(self._config["template_dir"])

    @property
    def output_dir(self) -> Path:
        return Path(self._config["output_dir"])

    @property
    def struct_dir(self) -> Path:
        """Directory of struct definition files."""
        return Path(self._config["struct_dir"])

    @property
    def overwrite(self) -> bool:
        """Replace output files that already exist."""
        return _parse_bool(self._config.get("overwrite", True))

    @overwrite.setter
    def overwrite(self, value: bool) -> None:
        self._config["overwrite"] = bool(value)

    @property
    def language_table(self) -> Optional[str]:
        """Game path of the language table, or None to skip localization."""
        return self._config.get("language_table") or None

    @property
    def tables(self) -> List[TableConfig]:
        return list(self._tables)

    def select_tables(self, template_names: Optional[List[str]] = None) -> List[TableConfig]:
        """Configured tables, optionally restricted to some template names."""
        if not template_names:
            return self.tables

        known = {t.template_name for t in self._tables}
        unknown = [n for n in template_names if n not in known]
        if unknown:
            raise ConfigError(f"Unknown template(s): {', '.join(unknown)}")
        return [t for t in self._tables if t.template_name in template_names]

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dict."""
        return {
            "export_root": str(self.export_root),
            "template_dir": str(self.template_dir),
            "output_dir": str(self.output_dir),
            "struct_dir": str(self.struct_dir),
            "overwrite": self.overwrite,
            "language_table": self.language_table,
            "tables": [t.to_dict() for t in self._tables],
            "config_file": str(self._config_path) if self._config_path else None,
        }


def write_default_config(path: Optional[Path] = None) -> Path:
    """
    Write a default configuration file.

    Returns the path where config was written.
    """
    if path is None:
        path = Path("pagegen.yaml")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tables = yaml.safe_dump(
        {"tables": [t.to_dict() for t in DEFAULT_TABLES]},
        sort_keys=False,
        default_flow_style=False,
    )

    config_content = f"""# pagegen configuration
#
# Relative paths are resolved against this file's folder.
# PAGEGEN_* environment variables override the values here.

# JSON/PNG exports of the game's assets, laid out by game path (Game/Data/...)
export_root: "exports"

# Wiki page templates ({{{{{{key}}}}}} placeholders)
template_dir: "PageTemplates"

# Generated pages
output_dir: "Output"

# ---@field struct definitions
struct_dir: "StructDefinitions"

# Replace pages that already exist
overwrite: true

# Language table for localized text (leave empty to disable)
language_table: "/Game/Data/TextDB/Loc_En"

# Tables to render. mode is "pages" (one file per row) or "aggregate" (one file).
{tables}"""

    with open(path, 'w', encoding='utf-8') as f:
        f.write(config_content)

    return path
