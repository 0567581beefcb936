"""
Page Generator

Drives a run: for every configured table, load its template and rows,
extract each row's properties, render, and write the pages.

Failures stay local: a missing template, struct definition or table skips
that table; a row that raises is logged and skipped; a broken icon only
loses the icon. Only a provider that cannot be created stops the run, and
that happens before a PageGenerator exists.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .assets import AssetLoadError, AssetProvider, Row, clean_asset_path, encode_png
from .config import GeneratorConfig, TableConfig
from .extract import NOT_AVAILABLE, extract_generic_properties, extract_properties
from .localization import LocalizationIndex
from .postprocess import get_postprocessor
from .schema import StructField, find_struct_definition, parse_struct_definition
from .template import Template, TemplateError, is_empty_value, render_aggregate, render_page

logger = logging.getLogger(__name__)


# Characters not allowed in file names on any supported platform
INVALID_FILENAME_CHARS = set('<>:"/\\|?*') | {chr(c) for c in range(32)}


def sanitize_filename(name: str) -> str:
    """Strip characters that are invalid in file names."""
    return "".join(ch for ch in name if ch not in INVALID_FILENAME_CHARS)


@dataclass
class TableResult:
    """Outcome of rendering one table."""
    template_name: str
    generated: List[str] = field(default_factory=list)     # Files written
    skipped: List[str] = field(default_factory=list)       # Existing files left alone
    filtered: List[str] = field(default_factory=list)      # Rows left out of an aggregate page
    failed: List[Tuple[str, str]] = field(default_factory=list)   # (row name, error)
    error: Optional[str] = None     # Set when the whole table was skipped

    @property
    def ok(self) -> bool:
        return self.error is None

    def summary(self) -> str:
        if self.error:
            return f"{self.template_name}: skipped ({self.error})"
        return (f"{self.template_name}: {len(self.generated)} generated, "
                f"{len(self.skipped)} skipped, {len(self.failed)} failed")


@dataclass
class RunReport:
    """Outcome of a whole run."""
    tables: List[TableResult] = field(default_factory=list)

    @property
    def generated(self) -> int:
        return sum(len(t.generated) for t in self.tables)

    @property
    def skipped(self) -> int:
        return sum(len(t.skipped) for t in self.tables)

    @property
    def failed(self) -> int:
        return sum(len(t.failed) for t in self.tables)

    def summary(self) -> str:
        lines = [t.summary() for t in self.tables]
        lines.append(f"Total: {self.generated} generated, {self.skipped} skipped, {self.failed} failed")
        return "\n".join(lines)


def build_localization(provider: AssetProvider, table_path: Optional[str]) -> LocalizationIndex:
    """
    Build the localization index from the language table.

    A missing or unreadable table gives an empty index; pages then carry the
    raw text.
    """
    if not table_path:
        return LocalizationIndex.empty()
    try:
        rows = provider.load_table(table_path)
    except AssetLoadError as e:
        logger.warning(f"Localization disabled: {e}")
        return LocalizationIndex.empty()
    return LocalizationIndex.from_rows(rows)


class PageGenerator:
    """
    Render configured tables to wiki pages.

    Usage:
        provider = JsonExportProvider(config.export_root)
        localization = build_localization(provider, config.language_table)
        report = PageGenerator.from_config(config, provider, localization).process_all(config.tables)
    """

    def __init__(self, provider: AssetProvider, template_dir: Union[str, Path],
                 output_dir: Union[str, Path], struct_dir: Union[str, Path],
                 overwrite: bool = True, localization: Optional[LocalizationIndex] = None):
        self.provider = provider
        self.template_dir = Path(template_dir)
        self.output_dir = Path(output_dir)
        self.struct_dir = Path(struct_dir)
        self.overwrite = overwrite
        self.localization = localization if localization is not None else LocalizationIndex.empty()
        self._struct_cache: Dict[str, List[StructField]] = {}

    @classmethod
    def from_config(cls, config: GeneratorConfig, provider: AssetProvider,
                    localization: Optional[LocalizationIndex] = None) -> "PageGenerator":
        return cls(
            provider,
            template_dir=config.template_dir,
            output_dir=config.output_dir,
            struct_dir=config.struct_dir,
            overwrite=config.overwrite,
            localization=localization,
        )

    # =========================================================================
    # RUN
    # =========================================================================

    def process_all(self, tables: List[TableConfig]) -> RunReport:
        """Render every table; one table failing does not stop the others."""
        logger.info(f"Processing {len(tables)} tables...")
        report = RunReport()

        for config in tables:
            try:
                result = self.process_table(config)
            except Exception as e:
                logger.error(f"Error processing {config.template_name}: {e}")
                result = TableResult(config.template_name, error=str(e))
            report.tables.append(result)

        logger.info(f"Completed processing all tables: {report.generated} generated, "
                    f"{report.skipped} skipped, {report.failed} failed")
        return report

    def process_table(self, config: TableConfig) -> TableResult:
        """Render one table in its configured mode."""
        logger.info(f"--- Processing {config.template_name} ---")
        result = TableResult(config.template_name)

        template_path = self.template_dir / config.template_name
        if not template_path.is_file():
            logger.warning(f"Template file not found at: {template_path}")
            result.error = "template not found"
            return result
        template = Template.parse(template_path.read_text(encoding='utf-8'), config.template_name)

        try:
            rows = self.provider.load_table(config.table_path)
        except AssetLoadError as e:
            logger.warning(f"Failed to load DataTable: {e}")
            result.error = "table not loaded"
            return result
        logger.info(f"Found DataTable {config.table_path} with {len(rows)} rows")

        folder = self.output_dir / config.output_folder
        folder.mkdir(parents=True, exist_ok=True)

        if config.is_aggregate:
            try:
                template.row_fragment()
            except TemplateError as e:
                logger.warning(str(e))
                result.error = "no repeatable row in template"
                return result
            self._process_aggregate(config, template, rows, folder, result)
        else:
            self._process_pages(config, template, rows, folder, result)

        logger.info(result.summary())
        return result

    # =========================================================================
    # MODES
    # =========================================================================

    def _process_pages(self, config: TableConfig, template: Template,
                       rows: List[Tuple[str, Row]], folder: Path, result: TableResult) -> None:
        for row_name, row in rows:
            logger.debug(f"Processing row: {row_name}")
            try:
                properties = self.row_properties(config, row)
                self._postprocess(config, properties)
                content = render_page(template, properties, self.localization)

                file_name = f"{sanitize_filename(row_name)}.txt"
                if self._write_text(folder / file_name, content):
                    result.generated.append(file_name)
                else:
                    result.skipped.append(file_name)
            except Exception as e:
                logger.error(f"Error processing row {row_name}: {e}")
                result.failed.append((row_name, str(e)))

    def _process_aggregate(self, config: TableConfig, template: Template,
                           rows: List[Tuple[str, Row]], folder: Path, result: TableResult) -> None:
        collected = []
        for row_name, row in rows:
            logger.debug(f"Processing row: {row_name}")
            try:
                properties = self.row_properties(config, row)

                missing = [f for f in config.required_fields
                           if is_empty_value(properties.get(f), f)]
                if missing:
                    logger.info(f"Skipping row {row_name}: no {', '.join(missing)}")
                    result.filtered.append(row_name)
                    continue

                if config.extract_icons:
                    properties["icon"] = self._extract_icon(properties.get("icon", ""), folder, row_name)

                self._postprocess(config, properties)
                collected.append(properties)
            except Exception as e:
                logger.error(f"Error processing row {row_name}: {e}")
                result.failed.append((row_name, str(e)))

        content = render_aggregate(template, collected, self.localization)

        file_name = f"{sanitize_filename(config.output_folder)}.txt"
        if self._write_text(folder / file_name, content):
            result.generated.append(file_name)
            logger.info(f"Generated single page: {file_name} with {len(collected)} rows")
        else:
            result.skipped.append(file_name)

    # =========================================================================
    # ROW HELPERS
    # =========================================================================

    def struct_fields(self, struct_name: str) -> List[StructField]:
        """Struct fields for a struct name, parsed once per run."""
        if struct_name not in self._struct_cache:
            path = find_struct_definition(self.struct_dir, struct_name)
            self._struct_cache[struct_name] = parse_struct_definition(path)
        return self._struct_cache[struct_name]

    def row_properties(self, config: TableConfig, row: Mapping) -> Dict[str, str]:
        """Property map of one row; generic extraction without a struct definition."""
        fields = self.struct_fields(config.struct_name)
        if not fields:
            logger.debug(f"No fields for {config.struct_name}, using generic extraction")
            return extract_generic_properties(row)
        return extract_properties(row, fields, self.localization)

    def _postprocess(self, config: TableConfig, properties: Dict[str, str]) -> None:
        if config.postprocess:
            get_postprocessor(config.postprocess)(properties)

    def _extract_icon(self, reference: str, folder: Path, row_name: str) -> str:
        """
        Export a row's icon texture as PNG next to the page.

        Returns the icon file stem, or "" when there is no usable icon.
        """
        if not reference or reference == NOT_AVAILABLE or reference == "None":
            return ""

        path = clean_asset_path(reference)
        try:
            image = self.provider.load_texture(path)
            data = encode_png(image)
        except Exception as e:
            logger.warning(f"Failed to extract icon for {row_name}, will show without icon: {e}")
            return ""

        stem = sanitize_filename(row_name)
        icon_path = folder / f"{stem}.png"
        if icon_path.exists() and not self.overwrite:
            logger.debug(f"Keeping existing icon {icon_path.name}")
        else:
            icon_path.write_bytes(data)
            logger.debug(f"Extracted icon: {icon_path.name}")
        return stem

    def _write_text(self, path: Path, content: str) -> bool:
        """Write a page; False when it exists and overwrite is off."""
        if path.exists() and not self.overwrite:
            logger.info(f"Skipping {path.name} (file already exists)")
            return False

        with open(path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(content)
        logger.debug(f"Generated: {path.name}")
        return True
