"""
Asset Provider

Access to game assets through the JSON and image exports written by an
external asset tool (FModel / CUE4Parse style). The binary pak format is
never read here.

Exports mirror game paths under an export root:

    /Game/Data/AssetLookups/Crops.Crops   ->  <root>/Game/Data/AssetLookups/Crops.json
    /Game/UI/Icons/Icon_wheat             ->  <root>/Game/UI/Icons/Icon_wheat.png
"""

import io
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


Row = Dict[str, Any]

TEXTURE_EXTENSIONS = (".png", ".tga", ".bmp", ".jpg", ".jpeg")


class AssetProviderError(Exception):
    """The provider could not be initialized."""


class AssetLoadError(Exception):
    """An asset could not be loaded or decoded."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


def clean_asset_path(reference: str) -> str:
    """
    Reduce an asset reference to its package path.

        Texture2D'/Game/UI/Icons/Icon_a.Icon_a'  ->  /Game/UI/Icons/Icon_a
        /Game/UI/Icons/Icon_a.Icon_a             ->  /Game/UI/Icons/Icon_a
    """
    path = reference.strip()

    first, last = path.find("'"), path.rfind("'")
    if first != -1 and last > first:
        path = path[first + 1:last]

    if path.count('.') == 1:
        package, obj = path.split('.')
        if package.endswith('/' + obj):
            path = package

    return path


def encode_png(image: Image.Image) -> bytes:
    """Encode a decoded image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class AssetProvider(ABC):
    """Source of DataTables and textures, addressed by game path."""

    @abstractmethod
    def load_table(self, game_path: str) -> List[Tuple[str, Row]]:
        """Ordered (row name, row value) pairs of a DataTable."""

    @abstractmethod
    def load_texture(self, game_path: str) -> Image.Image:
        """Decoded texture image."""


class JsonExportProvider(AssetProvider):
    """
    Reads DataTables and textures from an export directory.

    Usage:
        provider = JsonExportProvider("exports")
        rows = provider.load_table("/Game/Data/AssetLookups/Crops.Crops")
    """

    def __init__(self, export_root: Union[str, Path]):
        self.root = Path(export_root)
        if not self.root.is_dir():
            raise AssetProviderError(f"Export root not found: {self.root}")
        logger.info(f"Asset exports mounted from {self.root}")

    def _package_file(self, game_path: str) -> Path:
        """Filesystem path of a package, without extension."""
        package = game_path.strip().lstrip('/')
        head, _, tail = package.rpartition('/')
        tail = tail.split('.', 1)[0]
        return self.root / head / tail if head else self.root / tail

    def load_table(self, game_path: str) -> List[Tuple[str, Row]]:
        path = self._package_file(game_path).with_suffix(".json")
        if not path.is_file():
            raise AssetLoadError(game_path, f"no export at {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise AssetLoadError(game_path, str(e)) from e

        rows = self._find_rows(data)
        if rows is None:
            raise AssetLoadError(game_path, "export has no Rows")

        logger.debug(f"Loaded {len(rows)} rows from {path}")
        return list(rows.items())

    @staticmethod
    def _find_rows(data: Any):
        if isinstance(data, dict) and isinstance(data.get("Rows"), dict):
            return data["Rows"]
        if isinstance(data, list):
            for export in data:
                if isinstance(export, dict) and isinstance(export.get("Rows"), dict):
                    return export["Rows"]
        return None

    def load_texture(self, game_path: str) -> Image.Image:
        base = self._package_file(game_path)
        for ext in TEXTURE_EXTENSIONS:
            path = base.with_suffix(ext)
            if not path.is_file():
                continue
            try:
                with Image.open(path) as image:
                    image.load()
                    return image.copy()
            except (OSError, UnidentifiedImageError) as e:
                raise AssetLoadError(game_path, f"cannot decode {path.name}: {e}") from e

        raise AssetLoadError(game_path, f"no texture export next to {base}")
