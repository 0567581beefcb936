"""
Pytest configuration and shared fixtures.
"""

import shutil
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pagegen.assets import JsonExportProvider
from pagegen.generator import PageGenerator, build_localization


LANGUAGE_TABLE = "/Game/Data/TextDB/Loc_En"


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def structs_dir(fixtures_dir):
    """Path to struct definition fixtures."""
    return fixtures_dir / "structs"


@pytest.fixture
def templates_dir(fixtures_dir):
    """Path to template fixtures."""
    return fixtures_dir / "templates"


@pytest.fixture
def export_root(fixtures_dir, tmp_path):
    """Copy of the export fixtures with a sawmill icon texture added."""
    root = tmp_path / "exports"
    shutil.copytree(fixtures_dir / "exports", root)

    icons = root / "Game" / "UI" / "Icons"
    icons.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (8, 8), (139, 69, 19, 255)).save(icons / "Icon_sawmill.png")
    return root


@pytest.fixture
def output_dir(tmp_path):
    """Empty output directory."""
    path = tmp_path / "Output"
    path.mkdir()
    return path


# =============================================================================
# OBJECT FIXTURES
# =============================================================================

@pytest.fixture
def provider(export_root):
    """Provider over the export fixtures."""
    return JsonExportProvider(export_root)


@pytest.fixture
def localization(provider):
    """Localization index built from the fixture language table."""
    return build_localization(provider, LANGUAGE_TABLE)


@pytest.fixture
def generator(provider, templates_dir, output_dir, structs_dir, localization):
    """Generator wired to the fixtures, overwrite on."""
    return PageGenerator(
        provider,
        template_dir=templates_dir,
        output_dir=output_dir,
        struct_dir=structs_dir,
        overwrite=True,
        localization=localization,
    )
