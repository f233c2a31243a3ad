"""
Shared pytest fixtures and utilities for the arcadedex test suite.
"""

import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import yaml

from arcadedex.data_types import SourceType

# Sample data file and the name it gets inside an extracted source folder
SAMPLE_FILES = {
    SourceType.MAME: ("mame.xml", "MAME 0.261.dat"),
    SourceType.LANGUAGES: ("languages.ini", "languages.ini"),
    SourceType.NPLAYERS: ("nplayers.ini", "nplayers.ini"),
    SourceType.CATVER: ("catver.ini", "catver.ini"),
    SourceType.SERIES: ("series.ini", "series.ini"),
    SourceType.HISTORY: ("history.xml", "history.xml"),
    SourceType.RESOURCES: ("resources.dat", "pS_AllProject_20231201_261_(mame).dat"),
}


@pytest.fixture
def project_root() -> Path:
    """
    Repository root path for locating fixtures and sample data.
    """
    return Path(__file__).resolve().parent.parent


@pytest.fixture
def data_dir(project_root: Path) -> Path:
    """
    Path to shared static test fixtures (sample dats and INI files).
    """
    return project_root / "tests" / "data"


@pytest.fixture
def make_workspace(tmp_path: Path, data_dir: Path) -> Callable[..., Path]:
    """
    Lay out extracted sample files the way ``arcadedex unpack`` leaves them.

    Usage:
        workspace = make_workspace([SourceType.MAME, SourceType.CATVER])
    """

    def _builder(sources: Optional[List[SourceType]] = None) -> Path:
        workspace = tmp_path / "workspace"
        for source in sources if sources is not None else list(SourceType):
            sample, target_name = SAMPLE_FILES[source]
            folder = workspace / "extracted" / source.value
            folder.mkdir(parents=True, exist_ok=True)
            shutil.copy(data_dir / sample, folder / target_name)
        return workspace

    return _builder


@pytest.fixture
def events() -> List:
    """
    List collecting progress events; append is safe from any thread.
    """
    return []


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    """
    Create a minimal arcadedex.yaml in a temp directory.

    Usage:
        path = make_config({"export": {"formats": ["csv"]}})
    """

    def _builder(overrides: Optional[Dict[str, Any]] = None) -> Path:
        base = {
            "workspace": str(tmp_path / "workspace"),
            "sources": ["mame", "catver"],
            "export": {"formats": ["json"]},
            "logging": {"level": "WARNING", "console": False},
        }
        if overrides:
            base = merge_dicts(base, overrides)

        cfg_path = tmp_path / "arcadedex.yaml"
        cfg_path.write_text(yaml.safe_dump(base))
        return cfg_path

    return _builder


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow+deep merge helper for fixture config dictionaries.
    """
    result: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result
