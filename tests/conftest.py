"""Pytest configuration: make `src` importable and provide shared lookup tables."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_src_on_sys_path() -> None:
    """Prepend the repository `src` directory to `sys.path` if missing."""
    repo_root: Path = Path(__file__).resolve().parents[1]
    src_path: Path = repo_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_ensure_src_on_sys_path()

from ndlookup import LookupTable  # noqa: E402


@pytest.fixture
def table_2D() -> LookupTable:
    """Table with x = [1, 2, 3] (fastest) and y = [10, 20]."""
    return LookupTable([[1, 2, 3], [10, 20], [100, 200, 300, 400, 500, 600]])


@pytest.fixture
def table_3D() -> LookupTable:
    """2x2x2 unit cube holding 0..7, axis 0 fastest."""
    return LookupTable([[0, 1], [0, 1], [0, 1], list(range(8))])


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20221014)
