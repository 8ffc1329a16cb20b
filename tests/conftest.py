"""Shared fixtures for LutLattice tests."""

from __future__ import annotations

import pytest

from lutlattice.config import ENV_COMMENT, ENV_DOMAIN_MAX, ENV_DOMAIN_MIN, ENV_PRECISION
from lutlattice.core.types import LatticeConfig


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep CUBE_* variables from the host shell out of every test."""
    for name in (ENV_DOMAIN_MIN, ENV_DOMAIN_MAX, ENV_PRECISION, ENV_COMMENT):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def small_N():
    """Small lattice size for fast tests."""
    return 5


@pytest.fixture
def config_3():
    """Minimum 3x3x3 lattice on the default domain."""
    return LatticeConfig(size=3)


@pytest.fixture
def config_5(small_N):
    """5x5x5 lattice on the default domain."""
    return LatticeConfig(size=small_N)


@pytest.fixture
def wide_config():
    """5x5x5 lattice on an extended domain."""
    return LatticeConfig(size=5, domain_min=-0.25, domain_max=1.75, precision=4)


@pytest.fixture
def tmp_cube_path(tmp_path):
    """Temporary .cube output path."""
    return tmp_path / "test_output.cube"


@pytest.fixture
def read_body():
    """Return a reader for the data lines of a written .cube file."""
    def _read(path):
        text = path.read_text()
        header, _, body = text.partition("\n\n")
        # A comment block adds its own blank line before the title
        if header.startswith("##"):
            _, _, body = body.partition("\n\n")
        return body.splitlines()
    return _read


@pytest.fixture
def small_default_limit(monkeypatch):
    """Lower the default size limit to 8 so raised limits can be tested quickly."""
    monkeypatch.setattr("lutlattice.core.lattice.MAX_CUBE_SIZE", 8)
    monkeypatch.setattr("lutlattice.io.cube.MAX_CUBE_SIZE", 8)
    return 8
