"""Core data types and indexing helpers for LutLattice.

CRITICAL CONVENTION:
    Pixel buffers have shape (N^3, 4) with channels (R, G, B, A).
    Row index: flat = b * N * N + g * N + r  (R varies fastest, matching the .cube format).
    This convention MUST be used consistently in ALL modules.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from lutlattice.config import (
    DEFAULT_DOMAIN_MAX,
    DEFAULT_DOMAIN_MIN,
    DEFAULT_PRECISION,
    MAX_PRECISION,
)
from lutlattice.errors import InvalidConfigurationError


# ---------------------------------------------------------------------------
# Indexing helpers -- single source of truth for the flat <-> 3D mapping
# ---------------------------------------------------------------------------

def flat_index(r: int, g: int, b: int, N: int) -> int:
    """Convert 3D grid indices to flat index. R varies fastest."""
    return b * N * N + g * N + r


def grid_indices(flat: int, N: int) -> tuple[int, int, int]:
    """Convert flat index to (r, g, b) grid indices."""
    r = flat % N
    g = (flat // N) % N
    b = flat // (N * N)
    return r, g, b


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LatticeConfig:
    """Settings shared by lattice generation and .cube serialization.

    Built once by the driver and passed unchanged to both stages, so the
    writer always sees the size and domain the generator used.
    """
    size: int                                # N (grid resolution per axis)
    domain_min: float = DEFAULT_DOMAIN_MIN
    domain_max: float = DEFAULT_DOMAIN_MAX
    precision: int = DEFAULT_PRECISION       # fractional digits in output
    comment: Optional[str] = None
    max_size: Optional[int] = None           # size limit, None = MAX_CUBE_SIZE

    def __post_init__(self):
        if not (math.isfinite(self.domain_min) and math.isfinite(self.domain_max)):
            raise InvalidConfigurationError(
                f"Domain bounds must be finite, got [{self.domain_min}, {self.domain_max}]"
            )
        if self.domain_min >= self.domain_max:
            raise InvalidConfigurationError(
                f"Domain minimum must be below maximum, got [{self.domain_min}, {self.domain_max}]"
            )
        if not 0 <= self.precision <= MAX_PRECISION:
            raise InvalidConfigurationError(
                f"Precision must be 0-{MAX_PRECISION}, got {self.precision}"
            )

    @property
    def num_points(self) -> int:
        """Total number of lattice points (N^3)."""
        return self.size ** 3

    @property
    def step(self) -> float:
        """Distance between adjacent samples along one axis."""
        return (self.domain_max - self.domain_min) / (self.size - 1)

    @property
    def is_default_domain(self) -> bool:
        """True when the domain is the standard [0, 1] cube."""
        return (
            self.domain_min == DEFAULT_DOMAIN_MIN
            and self.domain_max == DEFAULT_DOMAIN_MAX
        )


@dataclass
class LatticeResult:
    """Result from a full lattice run."""
    config: LatticeConfig
    output_path: Optional[Path] = None
    diagnostics: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Callback types
# ---------------------------------------------------------------------------

ProgressCallback = Callable[[str, float, str], None]
"""Callback signature: (stage_name, fraction_complete, message)."""

CancelCheck = Callable[[], bool]
"""Returns True if the operation should be cancelled."""
