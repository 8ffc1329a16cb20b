"""Synthetic RGB lattice generation.

Instead of reading pixels from an image, the lattice generator emits every
grid point of an N x N x N cube as an RGBA pixel. Passing the buffer through
a color transform and writing the result in the same order yields a 3D LUT
of that transform.

Buffer layout:
    - Shape (N^3, 4), float32, channels (R, G, B, A)
    - Row b*N*N + g*N + r holds (min + r*step, min + g*step, min + b*step, 1)
    - step = (max - min) / (N - 1)
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import numpy as np

from lutlattice.config import ALPHA_VALUE, MAX_CUBE_SIZE, MIN_CUBE_SIZE
from lutlattice.core.types import LatticeConfig
from lutlattice.errors import InvalidResolutionError

logger = logging.getLogger(__name__)

_DECIMAL_RE = re.compile(r"\+?[0-9]+")


def validate_size(size: int, max_size: Optional[int] = None) -> int:
    """Check that a lattice size lies within [MIN_CUBE_SIZE, max_size].

    A max_size of None means MAX_CUBE_SIZE.
    """
    if max_size is None:
        max_size = MAX_CUBE_SIZE
    if size < MIN_CUBE_SIZE or size > max_size:
        raise InvalidResolutionError(
            f"LUT size {size} out of range ({MIN_CUBE_SIZE}-{max_size})"
        )
    return size


def parse_resolution(token: str, max_size: Optional[int] = None) -> int:
    """Parse a lattice size from a text token.

    The token is plain decimal integer text, e.g. ``"33"``. Surrounding
    whitespace is ignored.

    Args:
        token: Size token, typically taken from the command line.
        max_size: Largest accepted size. None means MAX_CUBE_SIZE.

    Returns:
        Validated grid size N.

    Raises:
        InvalidResolutionError: If the token is not a decimal integer or
            the value is out of range.
    """
    if max_size is None:
        max_size = MAX_CUBE_SIZE
    text = str(token).strip()
    if not _DECIMAL_RE.fullmatch(text):
        raise InvalidResolutionError(
            f"Can't read LUT size from {token!r}. Expected an integer "
            f"between {MIN_CUBE_SIZE} and {max_size}"
        )

    size = validate_size(int(text), max_size)
    logger.info("LUT size: %d (%d lattice points)", size, size ** 3)
    return size


def lattice_coordinates(config: LatticeConfig) -> np.ndarray:
    """Return the N sample values along one axis.

    Returns:
        (N,) float64 array: min + i * step for i in [0, N).
    """
    idx = np.arange(config.size, dtype=np.float64)
    return config.domain_min + idx * config.step


def generate_lattice(config: LatticeConfig) -> np.ndarray:
    """Generate the RGBA pixel buffer for every lattice point (vectorized).

    Iteration order is B outermost, G middle, R innermost, which is the
    row order a .cube body expects.

    Args:
        config: Lattice size, size limit, domain bounds, and formatting settings.

    Returns:
        (N^3, 4) float32 array.
    """
    N = validate_size(config.size, config.max_size)
    coords = lattice_coordinates(config)

    # indexing="ij" on (b, g, r) makes the last axis (r) vary fastest
    bb, gg, rr = np.meshgrid(coords, coords, coords, indexing="ij")

    pixels = np.empty((N ** 3, 4), dtype=np.float32)
    pixels[:, 0] = rr.ravel()
    pixels[:, 1] = gg.ravel()
    pixels[:, 2] = bb.ravel()
    pixels[:, 3] = ALPHA_VALUE

    logger.debug(
        "Generated %d^3 lattice over [%g, %g], step %g",
        N, config.domain_min, config.domain_max, config.step,
    )
    return pixels
