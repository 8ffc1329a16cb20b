""".cube LUT writer and reader for lattice buffers.

File layout written by write_cube_lattice:

    [## <comment line>]...
    [blank line]
    TITLE "Generated by modified ctlrender from Color Transformation Language files"
    LUT_3D_SIZE <N>
    [LUT_3D_INPUT_RANGE <min> <max>]
    <blank line>
    <R> <G> <B>        (N^3 lines, R fastest, B slowest)

Values are fixed-point with exactly ``precision`` fractional digits.
Rounding follows Python's %-formatting of the exact binary value (ties on
exactly representable halves go to even), the same as C printf.

The LUT_3D_INPUT_RANGE bounds are formatted from their float32 value, the
same dtype as the lattice buffer, so at high precision the header and the
first and last body rows print identical digits (e.g. -0.10000000149 at
precision 11 for a -0.1 minimum).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from lutlattice.config import (
    COMMENT_PREFIX,
    CUBE_TITLE,
    CUBE_FILE_EXTRA_LINES,
    MAX_CUBE_SIZE,
    MIN_CUBE_SIZE,
)
from lutlattice.core.types import LatticeConfig, grid_indices
from lutlattice.errors import (
    BufferSizeMismatchError,
    ExportError,
    LUTFormatError,
    OutputAlreadyExistsError,
    OutputUnwritableError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def format_value(value: float, precision: int) -> str:
    """Format one LUT value as fixed-point with ``precision`` digits."""
    return "%.*f" % (precision, float(value))


def _check_buffer(pixels: np.ndarray, config: LatticeConfig) -> np.ndarray:
    """Validate buffer shape against the lattice size; return the RGB view."""
    expected = config.num_points
    if pixels.ndim != 2 or pixels.shape[1] < 3:
        raise BufferSizeMismatchError(
            f"Pixel buffer must have shape (N^3, 3+), got {pixels.shape}"
        )
    if pixels.shape[0] != expected:
        raise BufferSizeMismatchError(
            f"Pixel buffer has {pixels.shape[0]} entries, expected "
            f"{expected} for a {config.size}^3 LUT"
        )

    rgb = pixels[:, :3]
    if not np.all(np.isfinite(rgb)):
        bad_rows = np.flatnonzero(~np.all(np.isfinite(rgb), axis=1))
        r, g, b = grid_indices(int(bad_rows[0]), config.size)
        raise ExportError(
            f"Non-finite values in pixel buffer ({len(bad_rows)} entries, "
            f"first at node r={r} g={g} b={b})"
        )
    return rgb


def _header_lines(config: LatticeConfig) -> list[str]:
    lines = []
    if config.comment is not None:
        for comment_line in config.comment.splitlines() or [""]:
            lines.append(f"{COMMENT_PREFIX}{comment_line}".rstrip() + "\n")
        lines.append("\n")

    lines.append(f'TITLE "{CUBE_TITLE}"\n')
    lines.append(f"LUT_3D_SIZE {config.size}\n")

    if not config.is_default_domain:
        lo = format_value(np.float32(config.domain_min), config.precision)
        hi = format_value(np.float32(config.domain_max), config.precision)
        lines.append(f"LUT_3D_INPUT_RANGE {lo} {hi}\n")

    lines.append("\n")
    return lines


def write_cube_lattice(
    path: PathLike,
    pixels: np.ndarray,
    config: LatticeConfig,
) -> Path:
    """Write a transformed lattice buffer as a .cube file.

    Rows are written in buffer order, which must be the generation order
    (B outer, G middle, R inner). Only R, G, B are written; any further
    channels (alpha) are ignored. The buffer is not modified.

    Args:
        path: Output file path. Must not exist yet.
        pixels: (N^3, C) array with C >= 3.
        config: The configuration the lattice was generated with.

    Returns:
        Path of the written file.

    Raises:
        BufferSizeMismatchError: If the buffer does not hold N^3 RGB rows.
        ExportError: If the buffer contains NaN or Inf.
        OutputAlreadyExistsError: If ``path`` already exists.
        OutputUnwritableError: If ``path`` cannot be created.
    """
    path = Path(path)
    pixels = np.asarray(pixels)
    rgb = _check_buffer(pixels, config)

    if path.exists():
        raise OutputAlreadyExistsError(f"File already exists: {path}")

    # "x" refuses to open an existing file, so nothing is ever truncated
    try:
        f = open(path, "x", encoding="utf-8", newline="\n")
    except FileExistsError:
        raise OutputAlreadyExistsError(f"File already exists: {path}") from None
    except OSError as e:
        raise OutputUnwritableError(f"File could not be created: {path} ({e})") from e

    fmt = "%.{0}f %.{0}f %.{0}f".format(config.precision)
    try:
        with f:
            f.writelines(_header_lines(config))
            np.savetxt(f, rgb, fmt=fmt, delimiter=" ", newline="\n")
    except OSError as e:
        path.unlink(missing_ok=True)
        raise OutputUnwritableError(f"Failed writing {path}: {e}") from e

    logger.info("Cube file written: %s (%d^3, %d entries)", path, config.size, len(rgb))
    return path


def read_cube(path: PathLike, max_size: Optional[int] = None) -> tuple[np.ndarray, dict]:
    """Read a .cube file written by write_cube_lattice.

    Args:
        path: Input .cube file.
        max_size: Largest accepted LUT_3D_SIZE. None means MAX_CUBE_SIZE.

    Returns:
        (rgb, meta) where rgb is an (N^3, 3) float32 array in file order
        and meta holds ``title``, ``size``, ``domain_min``, ``domain_max``
        and ``comment``.

    Raises:
        FileNotFoundError: If the file does not exist.
        LUTFormatError: If the file is malformed.
    """
    if max_size is None:
        max_size = MAX_CUBE_SIZE
    max_lines = max_size ** 3 + CUBE_FILE_EXTRA_LINES

    path = Path(path)
    meta = {
        "title": "",
        "size": None,
        "domain_min": 0.0,
        "domain_max": 1.0,
        "comment": None,
    }
    comments = []
    rows = []

    with open(path, "r", encoding="utf-8") as f:
        for line_no, raw in enumerate(f, start=1):
            if line_no > max_lines:
                raise LUTFormatError(f"File exceeds {max_lines} lines")

            line = raw.strip()
            if not line:
                continue
            if line.startswith("#"):
                if not rows:
                    comments.append(line.lstrip("#").strip())
                continue

            keyword = line.split(None, 1)[0]
            if keyword == "TITLE":
                meta["title"] = line[len("TITLE"):].strip().strip('"')
            elif keyword == "LUT_3D_SIZE":
                try:
                    size = int(line.split()[1])
                except (IndexError, ValueError):
                    raise LUTFormatError(f"Line {line_no}: invalid LUT_3D_SIZE") from None
                if size < MIN_CUBE_SIZE or size > max_size:
                    raise LUTFormatError(
                        f"LUT_3D_SIZE {size} out of range ({MIN_CUBE_SIZE}-{max_size})"
                    )
                meta["size"] = size
            elif keyword == "LUT_3D_INPUT_RANGE":
                parts = line.split()
                if len(parts) != 3:
                    raise LUTFormatError(f"Line {line_no}: invalid LUT_3D_INPUT_RANGE")
                try:
                    meta["domain_min"] = float(parts[1])
                    meta["domain_max"] = float(parts[2])
                except ValueError:
                    raise LUTFormatError(f"Line {line_no}: invalid LUT_3D_INPUT_RANGE") from None
            elif keyword[0].isalpha() and keyword.isupper() and keyword not in ("NAN", "INF"):
                raise LUTFormatError(f"Line {line_no}: unknown keyword {keyword}")
            else:
                parts = line.split()
                if len(parts) != 3:
                    raise LUTFormatError(f"Line {line_no}: expected 3 values, got {len(parts)}")
                try:
                    rows.append([float(v) for v in parts])
                except ValueError:
                    raise LUTFormatError(f"Line {line_no}: invalid number in {line!r}") from None

    if meta["size"] is None:
        raise LUTFormatError("No LUT_3D_SIZE found")

    expected = meta["size"] ** 3
    if len(rows) != expected:
        raise LUTFormatError(f"Expected {expected} data lines, found {len(rows)}")

    rgb = np.asarray(rows, dtype=np.float32)
    if not np.all(np.isfinite(rgb)):
        raise LUTFormatError("Non-finite values in LUT data")

    if comments:
        meta["comment"] = "\n".join(comments)

    return rgb, meta
