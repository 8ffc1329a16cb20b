"""Pipeline runner: lattice generation, external transform, .cube export.

This is the single entry point for the CLI and for embedding applications.
"""

from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from lutlattice.core.lattice import generate_lattice
from lutlattice.core.types import (
    CancelCheck,
    LatticeConfig,
    LatticeResult,
    ProgressCallback,
)
from lutlattice.errors import PipelineCancelledError, PipelineError
from lutlattice.io.cube import write_cube_lattice

logger = logging.getLogger(__name__)

Transform = Callable[[np.ndarray], np.ndarray]
"""Maps an (N^3, 4) RGBA buffer to an (N^3, C) buffer with C >= 3."""


def _check_cancel(cancel_check: Optional[CancelCheck]) -> None:
    """Raise if cancellation requested."""
    if cancel_check is not None and cancel_check():
        raise PipelineCancelledError("Pipeline cancelled by user")


def _emit_progress(
    callback: Optional[ProgressCallback],
    stage: str,
    fraction: float,
    message: str = "",
) -> None:
    """Emit progress update if callback is provided."""
    if callback is not None:
        callback(stage, fraction, message)


def load_transform(target: str) -> Transform:
    """Resolve a ``"package.module:function"`` string to a callable."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise PipelineError(
            f"Transform must be given as 'module:function', got {target!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PipelineError(f"Cannot import transform module {module_name!r}: {e}") from e

    func = module
    for part in attr.split("."):
        try:
            func = getattr(func, part)
        except AttributeError:
            raise PipelineError(f"Module {module_name!r} has no attribute {attr!r}") from None
    if not callable(func):
        raise PipelineError(f"Transform {target!r} is not callable")
    return func


def run_lattice(
    config: LatticeConfig,
    output_path: Path,
    transform: Optional[Transform] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_check: Optional[CancelCheck] = None,
) -> LatticeResult:
    """Generate a lattice, transform it, and write the result as a .cube LUT.

    Stages:
        1. Generate: build the (N^3, 4) lattice buffer
        2. Transform: apply the external transform (identity if None)
        3. Export: write the .cube file

    Args:
        config: Lattice configuration shared by generation and export.
        output_path: Destination .cube path. Must not exist.
        transform: Callable applied to the lattice buffer.
        progress_callback: (stage_name, fraction, message) callback.
        cancel_check: Returns True if pipeline should be cancelled.

    Returns:
        LatticeResult with the written path and stage timings.
    """
    t_start = time.perf_counter()
    diagnostics = {"size": config.size, "num_points": config.num_points}

    # ---------------------------------------------------------------
    # Stage 1: Generate
    # ---------------------------------------------------------------
    _emit_progress(progress_callback, "generate", 0.0, "Building lattice...")
    _check_cancel(cancel_check)

    t0 = time.perf_counter()
    pixels = generate_lattice(config)
    diagnostics["generate_time"] = time.perf_counter() - t0

    _emit_progress(progress_callback, "generate", 1.0, f"{config.num_points:,} points")
    logger.info("Generate: %.2fs", diagnostics["generate_time"])

    # ---------------------------------------------------------------
    # Stage 2: Transform
    # ---------------------------------------------------------------
    _emit_progress(progress_callback, "transform", 0.0, "Applying transform...")
    _check_cancel(cancel_check)

    t0 = time.perf_counter()
    if transform is not None:
        try:
            result = transform(pixels)
        except Exception as e:
            raise PipelineError(f"Transform failed: {e}") from e
        if result is None:
            raise PipelineError("Transform returned None")
        pixels = np.asarray(result)
        diagnostics["transform"] = getattr(transform, "__name__", repr(transform))
    else:
        diagnostics["transform"] = "identity"
    diagnostics["transform_time"] = time.perf_counter() - t0

    _emit_progress(progress_callback, "transform", 1.0, "")
    logger.info("Transform (%s): %.2fs", diagnostics["transform"], diagnostics["transform_time"])

    # ---------------------------------------------------------------
    # Stage 3: Export
    # ---------------------------------------------------------------
    _emit_progress(progress_callback, "export", 0.0, "Writing LUT...")
    _check_cancel(cancel_check)

    t0 = time.perf_counter()
    written = write_cube_lattice(output_path, pixels, config)
    diagnostics["export_time"] = time.perf_counter() - t0

    _emit_progress(progress_callback, "export", 1.0, str(written))
    logger.info("Export: %.2fs -> %s", diagnostics["export_time"], written)

    total_time = time.perf_counter() - t_start
    diagnostics["total_time"] = total_time
    logger.info("Pipeline complete: %.2fs total", total_time)

    return LatticeResult(config=config, output_path=written, diagnostics=diagnostics)
