"""Tests for the lattice pipeline runner."""

from __future__ import annotations

import numpy as np
import pytest

from lutlattice.core.types import LatticeConfig
from lutlattice.errors import (
    BufferSizeMismatchError,
    InvalidResolutionError,
    OutputAlreadyExistsError,
    PipelineCancelledError,
    PipelineError,
)
from lutlattice.io.cube import read_cube
from lutlattice.pipeline.runner import load_transform, run_lattice


def _gain(pixels):
    out = pixels.copy()
    out[:, :3] *= 0.5
    return out


class TestRunLattice:
    """Tests for run_lattice end-to-end."""

    def test_identity_pipeline(self, config_5, tmp_cube_path, read_body):
        result = run_lattice(config_5, tmp_cube_path)

        assert result.output_path == tmp_cube_path
        assert result.config is config_5
        assert result.diagnostics["transform"] == "identity"
        assert result.diagnostics["num_points"] == 125
        body = read_body(tmp_cube_path)
        assert body[0] == "0.000000 0.000000 0.000000"
        assert body[-1] == "1.000000 1.000000 1.000000"

    def test_transform_applied(self, config_3, tmp_cube_path):
        result = run_lattice(config_3, tmp_cube_path, transform=_gain)

        rgb, meta = read_cube(tmp_cube_path)
        assert meta["size"] == 3
        assert rgb.max() == pytest.approx(0.5)
        assert result.diagnostics["transform"] == "_gain"

    def test_transform_sees_lattice(self, config_3, tmp_cube_path):
        seen = {}

        def capture(pixels):
            seen["shape"] = pixels.shape
            seen["alpha"] = float(pixels[:, 3].min())
            return pixels

        run_lattice(config_3, tmp_cube_path, transform=capture)
        assert seen == {"shape": (27, 4), "alpha": 1.0}

    def test_transform_failure_wrapped(self, config_3, tmp_cube_path):
        def broken(pixels):
            raise RuntimeError("ctl error")

        with pytest.raises(PipelineError, match="Transform failed: ctl error"):
            run_lattice(config_3, tmp_cube_path, transform=broken)
        assert not tmp_cube_path.exists()

    def test_transform_returning_none(self, config_3, tmp_cube_path):
        with pytest.raises(PipelineError, match="returned None"):
            run_lattice(config_3, tmp_cube_path, transform=lambda p: None)

    def test_transform_changing_cardinality(self, config_3, tmp_cube_path):
        with pytest.raises(BufferSizeMismatchError):
            run_lattice(config_3, tmp_cube_path, transform=lambda p: p[:10])
        assert not tmp_cube_path.exists()

    def test_existing_output(self, config_3, tmp_cube_path):
        tmp_cube_path.write_text("keep\n")
        with pytest.raises(OutputAlreadyExistsError):
            run_lattice(config_3, tmp_cube_path)
        assert tmp_cube_path.read_text() == "keep\n"

    def test_progress_callback(self, config_3, tmp_cube_path):
        stages_seen = []

        def on_progress(stage, fraction, message):
            stages_seen.append((stage, fraction))

        run_lattice(config_3, tmp_cube_path, progress_callback=on_progress)

        stages = [s for s, _ in stages_seen]
        assert stages.index("generate") < stages.index("transform") < stages.index("export")
        assert ("export", 1.0) in stages_seen

    def test_cancellation(self, config_3, tmp_cube_path):
        with pytest.raises(PipelineCancelledError):
            run_lattice(config_3, tmp_cube_path, cancel_check=lambda: True)
        assert not tmp_cube_path.exists()

    def test_timings_recorded(self, config_3, tmp_cube_path):
        result = run_lattice(config_3, tmp_cube_path)
        for key in ("generate_time", "transform_time", "export_time", "total_time"):
            assert result.diagnostics[key] >= 0.0


class TestLoadTransform:
    """Tests for resolving transform callables by name."""

    def test_resolves_function(self):
        func = load_transform("numpy:square")
        assert func is np.square

    def test_nested_attribute(self):
        assert load_transform("numpy:linalg.norm") is np.linalg.norm

    @pytest.mark.parametrize("spec", ["numpy", "numpy:", ":square"])
    def test_bad_spec(self, spec):
        with pytest.raises(PipelineError, match="module:function"):
            load_transform(spec)

    def test_missing_module(self):
        with pytest.raises(PipelineError, match="Cannot import"):
            load_transform("no_such_module_xyz:run")

    def test_missing_attribute(self):
        with pytest.raises(PipelineError, match="no attribute"):
            load_transform("numpy:no_such_function_xyz")

    def test_not_callable(self):
        with pytest.raises(PipelineError, match="not callable"):
            load_transform("numpy:pi")


class TestSizeLimit:
    """The size limit chosen at config time applies to the whole run."""

    def test_raised_limit_reaches_generation(self, small_default_limit, tmp_cube_path, read_body):
        from lutlattice.core.environment import load_config

        config = load_config("9", environ={}, max_size=12)
        assert config.max_size == 12

        result = run_lattice(config, tmp_cube_path)
        assert result.output_path == tmp_cube_path
        assert len(read_body(tmp_cube_path)) == 9 ** 3

    def test_default_limit_applies(self, small_default_limit, tmp_cube_path):
        with pytest.raises(InvalidResolutionError, match=r"out of range \(3-8\)"):
            run_lattice(LatticeConfig(size=9), tmp_cube_path)
        assert not tmp_cube_path.exists()

    def test_lowered_limit(self, tmp_cube_path):
        with pytest.raises(InvalidResolutionError, match=r"\(3-4\)"):
            run_lattice(LatticeConfig(size=5, max_size=4), tmp_cube_path)
        assert not tmp_cube_path.exists()
