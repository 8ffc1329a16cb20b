"""Build a LatticeConfig from a size token and environment overrides.

Recognized variables:
    CUBE_MIN, CUBE_MAX   -- domain bounds, used only when both are set
    CUBE_FLOAT_LENGTH    -- fractional digits in the output
    CUBE_COMMENT         -- free-text comment for the .cube header
"""

from __future__ import annotations

import logging
import math
import os
from typing import Mapping, Optional

from lutlattice.config import (
    DEFAULT_DOMAIN_MAX,
    DEFAULT_DOMAIN_MIN,
    DEFAULT_PRECISION,
    ENV_COMMENT,
    ENV_DOMAIN_MAX,
    ENV_DOMAIN_MIN,
    ENV_PRECISION,
)
from lutlattice.core.lattice import parse_resolution
from lutlattice.core.types import LatticeConfig
from lutlattice.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError:
        raise InvalidConfigurationError(
            f"Invalid {name} environment variable: {raw!r}"
        ) from None
    if not math.isfinite(value):
        raise InvalidConfigurationError(
            f"Invalid {name} environment variable: {raw!r} is not finite"
        )
    return value


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidConfigurationError(
            f"Invalid {name} environment variable: {raw!r}"
        ) from None


def read_overrides(environ: Optional[Mapping[str, str]] = None) -> dict:
    """Read domain, precision, and comment overrides from the environment.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        Dict with any of ``domain_min``, ``domain_max``, ``precision``,
        ``comment`` that were set. Missing keys mean "use the default".

    Raises:
        InvalidConfigurationError: If a set value cannot be parsed.
    """
    env = os.environ if environ is None else environ
    overrides: dict = {}

    raw_min = env.get(ENV_DOMAIN_MIN)
    raw_max = env.get(ENV_DOMAIN_MAX)
    if raw_min is not None and raw_max is not None:
        overrides["domain_min"] = _parse_float(ENV_DOMAIN_MIN, raw_min)
        overrides["domain_max"] = _parse_float(ENV_DOMAIN_MAX, raw_max)
    elif raw_min is not None or raw_max is not None:
        logger.warning(
            "Only one of %s/%s is set, keeping default domain [%g, %g]",
            ENV_DOMAIN_MIN, ENV_DOMAIN_MAX, DEFAULT_DOMAIN_MIN, DEFAULT_DOMAIN_MAX,
        )

    raw_precision = env.get(ENV_PRECISION)
    if raw_precision is not None:
        overrides["precision"] = _parse_int(ENV_PRECISION, raw_precision)

    comment = env.get(ENV_COMMENT)
    if comment is not None:
        overrides["comment"] = comment

    return overrides


def load_config(
    token: str,
    environ: Optional[Mapping[str, str]] = None,
    max_size: Optional[int] = None,
    **explicit,
) -> LatticeConfig:
    """Create the lattice configuration for a run.

    Keyword arguments that are not None (``domain_min``, ``domain_max``,
    ``precision``, ``comment``) take priority over the environment.

    Args:
        token: Lattice size token, e.g. ``"33"``.
        environ: Environment mapping. Defaults to ``os.environ``.
        max_size: Largest accepted lattice size. None means MAX_CUBE_SIZE.
            Stored in the config so generation applies the same limit.

    Returns:
        Validated LatticeConfig.
    """
    size = parse_resolution(token, max_size)

    settings = {
        "domain_min": DEFAULT_DOMAIN_MIN,
        "domain_max": DEFAULT_DOMAIN_MAX,
        "precision": DEFAULT_PRECISION,
        "comment": None,
    }
    settings.update(read_overrides(environ))

    unknown = set(explicit) - set(settings)
    if unknown:
        raise TypeError(f"Unexpected configuration keys: {sorted(unknown)}")
    settings.update({k: v for k, v in explicit.items() if v is not None})

    config = LatticeConfig(size=size, max_size=max_size, **settings)
    if not config.is_default_domain:
        logger.info("Cube domain: min %g, max %g", config.domain_min, config.domain_max)
    return config
