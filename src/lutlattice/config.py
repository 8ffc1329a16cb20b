"""Default configuration, constants, and limits for LutLattice."""

# --- Lattice size limits ---
MIN_CUBE_SIZE = 3  # Smallest lattice (3^3 = 27 points)
MAX_CUBE_SIZE = 300  # Default largest lattice (300^3 = 27M points, ~430 MB as RGBA float32)
CUBE_FILE_EXTRA_LINES = 200  # Header allowance on top of N^3 data lines when parsing

# --- Domain defaults ---
DEFAULT_DOMAIN_MIN = 0.0
DEFAULT_DOMAIN_MAX = 1.0
ALPHA_VALUE = 1.0  # Constant alpha carried through the transform stage

# --- Number formatting ---
DEFAULT_PRECISION = 6  # Fractional digits per value
MAX_PRECISION = 17  # Beyond this float64 carries no further information

# --- Environment overrides ---
ENV_DOMAIN_MIN = "CUBE_MIN"
ENV_DOMAIN_MAX = "CUBE_MAX"
ENV_PRECISION = "CUBE_FLOAT_LENGTH"
ENV_COMMENT = "CUBE_COMMENT"

# --- .cube header ---
CUBE_TITLE = "Generated by modified ctlrender from Color Transformation Language files"
COMMENT_PREFIX = "## "
