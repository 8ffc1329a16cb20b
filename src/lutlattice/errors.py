"""Custom exception hierarchy for LutLattice."""


class LutLatticeError(Exception):
    """Base exception for all LutLattice errors."""


class ValidationError(LutLatticeError):
    """Input validation failures."""


class InvalidResolutionError(ValidationError):
    """Lattice size token is not an integer or is out of range."""


class InvalidConfigurationError(ValidationError):
    """Malformed domain, precision, or other configuration override."""


class ExportError(LutLatticeError):
    """Errors during LUT export."""


class OutputAlreadyExistsError(ExportError):
    """Target LUT file already exists. Existing files are never overwritten."""


class OutputUnwritableError(ExportError):
    """Target LUT file could not be created."""


class BufferSizeMismatchError(ExportError):
    """Pixel buffer shape does not match the configured lattice size."""


class LUTFormatError(ExportError):
    """Invalid or corrupted LUT file format."""


class PipelineError(LutLatticeError):
    """Errors during pipeline execution."""


class PipelineCancelledError(PipelineError):
    """Pipeline was cancelled by the user."""
