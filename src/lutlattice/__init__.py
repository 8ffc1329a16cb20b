"""LutLattice: synthetic RGB lattice generation and .cube LUT export."""

__version__ = "0.1.0"
