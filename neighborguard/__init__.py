"""NeighborGuard: neighborhood-safety event reporting backend."""

__version__ = "0.1.0"
