"""
PyTendency: clustering tendency statistics for Python.

Estimates whether a point set departs from uniform randomness, with
pluggable nearest-neighbor oracles (KD-tree, brute force, GPU).

Submodules:
    hopkins: Hopkins statistic with Beta(S, S) significance
    neighbors: Nearest-neighbor oracles
    core: Exceptions, results, statistics channel, result hierarchy
"""

__version__ = "0.1.0"

from pytendency import hopkins
from pytendency import neighbors

__all__ = [
    "__version__",
    "hopkins",
    "neighbors",
]
