"""
Shared compute infrastructure for PyTendency.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    device: Hardware detection for the torch oracle
    timing: Execution timing utilities
    moments: Online mean/variance accumulation with parallel merge
    special: Regularized incomplete beta function
"""

from pytendency.core.compute.device import detect_gpu, select_device
from pytendency.core.compute.moments import RunningMoments
from pytendency.core.compute.special import regularized_incomplete_beta
from pytendency.core.compute.timing import Timer

__all__ = [
    # Device detection
    "detect_gpu",
    "select_device",
    # Timing
    "Timer",
    # Numerics
    "RunningMoments",
    "regularized_incomplete_beta",
]
