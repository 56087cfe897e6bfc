"""
Capability string constants for PyTendency.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pytendency.core.capabilities import CAPABILITY_BATCH_QUERY

    if supports(oracle, CAPABILITY_BATCH_QUERY):
        distances = oracle.knn_distances(points, rank)
"""

# Oracle answers a whole (m, D) block of queries in one knn_distances() call
CAPABILITY_BATCH_QUERY = 'batch_query'

# Oracle runs its distance computation on a GPU device
CAPABILITY_GPU_NATIVE = 'gpu_native'

# Oracle may be queried concurrently from several threads
CAPABILITY_THREAD_SAFE = 'thread_safe'

# All capabilities as a frozenset for validation
ALL_CAPABILITIES = frozenset({
    CAPABILITY_BATCH_QUERY,
    CAPABILITY_GPU_NATIVE,
    CAPABILITY_THREAD_SAFE,
})


def supports(obj: object, capability: str) -> bool:
    """
    Capability check that tolerates objects without a supports() method.

    Third-party strategy objects only need knn_distance(); anything that
    does not implement supports() is treated as having no capabilities.
    """
    check = getattr(obj, 'supports', None)
    if check is None:
        return False
    return bool(check(capability))


__all__ = [
    'CAPABILITY_BATCH_QUERY',
    'CAPABILITY_GPU_NATIVE',
    'CAPABILITY_THREAD_SAFE',
    'ALL_CAPABILITIES',
    'supports',
]
