"""
GPU nearest-neighbor oracle.

TorchOracle keeps the corpus on a CUDA or MPS device and answers batched
k-th neighbor queries with torch.cdist + torch.topk. Queries are processed
in chunks to bound the (chunk, n) distance matrix.

MPS has no float64 support, so MPS runs in float32; distances then agree
with the CPU oracles only to single precision.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pytendency.core.capabilities import CAPABILITY_BATCH_QUERY, CAPABILITY_GPU_NATIVE
from pytendency.core.compute.device import select_device
from pytendency.core.validation import check_points
from pytendency.neighbors.oracles import as_queries, check_rank

logger = logging.getLogger(__name__)


class TorchOracle:
    """
    k-th nearest neighbor distances on a torch device.

    Args:
        data: Corpus, shape (n, D)
        device: 'auto' (CUDA, then MPS), 'cuda', 'mps' or 'cpu'
        p: Minkowski norm passed to torch.cdist
        chunk_size: Number of queries per cdist call
    """

    def __init__(
        self,
        data: ArrayLike,
        device: str = 'auto',
        p: float = 2.0,
        chunk_size: int = 4096,
    ):
        import torch

        self._torch = torch
        points = check_points(data, 'data')
        self._n, self._dim = points.shape
        self._device = select_device(device)
        self._dtype = torch.float32 if self._device == 'mps' else torch.float64
        self._p = float(p)
        self._chunk_size = int(chunk_size)
        self._corpus = torch.as_tensor(points, dtype=self._dtype, device=self._device)
        logger.debug("Moved %d points to %s (%s)", self._n, self._device, self._dtype)

    @property
    def name(self) -> str:
        return f'torch_{self._device}'

    @property
    def device(self) -> str:
        return self._device

    @property
    def n_points(self) -> int:
        return self._n

    def supports(self, capability: str) -> bool:
        if capability == CAPABILITY_BATCH_QUERY:
            return True
        return capability == CAPABILITY_GPU_NATIVE and self._device != 'cpu'

    def synchronize(self) -> None:
        """Block until queued device work has finished."""
        if self._device == 'cuda':
            self._torch.cuda.synchronize()
        elif self._device == 'mps':
            self._torch.mps.synchronize()

    def knn_distance(self, point: ArrayLike, rank: int) -> float:
        return float(self.knn_distances(point, rank)[0])

    def knn_distances(self, points: ArrayLike, rank: int) -> NDArray[np.float64]:
        torch = self._torch
        rank = check_rank(rank, self._n)
        queries = as_queries(points, self._dim)

        out = np.empty(queries.shape[0], dtype=np.float64)
        with torch.no_grad():
            for start in range(0, queries.shape[0], self._chunk_size):
                block = torch.as_tensor(
                    queries[start:start + self._chunk_size],
                    dtype=self._dtype,
                    device=self._device,
                )
                # Matmul-based Euclidean distances lose the exact zero self
                # distance that the real-data sample relies on
                distances = torch.cdist(
                    block, self._corpus, p=self._p,
                    compute_mode='donot_use_mm_for_euclid_dist',
                )
                kth = torch.topk(distances, rank, dim=1, largest=False).values[:, -1]
                out[start:start + block.shape[0]] = kth.cpu().numpy()
        return out
