"""
GPU backend for the Hopkins statistic.

Sampling, aggregation and the p-value stay on the CPU; the neighbor
queries, which dominate the cost for large corpora, run on the GPU
through TorchOracle.

Requires PyTorch with CUDA or MPS support.
"""

from __future__ import annotations

from pytendency.core.result import Result
from pytendency.hopkins._common import HopkinsParams
from pytendency.hopkins.backends.cpu import CPUHopkinsBackend
from pytendency.hopkins.design import HopkinsDesign


class GPUHopkinsBackend:
    """GPU-accelerated neighbor queries for the Hopkins statistic."""

    def __init__(self, device: str = 'auto', p: float = 2.0):
        from pytendency.core.compute.device import select_device

        self._device = select_device(device)
        self._p = p

    @property
    def name(self) -> str:
        return f'gpu_{self._device}_hopkins'

    def solve(self, design: HopkinsDesign) -> Result[HopkinsParams]:
        from pytendency.neighbors.gpu import TorchOracle

        oracle = TorchOracle(design.data, device=self._device, p=self._p)
        result = CPUHopkinsBackend(oracle=oracle).solve(design)

        return Result(
            params=result.params,
            info=result.info,
            timing=result.timing,
            backend_name=self.name,
            warnings=result.warnings,
        )
