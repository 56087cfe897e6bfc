"""
Hardware detection for the GPU neighbor oracle.

torch is imported lazily so that CPU-only installs never pay for it.
"""

from typing import Literal

DeviceType = Literal['cpu', 'cuda', 'mps']


def detect_gpu() -> DeviceType | None:
    """
    Detect an available GPU, if any.

    Priority: CUDA > MPS (Apple Silicon). Returns None when torch is not
    installed or no accelerator is present.
    """
    try:
        import torch
    except ImportError:
        return None

    if torch.cuda.is_available():
        return 'cuda'
    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        return 'mps'
    return None


def select_device(prefer: str = 'auto') -> DeviceType:
    """
    Resolve a device preference to a concrete torch device type.

    Args:
        prefer: 'auto' (GPU required, CUDA before MPS), 'cpu', 'cuda'
            or 'mps'

    Returns:
        The device type to place tensors on

    Raises:
        RuntimeError: If a GPU is required but none is available
        ValueError: If prefer is not a known device
    """
    if prefer == 'cpu':
        return 'cpu'
    if prefer not in ('auto', 'cuda', 'mps'):
        raise ValueError(
            f"Unknown device: {prefer!r}. Use 'auto', 'cpu', 'cuda' or 'mps'."
        )

    gpu = detect_gpu()
    if gpu is None:
        raise RuntimeError(
            "GPU requested but no GPU available. "
            "Ensure PyTorch is installed with CUDA/MPS support."
        )
    if prefer != 'auto' and prefer != gpu:
        if prefer == 'cuda':
            raise RuntimeError("CUDA requested but only MPS is available")
        import torch
        if not (hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()):
            raise RuntimeError("MPS requested but it is not available")
        return 'mps'
    return gpu
