"""
PyTorch Device Coordinator
--------------------------
Picks the compute device used for large path simulations.
Priority order: CUDA > MPS > CPU. Selection happens once per process.
"""
import os
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

_initialized = False
_device = None
_dtype = None
_device_info = {}


def initialize() -> None:
    """Select the best available torch device and record what was found."""
    global _initialized, _device, _dtype, _device_info

    if _initialized:
        return

    import torch
    _device_info["torch_version"] = torch.__version__

    if torch.cuda.is_available():
        _device = torch.device("cuda")
        _dtype = torch.float32

        cuda_id = torch.cuda.current_device()
        _device_info.update({
            "device_type": "cuda",
            "device_name": torch.cuda.get_device_name(cuda_id),
            "device_count": torch.cuda.device_count(),
        })
        logger.info(f"PyTorch using CUDA device: {_device_info['device_name']}")

    elif hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        _device = torch.device("mps")
        _dtype = torch.float32  # MPS only supports float32

        _device_info.update({
            "device_type": "mps",
            "device_name": "Apple Metal",
        })
        logger.info("PyTorch using Apple Metal (MPS) device")

    else:
        _device = torch.device("cpu")
        _dtype = torch.float64

        _device_info.update({
            "device_type": "cpu",
            "device_name": "CPU",
            "num_threads": torch.get_num_threads(),
            "cpu_count": os.cpu_count(),
        })
        logger.info(f"PyTorch using CPU with {_device_info['num_threads']} threads")

    _initialized = True


def get_device():
    """Get the selected torch device (CUDA > MPS > CPU)."""
    if not _initialized:
        initialize()
    return _device


def get_dtype():
    """Get the floating point dtype matching the selected device."""
    if not _initialized:
        initialize()
    return _dtype


def get_device_info() -> Dict[str, Any]:
    """Return a copy of the information gathered during device selection."""
    if not _initialized:
        initialize()
    return dict(_device_info)


def clear_memory_cache() -> bool:
    """Release cached accelerator memory after a large simulation."""
    if not _initialized:
        initialize()

    import torch

    if _device.type == "cuda":
        torch.cuda.empty_cache()
        logger.debug("CUDA memory cache cleared")
    elif _device.type == "mps" and hasattr(torch.mps, "empty_cache"):
        torch.mps.empty_cache()
        logger.debug("MPS memory cache cleared")

    return True
