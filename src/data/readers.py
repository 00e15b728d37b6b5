"""
Raw trace input.

Traces are flat binary arrays of fixed-width signed integer samples (16-bit,
big-endian by default, as in PhysioNet ``.dat`` exports) with an externally
supplied scale factor.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from src.core.exceptions import DataValidationError

logger = logging.getLogger(__name__)


def read_int16_trace(
    path: Union[str, Path],
    scale: float = 1.0,
    byteorder: str = ">",
) -> np.ndarray:
    """
    Read a 16-bit signed integer trace and scale it to floats.
    
    Args:
        path: Binary file of consecutive samples
        scale: Multiplier applied to every raw sample
        byteorder: ">" for big-endian, "<" for little-endian
    
    Returns:
        1-D float array, one entry per complete sample
    
    Raises:
        DataValidationError: If the file is missing or byteorder is invalid
    """
    filepath = Path(path)
    if not filepath.exists():
        raise DataValidationError(f"Trace file not found: {filepath}")
    if byteorder not in (">", "<"):
        raise DataValidationError(f"Unsupported byte order: {byteorder!r}")

    raw = filepath.read_bytes()
    if len(raw) % 2:
        # Odd trailing byte is not a complete sample
        logger.warning(f"Ignoring trailing byte in {filepath}")
        raw = raw[:-1]

    samples = np.frombuffer(raw, dtype=np.dtype(f"{byteorder}i2"))
    logger.info(f"Read {len(samples)} samples from {filepath}")
    return samples.astype(float) * scale
