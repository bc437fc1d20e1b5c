"""
Elementwise Operations
======================

In-place amplitude transforms on a single sample buffer.

All functions take a 1-D float64 ``numpy.ndarray`` and modify it in place;
an empty buffer is left untouched.

- apply_gain: multiply by a constant
- apply_offset: add a constant
- normalize: affine rescale of [min, max] onto [lo, hi]
- remove_dc: subtract the arithmetic mean

Example:
    ```python
    remove_dc(channel.samples)
    normalize(channel.samples, -1.0, 1.0)
    ```
"""

from typing import Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


def _require_buffer(buffer: np.ndarray) -> None:
    if not isinstance(buffer, np.ndarray) or buffer.ndim != 1:
        raise TypeError(
            f"buffer must be a 1-D numpy array, got {type(buffer).__name__}"
        )


def apply_gain(buffer: np.ndarray, gain: float) -> None:
    """Multiply every sample by ``gain``."""
    _require_buffer(buffer)
    if buffer.size == 0:
        return
    buffer *= gain


def apply_offset(buffer: np.ndarray, offset: float) -> None:
    """Add ``offset`` to every sample."""
    _require_buffer(buffer)
    if buffer.size == 0:
        return
    buffer += offset


def normalize(buffer: np.ndarray,
              lo: float = 0.0,
              hi: float = 1.0) -> Optional[Tuple[float, float]]:
    """
    Rescale the buffer so its observed [min, max] maps onto [lo, hi].

    Returns:
        The original (min, max), or None when the buffer is empty or
        constant and was left unchanged
    """
    _require_buffer(buffer)
    if buffer.size == 0:
        return None

    current_min = float(buffer.min())
    current_max = float(buffer.max())
    value_range = current_max - current_min
    if not value_range > 0:
        logger.debug("normalize: constant buffer left unchanged")
        return None

    buffer -= current_min
    buffer *= (hi - lo) / value_range
    buffer += lo
    return current_min, current_max


def remove_dc(buffer: np.ndarray) -> float:
    """
    Subtract the arithmetic mean.

    Returns:
        float: The removed mean (0.0 for an empty buffer)
    """
    _require_buffer(buffer)
    if buffer.size == 0:
        return 0.0

    mean = float(buffer.mean())
    buffer -= mean
    return mean
