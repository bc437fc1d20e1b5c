"""
Notch Filter Preprocessor
=========================

Single biquad notch for power line interference (50 Hz in Europe and most
of the world, 60 Hz in North America).

Coefficients:
------------
    w0    = 2*pi*f / fs
    alpha = sin(w0) / 2
    b     = [1, -2*cos(w0), 1]
    a     = [1 + alpha, -2*cos(w0), 1 - alpha]

The difference equation runs from sample 2 onward; the first two output
samples are copies of the first two inputs rather than a proper
initial-condition solve. Buffers shorter than 4 samples are left alone.

Usage Example:
    ```python
    from eegengine.preprocessing.steps import notch_filter

    notch_filter(channel.samples, channel.sampling_rate, 50.0)
    ```
"""

from typing import Any, Dict, Optional, Tuple
import logging

import numpy as np
from scipy import signal as scipy_signal

from eegengine.core.config import get_config
from eegengine.core.exceptions import InvalidFilterParametersError
from eegengine.core.interfaces.i_preprocessor import IPreprocessor
from eegengine.utils.validation import check_positive, validate_buffer

logger = logging.getLogger(__name__)

MIN_SAMPLES = 4


def validate_notch(sampling_rate: float, freq: float) -> None:
    """
    Check that 0 < freq < sampling_rate / 2.

    Raises:
        InvalidFilterParametersError: If the notch can't be placed
    """
    if not sampling_rate > 0:
        reason = "sampling_rate must be positive"
    elif not 0 < freq < sampling_rate / 2.0:
        reason = f"notch frequency must lie in (0, {sampling_rate / 2.0}) Hz"
    else:
        return
    raise InvalidFilterParametersError(freq, freq, sampling_rate, reason)


def notch_coefficients(sampling_rate: float, freq: float) -> Tuple[np.ndarray, np.ndarray]:
    """(b, a) of the biquad notch at ``freq`` Hz."""
    w0 = 2.0 * np.pi * freq / sampling_rate
    alpha = np.sin(w0) / 2.0
    cos_w0 = np.cos(w0)

    b = np.array([1.0, -2.0 * cos_w0, 1.0])
    a = np.array([1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha])
    return b, a


def notch_filter(buffer: np.ndarray,
                 sampling_rate: float,
                 freq: Optional[float] = None) -> bool:
    """
    Notch-filter ``buffer`` in place.

    Args:
        buffer: 1-D float64 samples
        sampling_rate: Hz
        freq: Notch frequency in Hz (config ``filters.notch.freq`` if None)

    Returns:
        bool: False if the buffer was left untouched (fewer than 4 samples,
        non-positive rate, or a notch outside (0, fs/2))
    """
    if freq is None:
        freq = get_config().get_float('filters.notch.freq', 50.0)

    if buffer.size < MIN_SAMPLES or not sampling_rate > 0:
        return False
    try:
        validate_notch(sampling_rate, freq)
    except InvalidFilterParametersError as e:
        logger.warning(f"Notch skipped: {e.details}")
        return False

    b, a = notch_coefficients(sampling_rate, freq)

    # Seed the recursion with y[0] = x[0], y[1] = x[1]
    x = buffer
    zi = scipy_signal.lfiltic(b, a, y=[x[1], x[0]], x=[x[1], x[0]])
    tail, _ = scipy_signal.lfilter(b, a, x[2:], zi=zi)
    buffer[2:] = tail

    return True


class NotchFilter(IPreprocessor):
    """
    Biquad notch filter step.

    Attributes:
        _notch_freq (float): Notch frequency in Hz
        _sampling_rate (float): Signal sampling rate in Hz
    """

    def __init__(self):
        self._notch_freq: float = get_config().get_float('filters.notch.freq', 50.0)
        self._sampling_rate: Optional[float] = None
        self._is_initialized = False

    @property
    def name(self) -> str:
        return "notch_filter"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Args:
            config: 'sampling_rate' (required), 'notch_freq' (optional)
        """
        if 'sampling_rate' not in config:
            raise ValueError("sampling_rate is required for notch filter")

        self._sampling_rate = float(config['sampling_rate'])
        self._notch_freq = float(config.get('notch_freq', self._notch_freq))
        check_positive(self._sampling_rate, 'sampling_rate')
        check_positive(self._notch_freq, 'notch_freq')

        self._is_initialized = True
        logger.debug(f"NotchFilter initialized: {self._notch_freq} Hz, fs={self._sampling_rate} Hz")

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """Return a notch-filtered copy of ``data``."""
        if not self._is_initialized:
            raise RuntimeError("NotchFilter not initialized. Call initialize() first.")

        filtered = validate_buffer(data, 'data').copy()
        notch_filter(filtered, self._sampling_rate, self._notch_freq)
        return filtered

    def get_params(self) -> Dict[str, Any]:
        return {
            'notch_freq': self._notch_freq,
            'sampling_rate': self._sampling_rate
        }

    def set_params(self, **params) -> 'NotchFilter':
        for key in params:
            if key not in ('notch_freq', 'sampling_rate'):
                raise ValueError(f"Unknown notch parameter: {key}")
        if 'notch_freq' in params:
            self._notch_freq = float(params['notch_freq'])
        if 'sampling_rate' in params:
            self._sampling_rate = float(params['sampling_rate'])
        return self

    def __repr__(self) -> str:
        return f"NotchFilter(freq={self._notch_freq} Hz, fs={self._sampling_rate})"
