"""
Bandpass Filter Preprocessor
============================

Zero-phase Butterworth bandpass filtering of a single channel.

Filter Design:
-------------
A 4th-order Butterworth bandpass (second-order sections) designed with
``scipy.signal.butter``. Designing the coefficients is the expensive step,
so each ``BandpassFilter`` instance caches the design for the last
(sampling_rate, low_freq, high_freq) it saw and only re-designs when one
of them changes. The cache is per instance: two callers filtering at
different settings should hold two filters.

Application:
-----------
Zero phase by explicit forward/backward passes: filter, reverse, filter,
reverse. Each pass starts from a zero filter state, so an all-zero input
stays all-zero. The whole buffer must be in memory.

Usage Example:
    ```python
    from eegengine.preprocessing.steps import BandpassFilter

    bandpass = BandpassFilter()
    ok = bandpass.apply(channel.samples, 256.0, 1.0, 40.0)   # in place

    bandpass.initialize({'sampling_rate': 256, 'low_freq': 1, 'high_freq': 40})
    filtered = bandpass.process(raw)                         # copy
    ```
"""

from typing import Any, Dict, Optional, Tuple
import logging

import numpy as np
from scipy import signal as scipy_signal

from eegengine.core.config import get_config
from eegengine.core.exceptions import InvalidFilterParametersError
from eegengine.core.interfaces.i_preprocessor import IPreprocessor
from eegengine.utils.validation import validate_buffer, validate_config_value

logger = logging.getLogger(__name__)


def validate_band(sampling_rate: float, low_freq: float, high_freq: float) -> None:
    """
    Check that 0 < low_freq < high_freq < sampling_rate / 2.

    Raises:
        InvalidFilterParametersError: If the band is unusable
    """
    if not sampling_rate > 0:
        reason = "sampling_rate must be positive"
    elif not low_freq > 0:
        reason = "low_freq must be positive"
    elif not high_freq > low_freq:
        reason = "high_freq must be greater than low_freq"
    elif not high_freq < sampling_rate / 2.0:
        reason = f"high_freq must be below the Nyquist frequency ({sampling_rate / 2.0} Hz)"
    else:
        return
    raise InvalidFilterParametersError(low_freq, high_freq, sampling_rate, reason)


class BandpassFilter(IPreprocessor):
    """
    Butterworth bandpass with a per-instance design cache.

    Attributes:
        order (int): Butterworth prototype order
        design_count (int): Number of coefficient designs actually computed
        _design_key (Tuple): (fs, low, high) of the cached design
        _sos (np.ndarray): Cached second-order sections
    """

    def __init__(self, order: Optional[int] = None):
        if order is None:
            order = get_config().get_int('filters.bandpass.order', 4)
        if order < 1:
            raise ValueError(f"order must be >= 1, got {order}")

        self.order = int(order)
        self.design_count = 0
        self._design_key: Optional[Tuple[float, float, float]] = None
        self._sos: Optional[np.ndarray] = None

        # Parameters used by process()
        self._sampling_rate: Optional[float] = None
        self._low_freq: Optional[float] = None
        self._high_freq: Optional[float] = None
        self._is_initialized = False

    @property
    def name(self) -> str:
        return "bandpass_filter"

    # =========================================================================
    # DESIGN
    # =========================================================================

    def design(self, sampling_rate: float, low_freq: float, high_freq: float) -> np.ndarray:
        """
        Return SOS coefficients for the band, re-designing only if the
        parameters differ from the cached design.

        Raises:
            ConfigValidationError: If 'order' is not a positive integer
            InvalidFilterParametersError: If the band is unusable
        """
        key = (float(sampling_rate), float(low_freq), float(high_freq))
        if key == self._design_key and self._sos is not None:
            logger.debug(f"Bandpass design cache hit for {key}")
            return self._sos

        validate_band(*key)

        self._sos = scipy_signal.butter(
            self.order,
            [key[1], key[2]],
            btype='bandpass',
            fs=key[0],
            output='sos'
        )
        self._design_key = key
        self.design_count += 1

        logger.debug(
            f"Designed Butterworth bandpass: {low_freq}-{high_freq} Hz, "
            f"order={self.order}, fs={sampling_rate} Hz"
        )
        return self._sos

    # =========================================================================
    # APPLICATION
    # =========================================================================

    def apply(self,
              buffer: np.ndarray,
              sampling_rate: float,
              low_freq: float,
              high_freq: float) -> bool:
        """
        Filter ``buffer`` in place, zero phase.

        Returns:
            bool: False if nothing was done (empty buffer, non-positive
            rate or an invalid band, the latter logged as a warning)
        """
        if buffer.size == 0 or not sampling_rate > 0:
            return False

        try:
            sos = self.design(sampling_rate, low_freq, high_freq)
        except InvalidFilterParametersError as e:
            logger.warning(f"Invalid bandpass frequencies: {e.message} ({e.details})")
            return False

        buffer[:] = self._zero_phase(sos, buffer)
        return True

    @staticmethod
    def _zero_phase(sos: np.ndarray, data: np.ndarray) -> np.ndarray:
        forward = scipy_signal.sosfilt(sos, data)
        backward = scipy_signal.sosfilt(sos, forward[::-1])
        return backward[::-1]

    # =========================================================================
    # IPreprocessor
    # =========================================================================

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Args:
            config: Keys 'sampling_rate' (required), 'low_freq',
                'high_freq' (required), 'order' (optional)

        Raises:
            ValueError: If a required key is missing
            ConfigValidationError: If 'order' is not a positive integer
            InvalidFilterParametersError: If the band is unusable
        """
        for key in ('sampling_rate', 'low_freq', 'high_freq'):
            if key not in config:
                raise ValueError(f"{key} is required for bandpass filter")

        if 'order' in config:
            validate_config_value(config, 'order', int, min_val=1)
            if config['order'] != self.order:
                self.order = config['order']
                self._design_key = None

        self._sampling_rate = float(config['sampling_rate'])
        self._low_freq = float(config['low_freq'])
        self._high_freq = float(config['high_freq'])

        self.design(self._sampling_rate, self._low_freq, self._high_freq)
        self._is_initialized = True

        logger.debug(
            f"BandpassFilter initialized: {self._low_freq}-{self._high_freq} Hz, "
            f"fs={self._sampling_rate} Hz"
        )

    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """Return a zero-phase filtered copy of ``data``."""
        if not self._is_initialized:
            raise RuntimeError("BandpassFilter not initialized. Call initialize() first.")

        filtered = validate_buffer(data, 'data').copy()
        if filtered.size:
            sos = self.design(self._sampling_rate, self._low_freq, self._high_freq)
            filtered[:] = self._zero_phase(sos, filtered)
        return filtered

    def get_params(self) -> Dict[str, Any]:
        return {
            'order': self.order,
            'sampling_rate': self._sampling_rate,
            'low_freq': self._low_freq,
            'high_freq': self._high_freq
        }

    def set_params(self, **params) -> 'BandpassFilter':
        unknown = set(params) - {'order', 'sampling_rate', 'low_freq', 'high_freq'}
        if unknown:
            raise ValueError(f"Unknown bandpass parameter(s): {sorted(unknown)}")

        if 'order' in params:
            self.order = int(params['order'])
            self._design_key = None
        for key in ('sampling_rate', 'low_freq', 'high_freq'):
            if key in params:
                setattr(self, f'_{key}', float(params[key]))

        if self._is_initialized:
            self.design(self._sampling_rate, self._low_freq, self._high_freq)
        return self

    def __repr__(self) -> str:
        if self._design_key is None:
            return f"BandpassFilter(order={self.order})"
        fs, low, high = self._design_key
        return f"BandpassFilter(order={self.order}, band={low}-{high} Hz, fs={fs} Hz)"
