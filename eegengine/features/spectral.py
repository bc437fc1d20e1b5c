"""
Spectral Analysis
=================

Frequency-domain views of a single channel.

Available Functions:
-------------------
| Function          | Output                                              |
|-------------------|-----------------------------------------------------|
| power_spectrum    | |FFT| / N for bins 0..N/2 (no window, no padding)   |
| band_power        | Squared magnitudes summed into the EEG bands        |
| spectrogram       | Hann-windowed STFT in dB, (n_windows, window//2+1)  |
| spectrogram_axes  | Window start times and bin frequencies              |

Standard EEG Frequency Bands (half-open):
----------------------------------------
| Band   | Frequency (Hz) |
|--------|----------------|
| Delta  | [0.5, 4)       |
| Theta  | [4, 8)         |
| Alpha  | [8, 13)        |
| Beta   | [13, 30)       |
| Gamma  | [30, 100)      |

Band edges come from the ``spectral.bands`` config section.

Frequency Axis:
--------------
``power_spectrum`` bins are labelled ``i * fs / (2 * n_bins)``, which for
N samples is slightly below the exact ``i * fs / N``. Band assignment uses
these labels.

Usage Example:
    ```python
    from eegengine.features.spectral import band_power, spectrogram

    bp = band_power(channel.samples, channel.sampling_rate)
    print(bp.dominant_band)

    db = spectrogram(channel.samples, channel.sampling_rate, window=256, hop=64)
    ```
"""

from typing import Dict, Optional, Tuple
import logging

import numpy as np

from eegengine.core.cancellation import CancellationToken, check_cancelled
from eegengine.core.config import get_config
from eegengine.core.exceptions import InsufficientDataError
from eegengine.core.types import BandPower
from eegengine.utils.logging import ProgressCallback, ProgressReporter
from eegengine.utils.validation import check_positive

logger = logging.getLogger(__name__)


BAND_NAMES = ('delta', 'theta', 'alpha', 'beta', 'gamma')


# =============================================================================
# WORKSPACE
# =============================================================================

class FFTWorkspace:
    """
    Scoped STFT buffers: the Hann window and one reusable frame.

    Buffers exist only inside the ``with`` block and are released on every
    exit path, including exceptions and cancellation. ``is_acquired`` tells
    whether this workspace currently holds them.

    Example:
        >>> with FFTWorkspace(256) as ws:
        ...     ws.frame[:] = samples[:256]
        ...     ws.frame *= ws.window
    """

    def __init__(self, size: int):
        if size < 2:
            raise ValueError(f"FFT workspace size must be >= 2, got {size}")
        self.size = int(size)
        self.window: Optional[np.ndarray] = None
        self.frame: Optional[np.ndarray] = None
        self.window_sum = 0.0

    @property
    def is_acquired(self) -> bool:
        return self.frame is not None

    def __enter__(self) -> 'FFTWorkspace':
        i = np.arange(self.size)
        self.window = 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (self.size - 1)))
        self.window_sum = float(self.window.sum())
        self.frame = np.empty(self.size, dtype=np.float64)
        logger.debug(f"Acquired FFT workspace ({self.size} points)")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.window = None
        self.frame = None
        logger.debug(f"Released FFT workspace ({self.size} points)")
        return False


# =============================================================================
# POWER SPECTRUM
# =============================================================================

def power_spectrum(buffer: np.ndarray, sampling_rate: float) -> np.ndarray:
    """
    Magnitude spectrum ``|X[i]| / N`` for i in 0..N/2.

    Returns an empty array for an empty buffer or a non-positive rate.
    """
    data = np.asarray(buffer, dtype=np.float64)
    if data.size == 0 or not sampling_rate > 0:
        return np.empty(0)
    return np.abs(np.fft.rfft(data)) / data.size


def spectrum_frequencies(n_bins: int, sampling_rate: float) -> np.ndarray:
    """Frequency label of each ``power_spectrum`` bin: ``i * fs / (2 * n_bins)``."""
    if n_bins <= 0:
        return np.empty(0)
    return np.arange(n_bins) * (sampling_rate / (2.0 * n_bins))


def _configured_bands() -> Dict[str, Tuple[float, float]]:
    section = get_config().get_section('spectral.bands')
    return {name: (float(section[name][0]), float(section[name][1])) for name in BAND_NAMES}


def band_power(buffer: np.ndarray, sampling_rate: float) -> BandPower:
    """
    Sum squared spectrum magnitudes into the five EEG bands.

    Each bin goes to the first band whose [low, high) range contains its
    frequency; bins outside every band are ignored.
    """
    power = BandPower()
    spectrum = power_spectrum(buffer, sampling_rate)
    if spectrum.size == 0:
        return power

    freqs = spectrum_frequencies(spectrum.size, sampling_rate)
    squared = spectrum ** 2
    assigned = np.zeros(spectrum.size, dtype=bool)

    for name, (low, high) in _configured_bands().items():
        in_band = (freqs >= low) & (freqs < high) & ~assigned
        setattr(power, name, float(squared[in_band].sum()))
        assigned |= in_band

    return power


# =============================================================================
# SPECTROGRAM
# =============================================================================

def spectrogram(buffer: np.ndarray,
                sampling_rate: float,
                window: Optional[int] = None,
                hop: Optional[int] = None,
                cancel_token: Optional[CancellationToken] = None,
                progress_callback: Optional[ProgressCallback] = None) -> np.ndarray:
    """
    Short-time power spectrum in decibels.

    Each frame of ``window`` samples, advanced by ``hop``, is multiplied by a
    Hann window; bin power is ``|X|^2 / (sum of window)^2`` and is reported
    as ``10*log10(power)``, or the dB floor when power is at or below the
    power floor.

    Args:
        buffer: 1-D samples
        sampling_rate: Hz
        window: Frame length (config ``spectral.window`` if None)
        hop: Frame advance (config ``spectral.hop`` if None)
        cancel_token: Checked once per frame
        progress_callback: Called with (frame, n_frames) after each frame

    Returns:
        np.ndarray: Shape (n_windows, window // 2 + 1)

    Raises:
        ValueError: window < 2, hop < 1 or non-positive sampling rate
        InsufficientDataError: Fewer samples than one window
        CancelledOperationError: If cancelled; no partial result is returned
    """
    config = get_config()
    window = int(config.get_int('spectral.window', 256) if window is None else window)
    hop = int(config.get_int('spectral.hop', 64) if hop is None else hop)
    power_floor = config.get_float('spectral.power_floor', 1e-10)
    db_floor = config.get_float('spectral.db_floor', -100.0)

    if window < 2:
        raise ValueError(f"window must be >= 2, got {window}")
    if hop < 1:
        raise ValueError(f"hop must be >= 1, got {hop}")
    check_positive(sampling_rate, 'sampling_rate')

    data = np.asarray(buffer, dtype=np.float64)
    n_windows = (data.size - window) // hop + 1 if data.size >= window else 0
    if n_windows < 1:
        raise InsufficientDataError(data.size, window, hop)

    result = np.empty((n_windows, window // 2 + 1))
    progress = ProgressReporter(n_windows, desc="Spectrogram", callback=progress_callback,
                                logger=logger)

    with FFTWorkspace(window) as ws:
        scale = ws.window_sum ** 2
        for k in range(n_windows):
            check_cancelled(cancel_token, "spectrogram", f"window {k}/{n_windows}")

            start = k * hop
            np.multiply(data[start:start + window], ws.window, out=ws.frame)
            power = np.abs(np.fft.rfft(ws.frame)) ** 2 / scale

            row = np.full(power.shape, db_floor)
            audible = power > power_floor
            row[audible] = 10.0 * np.log10(power[audible])
            result[k] = row

            progress.update()

    progress.finish()
    logger.debug(f"Spectrogram: {n_windows} windows x {window // 2 + 1} bins")
    return result


def spectrogram_axes(n_windows: int,
                     window: int,
                     hop: int,
                     sampling_rate: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Axes for a spectrogram matrix.

    Returns:
        (times, freqs): window start times ``k * hop / fs`` and bin
        frequencies ``i * fs / window``
    """
    check_positive(sampling_rate, 'sampling_rate')
    times = np.arange(n_windows) * (hop / sampling_rate)
    freqs = np.arange(window // 2 + 1) * (sampling_rate / window)
    return times, freqs
