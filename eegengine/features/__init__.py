"""
Features Module
===============

Read-only analysis of channel buffers.

Available Modules:
-----------------
- spectral: power spectrum, EEG band power, STFT spectrogram
- statistics: mean, standard deviation, min/max, time windows

Example Usage:
    ```python
    from eegengine.features import band_power, compute_channel_statistics

    bp = band_power(channel.samples, channel.sampling_rate)
    stats = compute_channel_statistics(0, channel)
    ```
"""

from eegengine.features.spectral import (
    BAND_NAMES,
    FFTWorkspace,
    power_spectrum,
    spectrum_frequencies,
    band_power,
    spectrogram,
    spectrogram_axes,
)

from eegengine.features.statistics import (
    channel_mean,
    channel_std,
    compute_channel_statistics,
    extract_time_window,
)

__all__ = [
    # Spectral
    'BAND_NAMES',
    'FFTWorkspace',
    'power_spectrum',
    'spectrum_frequencies',
    'band_power',
    'spectrogram',
    'spectrogram_axes',

    # Statistics
    'channel_mean',
    'channel_std',
    'compute_channel_statistics',
    'extract_time_window',
]
