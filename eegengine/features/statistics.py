"""
Channel Statistics
==================

Time-domain descriptive statistics of a channel.

| Statistic     | Formula                     |
|---------------|-----------------------------|
| mean          | mean(x)                     |
| std           | sqrt(mean((x - mean)^2))    |
| variance      | mean((x - mean)^2)          |
| peak_to_peak  | max(x) - min(x)             |

Standard deviation and variance are population statistics (divide by N).
Empty buffers report 0.0 everywhere; std of fewer than 2 samples is 0.0.
"""

from typing import Sequence
import logging

import numpy as np

from eegengine.core.types import Channel, ChannelStatistics

logger = logging.getLogger(__name__)


def channel_mean(buffer: np.ndarray) -> float:
    """Arithmetic mean, 0.0 when empty."""
    if len(buffer) == 0:
        return 0.0
    return float(np.mean(buffer))


def channel_std(buffer: np.ndarray) -> float:
    """Population standard deviation, 0.0 for fewer than 2 samples."""
    if len(buffer) < 2:
        return 0.0
    return float(np.std(buffer))


def compute_channel_statistics(index: int, channel: Channel) -> ChannelStatistics:
    """Full statistics row for one channel."""
    samples = channel.samples
    stats = ChannelStatistics(
        index=index,
        label=channel.label,
        n_samples=int(samples.size),
        sampling_rate=channel.sampling_rate
    )
    if samples.size == 0:
        return stats

    stats.mean = channel_mean(samples)
    stats.std = channel_std(samples)
    stats.variance = stats.std ** 2
    stats.minimum = float(samples.min())
    stats.maximum = float(samples.max())
    stats.peak_to_peak = stats.maximum - stats.minimum
    return stats


def extract_time_window(buffer: Sequence[float],
                        sampling_rate: float,
                        start_time: float,
                        duration: float) -> np.ndarray:
    """
    Samples from ``int(start*fs)`` to ``int((start+duration)*fs)`` inclusive.

    Both ends are clamped to the buffer. Returns an empty array for an empty
    buffer, a non-positive rate, or a window that ends before it starts.
    """
    data = np.asarray(buffer, dtype=np.float64)
    if data.size == 0 or not sampling_rate > 0:
        return np.empty(0)

    start = max(0, int(start_time * sampling_rate))
    end = min(data.size - 1, int((start_time + duration) * sampling_rate))
    if start > end:
        return np.empty(0)
    return data[start:end + 1].copy()
