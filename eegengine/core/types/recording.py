"""
Recording Data Types
====================

Core data types for representing a decoded EEG recording.

Data Types:
----------
1. Channel: One sensor's samples plus calibration bounds and sampling rate
2. Recording: Ordered channel collection with patient/recording metadata
   and a listener list for mutation notifications
3. RecordingEvent: Notification kinds emitted by a Recording
4. MontageKind: Supported re-referencing strategies
5. BandPower: Spectral power in the five canonical EEG bands
6. ChannelStatistics: Descriptive statistics of a channel

Design Principles:
-----------------
- Channel index is the public identity of a channel; order is significant
- Channels may differ in sampling rate and length
- Sample buffers are 1-D float64 numpy arrays mutated in place
- ``copy()`` always produces an independent deep copy (listeners excluded)

Example Usage:
    ```python
    from eegengine.core.types import Channel, Recording, RecordingEvent

    recording = Recording(patient_info='P01')
    recording.add_channel(Channel('Fp1', samples, sampling_rate=256.0))

    def on_change(event, payload):
        print(event, payload)

    recording.subscribe(on_change)
    ```
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from eegengine.utils.validation import check_channel_index


# =============================================================================
# ENUMS
# =============================================================================

class RecordingEvent(Enum):
    """Kinds of mutation notification emitted by a Recording."""
    DATA_CHANGED = 'data_changed'
    CHANNEL_ADDED = 'channel_added'
    CHANNEL_REMOVED = 'channel_removed'
    CHANNEL_COUNT_CHANGED = 'channel_count_changed'


class MontageKind(Enum):
    """Re-referencing strategies."""
    AVERAGE_REFERENCE = 'average'
    BIPOLAR = 'bipolar'
    LAPLACIAN = 'laplacian'

    @classmethod
    def parse(cls, value: Any) -> 'MontageKind':
        """Accept a MontageKind, its value ('average') or its name ('AVERAGE_REFERENCE')."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for kind in cls:
            if text.lower() == kind.value or text.upper() == kind.name:
                return kind
        raise ValueError(
            f"Unknown montage '{value}'. Available: {[k.value for k in cls]}"
        )


RecordingListener = Callable[[RecordingEvent, Any], None]


# =============================================================================
# CHANNEL
# =============================================================================

@dataclass(eq=False)
class Channel:
    """
    A single EEG channel.

    Attributes:
        label: Channel label (e.g. 'Fp1')
        samples: Sample buffer in physical units, 1-D float64
        sampling_rate: Sampling frequency in Hz
        unit: Physical unit string
        physical_min: Lower calibration bound in physical units
        physical_max: Upper calibration bound in physical units
        digital_min: Lower calibration bound in raw units
        digital_max: Upper calibration bound in raw units
    """
    label: str
    samples: np.ndarray = field(default_factory=lambda: np.zeros(0))
    sampling_rate: float = 250.0
    unit: str = 'µV'
    physical_min: float = -500.0
    physical_max: float = 500.0
    digital_min: float = -32768.0
    digital_max: float = 32767.0

    def __post_init__(self):
        """Coerce samples to float64 and validate the sampling rate."""
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(
                f"samples must be 1D, got {samples.ndim}D for channel '{self.label}'"
            )
        # Keep the caller's array object when no conversion was needed
        self.samples = samples

        if samples.size > 0 and not self.sampling_rate > 0:
            raise ValueError(
                f"sampling_rate must be > 0 for channel '{self.label}' with samples, "
                f"got {self.sampling_rate}"
            )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def n_samples(self) -> int:
        """Number of samples."""
        return int(self.samples.size)

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds (0 when the rate is unset)."""
        if self.sampling_rate <= 0:
            return 0.0
        return self.n_samples / self.sampling_rate

    @property
    def has_valid_calibration(self) -> bool:
        """True when both calibration spans are strictly increasing."""
        return (self.physical_max > self.physical_min
                and self.digital_max > self.digital_min)

    def get_time_axis(self) -> np.ndarray:
        """Time axis in seconds."""
        return np.arange(self.n_samples) / self.sampling_rate

    def copy(self) -> 'Channel':
        """Create a deep copy."""
        return Channel(
            label=self.label,
            samples=self.samples.copy(),
            sampling_rate=self.sampling_rate,
            unit=self.unit,
            physical_min=self.physical_min,
            physical_max=self.physical_max,
            digital_min=self.digital_min,
            digital_max=self.digital_max
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'label': self.label,
            'samples': self.samples.tolist(),
            'sampling_rate': self.sampling_rate,
            'unit': self.unit,
            'physical_min': self.physical_min,
            'physical_max': self.physical_max,
            'digital_min': self.digital_min,
            'digital_max': self.digital_max
        }

    def __repr__(self) -> str:
        return (
            f"Channel(label='{self.label}', "
            f"n_samples={self.n_samples}, "
            f"sr={self.sampling_rate}Hz)"
        )


# =============================================================================
# RECORDING
# =============================================================================

@dataclass(eq=False)
class Recording:
    """
    Ordered collection of channels with recording metadata.

    Structural operations (add/remove/clear/replace/copy_from) notify
    subscribed listeners themselves. In-place sample edits made by the
    processing layer are announced with ``notify(RecordingEvent.DATA_CHANGED)``.

    Attributes:
        channels: Ordered channel list; the index is the channel's identity
        patient_info: Free-text patient identification
        recording_info: Free-text recording identification
        start_time: Recording start timestamp, if known
        source_file: Path the recording was decoded from
        warnings: Recoverable problems found while decoding
    """
    channels: List[Channel] = field(default_factory=list)
    patient_info: str = ''
    recording_info: str = ''
    start_time: Optional[datetime] = None
    source_file: str = ''
    warnings: List[Exception] = field(default_factory=list)
    _listeners: List[RecordingListener] = field(
        default_factory=list, init=False, repr=False, compare=False
    )

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def channel_count(self) -> int:
        """Number of channels."""
        return len(self.channels)

    @property
    def is_empty(self) -> bool:
        return not self.channels

    @property
    def labels(self) -> List[str]:
        """Channel labels in index order."""
        return [ch.label for ch in self.channels]

    @property
    def max_sampling_rate(self) -> float:
        """Highest channel sampling rate (0.0 when empty)."""
        if not self.channels:
            return 0.0
        return max(ch.sampling_rate for ch in self.channels)

    @property
    def duration_seconds(self) -> float:
        """Longest channel duration."""
        if not self.channels:
            return 0.0
        return max(ch.duration_seconds for ch in self.channels)

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def subscribe(self, listener: RecordingListener) -> None:
        """Register ``listener(event, payload)``; duplicates are ignored."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: RecordingListener) -> None:
        """Remove a listener if registered."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self, event: RecordingEvent, payload: Any = None) -> None:
        """Call every listener synchronously, in subscription order."""
        for listener in list(self._listeners):
            listener(event, payload)

    # =========================================================================
    # CHANNEL ACCESS / MUTATION
    # =========================================================================

    def channel(self, index: int) -> Channel:
        """
        Get a channel by index.

        Raises:
            InvalidChannelIndexError: If index is out of bounds
        """
        return self.channels[check_channel_index(index, len(self.channels))]

    def add_channel(self, channel: Channel) -> int:
        """Append a channel and return its index."""
        self.channels.append(channel)
        index = len(self.channels) - 1
        self.notify(RecordingEvent.CHANNEL_ADDED, index)
        self.notify(RecordingEvent.CHANNEL_COUNT_CHANGED, len(self.channels))
        return index

    def remove_channel(self, index: int) -> Channel:
        """
        Remove and return a channel.

        Raises:
            InvalidChannelIndexError: If index is out of bounds
        """
        index = check_channel_index(index, len(self.channels))
        removed = self.channels.pop(index)
        self.notify(RecordingEvent.CHANNEL_REMOVED, index)
        self.notify(RecordingEvent.CHANNEL_COUNT_CHANGED, len(self.channels))
        return removed

    def clear(self) -> None:
        """Remove all channels and metadata."""
        had_channels = bool(self.channels)
        self.channels = []
        self.patient_info = ''
        self.recording_info = ''
        self.start_time = None
        self.source_file = ''
        self.warnings = []
        if had_channels:
            self.notify(RecordingEvent.CHANNEL_COUNT_CHANGED, 0)
        self.notify(RecordingEvent.DATA_CHANGED)

    def replace_channels(self, channels: Sequence[Channel]) -> None:
        """
        Swap in a new channel list in one step.

        Emits DATA_CHANGED, plus CHANNEL_COUNT_CHANGED when the count differs.
        """
        old_count = len(self.channels)
        self.channels = list(channels)
        self.notify(RecordingEvent.DATA_CHANGED)
        if len(self.channels) != old_count:
            self.notify(RecordingEvent.CHANNEL_COUNT_CHANGED, len(self.channels))

    # =========================================================================
    # COPYING
    # =========================================================================

    def copy(self) -> 'Recording':
        """Create an independent deep copy (without listeners)."""
        return Recording(
            channels=[ch.copy() for ch in self.channels],
            patient_info=self.patient_info,
            recording_info=self.recording_info,
            start_time=self.start_time,
            source_file=self.source_file,
            warnings=list(self.warnings)
        )

    def copy_from(self, other: 'Recording') -> None:
        """Replace this recording's contents with a deep copy of ``other``."""
        snapshot = other.copy()
        self.patient_info = snapshot.patient_info
        self.recording_info = snapshot.recording_info
        self.start_time = snapshot.start_time
        self.source_file = snapshot.source_file
        self.warnings = snapshot.warnings
        self.replace_channels(snapshot.channels)

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def get_info(self) -> Dict[str, Any]:
        """Get summary information."""
        return {
            'n_channels': self.channel_count,
            'labels': self.labels,
            'sampling_rates': [ch.sampling_rate for ch in self.channels],
            'duration_seconds': self.duration_seconds,
            'patient_info': self.patient_info,
            'recording_info': self.recording_info,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'source_file': self.source_file,
            'n_warnings': len(self.warnings)
        }

    def __len__(self) -> int:
        return len(self.channels)

    def __iter__(self):
        return iter(self.channels)

    def __repr__(self) -> str:
        return (
            f"Recording("
            f"channels={self.channel_count}, "
            f"max_sr={self.max_sampling_rate}Hz, "
            f"duration={self.duration_seconds:.1f}s)"
        )


# =============================================================================
# DERIVED RESULTS
# =============================================================================

@dataclass
class BandPower:
    """Summed spectral power in the canonical EEG bands."""
    delta: float = 0.0
    theta: float = 0.0
    alpha: float = 0.0
    beta: float = 0.0
    gamma: float = 0.0

    @property
    def total(self) -> float:
        return self.delta + self.theta + self.alpha + self.beta + self.gamma

    @property
    def dominant_band(self) -> str:
        """Name of the band holding the most power."""
        values = self.to_dict()
        return max(values, key=values.get)

    def to_dict(self) -> Dict[str, float]:
        return {
            'delta': self.delta,
            'theta': self.theta,
            'alpha': self.alpha,
            'beta': self.beta,
            'gamma': self.gamma
        }


@dataclass
class ChannelStatistics:
    """
    Descriptive statistics of one channel.

    ``std`` and ``variance`` are population statistics.
    """
    index: int
    label: str
    n_samples: int
    sampling_rate: float
    mean: float = 0.0
    std: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    peak_to_peak: float = 0.0
    variance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'label': self.label,
            'n_samples': self.n_samples,
            'sampling_rate': self.sampling_rate,
            'mean': self.mean,
            'std': self.std,
            'min': self.minimum,
            'max': self.maximum,
            'peak_to_peak': self.peak_to_peak,
            'variance': self.variance
        }
