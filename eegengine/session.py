"""
EEG Session
===========

Channel-index based facade over the engine, for front ends (viewers,
notebooks, scripts) that work on one loaded recording at a time.

Responsibilities:
----------------
- Load / save / reload a recording through the codec factory
- Per-channel edits (gain, offset, bandpass, notch, normalize, DC removal)
  with calibration bookkeeping
- Whole-recording montages
- Read-only derived values (statistics, spectra, band power, spectrogram)
- Notch preview on a detached copy, then commit

Notifications:
-------------
The session owns a ``Recording`` and never replaces that object, so
listeners subscribed once stay valid across loads. Every mutating call
emits ``RecordingEvent.DATA_CHANGED`` once after the change; a montage
that changes the channel count also emits ``CHANNEL_COUNT_CHANGED``.

Errors:
------
Invalid channel indices and filter parameters raise before any buffer is
touched, so a failed call leaves the recording unchanged.

Usage Example:
    ```python
    from eegengine import EEGSession, RecordingEvent

    session = EEGSession()
    session.subscribe(lambda event, payload: redraw())
    session.load('data/session01.edf')

    session.remove_dc(0)
    session.apply_filter(0, 1.0, 40.0)
    session.apply_montage('average')

    print(session.band_power(0).dominant_band)
    ```
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging

import numpy as np

from eegengine.core.cancellation import CancellationToken
from eegengine.core.config import get_config
from eegengine.core.types import (
    BandPower,
    Channel,
    ChannelStatistics,
    MontageKind,
    Recording,
    RecordingEvent,
    RecordingListener,
)
from eegengine.data.codecs import decode_file, encode_file
from eegengine.features.spectral import (
    band_power,
    power_spectrum,
    spectrogram,
    spectrum_frequencies,
)
from eegengine.features.statistics import (
    channel_mean,
    channel_std,
    compute_channel_statistics,
    extract_time_window,
)
from eegengine.preprocessing.montage import MontageResult, apply_montage
from eegengine.preprocessing.steps import (
    BandpassFilter,
    notch_filter,
    validate_band,
    validate_notch,
)
from eegengine.preprocessing.steps import elementwise
from eegengine.utils.logging import ProgressCallback, log_execution_time

logger = logging.getLogger(__name__)


class EEGSession:
    """
    One loaded recording plus the operations a viewer performs on it.

    Attributes:
        recording (Recording): The session's recording (same object for the
            session's lifetime)
        bandpass (BandpassFilter): Filter instance whose design cache is
            reused across ``apply_filter`` calls
    """

    def __init__(self,
                 recording: Optional[Recording] = None,
                 bandpass: Optional[BandpassFilter] = None):
        self.recording = recording if recording is not None else Recording()
        self.bandpass = bandpass or BandpassFilter()
        self._source_path: Optional[Path] = None

    # =========================================================================
    # FILES
    # =========================================================================

    @property
    def source_path(self) -> Optional[Path]:
        """Path of the last successful load."""
        return self._source_path

    @log_execution_time()
    def load(self, file_path: Union[str, Path], **kwargs) -> Recording:
        """
        Decode a file and adopt its contents.

        The decode completes before anything changes, so a failed load
        leaves the current recording intact.

        Args:
            file_path: Recording path
            **kwargs: Passed to the codec (cancel_token, progress_callback)
        """
        file_path = Path(file_path)
        decoded = decode_file(file_path, **kwargs)
        self._adopt(decoded)
        self._source_path = file_path

        logger.info(
            f"Session loaded {file_path.name}: {decoded.channel_count} channels, "
            f"{decoded.duration_seconds:.1f}s"
        )
        return self.recording

    def save(self, file_path: Union[str, Path]) -> None:
        """Encode the recording; the extension selects the format."""
        encode_file(file_path, self.recording)

    def reload(self, **kwargs) -> Recording:
        """
        Decode the last loaded file again, discarding every edit and montage.

        Raises:
            RuntimeError: If nothing has been loaded
        """
        if self._source_path is None:
            raise RuntimeError("No file loaded. Call load() first.")
        return self.load(self._source_path, **kwargs)

    def _adopt(self, decoded: Recording) -> None:
        self.recording.patient_info = decoded.patient_info
        self.recording.recording_info = decoded.recording_info
        self.recording.start_time = decoded.start_time
        self.recording.source_file = decoded.source_file
        self.recording.warnings = list(decoded.warnings)
        self.recording.replace_channels(decoded.channels)

    # =========================================================================
    # LISTENERS
    # =========================================================================

    def subscribe(self, listener: RecordingListener) -> None:
        self.recording.subscribe(listener)

    def unsubscribe(self, listener: RecordingListener) -> None:
        self.recording.unsubscribe(listener)

    def _changed(self) -> None:
        self.recording.notify(RecordingEvent.DATA_CHANGED)

    # =========================================================================
    # PER-CHANNEL EDITS
    # =========================================================================

    def apply_gain(self, index: int, gain: float) -> None:
        """Multiply a channel by ``gain``; calibration bounds scale too."""
        channel = self.recording.channel(index)
        elementwise.apply_gain(channel.samples, gain)
        channel.physical_min *= gain
        channel.physical_max *= gain
        self._changed()

    def apply_offset(self, index: int, offset: float) -> None:
        """Add ``offset`` to a channel; calibration bounds shift too."""
        channel = self.recording.channel(index)
        elementwise.apply_offset(channel.samples, offset)
        channel.physical_min += offset
        channel.physical_max += offset
        self._changed()

    def normalize(self, index: int, lo: float = 0.0, hi: float = 1.0) -> bool:
        """
        Rescale a channel onto [lo, hi].

        Returns:
            bool: False if the channel was empty or constant (unchanged)
        """
        channel = self.recording.channel(index)
        if elementwise.normalize(channel.samples, lo, hi) is None:
            return False
        channel.physical_min = lo
        channel.physical_max = hi
        self._changed()
        return True

    def remove_dc(self, index: int) -> float:
        """Subtract a channel's mean and return it."""
        channel = self.recording.channel(index)
        mean = elementwise.remove_dc(channel.samples)
        channel.physical_min -= mean
        channel.physical_max -= mean
        self._changed()
        return mean

    def apply_filter(self, index: int, low_freq: float, high_freq: float) -> bool:
        """
        Zero-phase bandpass one channel.

        Raises:
            InvalidChannelIndexError: Bad index
            InvalidFilterParametersError: Band not within (0, fs/2)
        """
        channel = self.recording.channel(index)
        validate_band(channel.sampling_rate, low_freq, high_freq)

        applied = self.bandpass.apply(channel.samples, channel.sampling_rate, low_freq, high_freq)
        if applied:
            self._changed()
        return applied

    def apply_notch(self, index: int, freq: Optional[float] = None) -> bool:
        """
        Notch-filter one channel (default frequency from config).

        Returns:
            bool: False if the channel is shorter than 4 samples

        Raises:
            InvalidChannelIndexError: Bad index
            InvalidFilterParametersError: Frequency not within (0, fs/2)
        """
        freq = self._notch_freq(freq)
        channel = self.recording.channel(index)
        validate_notch(channel.sampling_rate, freq)

        applied = notch_filter(channel.samples, channel.sampling_rate, freq)
        if applied:
            self._changed()
        return applied

    def apply_notch_all(self, freq: Optional[float] = None) -> int:
        """
        Notch-filter every channel; channels whose rate can't hold the notch
        are skipped with a warning.

        Returns:
            int: Number of channels filtered
        """
        freq = self._notch_freq(freq)
        filtered = sum(
            notch_filter(ch.samples, ch.sampling_rate, freq) for ch in self.recording
        )
        if filtered:
            self._changed()
        logger.info(f"Notch {freq} Hz applied to {filtered}/{self.recording.channel_count} channels")
        return filtered

    @staticmethod
    def _notch_freq(freq: Optional[float]) -> float:
        if freq is None:
            return get_config().get_float('filters.notch.freq', 50.0)
        return float(freq)

    # =========================================================================
    # MONTAGE
    # =========================================================================

    def apply_montage(self, kind: Union[MontageKind, str]) -> MontageResult:
        """
        Re-reference the whole recording.

        Channels are swapped in atomically. Bipolar channels take rate, unit
        and calibration from the first electrode of their pair.

        Raises:
            MontageError: Too few channels (recording unchanged)
        """
        kind = MontageKind.parse(kind)
        channels = self.recording.channels
        result = apply_montage([ch.samples for ch in channels], self.recording.labels, kind)

        if kind is MontageKind.BIPOLAR:
            sources = [channels[a] for a, _ in result.pairs]
        else:
            sources = list(channels)

        new_channels = []
        for source, label, samples in zip(sources, result.labels, result.buffers):
            derived = Channel(
                label=label,
                samples=samples,
                sampling_rate=source.sampling_rate,
                unit=source.unit,
                physical_min=source.physical_min,
                physical_max=source.physical_max,
                digital_min=source.digital_min,
                digital_max=source.digital_max
            )
            new_channels.append(derived)

        self.recording.replace_channels(new_channels)
        return result

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    def means(self) -> List[float]:
        return [channel_mean(ch.samples) for ch in self.recording]

    def std_devs(self) -> List[float]:
        return [channel_std(ch.samples) for ch in self.recording]

    def statistics(self) -> List[ChannelStatistics]:
        """One statistics row per channel."""
        return [compute_channel_statistics(i, ch) for i, ch in enumerate(self.recording)]

    def power_spectrum(self,
                       index: int,
                       window: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Magnitude spectrum of a channel's first ``window`` samples.

        Args:
            index: Channel index
            window: Number of leading samples to analyze (all if None)

        Returns:
            (freqs, magnitudes)
        """
        channel = self.recording.channel(index)
        if window is not None and window < 1:
            raise ValueError(f"window must be >= 1, got {window}")

        n = channel.n_samples if window is None else min(window, channel.n_samples)
        spectrum = power_spectrum(channel.samples[:n], channel.sampling_rate)
        return spectrum_frequencies(spectrum.size, channel.sampling_rate), spectrum

    def average_power_spectrum(self,
                               window: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Mean magnitude spectrum over all channels.

        Spectra are truncated to the shortest one; frequencies use the first
        channel's sampling rate. Channels with no spectrum are skipped.
        """
        spectra = []
        for index in range(self.recording.channel_count):
            _, spectrum = self.power_spectrum(index, window)
            if spectrum.size:
                spectra.append(spectrum)

        if not spectra:
            return np.empty(0), np.empty(0)

        n_bins = min(s.size for s in spectra)
        average = np.mean([s[:n_bins] for s in spectra], axis=0)
        fs = self.recording.channel(0).sampling_rate
        return spectrum_frequencies(n_bins, fs), average

    def band_power(self, index: int) -> BandPower:
        channel = self.recording.channel(index)
        return band_power(channel.samples, channel.sampling_rate)

    def band_powers(self) -> List[BandPower]:
        return [band_power(ch.samples, ch.sampling_rate) for ch in self.recording]

    def spectrogram(self,
                    index: int,
                    window: Optional[int] = None,
                    hop: Optional[int] = None,
                    cancel_token: Optional[CancellationToken] = None,
                    progress_callback: Optional[ProgressCallback] = None) -> np.ndarray:
        """
        Spectrogram of one channel in dB.

        Raises:
            InsufficientDataError: Channel shorter than one window
            CancelledOperationError: Cancelled through ``cancel_token``
        """
        channel = self.recording.channel(index)
        return spectrogram(
            channel.samples,
            channel.sampling_rate,
            window=window,
            hop=hop,
            cancel_token=cancel_token,
            progress_callback=progress_callback
        )

    def time_series(self,
                    index: int,
                    start: float = 0.0,
                    duration: Optional[float] = None) -> np.ndarray:
        """Samples between ``start`` and ``start + duration`` seconds (to the end if None)."""
        channel = self.recording.channel(index)
        if duration is None:
            duration = max(channel.duration_seconds - start, 0.0)
        return extract_time_window(channel.samples, channel.sampling_rate, start, duration)

    # =========================================================================
    # NOTCH PREVIEW
    # =========================================================================

    def preview_notch(self,
                      freq: Optional[float] = None,
                      channel_index: Optional[int] = None) -> Recording:
        """
        Notch-filter a detached copy of the recording.

        Args:
            freq: Notch frequency (config default if None)
            channel_index: Only filter this channel (all if None)

        Returns:
            Recording: Filtered copy; the session is not modified
        """
        freq = self._notch_freq(freq)
        preview = self.recording.copy()

        if channel_index is None:
            targets = list(preview)
        else:
            targets = [preview.channel(channel_index)]

        for channel in targets:
            notch_filter(channel.samples, channel.sampling_rate, freq)
        return preview

    def commit(self, recording: Recording) -> None:
        """Adopt a deep copy of ``recording`` (e.g. an accepted preview)."""
        self.recording.copy_from(recording)

    def __repr__(self) -> str:
        return f"EEGSession(recording={self.recording!r}, source={self._source_path})"
