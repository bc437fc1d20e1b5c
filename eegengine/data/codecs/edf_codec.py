"""
EDF Codec
=========

Decoder/encoder for the EDF-like binary EEG format.

File Layout:
-----------
Fixed header (256 bytes, ASCII, space padded):

    offset  width  field
    0       8      version
    8       80     patient identification
    88      80     recording identification
    168     8      start date (dd.mm.yy)
    176     8      start time (hh.mm.ss)
    252     4      number of signals N

Per-signal header, each field repeated N times before the next field:

    16 label | 80 transducer | 8 physical unit | 8 physical min |
    8 physical max | 8 digital min | 8 digital max | 80 prefiltering |
    32 reserved | 8 samples per record

followed by a single 8-byte record duration in seconds.

The data section is a sequence of records; each record holds, for every
signal in header order, ``samples_per_record[signal]`` little-endian int16
samples.

Calibration:
-----------
    scale  = (phys_max - phys_min) / (dig_max - dig_min)
    offset = phys_min - dig_min * scale
    value  = raw * scale + offset

When either span is <= 0.1 the header calibration is unusable and the
channel is auto-scaled from its raw sample statistics instead.

Only the fixed header is written on encode; sample data is not serialized.

Example:
    ```python
    codec = EDFCodec()
    recording = codec.decode('data/S001R01.edf')
    ```
"""

from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Sequence, Tuple
import io
import logging
import os

import numpy as np

from eegengine.core.cancellation import CancellationToken, check_cancelled
from eegengine.core.exceptions import (
    CorruptedCalibrationError,
    InvalidSignalCountError,
    TruncatedDataError,
    TruncatedHeaderError,
)
from eegengine.core.types.recording import Channel, Recording
from eegengine.data.codecs.base_codec import BaseCodec
from eegengine.utils.logging import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

FIXED_HEADER_SIZE = 256
VERSION_FIELD = (0, 8)
PATIENT_FIELD = (8, 80)
RECORDING_FIELD = (88, 80)
START_DATE_FIELD = (168, 8)
START_TIME_FIELD = (176, 8)
SIGNAL_COUNT_FIELD = (252, 4)

LABEL_WIDTH = 16
TRANSDUCER_WIDTH = 80
UNIT_WIDTH = 8
NUMBER_WIDTH = 8
PREFILTER_WIDTH = 80
RESERVED_WIDTH = 32

SAMPLE_DTYPE = np.dtype('<i2')

# Calibration spans at or below this are treated as corrupted
CALIBRATION_EPSILON = 0.1


# =============================================================================
# HEADER TYPES
# =============================================================================

class SignalHeader:
    """Parsed per-signal header fields."""

    __slots__ = ('label', 'physical_min', 'physical_max',
                 'digital_min', 'digital_max', 'samples_per_record')

    def __init__(self, label: str):
        self.label = label
        self.physical_min = 0.0
        self.physical_max = 0.0
        self.digital_min = 0.0
        self.digital_max = 0.0
        self.samples_per_record = 1

    @property
    def has_valid_calibration(self) -> bool:
        return (abs(self.digital_max - self.digital_min) > CALIBRATION_EPSILON
                and abs(self.physical_max - self.physical_min) > CALIBRATION_EPSILON)

    def __repr__(self) -> str:
        return (
            f"SignalHeader(label='{self.label}', spr={self.samples_per_record}, "
            f"phys=[{self.physical_min}, {self.physical_max}], "
            f"dig=[{self.digital_min}, {self.digital_max}])"
        )


class _HeaderReader:
    """Sequential reader over the header bytes of a stream."""

    def __init__(self, stream: BinaryIO, source: str):
        self._stream = stream
        self._source = source
        self.position = 0

    def read(self, width: int, field: str) -> bytes:
        chunk = self._stream.read(width)
        if len(chunk) != width:
            raise TruncatedHeaderError(self._source, field)
        self.position += width
        return chunk

    def read_text(self, width: int, field: str) -> str:
        return self.read(width, field).decode('latin-1').strip()

    def skip(self, width: int, field: str) -> None:
        self.read(width, field)


# =============================================================================
# CALIBRATION
# =============================================================================

def calibration_from_header(physical_min: float,
                            physical_max: float,
                            digital_min: float,
                            digital_max: float) -> Tuple[float, float]:
    """Linear (scale, offset) mapping digital units to physical units."""
    scale = (physical_max - physical_min) / (digital_max - digital_min)
    offset = physical_min - digital_min * scale
    return scale, offset


def auto_scale(raw: np.ndarray) -> Tuple[float, float]:
    """
    Statistical (scale, offset) for a channel with unusable calibration.

    - range < 100: assumed to already be physiological units
    - range > 30000: full 16-bit span, mapped to about +/-100 units
    - otherwise: range mapped to a 100-unit band centred on the mean

    Channels with 10 samples or fewer, or an essentially flat signal,
    are left unscaled.
    """
    if raw.size <= 10:
        return 1.0, 0.0

    values = raw.astype(np.float64)
    value_range = float(values.max() - values.min())
    if value_range <= CALIBRATION_EPSILON:
        return 1.0, 0.0

    mean = float(values.mean())
    if value_range < 100:
        return 1.0, 0.0
    if value_range > 30000:
        scale = 200.0 / 65536.0
    else:
        scale = 100.0 / value_range
    return scale, -mean * scale


# =============================================================================
# CODEC
# =============================================================================

class EDFCodec(BaseCodec):
    """
    EDF-like binary codec.

    Configuration (``codec.edf``):
        max_records: Cap on decoded data records
        max_channels: Only the first N signals are considered
        default_record_duration: Used when the header value is unusable
        annotation_markers: Label substrings identifying annotation signals
        fallback_*: Values for unparsable calibration fields
        unit: Unit assigned to decoded channels
    """

    config_section = 'codec.edf'

    def __init__(self):
        super().__init__()
        self._max_records = 10000
        self._max_channels = 32
        self._default_record_duration = 1.0
        self._annotation_markers: List[str] = ['annotation']
        self._fallbacks = (-500.0, 500.0, -32768.0, 32767.0)
        self._unit = 'µV'

    @property
    def name(self) -> str:
        return 'edf'

    @property
    def supported_extensions(self) -> List[str]:
        return ['.edf']

    def _initialize_specific(self, config: Dict[str, Any]) -> None:
        self._max_records = int(config.get('max_records', self._max_records))
        self._max_channels = int(config.get('max_channels', self._max_channels))
        self._default_record_duration = float(
            config.get('default_record_duration', self._default_record_duration)
        )
        self._annotation_markers = [
            m.lower() for m in config.get('annotation_markers', self._annotation_markers)
        ]
        self._fallbacks = (
            float(config.get('fallback_physical_min', self._fallbacks[0])),
            float(config.get('fallback_physical_max', self._fallbacks[1])),
            float(config.get('fallback_digital_min', self._fallbacks[2])),
            float(config.get('fallback_digital_max', self._fallbacks[3])),
        )
        self._unit = config.get('unit', self._unit)

    # =========================================================================
    # DECODING
    # =========================================================================

    def _decode_file(self,
                     file_path: Path,
                     cancel_token: Optional[CancellationToken] = None,
                     progress_callback: Optional[ProgressCallback] = None) -> Recording:
        with open(file_path, 'rb') as stream:
            size = os.fstat(stream.fileno()).st_size
            return self.decode_stream(
                stream, size, str(file_path),
                cancel_token=cancel_token,
                progress_callback=progress_callback
            )

    def decode_bytes(self,
                     data: bytes,
                     source: str = '<bytes>',
                     cancel_token: Optional[CancellationToken] = None,
                     progress_callback: Optional[ProgressCallback] = None) -> Recording:
        """Decode an in-memory EDF image."""
        self._ensure_initialized()
        return self.decode_stream(
            io.BytesIO(data), len(data), source,
            cancel_token=cancel_token,
            progress_callback=progress_callback
        )

    def decode_stream(self,
                      stream: BinaryIO,
                      size: int,
                      source: str = '<stream>',
                      cancel_token: Optional[CancellationToken] = None,
                      progress_callback: Optional[ProgressCallback] = None) -> Recording:
        """
        Decode from a binary stream positioned at the start of the header.

        Args:
            stream: Readable binary stream
            size: Total size in bytes; the record count is derived from it
            source: Name used in error messages
            cancel_token: Checked once per data record
            progress_callback: Called as ``(record, n_records)``

        Returns:
            Recording: Decoded recording

        Raises:
            TruncatedHeaderError: If a header field is cut short
            InvalidSignalCountError: If N is not a positive integer
            TruncatedDataError: If a record read comes up short
            CancelledOperationError: If cancelled between records
        """
        self._ensure_initialized()

        reader = _HeaderReader(stream, source)
        fixed = reader.read(FIXED_HEADER_SIZE, 'fixed header')

        n_signals = self._parse_signal_count(fixed, source)
        headers = self._read_signal_headers(reader, n_signals)
        record_duration = self._read_record_duration(reader)

        samples_per_record = [h.samples_per_record for h in headers]
        bytes_per_record = 2 * sum(samples_per_record)
        n_records = min(max(size - reader.position, 0) // bytes_per_record, self._max_records)

        logger.debug(
            f"{source}: {n_signals} signals, {n_records} records of "
            f"{record_duration}s ({bytes_per_record} bytes each)"
        )

        raw = self._read_records(
            stream, source, samples_per_record, n_records,
            cancel_token, progress_callback
        )

        recording = Recording(
            patient_info=_field_text(fixed, PATIENT_FIELD),
            recording_info=_field_text(fixed, RECORDING_FIELD),
            start_time=_parse_start_time(
                _field_text(fixed, START_DATE_FIELD),
                _field_text(fixed, START_TIME_FIELD)
            ),
            source_file=source
        )

        for index in range(min(n_signals, self._max_channels)):
            header = headers[index]
            if self._is_annotation(header.label):
                logger.debug(f"Skipping annotation channel {index}: '{header.label}'")
                continue

            recording.channels.append(
                self._build_channel(index, header, raw[index], record_duration, recording)
            )

        return recording

    def _parse_signal_count(self, fixed: bytes, source: str) -> int:
        text = _field_text(fixed, SIGNAL_COUNT_FIELD)
        try:
            n_signals = int(text)
        except ValueError:
            raise InvalidSignalCountError(source, text) from None
        if n_signals <= 0:
            raise InvalidSignalCountError(source, text)
        return n_signals

    def _read_signal_headers(self, reader: _HeaderReader, n_signals: int) -> List[SignalHeader]:
        headers = [
            SignalHeader(reader.read_text(LABEL_WIDTH, f'label[{i}]'))
            for i in range(n_signals)
        ]

        reader.skip(TRANSDUCER_WIDTH * n_signals, 'transducer type')
        reader.skip(UNIT_WIDTH * n_signals, 'physical dimension')

        phys_min_fb, phys_max_fb, dig_min_fb, dig_max_fb = self._fallbacks
        for i, header in enumerate(headers):
            header.physical_min = _parse_float(reader.read_text(NUMBER_WIDTH, f'physical_min[{i}]'), phys_min_fb)
            header.physical_max = _parse_float(reader.read_text(NUMBER_WIDTH, f'physical_max[{i}]'), phys_max_fb)
            header.digital_min = _parse_float(reader.read_text(NUMBER_WIDTH, f'digital_min[{i}]'), dig_min_fb)
            header.digital_max = _parse_float(reader.read_text(NUMBER_WIDTH, f'digital_max[{i}]'), dig_max_fb)

        reader.skip(PREFILTER_WIDTH * n_signals, 'prefiltering')
        reader.skip(RESERVED_WIDTH * n_signals, 'reserved')

        for i, header in enumerate(headers):
            text = reader.read_text(NUMBER_WIDTH, f'samples_per_record[{i}]')
            try:
                spr = int(text)
            except ValueError:
                spr = 1
            header.samples_per_record = spr if spr > 0 else 1

        return headers

    def _read_record_duration(self, reader: _HeaderReader) -> float:
        duration = _parse_float(reader.read_text(NUMBER_WIDTH, 'record duration'), 0.0)
        if not duration > 0:
            return self._default_record_duration
        return duration

    def _read_records(self,
                      stream: BinaryIO,
                      source: str,
                      samples_per_record: Sequence[int],
                      n_records: int,
                      cancel_token: Optional[CancellationToken],
                      progress_callback: Optional[ProgressCallback]) -> List[np.ndarray]:
        """Read ``n_records`` records into one int16 array per signal."""
        raw = [np.empty(spr * n_records, dtype=SAMPLE_DTYPE) for spr in samples_per_record]

        # Byte offset of each signal's block inside a record
        bounds = np.concatenate(([0], np.cumsum(samples_per_record))) * 2
        bytes_per_record = int(bounds[-1])

        progress = ProgressReporter(n_records, desc=f"Decoding {source}",
                                    callback=progress_callback, logger=logger)

        for rec in range(n_records):
            check_cancelled(cancel_token, 'edf_decode', f"record {rec}/{n_records}")

            block = stream.read(bytes_per_record)
            if len(block) != bytes_per_record:
                signal = int(np.searchsorted(bounds, len(block), side='right')) - 1
                raise TruncatedDataError(source, rec, signal)

            samples = np.frombuffer(block, dtype=SAMPLE_DTYPE)
            for sig, spr in enumerate(samples_per_record):
                start = bounds[sig] // 2
                raw[sig][rec * spr:(rec + 1) * spr] = samples[start:start + spr]

            progress.update()

        progress.finish()
        return raw

    def _is_annotation(self, label: str) -> bool:
        lowered = label.lower()
        return any(marker in lowered for marker in self._annotation_markers)

    def _build_channel(self,
                       index: int,
                       header: SignalHeader,
                       raw: np.ndarray,
                       record_duration: float,
                       recording: Recording) -> Channel:
        label = header.label or f"CH{index + 1}"

        if header.has_valid_calibration:
            scale, offset = calibration_from_header(
                header.physical_min, header.physical_max,
                header.digital_min, header.digital_max
            )
        else:
            warning = CorruptedCalibrationError(
                label, header.physical_min, header.physical_max,
                header.digital_min, header.digital_max
            )
            logger.warning(f"{warning.message} ({warning.details}); auto-scaling")
            recording.warnings.append(warning)
            scale, offset = auto_scale(raw)

        samples = raw.astype(np.float64) * scale + offset

        return Channel(
            label=label,
            samples=samples,
            sampling_rate=header.samples_per_record / record_duration,
            unit=self._unit,
            physical_min=header.physical_min,
            physical_max=header.physical_max,
            digital_min=header.digital_min,
            digital_max=header.digital_max
        )

    # =========================================================================
    # ENCODING
    # =========================================================================

    def _encode_file(self, recording: Recording, file_path: Path) -> None:
        with open(file_path, 'wb') as f:
            f.write(self.encode_header(recording))

    def encode_header(self, recording: Recording) -> bytes:
        """
        Build the 256-byte fixed header for ``recording``.

        Only identification, start date/time and the signal count are
        filled in; everything else stays blank.
        """
        header = bytearray(b' ' * FIXED_HEADER_SIZE)

        start = recording.start_time
        fields = [
            (VERSION_FIELD, '0'),
            (PATIENT_FIELD, recording.patient_info),
            (RECORDING_FIELD, recording.recording_info),
            (START_DATE_FIELD, start.strftime('%d.%m.%y') if start else ''),
            (START_TIME_FIELD, start.strftime('%H.%M.%S') if start else ''),
            (SIGNAL_COUNT_FIELD, str(recording.channel_count)),
        ]
        for (offset, width), text in fields:
            encoded = text[:width].encode('latin-1', errors='replace').ljust(width, b' ')
            header[offset:offset + width] = encoded[:width]

        return bytes(header)


# =============================================================================
# HELPERS
# =============================================================================

def _field_text(header: bytes, field: Tuple[int, int]) -> str:
    offset, width = field
    return header[offset:offset + width].decode('latin-1').strip()


def _parse_float(text: str, fallback: float) -> float:
    try:
        return float(text)
    except ValueError:
        return fallback


def _parse_start_time(date_text: str, time_text: str) -> Optional[datetime]:
    try:
        return datetime.strptime(f"{date_text} {time_text}", '%d.%m.%y %H.%M.%S')
    except ValueError:
        return None
