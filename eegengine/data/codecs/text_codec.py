"""
Text Codec
==========

Decoder/encoder for delimited text recordings (CSV and friends).

Format:
------
- Blank lines and lines starting with '#' are ignored
- The first remaining line is the header: a time column followed by one
  column per channel
- The delimiter is detected from the header, trying ',', tab and ';' in
  that order; the first one yielding at least two fields wins
- The time column is discarded on decode; the text carries no sampling
  rate, so every channel gets the configured default (250 Hz)
- Rows whose field count differs from the header are skipped; cells that
  don't parse as numbers become 0.0

On encode the time column is regenerated as ``sample / rate`` using the
first channel's sampling rate, values are written with 6 decimals and
channels shorter than the longest are padded with a literal ``0``.

Example:
    ```python
    codec = TextCodec()
    recording = codec.decode('exports/session.csv')
    codec.encode(recording, 'exports/session_filtered.csv')
    ```
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import io
import logging

import numpy as np

from eegengine.core.exceptions import DecodeError
from eegengine.core.types.recording import Channel, Recording
from eegengine.data.codecs.base_codec import BaseCodec

logger = logging.getLogger(__name__)

TIME_HEADER = 'Time(s)'
COMMENT_PREFIX = '#'


class TextCodec(BaseCodec):
    """
    Delimited text codec.

    Configuration (``codec.text``):
        default_sampling_rate: Rate assigned to decoded channels
        delimiters: Candidate delimiters in priority order
        precision: Decimal places written on encode
        unit: Unit assigned to decoded channels
        recording_info: Recording identification assigned on decode
    """

    config_section = 'codec.text'

    def __init__(self):
        super().__init__()
        self._sampling_rate = 250.0
        self._delimiters: List[str] = [',', '\t', ';']
        self._precision = 6
        self._unit = 'uV'
        self._recording_info = 'CSV Import'

    @property
    def name(self) -> str:
        return 'text'

    @property
    def supported_extensions(self) -> List[str]:
        return ['.csv', '.txt', '.dat']

    def _initialize_specific(self, config: Dict[str, Any]) -> None:
        self._sampling_rate = float(config.get('default_sampling_rate', self._sampling_rate))
        self._delimiters = list(config.get('delimiters', self._delimiters))
        self._precision = int(config.get('precision', self._precision))
        self._unit = config.get('unit', self._unit)
        self._recording_info = config.get('recording_info', self._recording_info)

    # =========================================================================
    # DECODING
    # =========================================================================

    def _decode_file(self, file_path: Path, **kwargs) -> Recording:
        with open(file_path, 'r', encoding='utf-8-sig', errors='replace') as f:
            text = f.read()
        # Patient info is the file name up to its first dot
        return self.decode_text(text, str(file_path), patient_info=file_path.name.split('.')[0])

    def decode_text(self,
                    text: str,
                    source: str = '<text>',
                    patient_info: Optional[str] = None) -> Recording:
        """
        Decode delimited text into a Recording.

        Raises:
            DecodeError: If there is no header or it has fewer than two fields
        """
        self._ensure_initialized()

        lines = [line.strip() for line in text.splitlines()]
        lines = [line for line in lines if line and not line.startswith(COMMENT_PREFIX)]
        if not lines:
            raise DecodeError(source, "Empty text file")

        delimiter, headers = self._detect_delimiter(lines[0])
        if delimiter is None:
            raise DecodeError(
                source,
                "Header row has fewer than two fields",
                "Use ',', tab or ';' between the time column and channel columns."
            )

        n_fields = len(headers)
        rows: List[List[float]] = []
        skipped = 0
        for row_number, line in enumerate(lines[1:], start=1):
            values = line.split(delimiter)
            if len(values) != n_fields:
                logger.warning(
                    f"{source}: row {row_number} has {len(values)} fields, "
                    f"expected {n_fields}; skipped"
                )
                skipped += 1
                continue
            rows.append([_parse_cell(v) for v in values[1:]])

        n_channels = n_fields - 1
        data = np.array(rows, dtype=np.float64).reshape(len(rows), n_channels)

        recording = Recording(
            patient_info=patient_info if patient_info is not None else '',
            recording_info=self._recording_info,
            source_file=source
        )
        for i in range(n_channels):
            label = headers[i + 1].strip() or f"Channel_{i + 1}"
            recording.channels.append(Channel(
                label=label,
                samples=data[:, i].copy(),
                sampling_rate=self._sampling_rate,
                unit=self._unit
            ))

        logger.debug(
            f"{source}: delimiter={delimiter!r}, {n_channels} channels, "
            f"{len(rows)} rows, {skipped} skipped"
        )
        return recording

    def _detect_delimiter(self, header: str):
        for delimiter in self._delimiters:
            fields = header.split(delimiter)
            if len(fields) >= 2:
                return delimiter, fields
        return None, []

    # =========================================================================
    # ENCODING
    # =========================================================================

    def _encode_file(self, recording: Recording, file_path: Path) -> None:
        with open(file_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(self.encode_text(recording))

    def encode_text(self, recording: Recording) -> str:
        """Render a Recording as comma-separated text."""
        self._ensure_initialized()

        channels = recording.channels
        fs = channels[0].sampling_rate if channels and channels[0].sampling_rate > 0 \
            else self._sampling_rate
        n_rows = max((ch.n_samples for ch in channels), default=0)
        fmt = f"{{:.{self._precision}f}}"

        out = io.StringIO()
        out.write(','.join([TIME_HEADER] + [ch.label for ch in channels]))
        out.write('\n')

        for sample in range(n_rows):
            fields = [fmt.format(sample / fs)]
            for ch in channels:
                if sample < ch.n_samples:
                    fields.append(fmt.format(ch.samples[sample]))
                else:
                    fields.append('0')
            out.write(','.join(fields))
            out.write('\n')

        return out.getvalue()


def _parse_cell(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0
