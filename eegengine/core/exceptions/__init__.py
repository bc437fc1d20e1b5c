"""
Custom Exceptions
=================

This module defines all custom exceptions for the EEG engine.

Exception Hierarchy:
-------------------
EEGEngineError (Base)
├── DataError
│   ├── RecordingFileNotFoundError
│   ├── DecodeError
│   │   ├── TruncatedHeaderError
│   │   ├── InvalidSignalCountError
│   │   ├── TruncatedDataError
│   │   └── UnsupportedFormatError
│   ├── EncodeError
│   └── CorruptedCalibrationError   (recorded, never raised by decode)
├── ProcessingError
│   ├── InvalidChannelIndexError
│   ├── InvalidFilterParametersError
│   ├── InsufficientDataError
│   └── MontageError
├── CancelledOperationError
└── ConfigurationError
    ├── ConfigNotFoundError
    └── ConfigValidationError

Example Usage:
    ```python
    from eegengine.core.exceptions import DecodeError, TruncatedDataError

    try:
        recording = codec.decode(path)
    except TruncatedDataError as e:
        logger.error(f"Recording is cut short: {e}")
    except DecodeError as e:
        logger.error(f"Failed to decode: {e}")
    ```

Author: EEG Engine
Date: 2024
"""


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class EEGEngineError(Exception):
    """
    Base exception for all EEG engine errors.

    All custom exceptions should inherit from this class.
    Provides consistent error message formatting.

    Attributes:
        message: Error message
        details: Additional error details
        suggestion: Suggestion for fixing the error
    """

    def __init__(self,
                 message: str,
                 details: str = '',
                 suggestion: str = ''):
        self.message = message
        self.details = details
        self.suggestion = suggestion

        full_message = message
        if details:
            full_message += f"\nDetails: {details}"
        if suggestion:
            full_message += f"\nSuggestion: {suggestion}"

        super().__init__(full_message)


# =============================================================================
# DATA ERRORS
# =============================================================================

class DataError(EEGEngineError):
    """Base exception for recording and file errors."""
    pass


class RecordingFileNotFoundError(DataError):
    """Raised when a recording file does not exist."""

    def __init__(self, path: str):
        message = f"Recording file not found: '{path}'"
        details = "The specified file does not exist or is not a regular file."
        suggestion = "Check the file path."

        super().__init__(message, details, suggestion)
        self.path = path


class DecodeError(DataError):
    """Base exception for structurally invalid recordings."""

    def __init__(self,
                 path: str,
                 reason: str = 'Unknown error',
                 suggestion: str = "Check that the file is a valid recording."):
        message = f"Failed to decode recording '{path}'"
        super().__init__(message, reason, suggestion)
        self.path = path
        self.reason = reason


class TruncatedHeaderError(DecodeError):
    """Raised when the fixed header or a per-signal header field is cut short."""

    def __init__(self, path: str, field: str):
        super().__init__(
            path,
            f"Header truncated while reading '{field}'",
            "The file is incomplete; re-export it from the acquisition software."
        )
        self.field = field


class InvalidSignalCountError(DecodeError):
    """Raised when the declared signal count is missing or not positive."""

    def __init__(self, path: str, value: str):
        super().__init__(
            path,
            f"Invalid number of signals: '{value}'",
            "The signal count field (bytes 252-255) must hold a positive integer."
        )
        self.value = value


class TruncatedDataError(DecodeError):
    """Raised when a sample read underruns in the middle of a data record."""

    def __init__(self, path: str, record: int, signal: int):
        super().__init__(
            path,
            f"Sample data ended inside record {record} (signal {signal})",
            "The file is incomplete; no partial recording was returned."
        )
        self.record = record
        self.signal = signal


class UnsupportedFormatError(DecodeError):
    """Raised when no codec can read the file."""

    def __init__(self, path: str, reason: str = ''):
        super().__init__(
            path,
            reason or "No codec recognized the file contents",
            "Supported formats are EDF (.edf) and delimited text (.csv, .txt, .dat)."
        )


class EncodeError(DataError):
    """Raised when a recording cannot be written."""

    def __init__(self, path: str, reason: str = ''):
        message = f"Failed to encode recording to '{path}'"
        suggestion = "Check that the recording has channels and the path is writable."

        super().__init__(message, reason, suggestion)
        self.path = path


class CorruptedCalibrationError(DataError):
    """
    Describes a channel whose calibration bounds are degenerate.

    Decoding recovers from this by auto-scaling the raw samples, so the
    instance is logged and kept in ``Recording.warnings`` rather than raised.
    """

    def __init__(self,
                 label: str,
                 physical_min: float,
                 physical_max: float,
                 digital_min: float,
                 digital_max: float):
        message = f"Corrupted calibration values for signal '{label}'"
        details = (
            f"phys: {physical_min} to {physical_max}, "
            f"dig: {digital_min} to {digital_max}"
        )
        suggestion = "Samples were auto-scaled from their raw range."

        super().__init__(message, details, suggestion)
        self.label = label
        self.physical_min = physical_min
        self.physical_max = physical_max
        self.digital_min = digital_min
        self.digital_max = digital_max


# =============================================================================
# PROCESSING ERRORS
# =============================================================================

class ProcessingError(EEGEngineError):
    """Base exception for signal processing errors."""
    pass


class InvalidChannelIndexError(ProcessingError):
    """Raised when a channel index is outside the recording."""

    def __init__(self, index: int, n_channels: int):
        message = f"Invalid channel index {index}"
        details = f"Recording has {n_channels} channel(s)"
        suggestion = "Use an index between 0 and channel_count - 1."

        super().__init__(message, details, suggestion)
        self.index = index
        self.n_channels = n_channels


class InvalidFilterParametersError(ProcessingError):
    """Raised when band edges are non-monotonic or exceed Nyquist."""

    def __init__(self,
                 low_freq: float,
                 high_freq: float,
                 sampling_rate: float,
                 reason: str = ''):
        message = f"Invalid filter parameters: {low_freq}-{high_freq} Hz at fs={sampling_rate} Hz"
        suggestion = "Require 0 < low_freq < high_freq < sampling_rate / 2."

        super().__init__(message, reason, suggestion)
        self.low_freq = low_freq
        self.high_freq = high_freq
        self.sampling_rate = sampling_rate


class InsufficientDataError(ProcessingError):
    """Raised when a buffer is too short for a single spectrogram window."""

    def __init__(self, n_samples: int, window: int, hop: int):
        message = "Not enough data for spectrogram"
        details = f"{n_samples} samples, window={window}, hop={hop}"
        suggestion = "Use a shorter window or a longer recording."

        super().__init__(message, details, suggestion)
        self.n_samples = n_samples
        self.window = window
        self.hop = hop


class MontageError(ProcessingError):
    """Raised when a montage cannot be applied to the channel set."""

    def __init__(self, kind: str, reason: str = ''):
        message = f"Montage '{kind}' could not be applied"
        suggestion = "The channel set was left unchanged."

        super().__init__(message, reason, suggestion)
        self.kind = kind


# =============================================================================
# CANCELLATION
# =============================================================================

class CancelledOperationError(EEGEngineError):
    """Raised at a cancellation checkpoint once cancellation was requested."""

    def __init__(self, operation: str, progress: str = ''):
        message = f"Operation '{operation}' was cancelled"
        details = progress

        super().__init__(message, details)
        self.operation = operation


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(EEGEngineError):
    """Base exception for configuration errors."""
    pass


class ConfigNotFoundError(ConfigurationError):
    """Raised when configuration file is not found."""

    def __init__(self, path: str):
        message = f"Configuration file not found: '{path}'"
        details = "The specified configuration file does not exist."
        suggestion = "Check the file path or create the configuration file."

        super().__init__(message, details, suggestion)
        self.path = path


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self,
                 key: str,
                 expected: str,
                 actual: str = ''):
        message = f"Invalid configuration value for '{key}'"
        details = f"Expected: {expected}"
        if actual:
            details += f", Got: {actual}"
        suggestion = "Update the configuration with a valid value."

        super().__init__(message, details, suggestion)
        self.key = key


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    'EEGEngineError',

    # Data
    'DataError',
    'RecordingFileNotFoundError',
    'DecodeError',
    'TruncatedHeaderError',
    'InvalidSignalCountError',
    'TruncatedDataError',
    'UnsupportedFormatError',
    'EncodeError',
    'CorruptedCalibrationError',

    # Processing
    'ProcessingError',
    'InvalidChannelIndexError',
    'InvalidFilterParametersError',
    'InsufficientDataError',
    'MontageError',

    # Cancellation
    'CancelledOperationError',

    # Configuration
    'ConfigurationError',
    'ConfigNotFoundError',
    'ConfigValidationError',
]
