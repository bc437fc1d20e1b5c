"""
Core Module
===========

Foundation of the EEG engine:
- Abstract interfaces for codecs and preprocessing steps
- Recording data types
- Configuration management
- Cooperative cancellation
- Custom exceptions

Quick Start:
-----------
```python
from eegengine.core import Channel, Recording, get_config, EEGEngineError

config = get_config()
print(config.get('spectral.window'))  # 256

recording = Recording(patient_info='P01')
recording.add_channel(Channel('Cz', samples, sampling_rate=250.0))
```
"""

# =============================================================================
# Exceptions
# =============================================================================
from eegengine.core.exceptions import (
    # Base
    EEGEngineError,

    # Data
    DataError,
    RecordingFileNotFoundError,
    DecodeError,
    TruncatedHeaderError,
    InvalidSignalCountError,
    TruncatedDataError,
    UnsupportedFormatError,
    EncodeError,
    CorruptedCalibrationError,

    # Processing
    ProcessingError,
    InvalidChannelIndexError,
    InvalidFilterParametersError,
    InsufficientDataError,
    MontageError,

    # Cancellation
    CancelledOperationError,

    # Configuration
    ConfigurationError,
    ConfigNotFoundError,
    ConfigValidationError,
)

# =============================================================================
# Data Types
# =============================================================================
from eegengine.core.types import (
    Channel,
    Recording,
    RecordingEvent,
    RecordingListener,
    MontageKind,
    BandPower,
    ChannelStatistics
)

# =============================================================================
# Interfaces
# =============================================================================
from eegengine.core.interfaces import (
    ICodec,
    IPreprocessor,
)

# =============================================================================
# Configuration & Cancellation
# =============================================================================
from eegengine.core.config import (
    ConfigManager,
    get_config,
    load_config
)

from eegengine.core.cancellation import (
    CancellationToken,
    check_cancelled
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Interfaces
    'ICodec',
    'IPreprocessor',

    # Data Types
    'Channel',
    'Recording',
    'RecordingEvent',
    'RecordingListener',
    'MontageKind',
    'BandPower',
    'ChannelStatistics',

    # Configuration
    'ConfigManager',
    'get_config',
    'load_config',

    # Cancellation
    'CancellationToken',
    'check_cancelled',

    # All Exceptions
    'EEGEngineError',
    'DataError',
    'RecordingFileNotFoundError',
    'DecodeError',
    'TruncatedHeaderError',
    'InvalidSignalCountError',
    'TruncatedDataError',
    'UnsupportedFormatError',
    'EncodeError',
    'CorruptedCalibrationError',
    'ProcessingError',
    'InvalidChannelIndexError',
    'InvalidFilterParametersError',
    'InsufficientDataError',
    'MontageError',
    'CancelledOperationError',
    'ConfigurationError',
    'ConfigNotFoundError',
    'ConfigValidationError',
]
