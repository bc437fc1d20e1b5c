"""
EEG Engine
==========

Decoding, encoding and numerical processing of multichannel EEG
recordings.

Features:
---------
- EDF binary decoding with calibration and auto-scale recovery
- Delimited text (CSV/TSV) import and export
- Gain, offset, normalization, DC removal
- Zero-phase Butterworth bandpass and biquad notch filters
- Average reference, bipolar and Laplacian montages
- Power spectrum, EEG band power and STFT spectrogram
- Change notifications for front ends

Quick Start:
-----------
```python
import eegengine

# Setup logging
eegengine.setup_logging(level='INFO')

# Load and process
session = eegengine.EEGSession()
session.load('data/session01.edf')
session.apply_notch_all(50.0)
session.apply_montage('bipolar')

# Analyze
print(session.band_power(0).to_dict())
```

Project Structure:
-----------------
eegengine/
├── core/               # Interfaces, types, config, cancellation, exceptions
├── data/               # File codecs (EDF, text) and codec factory
├── preprocessing/      # Filters, elementwise steps, montages
├── features/           # Spectral analysis and statistics
├── utils/              # Logging and validation
└── session.py          # Channel-index facade for front ends
"""

# Version
__version__ = '1.0.0'

# Core module
from eegengine import core
from eegengine import utils

# Convenience imports
from eegengine.core import (
    # Configuration
    get_config,
    load_config,
    ConfigManager,

    # Types
    Channel,
    Recording,
    RecordingEvent,
    MontageKind,
    BandPower,
    ChannelStatistics,

    # Cancellation
    CancellationToken,
)

from eegengine.data import (
    decode_file,
    encode_file,
)

from eegengine.session import EEGSession

from eegengine.utils import (
    setup_logging,
    get_logger,
)

__all__ = [
    # Modules
    'core',
    'utils',

    # Configuration
    'get_config',
    'load_config',
    'ConfigManager',

    # Types
    'Channel',
    'Recording',
    'RecordingEvent',
    'MontageKind',
    'BandPower',
    'ChannelStatistics',
    'CancellationToken',

    # Files
    'decode_file',
    'encode_file',

    # Session
    'EEGSession',

    # Logging
    'setup_logging',
    'get_logger',

    # Version
    '__version__',
]
