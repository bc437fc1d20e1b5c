"""
Data Types
==========

Core data types of the EEG engine.

Example Usage:
    ```python
    from eegengine.core.types import Channel, Recording

    recording = Recording(patient_info='P01')
    recording.add_channel(Channel('Cz', samples, sampling_rate=250.0))
    ```
"""

from eegengine.core.types.recording import (
    Channel,
    Recording,
    RecordingEvent,
    RecordingListener,
    MontageKind,
    BandPower,
    ChannelStatistics
)

__all__ = [
    'Channel',
    'Recording',
    'RecordingEvent',
    'RecordingListener',
    'MontageKind',
    'BandPower',
    'ChannelStatistics'
]
