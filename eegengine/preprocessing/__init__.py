"""
Preprocessing Module
====================

Signal transforms that mutate channel buffers.

Module Structure:
----------------
- steps/: Single-channel steps (gain, offset, normalize, DC removal,
  bandpass, notch)
- montage.py: Whole-recording re-referencing (average, bipolar, Laplacian)

Typical Cleanup:
---------------
1. **DC removal**: Drop the amplifier offset
2. **Notch Filter**: Remove 50/60 Hz power line interference
3. **Bandpass Filter**: Keep the band of interest (e.g. 1-40 Hz)
4. **Montage**: Re-reference if needed

Usage Examples:
    ```python
    from eegengine.preprocessing import BandpassFilter, notch_filter, apply_montage

    bandpass = BandpassFilter()
    for channel in recording:
        notch_filter(channel.samples, channel.sampling_rate, 50.0)
        bandpass.apply(channel.samples, channel.sampling_rate, 1.0, 40.0)

    result = apply_montage([c.samples for c in recording], recording.labels, 'average')
    ```
"""

from eegengine.preprocessing.steps import (
    apply_gain,
    apply_offset,
    normalize,
    remove_dc,
    BandpassFilter,
    validate_band,
    NotchFilter,
    notch_coefficients,
    notch_filter,
    validate_notch,
)

from eegengine.preprocessing.montage import (
    CANONICAL_BIPOLAR_PAIRS,
    MontageResult,
    apply_montage,
    average_reference,
    bipolar_montage,
    find_channel_index,
    laplacian_montage,
    resolve_bipolar_pairs,
)

__all__ = [
    # Steps
    'apply_gain',
    'apply_offset',
    'normalize',
    'remove_dc',
    'BandpassFilter',
    'validate_band',
    'NotchFilter',
    'notch_coefficients',
    'notch_filter',
    'validate_notch',

    # Montages
    'CANONICAL_BIPOLAR_PAIRS',
    'MontageResult',
    'apply_montage',
    'average_reference',
    'bipolar_montage',
    'find_channel_index',
    'laplacian_montage',
    'resolve_bipolar_pairs',
]
