"""
Preprocessing Steps
===================

Single-channel signal transforms.

Available Steps:
---------------
- apply_gain / apply_offset / normalize / remove_dc: in-place amplitude ops
- BandpassFilter: zero-phase Butterworth bandpass with a design cache
- NotchFilter / notch_filter: biquad power line notch

Example:
    ```python
    from eegengine.preprocessing.steps import BandpassFilter, notch_filter, remove_dc

    remove_dc(samples)
    BandpassFilter().apply(samples, 250.0, 1.0, 40.0)
    notch_filter(samples, 250.0, 50.0)
    ```
"""

from eegengine.preprocessing.steps.elementwise import (
    apply_gain,
    apply_offset,
    normalize,
    remove_dc,
)
from eegengine.preprocessing.steps.bandpass_filter import BandpassFilter, validate_band
from eegengine.preprocessing.steps.notch_filter import (
    NotchFilter,
    notch_coefficients,
    notch_filter,
    validate_notch,
)

__all__ = [
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
]
