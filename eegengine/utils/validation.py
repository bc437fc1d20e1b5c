"""
Validation Utilities
====================

Argument checks shared by the codecs, filters and the session facade.

Generic checks raise the built-in ``ValueError``; checks tied
to the recording model raise the engine's own exceptions so that callers can
catch ``ProcessingError`` uniformly.

Example Usage:
    ```python
    from eegengine.utils.validation import check_positive, validate_buffer

    check_positive(sampling_rate, 'sampling_rate')
    samples = validate_buffer(values, name='samples')
    ```
"""

from typing import Any, Dict, Optional, Tuple, Type, Union

import numpy as np

from eegengine.core.exceptions import ConfigValidationError, InvalidChannelIndexError


# =============================================================================
# BASIC CHECKS
# =============================================================================

def check_range(value: Union[int, float],
                min_val: Optional[Union[int, float]] = None,
                max_val: Optional[Union[int, float]] = None,
                name: str = 'value',
                inclusive: bool = True) -> None:
    """
    Check if value is within range.

    Raises:
        ValueError: If value is out of range
    """
    if min_val is not None:
        if inclusive and value < min_val:
            raise ValueError(f"'{name}' must be >= {min_val}, got {value}")
        elif not inclusive and value <= min_val:
            raise ValueError(f"'{name}' must be > {min_val}, got {value}")

    if max_val is not None:
        if inclusive and value > max_val:
            raise ValueError(f"'{name}' must be <= {max_val}, got {value}")
        elif not inclusive and value >= max_val:
            raise ValueError(f"'{name}' must be < {max_val}, got {value}")


def check_positive(value: Union[int, float],
                   name: str = 'value',
                   allow_zero: bool = False) -> None:
    """
    Check if value is positive.

    Raises:
        ValueError: If value is not positive
    """
    if allow_zero:
        if value < 0:
            raise ValueError(f"'{name}' must be non-negative, got {value}")
    elif value <= 0:
        raise ValueError(f"'{name}' must be positive, got {value}")


# =============================================================================
# SIGNAL CHECKS
# =============================================================================

def validate_buffer(values: Any, name: str = 'samples') -> np.ndarray:
    """
    Coerce a sequence of samples to a 1-D float64 array.

    Raises:
        ValueError: If the input is not one-dimensional
    """
    array = np.asarray(values, dtype=np.float64)
    if array.ndim == 0:
        array = array.reshape(1)
    if array.ndim != 1:
        raise ValueError(f"'{name}' must be 1-D, got shape {array.shape}")
    return array


def check_channel_index(index: int, n_channels: int) -> int:
    """
    Check that ``index`` addresses an existing channel.

    Negative indices are rejected rather than wrapped.

    Raises:
        InvalidChannelIndexError: If the index is out of bounds
    """
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise InvalidChannelIndexError(index, n_channels)
    if index < 0 or index >= n_channels:
        raise InvalidChannelIndexError(int(index), n_channels)
    return int(index)


# =============================================================================
# CONFIG CHECKS
# =============================================================================

def validate_config_value(config: Dict[str, Any],
                          key: str,
                          expected_type: Union[Type, Tuple[Type, ...]],
                          min_val: Optional[float] = None,
                          max_val: Optional[float] = None) -> None:
    """
    Validate a single (already-present) configuration value.

    Raises:
        ConfigValidationError: If the value has the wrong type or range
    """
    value = config[key]

    if not isinstance(value, expected_type) or isinstance(value, bool) and expected_type is not bool:
        expected = getattr(expected_type, '__name__', str(expected_type))
        raise ConfigValidationError(key, expected, repr(value))

    try:
        check_range(value, min_val=min_val, max_val=max_val, name=key)
    except ValueError as e:
        raise ConfigValidationError(key, str(e), repr(value)) from e
