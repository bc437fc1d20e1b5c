"""
Utilities Module
================

Common helpers shared by the engine.

Available Modules:
-----------------
- logging: Package logger configuration and progress reporting
- validation: Argument and buffer checks

Example Usage:
    ```python
    from eegengine.utils import setup_logging, get_logger, check_channel_index

    setup_logging(level='INFO', log_file='logs/eegengine.log')
    logger = get_logger(__name__)

    index = check_channel_index(3, recording.channel_count)
    ```
"""

# =============================================================================
# Logging Utilities
# =============================================================================
from eegengine.utils.logging import (
    ColoredFormatter,
    ProgressCallback,
    ProgressReporter,
    setup_logging,
    setup_logging_from_config,
    get_logger,
    set_level,
    log_execution_time,
    LogLevel
)

# =============================================================================
# Validation Utilities
# =============================================================================
from eegengine.utils.validation import (
    check_range,
    check_positive,
    validate_buffer,
    check_channel_index,
    validate_config_value
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Logging
    'ColoredFormatter',
    'ProgressCallback',
    'ProgressReporter',
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',
    'set_level',
    'log_execution_time',
    'LogLevel',

    # Validation
    'check_range',
    'check_positive',
    'validate_buffer',
    'check_channel_index',
    'validate_config_value'
]
