"""
IPreprocessor Interface
=======================

Abstract interface for single-channel signal conditioning steps
(bandpass, notch).

Design Principles:
- Each step is a separate class implementing IPreprocessor
- A step is configured once (``initialize``) and can then be applied to
  any number of buffers with ``process``
- ``process`` filters a copy and returns it; the in-place variant is the
  step's own ``apply`` method
- The only state a step holds is its parameters and a design cache

Example:
    ```python
    bandpass = BandpassFilter()
    bandpass.initialize({'sampling_rate': 250, 'low_freq': 1, 'high_freq': 40})
    filtered = bandpass.process(samples)
    ```
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np


class IPreprocessor(ABC):
    """
    Abstract interface for EEG preprocessing steps.

    Attributes:
        name (str): Unique identifier for this preprocessor
    """

    # =========================================================================
    # ABSTRACT PROPERTIES
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this preprocessing step.

        Example:
            >>> preprocessor.name
            'bandpass_filter'
        """
        pass

    # =========================================================================
    # ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize the preprocessor with configuration parameters.

        Args:
            config: Preprocessor-specific settings; most steps need
                'sampling_rate'

        Raises:
            ValueError: If required configuration is missing
            InvalidFilterParametersError: If frequencies are out of range
        """
        pass

    @abstractmethod
    def process(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """
        Apply the step to a 1-D sample buffer.

        Args:
            data: 1-D sample buffer (left untouched)

        Returns:
            np.ndarray: Processed copy of ``data``
        """
        pass

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        """Get current preprocessor parameters."""
        pass

    @abstractmethod
    def set_params(self, **params) -> 'IPreprocessor':
        """
        Set preprocessor parameters.

        Returns:
            Self for method chaining

        Raises:
            ValueError: If parameter name is invalid
        """
        pass

    # =========================================================================
    # CONCRETE METHODS
    # =========================================================================

    @property
    def is_initialized(self) -> bool:
        return getattr(self, '_is_initialized', False)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"

    def __call__(self, data: np.ndarray, **kwargs) -> np.ndarray:
        """Allow using a step as a callable: ``filtered = step(data)``."""
        return self.process(data, **kwargs)
