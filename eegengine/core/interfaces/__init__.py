"""
Interfaces
==========

Abstract base classes for pluggable engine components.

- ICodec: Recording file decoders/encoders
- IPreprocessor: Single-channel signal conditioning steps
"""

from eegengine.core.interfaces.i_codec import ICodec
from eegengine.core.interfaces.i_preprocessor import IPreprocessor

__all__ = [
    'ICodec',
    'IPreprocessor'
]
