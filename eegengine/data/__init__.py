"""
Data Module
===========

Reading and writing recordings.

Example Usage:
    ```python
    from eegengine.data import decode_file, encode_file

    recording = decode_file('data/session01.edf')
    encode_file('exports/session01.csv', recording)
    ```
"""

from eegengine.data.codecs import (
    BaseCodec,
    EDFCodec,
    TextCodec,
    CodecFactory,
    decode_file,
    encode_file,
)

__all__ = [
    'BaseCodec',
    'EDFCodec',
    'TextCodec',
    'CodecFactory',
    'decode_file',
    'encode_file',
]
