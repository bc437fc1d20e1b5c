"""
Codecs
======

Recording file decoders and encoders.

- EDFCodec: EDF-like binary format (header-only encode)
- TextCodec: Delimited text (.csv, .txt, .dat)
- CodecFactory: Extension-based codec selection
- decode_file / encode_file: Entry points used by the session layer
"""

from eegengine.data.codecs.base_codec import BaseCodec
from eegengine.data.codecs.edf_codec import (
    EDFCodec,
    SignalHeader,
    auto_scale,
    calibration_from_header,
)
from eegengine.data.codecs.text_codec import TextCodec
from eegengine.data.codecs.factory import (
    CodecFactory,
    decode_file,
    encode_file,
)

__all__ = [
    'BaseCodec',
    'EDFCodec',
    'SignalHeader',
    'auto_scale',
    'calibration_from_header',
    'TextCodec',
    'CodecFactory',
    'decode_file',
    'encode_file',
]
