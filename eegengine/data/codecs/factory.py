"""
Codec Factory
=============

Factory for recording codecs, plus the two entry points the rest of the
engine uses: ``decode_file`` and ``encode_file``.

The factory supports:
- Codec selection by file extension
- Manual codec creation by name
- Registration of custom codecs
- Content sniffing for unknown extensions (binary first, then text)

Usage Examples:
    ```python
    from eegengine.data.codecs import CodecFactory, decode_file

    recording = decode_file('data/session01.edf')

    codec = CodecFactory.create('text', config={'default_sampling_rate': 500})
    recording = codec.decode('data/export.csv')
    ```
"""

from typing import Any, Dict, List, Optional, Type, Union
from pathlib import Path
import logging

from eegengine.core.exceptions import (
    DecodeError,
    RecordingFileNotFoundError,
    UnsupportedFormatError,
)
from eegengine.core.interfaces.i_codec import ICodec
from eegengine.core.types.recording import Recording

logger = logging.getLogger(__name__)


class CodecFactory:
    """
    Factory class for creating codec instances.

    Class Attributes:
        _codecs (Dict): Registry of codec name -> codec class (insertion
            order is the sniffing order for unknown extensions)
        _extension_map (Dict): Registry of extension -> codec name
    """

    _codecs: Dict[str, Type[ICodec]] = {}
    _extension_map: Dict[str, str] = {}
    _initialized: bool = False

    # Used by encode_file for anything that isn't explicitly mapped
    default_encoder: str = 'text'

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Register the built-in codecs on first use."""
        if cls._initialized:
            return

        from eegengine.data.codecs.edf_codec import EDFCodec
        from eegengine.data.codecs.text_codec import TextCodec

        cls._initialized = True
        cls.register('edf', EDFCodec)
        cls.register('text', TextCodec)

        logger.debug(f"CodecFactory initialized with {len(cls._codecs)} codecs")

    @classmethod
    def register(cls,
                 name: str,
                 codec_class: Type[ICodec],
                 extensions: Optional[List[str]] = None) -> None:
        """
        Register a codec class.

        Args:
            name: Unique codec name
            codec_class: Class implementing ICodec
            extensions: File extensions; taken from an instance if None

        Raises:
            TypeError: If codec_class doesn't implement ICodec
        """
        cls._ensure_initialized()

        if not isinstance(codec_class, type) or not issubclass(codec_class, ICodec):
            raise TypeError(f"{codec_class!r} must implement the ICodec interface")

        if name in cls._codecs:
            logger.warning(f"Overwriting existing codec registration: '{name}'")

        cls._codecs[name] = codec_class
        logger.debug(f"Registered codec: '{name}' -> {codec_class.__name__}")

        if extensions is None:
            extensions = codec_class().supported_extensions

        for ext in extensions:
            cls._extension_map[ext.lower()] = name

    @classmethod
    def unregister(cls, name: str) -> bool:
        """Remove a codec; returns False if it wasn't registered."""
        cls._ensure_initialized()

        if name not in cls._codecs:
            return False

        del cls._codecs[name]
        for ext in [e for e, n in cls._extension_map.items() if n == name]:
            del cls._extension_map[ext]

        logger.debug(f"Unregistered codec: '{name}'")
        return True

    @classmethod
    def create(cls,
               name: str,
               config: Optional[Dict[str, Any]] = None) -> ICodec:
        """
        Create and initialize a codec by name.

        Raises:
            ValueError: If the name is not registered
        """
        cls._ensure_initialized()

        name = name.lower()
        if name not in cls._codecs:
            available = ', '.join(cls._codecs.keys())
            raise ValueError(f"Unknown codec: '{name}'. Available codecs: {available}")

        codec = cls._codecs[name]()
        codec.initialize(config or {})
        return codec

    @classmethod
    def create_for_file(cls,
                        file_path: Union[str, Path],
                        config: Optional[Dict[str, Any]] = None) -> Optional[ICodec]:
        """Codec mapped to the file's extension, or None if unmapped."""
        cls._ensure_initialized()

        extension = Path(file_path).suffix.lower()
        name = cls._extension_map.get(extension)
        if name is None:
            return None

        logger.debug(f"Selected codec '{name}' for extension '{extension}'")
        return cls.create(name, config)

    @classmethod
    def get_available_codecs(cls) -> List[str]:
        cls._ensure_initialized()
        return list(cls._codecs.keys())

    @classmethod
    def get_supported_extensions(cls) -> Dict[str, str]:
        """Mapping of extension -> codec name."""
        cls._ensure_initialized()
        return dict(cls._extension_map)

    @classmethod
    def reset(cls) -> None:
        """Clear registrations; built-ins are re-registered on next use."""
        cls._codecs.clear()
        cls._extension_map.clear()
        cls._initialized = False
        logger.debug("CodecFactory reset")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def decode_file(file_path: Union[str, Path], **kwargs) -> Recording:
    """
    Decode a recording, choosing the codec from the extension.

    Files with an unknown extension are tried with every registered codec
    in registration order (binary before text).

    Args:
        file_path: Recording path
        **kwargs: Passed to the codec's ``decode``

    Raises:
        RecordingFileNotFoundError: If the file doesn't exist
        DecodeError: If the mapped codec rejects the file
        UnsupportedFormatError: If no codec can read an unmapped file
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise RecordingFileNotFoundError(str(file_path))

    codec = CodecFactory.create_for_file(file_path)
    if codec is not None:
        return codec.decode(file_path, **kwargs)

    reasons = []
    for name in CodecFactory.get_available_codecs():
        try:
            recording = CodecFactory.create(name).decode(file_path, **kwargs)
        except DecodeError as e:
            logger.debug(f"Codec '{name}' rejected {file_path}: {e.reason}")
            reasons.append(f"{name}: {e.reason}")
            continue
        logger.info(f"Detected {name} content in {file_path.name}")
        return recording

    raise UnsupportedFormatError(str(file_path), '; '.join(reasons))


def encode_file(file_path: Union[str, Path], recording: Recording) -> None:
    """
    Save a recording; '.edf' selects the binary header writer, anything
    else the text encoder.

    Raises:
        EncodeError: If the recording is empty or the file can't be written
    """
    file_path = Path(file_path)
    name = 'edf' if file_path.suffix.lower() == '.edf' else CodecFactory.default_encoder
    CodecFactory.create(name).encode(recording, file_path)
