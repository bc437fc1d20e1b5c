"""
ICodec Interface
================

Abstract interface for recording file codecs.

Codecs are responsible for:
- Decoding a file into a ``Recording`` (all-or-nothing)
- Encoding a ``Recording`` back to a file
- Declaring which file extensions they handle

Example:
    ```python
    codec = CodecFactory.create('edf')
    recording = codec.decode('data/session01.edf')
    ```
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from eegengine.core.types.recording import Recording


class ICodec(ABC):
    """
    Abstract interface for recording codecs.

    Attributes:
        name (str): Unique identifier used by the codec factory
        supported_extensions (List[str]): Lower-case extensions with the dot
    """

    # =========================================================================
    # ABSTRACT PROPERTIES
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """Codec name, e.g. 'edf' or 'text'."""
        pass

    @property
    @abstractmethod
    def supported_extensions(self) -> List[str]:
        """File extensions this codec handles, e.g. ['.edf']."""
        pass

    # =========================================================================
    # ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Configure the codec. Keys override the codec's config section.
        """
        pass

    @abstractmethod
    def decode(self, file_path: Union[str, Path], **kwargs) -> 'Recording':
        """
        Decode a file into a new Recording.

        Raises:
            RecordingFileNotFoundError: If the file does not exist
            DecodeError: If the file is structurally invalid; no partial
                recording is returned
        """
        pass

    @abstractmethod
    def encode(self, recording: 'Recording', file_path: Union[str, Path]) -> None:
        """
        Write a Recording to a file.

        Raises:
            EncodeError: If the recording is empty or the file can't be written
        """
        pass

    # =========================================================================
    # CONCRETE METHODS
    # =========================================================================

    def can_decode(self, file_path: Union[str, Path]) -> bool:
        """True if the file extension is one this codec handles."""
        return Path(file_path).suffix.lower() in self.supported_extensions

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"
