"""
Base Codec Implementation
=========================

Base implementation of the ICodec interface shared by the EDF and text
codecs.

The BaseCodec implements:
- Configuration (codec section of the engine config, then overrides)
- File validation
- Logging and error wrapping around the format-specific steps

Design Pattern:
- Template Method Pattern: ``decode``/``encode`` validate, delegate to
  ``_decode_file``/``_encode_file`` and log the outcome

Usage:
    ```python
    class MyCodec(BaseCodec):
        config_section = 'codec.mine'

        @property
        def name(self) -> str:
            return 'mine'

        @property
        def supported_extensions(self) -> List[str]:
            return ['.mine']

        def _decode_file(self, file_path, **kwargs):
            ...

        def _encode_file(self, recording, file_path):
            ...
    ```
"""

from abc import abstractmethod
from pathlib import Path
from typing import Any, Dict, Union
import logging
import os

from eegengine.core.config import get_config
from eegengine.core.exceptions import EncodeError, RecordingFileNotFoundError
from eegengine.core.interfaces.i_codec import ICodec
from eegengine.core.types.recording import Recording

logger = logging.getLogger(__name__)


class BaseCodec(ICodec):
    """
    Base implementation of the ICodec interface.

    Attributes:
        config_section (str): Dotted config key holding this codec's defaults
        _config (Dict): Effective configuration
        _initialized (bool): Whether initialize() has been called
    """

    config_section: str = ''

    def __init__(self):
        self._config: Dict[str, Any] = {}
        self._initialized: bool = False

        logger.debug(f"{self.__class__.__name__} instantiated")

    # =========================================================================
    # INTERFACE IMPLEMENTATION
    # =========================================================================

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Configure the codec.

        Values from the codec's config section are used unless ``config``
        overrides them.
        """
        defaults = get_config().get_section(self.config_section) if self.config_section else {}
        self._config = {**defaults, **(config or {})}
        self._initialize_specific(self._config)
        self._initialized = True
        logger.debug(f"{self.name} codec initialized")

    def decode(self, file_path: Union[str, Path], **kwargs) -> Recording:
        """
        Decode a file into a new Recording.

        Args:
            file_path: Path to the recording
            **kwargs: Codec-specific options (e.g. ``cancel_token``,
                ``progress_callback``)

        Returns:
            Recording: Fully decoded recording

        Raises:
            RecordingFileNotFoundError: If the file doesn't exist
            DecodeError: If the contents are invalid
            CancelledOperationError: If decoding was cancelled
        """
        self._ensure_initialized()

        file_path = Path(file_path)
        self._validate_file_path(file_path)
        logger.debug(f"Decoding {file_path} with {self.name} codec")

        recording = self._decode_file(file_path, **kwargs)
        recording.source_file = str(file_path)

        logger.info(
            f"Loaded {file_path.name}: {recording.channel_count} channels, "
            f"{recording.duration_seconds:.1f}s"
        )
        return recording

    def encode(self, recording: Recording, file_path: Union[str, Path]) -> None:
        """
        Write a Recording to ``file_path``.

        Raises:
            EncodeError: If the recording is empty or writing fails
        """
        self._ensure_initialized()

        file_path = Path(file_path)
        if recording.is_empty:
            raise EncodeError(str(file_path), "Cannot save an empty recording")

        try:
            self._encode_file(recording, file_path)
        except OSError as e:
            raise EncodeError(str(file_path), str(e)) from e

        logger.info(f"Saved {recording.channel_count} channels to {file_path}")

    # =========================================================================
    # TEMPLATE METHODS
    # =========================================================================

    @abstractmethod
    def _decode_file(self, file_path: Path, **kwargs) -> Recording:
        """Format-specific decoding."""
        pass

    @abstractmethod
    def _encode_file(self, recording: Recording, file_path: Path) -> None:
        """Format-specific encoding."""
        pass

    def _initialize_specific(self, config: Dict[str, Any]) -> None:
        """Hook for subclasses to read their configuration."""
        pass

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize({})

    def _validate_file_path(self, file_path: Path) -> None:
        """
        Raises:
            RecordingFileNotFoundError: If the path is not a readable file
        """
        if not file_path.is_file() or not os.access(file_path, os.R_OK):
            raise RecordingFileNotFoundError(str(file_path))
