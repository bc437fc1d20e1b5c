"""
Configuration Manager
=====================

Central configuration for the EEG engine.

The configuration manager is responsible for:
- Holding hard-coded defaults for codecs, filters and spectral analysis
- Loading overrides from YAML/JSON files (deep merged)
- Dot-notation, type-converting access
- Validating the values the engine depends on

Configuration Hierarchy:
-----------------------
1. Default config (``_init_defaults``)
2. Files passed to ``load`` (in call order)
3. Environment file ``configs/<EEGENGINE_ENV>.yaml`` via ``set_environment``
4. Runtime overrides (``set``/``update``)

Each level overrides values from previous levels.

Example Usage:
    ```python
    from eegengine.core.config import get_config

    config = get_config()
    config.load('configs/clinic.yaml')

    max_records = config.get_int('codec.edf.max_records')
    config.set('spectral.hop', 32)
    bands = config.get_section('spectral.bands')
    ```
"""

from typing import Dict, List, Optional, Any, Union
from pathlib import Path
from copy import deepcopy
import json
import logging
import os
import threading

import yaml

from eegengine.core.exceptions import ConfigNotFoundError, ConfigurationError

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Central configuration manager for the engine.

    Implements the Singleton pattern with thread-safe access.

    Attributes:
        _instance: Singleton instance
        _lock: Thread lock
        _config: Hierarchical configuration dictionary
        _sources: Which file (or 'default'/'runtime') set each dotted key
    """

    _instance: Optional['ConfigManager'] = None
    _lock: threading.Lock = threading.Lock()

    # =========================================================================
    # SINGLETON PATTERN
    # =========================================================================

    def __new__(cls) -> 'ConfigManager':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config: Dict[str, Any] = {}
        self._sources: Dict[str, str] = {}
        self._loaded_files: List[str] = []
        self._defaults: Dict[str, Any] = {}
        self._environment: str = os.getenv('EEGENGINE_ENV', 'development')

        self._init_defaults()

        self._initialized = True
        logger.debug(f"ConfigManager initialized (env: {self._environment})")

    @classmethod
    def get_instance(cls) -> 'ConfigManager':
        """Get the singleton configuration manager."""
        return cls()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access starts from defaults (mainly for testing)."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance._config.clear()
                cls._instance._sources.clear()
                cls._instance._loaded_files.clear()
                cls._instance._initialized = False
            cls._instance = None
        logger.debug("ConfigManager reset")

    # =========================================================================
    # DEFAULT CONFIGURATION
    # =========================================================================

    def _init_defaults(self) -> None:
        """Initialize hard-coded default values."""
        self._defaults = {
            'project': {
                'name': 'eegengine',
                'version': '1.0.0'
            },

            'codec': {
                'edf': {
                    'max_records': 10000,
                    'max_channels': 32,
                    'default_record_duration': 1.0,
                    'annotation_markers': ['annotation'],
                    # Fallbacks for unparsable per-signal header fields
                    'fallback_physical_min': -500.0,
                    'fallback_physical_max': 500.0,
                    'fallback_digital_min': -32768.0,
                    'fallback_digital_max': 32767.0,
                    'unit': 'µV'
                },
                'text': {
                    'default_sampling_rate': 250.0,
                    'delimiters': [',', '\t', ';'],
                    'precision': 6,
                    'unit': 'uV',
                    'recording_info': 'CSV Import'
                }
            },

            'filters': {
                'bandpass': {
                    'order': 4
                },
                'notch': {
                    'freq': 50.0
                }
            },

            'spectral': {
                'window': 256,
                'hop': 64,
                'power_floor': 1e-10,
                'db_floor': -100.0,
                'bands': {
                    'delta': [0.5, 4.0],
                    'theta': [4.0, 8.0],
                    'alpha': [8.0, 13.0],
                    'beta': [13.0, 30.0],
                    'gamma': [30.0, 100.0]
                }
            },

            'logging': {
                'level': 'INFO',
                'file': None,
                'console': True,
                'colors': True,
                'detailed': False
            }
        }

        self._config = deepcopy(self._defaults)
        logger.debug("Default configuration initialized")

    # =========================================================================
    # LOADING CONFIGURATION
    # =========================================================================

    def load(self,
             path: Union[str, Path],
             merge: bool = True) -> 'ConfigManager':
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to configuration file
            merge: If True, deep merge over the current config. If False,
                replace it (defaults included).

        Returns:
            Self for method chaining

        Raises:
            ConfigNotFoundError: If file doesn't exist
            ConfigurationError: If the format is unsupported or unreadable
        """
        path = Path(path)

        if not path.is_file():
            raise ConfigNotFoundError(str(path))

        suffix = path.suffix.lower()
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if suffix in ('.yaml', '.yml'):
                    data = yaml.safe_load(f) or {}
                elif suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported config format: {path.suffix}",
                        suggestion="Use a .yaml, .yml or .json file."
                    )
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not parse configuration file '{path}'", str(e)) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file '{path}' must contain a mapping",
                f"Got {type(data).__name__}"
            )

        if merge:
            self._merge_config(data, str(path))
        else:
            self._config = {}
            self._sources = {}
            self._merge_config(data, str(path))

        self._loaded_files.append(str(path))
        logger.info(f"Loaded configuration from {path}")

        return self

    def _merge_config(self,
                      new_config: Dict[str, Any],
                      source: str) -> None:
        """Deep merge new configuration into the existing one."""
        def deep_merge(base: Dict, update: Dict, prefix: str = '') -> Dict:
            for key, value in update.items():
                full_key = f"{prefix}.{key}" if prefix else key

                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value, full_key)
                else:
                    base[key] = deepcopy(value)
                    self._sources[full_key] = source

            return base

        deep_merge(self._config, new_config)

    # =========================================================================
    # ACCESSING CONFIGURATION
    # =========================================================================

    def get(self,
            key: str,
            default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            >>> config.get('codec.edf.max_records')
            10000
            >>> config.get('nonexistent', default='fallback')
            'fallback'
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get configuration value as float."""
        value = self.get(key, default)
        return float(value) if value is not None else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'on')
        return bool(value) if value is not None else default

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get configuration value as list."""
        value = self.get(key, default)
        if value is None:
            return default or []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def get_section(self, key: str) -> Dict[str, Any]:
        """Get a configuration section as a deep-copied dictionary."""
        value = self.get(key, {})
        return deepcopy(value) if isinstance(value, dict) else {}

    def get_source(self, key: str) -> str:
        """Get the source (file path, 'runtime' or 'default') of a value."""
        return self._sources.get(key, 'default')

    # =========================================================================
    # MODIFYING CONFIGURATION
    # =========================================================================

    def set(self,
            key: str,
            value: Any,
            source: str = 'runtime') -> 'ConfigManager':
        """
        Set a configuration value.

        Example:
            >>> config.set('spectral.hop', 32)
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self._sources[key] = source

        logger.debug(f"Set {key} = {value!r}")
        return self

    def update(self,
               values: Dict[str, Any],
               source: str = 'runtime') -> 'ConfigManager':
        """Set several dotted keys at once."""
        for key, value in values.items():
            self.set(key, value, source)
        return self

    # =========================================================================
    # SAVING CONFIGURATION
    # =========================================================================

    def save(self,
             path: Union[str, Path],
             sections: Optional[List[str]] = None) -> None:
        """
        Save configuration to a YAML or JSON file.

        Args:
            path: Output file path
            sections: If specified, only save these top-level sections
        """
        path = Path(path)

        if sections:
            data = {s: self.get_section(s) for s in sections}
        else:
            data = deepcopy(self._config)

        path.parent.mkdir(parents=True, exist_ok=True)

        suffix = path.suffix.lower()
        if suffix in ('.yaml', '.yml'):
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True)
        elif suffix == '.json':
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            raise ConfigurationError(f"Unsupported format: {path.suffix}")

        logger.info(f"Saved configuration to {path}")

    # =========================================================================
    # VALIDATION / ENVIRONMENT
    # =========================================================================

    def validate(self) -> List[str]:
        """
        Validate the values the engine relies on.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        positive_keys = [
            'codec.edf.max_records',
            'codec.edf.max_channels',
            'codec.edf.default_record_duration',
            'codec.text.default_sampling_rate',
            'filters.bandpass.order',
            'filters.notch.freq',
        ]
        for key in positive_keys:
            value = self.get(key)
            if value is None:
                errors.append(f"Missing required configuration: {key}")
            elif not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
                errors.append(f"{key} must be a positive number, got {value!r}")

        window = self.get('spectral.window')
        if not isinstance(window, int) or window < 2:
            errors.append(f"spectral.window must be an integer >= 2, got {window!r}")

        hop = self.get('spectral.hop')
        if not isinstance(hop, int) or hop < 1:
            errors.append(f"spectral.hop must be an integer >= 1, got {hop!r}")

        bands = self.get('spectral.bands', {})
        if not isinstance(bands, dict) or not bands:
            errors.append("spectral.bands must be a non-empty mapping")
        else:
            for name, edges in bands.items():
                if (not isinstance(edges, (list, tuple)) or len(edges) != 2
                        or not edges[0] < edges[1]):
                    errors.append(f"spectral.bands.{name} must be [low, high] with low < high, got {edges!r}")

        return errors

    def get_environment(self) -> str:
        """Get current environment name."""
        return self._environment

    def set_environment(self, env: str, config_dir: Union[str, Path] = 'configs') -> 'ConfigManager':
        """Set environment and load ``<config_dir>/<env>.yaml`` if it exists."""
        self._environment = env
        env_config = Path(config_dir) / f"{env}.yaml"
        if env_config.is_file():
            self.load(env_config)
        return self

    def __repr__(self) -> str:
        return f"ConfigManager(env='{self._environment}', files={len(self._loaded_files)})"

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def get_config() -> ConfigManager:
    """Get the singleton ConfigManager instance."""
    return ConfigManager.get_instance()


def load_config(path: Union[str, Path]) -> ConfigManager:
    """Load configuration from file into the singleton."""
    return get_config().load(path)
