"""
Unit Tests for Core Types and Infrastructure
============================================

Test Coverage:
- Channel / Recording data types and notifications
- BandPower / ChannelStatistics
- ConfigManager
- Cancellation token
- Logging helpers
- Validation helpers
"""

import json
import logging

import pytest
import numpy as np
import yaml

from eegengine.core.cancellation import CancellationToken, check_cancelled
from eegengine.core.config import ConfigManager, get_config, load_config
from eegengine.core.exceptions import (
    CancelledOperationError,
    ConfigNotFoundError,
    ConfigurationError,
    ConfigValidationError,
    EEGEngineError,
    InvalidChannelIndexError,
    TruncatedHeaderError,
)
from eegengine.core.types import BandPower, Channel, Recording, RecordingEvent
from eegengine.utils.logging import (
    LogLevel,
    ProgressReporter,
    set_level,
    setup_logging,
    setup_logging_from_config,
)
from eegengine.utils.validation import (
    check_channel_index,
    validate_buffer,
    validate_config_value,
)


@pytest.fixture
def recording():
    rec = Recording(patient_info='P01')
    rec.channels.append(Channel('Fp1', np.arange(500.0), sampling_rate=250.0))
    rec.channels.append(Channel('Fp2', np.arange(1000.0), sampling_rate=500.0))
    rec.channels.append(Channel('Cz', np.arange(100.0), sampling_rate=100.0))
    return rec


@pytest.fixture
def events():
    return []


@pytest.fixture
def listener(events):
    def on_event(event, payload):
        events.append((event, payload))
    return on_event


# =============================================================================
# CHANNEL
# =============================================================================

class TestChannel:
    """Test cases for Channel."""

    def test_samples_coerced(self):
        """Test sample lists become float64 arrays."""
        channel = Channel('Cz', [1, 2, 3], sampling_rate=10.0)

        assert channel.samples.dtype == np.float64
        assert channel.n_samples == 3
        assert channel.duration_seconds == pytest.approx(0.3)
        np.testing.assert_allclose(channel.get_time_axis(), [0.0, 0.1, 0.2])

    def test_rate_required_with_samples(self):
        """Test a non-positive rate is rejected when samples exist."""
        with pytest.raises(ValueError):
            Channel('Cz', [1.0], sampling_rate=0.0)
        assert Channel('Cz', sampling_rate=0.0).n_samples == 0

    def test_two_dimensional_rejected(self):
        """Test 2-D samples are rejected."""
        with pytest.raises(ValueError):
            Channel('Cz', np.zeros((2, 3)))

    def test_copy_is_deep(self):
        """Test copies don't share sample buffers."""
        channel = Channel('Cz', np.ones(4))
        clone = channel.copy()
        clone.samples[0] = 99.0

        assert channel.samples[0] == 1.0
        assert clone.label == 'Cz'

    def test_calibration_validity(self):
        """Test has_valid_calibration."""
        assert Channel('Cz').has_valid_calibration
        assert not Channel('Cz', physical_min=1.0, physical_max=1.0).has_valid_calibration


# =============================================================================
# RECORDING
# =============================================================================

class TestRecording:
    """Test cases for Recording."""

    def test_properties(self, recording):
        """Test derived properties."""
        assert recording.channel_count == 3
        assert len(recording) == 3
        assert recording.labels == ['Fp1', 'Fp2', 'Cz']
        assert recording.max_sampling_rate == 500.0
        assert recording.duration_seconds == pytest.approx(2.0)
        assert not recording.is_empty

    def test_empty(self):
        """Test an empty recording."""
        recording = Recording()
        assert recording.is_empty
        assert recording.max_sampling_rate == 0.0
        assert recording.duration_seconds == 0.0

    def test_channel_index_checked(self, recording):
        """Test out-of-range and negative indices."""
        assert recording.channel(2).label == 'Cz'
        for bad in (3, -1, 1.0, True):
            with pytest.raises(InvalidChannelIndexError):
                recording.channel(bad)

    def test_add_channel_events(self, recording, listener, events):
        """Test add_channel notifications."""
        recording.subscribe(listener)
        index = recording.add_channel(Channel('O1', np.zeros(10)))

        assert index == 3
        assert events == [
            (RecordingEvent.CHANNEL_ADDED, 3),
            (RecordingEvent.CHANNEL_COUNT_CHANGED, 4),
        ]

    def test_remove_channel_events(self, recording, listener, events):
        """Test remove_channel notifications."""
        recording.subscribe(listener)
        removed = recording.remove_channel(0)

        assert removed.label == 'Fp1'
        assert recording.labels == ['Fp2', 'Cz']
        assert events == [
            (RecordingEvent.CHANNEL_REMOVED, 0),
            (RecordingEvent.CHANNEL_COUNT_CHANGED, 2),
        ]

    def test_clear(self, recording, listener, events):
        """Test clear drops channels and metadata."""
        recording.subscribe(listener)
        recording.clear()

        assert recording.is_empty
        assert recording.patient_info == ''
        assert events == [
            (RecordingEvent.CHANNEL_COUNT_CHANGED, 0),
            (RecordingEvent.DATA_CHANGED, None),
        ]

    def test_replace_channels(self, recording, listener, events):
        """Test replace_channels emits count changes only when needed."""
        recording.subscribe(listener)

        recording.replace_channels([ch.copy() for ch in recording.channels])
        assert events == [(RecordingEvent.DATA_CHANGED, None)]

        events.clear()
        recording.replace_channels(recording.channels[:1])
        assert events == [
            (RecordingEvent.DATA_CHANGED, None),
            (RecordingEvent.CHANNEL_COUNT_CHANGED, 1),
        ]

    def test_unsubscribe(self, recording, listener, events):
        """Test listeners stop receiving after unsubscribe."""
        recording.subscribe(listener)
        recording.subscribe(listener)
        recording.unsubscribe(listener)
        recording.notify(RecordingEvent.DATA_CHANGED)

        assert events == []

    def test_copy_is_independent(self, recording, listener, events):
        """Test copy() is deep and carries no listeners."""
        recording.subscribe(listener)
        clone = recording.copy()
        clone.channels[0].samples[:] = 0.0
        clone.notify(RecordingEvent.DATA_CHANGED)

        assert recording.channels[0].samples[1] == 1.0
        assert clone.patient_info == 'P01'
        assert events == []

    def test_copy_from(self, recording, listener, events):
        """Test copy_from replaces contents with a deep copy."""
        other = Recording(patient_info='P02')
        other.channels.append(Channel('O1', np.ones(5)))

        recording.subscribe(listener)
        recording.copy_from(other)
        other.channels[0].samples[0] = 42.0

        assert recording.patient_info == 'P02'
        assert recording.labels == ['O1']
        assert recording.channels[0].samples[0] == 1.0
        assert (RecordingEvent.CHANNEL_COUNT_CHANGED, 1) in events

    def test_get_info(self, recording):
        """Test the summary dictionary."""
        info = recording.get_info()
        assert info['n_channels'] == 3
        assert info['start_time'] is None


class TestBandPowerType:
    """Test cases for BandPower."""

    def test_total_and_dominant(self):
        """Test derived values."""
        bp = BandPower(delta=1.0, theta=2.0, alpha=5.0, beta=0.5, gamma=0.1)
        assert bp.total == pytest.approx(8.6)
        assert bp.dominant_band == 'alpha'


# =============================================================================
# CONFIG
# =============================================================================

class TestConfigManager:
    """Test cases for ConfigManager."""

    def test_singleton(self):
        """Test get_config returns one instance."""
        assert get_config() is ConfigManager()

    def test_defaults(self):
        """Test hard-coded defaults."""
        config = get_config()
        assert config.get_int('codec.edf.max_records') == 10000
        assert config.get_int('codec.edf.max_channels') == 32
        assert config.get_float('codec.text.default_sampling_rate') == 250.0
        assert config.get_list('codec.text.delimiters') == [',', '\t', ';']
        assert config.get_int('filters.bandpass.order') == 4
        assert config.get_float('filters.notch.freq') == 50.0
        assert config.get('spectral.bands.alpha') == [8.0, 13.0]
        assert config.get('missing.key', 'fallback') == 'fallback'
        assert config.validate() == []

    def test_set_and_source(self):
        """Test runtime overrides are tracked."""
        config = get_config()
        config.set('spectral.hop', 32)

        assert config['spectral.hop'] == 32
        assert config.get_source('spectral.hop') == 'runtime'
        assert config.get_source('spectral.window') == 'default'
        assert 'spectral.window' in config

    def test_section_is_copy(self):
        """Test get_section can't mutate the config."""
        section = get_config().get_section('codec.edf')
        section['max_records'] = 1
        assert get_config().get_int('codec.edf.max_records') == 10000

    def test_load_yaml_merges(self, tmp_path):
        """Test YAML files deep merge over defaults."""
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.safe_dump({'spectral': {'window': 512}}))

        config = load_config(path)
        assert config.get('spectral.window') == 512
        assert config.get('spectral.hop') == 64
        assert config.get_source('spectral.window') == str(path)

    def test_load_json(self, tmp_path):
        """Test JSON files."""
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'filters': {'notch': {'freq': 60}}}))

        assert load_config(path).get_float('filters.notch.freq') == 60.0

    def test_load_errors(self, tmp_path):
        """Test missing files and unsupported formats."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / 'missing.yaml')

        bad = tmp_path / 'config.ini'
        bad.write_text('[x]')
        with pytest.raises(ConfigurationError):
            load_config(bad)

        not_mapping = tmp_path / 'list.yaml'
        not_mapping.write_text('- 1\n- 2\n')
        with pytest.raises(ConfigurationError):
            load_config(not_mapping)

    def test_save_round_trip(self, tmp_path):
        """Test save then load."""
        config = get_config()
        config.set('codec.edf.max_channels', 16)
        path = tmp_path / 'out' / 'saved.yaml'
        config.save(path, sections=['codec'])

        ConfigManager.reset()
        assert load_config(path).get_int('codec.edf.max_channels') == 16

    def test_validate_reports_errors(self):
        """Test validation of bad values."""
        config = get_config()
        config.set('spectral.hop', 0)
        config.set('spectral.bands.beta', [30.0, 13.0])
        config.set('codec.edf.max_records', -5)

        errors = config.validate()
        assert len(errors) == 3
        assert any('spectral.hop' in e for e in errors)


    def test_typed_getters_and_update(self):
        """Test update() and the boolean/list conversions."""
        config = get_config()
        config.update({'logging.console': 'no', 'codec.text.delimiters': ';'})

        assert config.get_bool('logging.console') is False
        assert config.get_bool('logging.colors') is True
        assert config.get_list('codec.text.delimiters') == [';']
        assert config.get_source('logging.console') == 'runtime'

    def test_environment(self, tmp_path, monkeypatch):
        """Test the environment name and its optional config file."""
        monkeypatch.setenv('EEGENGINE_ENV', 'clinic')
        ConfigManager.reset()
        config = get_config()
        assert config.get_environment() == 'clinic'

        (tmp_path / 'testing.yaml').write_text(yaml.safe_dump({'spectral': {'hop': 16}}))
        config.set_environment('testing', config_dir=tmp_path)

        assert config.get_environment() == 'testing'
        assert config.get_int('spectral.hop') == 16
    def test_validate_config_value(self):
        """Test dict-level validation helper."""
        validate_config_value({'order': 4}, 'order', int, min_val=1)
        with pytest.raises(ConfigValidationError):
            validate_config_value({'order': 'four'}, 'order', int)
        with pytest.raises(ConfigValidationError):
            validate_config_value({'order': 0}, 'order', int, min_val=1)


# =============================================================================
# CANCELLATION / LOGGING / VALIDATION
# =============================================================================

class TestCancellation:
    """Test cases for CancellationToken."""

    def test_token(self):
        """Test cancel, check and reset."""
        token = CancellationToken()
        token.raise_if_cancelled('op')

        token.cancel()
        assert token.is_cancelled
        with pytest.raises(CancelledOperationError) as exc_info:
            check_cancelled(token, 'decode', 'record 3/10')
        assert exc_info.value.operation == 'decode'

        token.reset()
        assert not token.is_cancelled

    def test_missing_token(self):
        """Test a None token never cancels."""
        check_cancelled(None, 'op')


class TestLogging:
    """Test cases for logging helpers."""

    def test_setup_logging_file(self, tmp_path):
        """Test the package logger writes to a log file."""
        log_file = tmp_path / 'logs' / 'engine.log'
        logger = setup_logging(level='DEBUG', log_file=str(log_file), console=False)

        logging.getLogger('eegengine.test').info('hello file')
        for handler in logger.handlers:
            handler.flush()

        assert logger.name == 'eegengine'
        assert 'hello file' in log_file.read_text(encoding='utf-8')


    def test_setup_logging_from_config(self, tmp_path):
        """Test the logging config section drives setup."""
        log_file = tmp_path / 'from_config.log'
        get_config().update({
            'logging.level': 'WARNING',
            'logging.file': str(log_file),
            'logging.console': False,
        })

        logger = setup_logging_from_config()

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.FileHandler)

    def test_set_level(self):
        """Test set_level on the package logger."""
        set_level('DEBUG')
        assert logging.getLogger('eegengine').level == logging.DEBUG
    def test_log_level_context(self):
        """Test LogLevel restores the previous level."""
        logger = logging.getLogger('eegengine')
        logger.setLevel(logging.INFO)

        with LogLevel('ERROR'):
            assert logger.level == logging.ERROR
        assert logger.level == logging.INFO

    def test_progress_reporter(self):
        """Test callbacks receive (current, total)."""
        calls = []
        progress = ProgressReporter(2, callback=lambda c, t: calls.append((c, t)))
        progress.update()
        progress.update()
        progress.finish()

        assert calls == [(1, 2), (2, 2)]


class TestValidation:
    """Test cases for validation helpers."""

    def test_validate_buffer(self):
        """Test coercion to 1-D float64."""
        assert validate_buffer([1, 2]).dtype == np.float64
        assert validate_buffer(3.0).shape == (1,)
        with pytest.raises(ValueError):
            validate_buffer(np.zeros((2, 2)))

    def test_check_channel_index(self):
        """Test index bounds."""
        assert check_channel_index(np.int64(1), 2) == 1
        with pytest.raises(InvalidChannelIndexError) as exc_info:
            check_channel_index(5, 2)
        assert exc_info.value.n_channels == 2

    def test_error_formatting(self):
        """Test message, details and suggestion are combined."""
        error = TruncatedHeaderError('a.edf', 'label[0]')
        assert isinstance(error, EEGEngineError)
        assert 'label[0]' in str(error)
