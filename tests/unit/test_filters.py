"""
Unit Tests for Filter Steps
===========================

Test Coverage:
- Elementwise steps (gain, offset, normalize, DC removal)
- BandpassFilter (design cache, zero-phase application)
- Notch filter (function and NotchFilter class)
"""

import logging

import pytest
import numpy as np

from eegengine.core.config import get_config
from eegengine.core.exceptions import ConfigValidationError, InvalidFilterParametersError
from eegengine.core.interfaces import IPreprocessor
from eegengine.features.spectral import power_spectrum
from eegengine.preprocessing.steps import (
    BandpassFilter,
    NotchFilter,
    apply_gain,
    apply_offset,
    normalize,
    notch_coefficients,
    notch_filter,
    remove_dc,
    validate_band,
    validate_notch,
)


FS = 250.0


@pytest.fixture
def time_axis():
    """10 s at 250 Hz."""
    return np.arange(2500) / FS


# =============================================================================
# ELEMENTWISE
# =============================================================================

class TestElementwise:
    """Test cases for in-place amplitude operations."""

    def test_gain_and_offset(self):
        """Test multiply and add in place."""
        buffer = np.array([1.0, -2.0, 3.0])
        original = buffer

        apply_gain(buffer, 2.0)
        apply_offset(buffer, 1.0)

        assert buffer is original
        np.testing.assert_allclose(buffer, [3.0, -3.0, 7.0])

    def test_empty_buffer_noop(self):
        """Test empty buffers are left alone."""
        buffer = np.zeros(0)
        apply_gain(buffer, 5.0)
        apply_offset(buffer, 5.0)
        assert normalize(buffer) is None
        assert remove_dc(buffer) == 0.0
        assert buffer.size == 0

    def test_non_array_rejected(self):
        """Test lists are rejected."""
        with pytest.raises(TypeError):
            apply_gain([1.0, 2.0], 2.0)

    def test_normalize(self):
        """Test [min, max] maps onto [lo, hi]."""
        buffer = np.array([2.0, 4.0, 6.0])
        bounds = normalize(buffer, -1.0, 1.0)

        assert bounds == (2.0, 6.0)
        np.testing.assert_allclose(buffer, [-1.0, 0.0, 1.0])

    def test_normalize_default_range(self):
        """Test the default [0, 1] target."""
        buffer = np.array([-5.0, 5.0, 0.0])
        normalize(buffer)
        np.testing.assert_allclose(buffer, [0.0, 1.0, 0.5])

    def test_normalize_constant(self):
        """Test constant buffers are unchanged."""
        buffer = np.full(4, 3.0)
        assert normalize(buffer) is None
        np.testing.assert_array_equal(buffer, np.full(4, 3.0))

    def test_remove_dc(self):
        """Test the mean is subtracted and returned."""
        buffer = np.array([1.0, 2.0, 3.0, 6.0])
        mean = remove_dc(buffer)

        assert mean == pytest.approx(3.0)
        assert buffer.mean() == pytest.approx(0.0)


# =============================================================================
# BANDPASS
# =============================================================================

class TestBandpassFilter:
    """Test cases for BandpassFilter."""

    def test_properties(self):
        """Test filter properties."""
        bp = BandpassFilter()

        assert bp.name == 'bandpass_filter'
        assert bp.order == 4

    def test_order_from_config(self):
        """Test the default order comes from configuration."""
        get_config().set('filters.bandpass.order', 2)
        assert BandpassFilter().order == 2
        assert BandpassFilter(order=6).order == 6

    def test_zero_input_stays_zero(self):
        """Test an all-zero buffer remains all zero."""
        buffer = np.zeros(500)
        assert BandpassFilter().apply(buffer, FS, 1.0, 40.0)
        np.testing.assert_array_equal(buffer, np.zeros(500))

    def test_passband_preserved_stopband_removed(self, time_axis):
        """Test 10 Hz passes a 1-40 Hz band and 100 Hz does not, without lag."""
        clean = np.sin(2 * np.pi * 10 * time_axis)
        buffer = clean + np.sin(2 * np.pi * 100 * time_axis)

        BandpassFilter().apply(buffer, FS, 1.0, 40.0)

        middle = slice(1000, 1500)
        np.testing.assert_allclose(buffer[middle], clean[middle], atol=0.05)

    def test_design_cache(self):
        """Test coefficients are only re-designed when parameters change."""
        bp = BandpassFilter()
        buffer = np.random.randn(300)

        bp.apply(buffer, FS, 1.0, 40.0)
        bp.apply(buffer, FS, 1.0, 40.0)
        assert bp.design_count == 1

        bp.apply(buffer, FS, 8.0, 30.0)
        assert bp.design_count == 2

        bp.apply(buffer, FS, 1.0, 40.0)
        assert bp.design_count == 3

    def test_cache_is_per_instance(self):
        """Test two filters keep independent designs."""
        first, second = BandpassFilter(), BandpassFilter()
        buffer = np.random.randn(300)

        first.apply(buffer, FS, 1.0, 40.0)
        second.apply(buffer, FS, 8.0, 30.0)
        first.apply(buffer, FS, 1.0, 40.0)

        assert first.design_count == 1
        assert second.design_count == 1

    @pytest.mark.parametrize('low,high', [(0.0, 40.0), (30.0, 20.0), (1.0, 125.0), (1.0, 200.0)])
    def test_invalid_band_is_noop(self, low, high, caplog):
        """Test invalid bands log a warning and leave the buffer untouched."""
        buffer = np.random.randn(300)
        before = buffer.copy()

        with caplog.at_level(logging.WARNING):
            assert BandpassFilter().apply(buffer, FS, low, high) is False

        np.testing.assert_array_equal(buffer, before)
        assert 'Invalid bandpass' in caplog.text

    def test_validate_band(self):
        """Test validate_band raises for unusable bands."""
        validate_band(FS, 1.0, 40.0)
        with pytest.raises(InvalidFilterParametersError):
            validate_band(FS, 40.0, 1.0)
        with pytest.raises(InvalidFilterParametersError):
            validate_band(0.0, 1.0, 40.0)

    def test_empty_buffer(self):
        """Test empty buffers report no change."""
        assert BandpassFilter().apply(np.zeros(0), FS, 1.0, 40.0) is False

    def test_process_returns_copy(self, time_axis):
        """Test the IPreprocessor path leaves the input alone."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': FS, 'low_freq': 8, 'high_freq': 30})
        data = np.sin(2 * np.pi * 50 * time_axis)

        filtered = bp.process(data)
        assert filtered is not data
        assert filtered.shape == data.shape
        assert np.abs(filtered[1000:1500]).max() < 0.1
        assert bp.get_params() == {
            'order': 4, 'sampling_rate': FS, 'low_freq': 8.0, 'high_freq': 30.0
        }

    def test_process_requires_initialize(self):
        """Test process before initialize."""
        with pytest.raises(RuntimeError):
            BandpassFilter().process(np.zeros(10))

    def test_initialize_requires_keys(self):
        """Test missing configuration keys."""
        with pytest.raises(ValueError):
            BandpassFilter().initialize({'sampling_rate': FS, 'low_freq': 8})

    @pytest.mark.parametrize('order', [0, 2.5, 'four'])
    def test_initialize_rejects_bad_order(self, order):
        """Test the order must be a positive integer."""
        with pytest.raises(ConfigValidationError):
            BandpassFilter().initialize(
                {'sampling_rate': FS, 'low_freq': 8, 'high_freq': 30, 'order': order}
            )

    def test_set_params_redesigns(self):
        """Test set_params on an initialized filter updates the design."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': FS, 'low_freq': 8, 'high_freq': 30})
        bp.set_params(low_freq=1.0, high_freq=40.0)

        assert bp.get_params()['low_freq'] == 1.0
        assert bp.design_count == 2
        with pytest.raises(ValueError):
            bp.set_params(ripple=0.1)

    def test_initialize_order(self):
        """Test a new order replaces the cached design."""
        bp = BandpassFilter()
        bp.initialize({'sampling_rate': FS, 'low_freq': 8, 'high_freq': 30, 'order': 2})

        assert bp.order == 2
        assert bp.design_count == 1


# =============================================================================
# NOTCH
# =============================================================================

class TestNotchFilter:
    """Test cases for the biquad notch."""

    def test_coefficients(self):
        """Test the biquad coefficients."""
        b, a = notch_coefficients(FS, 50.0)
        w0 = 2 * np.pi * 50.0 / FS
        alpha = np.sin(w0) / 2

        np.testing.assert_allclose(b, [1.0, -2 * np.cos(w0), 1.0])
        np.testing.assert_allclose(a, [1 + alpha, -2 * np.cos(w0), 1 - alpha])

    def test_attenuates_line_noise(self, time_axis):
        """Test a pure 50 Hz tone loses most of its power at the 50 Hz bin."""
        tone = np.sin(2 * np.pi * 50 * time_axis[:1000])
        buffer = tone.copy()

        assert notch_filter(buffer, FS, 50.0)

        bin_50 = 200
        before = power_spectrum(tone, FS)[bin_50]
        after = power_spectrum(buffer, FS)[bin_50]
        assert after < 0.1 * before

    def test_passes_other_frequencies(self, time_axis):
        """Test a 10 Hz tone is mostly preserved."""
        tone = np.sin(2 * np.pi * 10 * time_axis[:1000])
        buffer = tone.copy()
        notch_filter(buffer, FS, 50.0)

        bin_10 = 40
        ratio = power_spectrum(buffer, FS)[bin_10] / power_spectrum(tone, FS)[bin_10]
        assert ratio > 0.8

    def test_first_samples_seeded(self):
        """Test the first two outputs equal the first two inputs."""
        buffer = np.random.randn(100)
        head = buffer[:2].copy()

        notch_filter(buffer, FS, 50.0)
        np.testing.assert_array_equal(buffer[:2], head)

    def test_short_buffer_noop(self):
        """Test fewer than 4 samples is a no-op."""
        buffer = np.array([1.0, 2.0, 3.0])
        assert notch_filter(buffer, FS, 50.0) is False
        np.testing.assert_array_equal(buffer, [1.0, 2.0, 3.0])

    def test_frequency_above_nyquist_noop(self):
        """Test an unplaceable notch is skipped."""
        buffer = np.random.randn(100)
        before = buffer.copy()

        assert notch_filter(buffer, FS, 200.0) is False
        np.testing.assert_array_equal(buffer, before)
        with pytest.raises(InvalidFilterParametersError):
            validate_notch(FS, 200.0)

    def test_default_frequency_from_config(self):
        """Test freq=None uses filters.notch.freq."""
        get_config().set('filters.notch.freq', 60.0)
        t = np.arange(1000) / FS
        tone = np.sin(2 * np.pi * 60 * t)
        buffer = tone.copy()

        notch_filter(buffer, FS)

        bin_60 = 240
        assert power_spectrum(buffer, FS)[bin_60] < 0.1 * power_spectrum(tone, FS)[bin_60]

    def test_notch_filter_class(self):
        """Test NotchFilter through the IPreprocessor interface."""
        nf = NotchFilter()
        nf.initialize({'sampling_rate': FS, 'notch_freq': 50})

        data = np.random.randn(200)
        filtered = nf.process(data)

        expected = data.copy()
        notch_filter(expected, FS, 50.0)
        np.testing.assert_allclose(filtered, expected)
        assert nf.get_params() == {'notch_freq': 50.0, 'sampling_rate': FS}
        assert nf.name == 'notch_filter'

    def test_notch_filter_class_requires_rate(self):
        """Test initialize without a sampling rate."""
        with pytest.raises(ValueError):
            NotchFilter().initialize({'notch_freq': 50})

    def test_set_params_and_call(self):
        """Test set_params and calling the step directly."""
        nf = NotchFilter()
        nf.initialize({'sampling_rate': FS})
        nf.set_params(notch_freq=60.0)

        assert nf.get_params()['notch_freq'] == 60.0
        data = np.random.randn(100)
        np.testing.assert_allclose(nf(data), nf.process(data))
        with pytest.raises(ValueError):
            nf.set_params(q=30)


# =============================================================================
# INTERFACE
# =============================================================================

class TestPreprocessorInterface:
    """Test cases for the IPreprocessor contract."""

    def test_minimal_step(self):
        """Test a step implementing only the conditioning methods is usable."""

        class Invert(IPreprocessor):
            @property
            def name(self):
                return 'invert'

            def initialize(self, config):
                self._is_initialized = True

            def process(self, data, **kwargs):
                return -np.asarray(data, dtype=np.float64)

            def get_params(self):
                return {}

            def set_params(self, **params):
                return self

        step = Invert()
        assert not step.is_initialized
        step.initialize({})

        assert step.is_initialized
        np.testing.assert_array_equal(step(np.array([1.0, -2.0])), [-1.0, 2.0])
        assert repr(step) == "Invert(name='invert')"

    def test_steps_expose_only_conditioning_api(self):
        """Test the filters carry no fitting flag."""
        for step in (BandpassFilter(), NotchFilter()):
            assert isinstance(step, IPreprocessor)
            assert not hasattr(step, 'is_trainable')
