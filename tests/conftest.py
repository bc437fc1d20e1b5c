"""
Shared test fixtures.

- Fresh configuration and codec registry for every test
- ``make_edf``: builds EDF images in memory from per-signal descriptions
"""

import logging

import pytest
import numpy as np

from eegengine.core.config import ConfigManager
from eegengine.data.codecs import CodecFactory


@pytest.fixture(autouse=True)
def clean_state():
    """Reset global singletons and the package logger around each test."""
    ConfigManager.reset()
    CodecFactory.reset()
    yield
    ConfigManager.reset()
    CodecFactory.reset()

    package_logger = logging.getLogger('eegengine')
    package_logger.setLevel(logging.NOTSET)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


def _field(value, width):
    return str(value).ljust(width)[:width].encode('latin-1')


def build_edf(signals,
              n_records=1,
              record_duration='1',
              patient='P01',
              recording='Test recording',
              start_date='14.05.23',
              start_time='13.45.30',
              signal_count=None):
    """
    Assemble an EDF image.

    Each signal is a dict with 'label', 'raw' (int16 samples, length
    spr * n_records) and optional 'spr', 'pmin', 'pmax', 'dmin', 'dmax'.
    """
    n = len(signals)
    specs = []
    for sig in signals:
        raw = np.asarray(sig['raw'], dtype='<i2')
        spr = sig.get('spr', raw.size // n_records if n_records else 1)
        specs.append(dict(
            label=sig.get('label', ''),
            raw=raw,
            spr=spr,
            pmin=sig.get('pmin', -3276.8),
            pmax=sig.get('pmax', 3276.7),
            dmin=sig.get('dmin', -32768),
            dmax=sig.get('dmax', 32767),
        ))

    header = bytearray(b' ' * 256)
    header[0:8] = _field('0', 8)
    header[8:88] = _field(patient, 80)
    header[88:168] = _field(recording, 80)
    header[168:176] = _field(start_date, 8)
    header[176:184] = _field(start_time, 8)
    header[252:256] = _field(n if signal_count is None else signal_count, 4)

    out = bytearray(header)
    out += b''.join(_field(s['label'], 16) for s in specs)
    out += b' ' * (80 * n)                      # transducer
    out += b''.join(_field('uV', 8) for _ in specs)
    for s in specs:                             # min/max group per signal
        out += b''.join(_field(s[key], 8) for key in ('pmin', 'pmax', 'dmin', 'dmax'))
    out += b' ' * (80 * n)                      # prefiltering
    out += b' ' * (32 * n)                      # reserved
    out += b''.join(_field(s['spr'], 8) for s in specs)
    out += _field(record_duration, 8)

    for rec in range(n_records):
        for s in specs:
            spr = s['spr']
            out += s['raw'][rec * spr:(rec + 1) * spr].tobytes()

    return bytes(out)


@pytest.fixture
def make_edf():
    """Factory fixture returning ``build_edf``."""
    return build_edf


@pytest.fixture
def sampling_rate():
    return 250.0


@pytest.fixture
def sine_10hz(sampling_rate):
    """4 s of a unit 10 Hz sine."""
    t = np.arange(1000) / sampling_rate
    return np.sin(2 * np.pi * 10 * t)
