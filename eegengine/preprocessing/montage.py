"""
Montages
========

Re-referencing of a whole channel set.

Available Montages:
------------------
| Montage           | Output channel                              | Needs   |
|-------------------|---------------------------------------------|---------|
| Average reference | x_c - mean over channels at that sample     | 1+ ch   |
| Bipolar           | x_a - x_b for each resolved electrode pair  | 2+ ch   |
| Laplacian         | x_c - mean of index neighbours (c-1, c+1)   | 3+ ch   |

Bipolar pairing:
---------------
1. Canonical 10-20 anterior-posterior chains (Fp1-F7, F7-T3, ... Cz-Pz),
   matched by case-insensitive label substring
2. Otherwise, labels grouped by their letters (digits stripped); within a
   group, odd-numbered electrodes pair with even-numbered ones (C3-C4)
3. Otherwise, consecutive indices (0-1, 1-2, ...)

Non-finite handling:
-------------------
NaN/Inf input samples are zeroed before computing; the average reference
also leaves them out of the mean. Any non-finite output is replaced with 0.0. The number of replaced values is reported in
``MontageResult.sanitized`` and logged as a warning.

Channels may have different lengths; missing positions are excluded from
averages, and each output keeps the length of the channel it came from.

Usage Example:
    ```python
    from eegengine.preprocessing.montage import apply_montage

    result = apply_montage(buffers, labels, 'bipolar')
    result.labels   # ['Fp1-F7', 'F7-T3', ...]
    ```
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple, Union
import logging
import re

import numpy as np

from eegengine.core.exceptions import MontageError
from eegengine.core.types import MontageKind

logger = logging.getLogger(__name__)


# =============================================================================
# CANONICAL PAIRS
# =============================================================================

CANONICAL_BIPOLAR_PAIRS: List[Tuple[str, str]] = [
    # Left temporal chain
    ('Fp1', 'F7'), ('F7', 'T3'), ('T3', 'T5'), ('T5', 'O1'),
    # Right temporal chain
    ('Fp2', 'F8'), ('F8', 'T4'), ('T4', 'T6'), ('T6', 'O2'),
    # Midline
    ('Fz', 'Cz'), ('Cz', 'Pz'),
]

_DIGITS = re.compile(r'\d+')


class MontageResult(NamedTuple):
    """Output of a montage: new buffers and labels, plus bookkeeping."""
    buffers: List[np.ndarray]
    labels: List[str]
    pairs: List[Tuple[int, int]]
    sanitized: int


# =============================================================================
# HELPERS
# =============================================================================

def _stack(buffers: Sequence[np.ndarray]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    NaN-padded (n_channels, max_len) matrix with non-finite samples zeroed.

    Returns:
        (matrix, present mask, mask of the samples that were zeroed)
    """
    lengths = [len(b) for b in buffers]
    max_len = max(lengths) if lengths else 0

    matrix = np.full((len(buffers), max_len), np.nan)
    present = np.zeros((len(buffers), max_len), dtype=bool)
    for row, buffer in enumerate(buffers):
        matrix[row, :lengths[row]] = buffer
        present[row, :lengths[row]] = True

    bad = present & ~np.isfinite(matrix)
    matrix[bad] = 0.0
    return matrix, present, bad


def _unstack(matrix: np.ndarray, lengths: Sequence[int]) -> Tuple[List[np.ndarray], int]:
    """Split rows back to their own lengths, zeroing non-finite results."""
    out = []
    replaced = 0
    for row, length in enumerate(lengths):
        values = np.array(matrix[row, :length], dtype=np.float64)
        bad = ~np.isfinite(values)
        if bad.any():
            replaced += int(bad.sum())
            values[bad] = 0.0
        out.append(values)
    return out, replaced


def _sanitized(values: np.ndarray) -> Tuple[np.ndarray, int]:
    values = np.array(values, dtype=np.float64)
    bad = ~np.isfinite(values)
    values[bad] = 0.0
    return values, int(bad.sum())


def find_channel_index(labels: Sequence[str], name: str) -> Optional[int]:
    """First label containing ``name`` (case-insensitive), or None."""
    needle = name.lower()
    for index, label in enumerate(labels):
        if needle in label.lower():
            return index
    return None


# =============================================================================
# PAIR RESOLUTION
# =============================================================================

def _canonical_pairs(labels: Sequence[str]) -> List[Tuple[int, int]]:
    pairs = []
    for first, second in CANONICAL_BIPOLAR_PAIRS:
        a = find_channel_index(labels, first)
        b = find_channel_index(labels, second)
        if a is not None and b is not None and a != b:
            pairs.append((a, b))
    return pairs


def _hemisphere_pairs(labels: Sequence[str]) -> List[Tuple[int, int]]:
    """Pair odd- and even-numbered electrodes sharing the same letters."""
    groups = {}
    for index, label in enumerate(labels):
        digits = _DIGITS.findall(label)
        if not digits:
            continue
        prefix = _DIGITS.sub('', label).strip().upper()
        odd, even = groups.setdefault(prefix, ([], []))
        (odd if int(digits[-1]) % 2 else even).append(index)

    pairs = []
    for odd, even in groups.values():
        pairs.extend(zip(odd, even))
    return pairs


def resolve_bipolar_pairs(labels: Sequence[str]) -> List[Tuple[int, int]]:
    """
    Resolve (anode, cathode) index pairs for a bipolar montage.

    Tries canonical 10-20 chains, then odd/even pairing within label
    groups, then consecutive indices.
    """
    pairs = _canonical_pairs(labels)
    if pairs:
        logger.debug(f"Bipolar: {len(pairs)} canonical pairs")
        return pairs

    pairs = _hemisphere_pairs(labels)
    if pairs:
        logger.debug(f"Bipolar: {len(pairs)} odd/even label pairs")
        return pairs

    logger.debug("Bipolar: falling back to consecutive channels")
    return [(i, i + 1) for i in range(len(labels) - 1)]


# =============================================================================
# MONTAGES
# =============================================================================

def average_reference(buffers: Sequence[np.ndarray],
                      labels: Sequence[str]) -> MontageResult:
    """Common average reference over every channel."""
    if not buffers:
        raise MontageError(MontageKind.AVERAGE_REFERENCE.value, "recording has no channels")

    matrix, present, zeroed = _stack(buffers)

    # Zeroed samples are referenced but take no part in the mean
    valid = present & ~zeroed
    counts = valid.sum(axis=0)
    sums = np.where(valid, matrix, 0.0).sum(axis=0)
    mean = np.divide(sums, counts, out=np.zeros(sums.shape), where=counts > 0)

    referenced, replaced = _unstack(matrix - mean, [len(b) for b in buffers])
    return MontageResult(referenced, list(labels), [], int(zeroed.sum()) + replaced)


def bipolar_montage(buffers: Sequence[np.ndarray],
                    labels: Sequence[str]) -> MontageResult:
    """Differences of resolved electrode pairs; output length is the shorter of each pair."""
    if len(buffers) < 2:
        raise MontageError(MontageKind.BIPOLAR.value, "at least 2 channels are required")

    pairs = resolve_bipolar_pairs(labels)
    sanitized = 0
    out_buffers = []
    out_labels = []
    for a, b in pairs:
        first, bad_a = _sanitized(buffers[a])
        second, bad_b = _sanitized(buffers[b])
        n = min(len(first), len(second))
        diff, bad_out = _sanitized(first[:n] - second[:n])
        sanitized += bad_a + bad_b + bad_out
        out_buffers.append(diff)
        out_labels.append(f"{labels[a]}-{labels[b]}")

    return MontageResult(out_buffers, out_labels, pairs, sanitized)


def laplacian_montage(buffers: Sequence[np.ndarray],
                      labels: Sequence[str]) -> MontageResult:
    """Subtract the mean of the previous and next channel (one neighbour at the edges)."""
    if len(buffers) < 3:
        raise MontageError(MontageKind.LAPLACIAN.value, "at least 3 channels are required")

    matrix, present, zeroed = _stack(buffers)
    values = np.where(present, matrix, 0.0)
    weights = present.astype(np.float64)

    neighbour_sum = np.zeros_like(values)
    neighbour_count = np.zeros_like(values)
    neighbour_sum[1:] += values[:-1]
    neighbour_count[1:] += weights[:-1]
    neighbour_sum[:-1] += values[1:]
    neighbour_count[:-1] += weights[1:]

    with np.errstate(invalid='ignore', divide='ignore'):
        neighbour_mean = np.where(neighbour_count > 0, neighbour_sum / neighbour_count, 0.0)

    result, replaced = _unstack(matrix - neighbour_mean, [len(b) for b in buffers])
    return MontageResult(result, list(labels), [], int(zeroed.sum()) + replaced)


_MONTAGES = {
    MontageKind.AVERAGE_REFERENCE: average_reference,
    MontageKind.BIPOLAR: bipolar_montage,
    MontageKind.LAPLACIAN: laplacian_montage,
}


def apply_montage(buffers: Sequence[np.ndarray],
                  labels: Sequence[str],
                  kind: Union[MontageKind, str]) -> MontageResult:
    """
    Re-reference a channel set.

    The input buffers are never modified; callers swap in the returned
    buffers as a whole.

    Args:
        buffers: One 1-D float64 array per channel
        labels: Channel labels, same order as ``buffers``
        kind: MontageKind or its name ('average', 'bipolar', 'laplacian')

    Returns:
        MontageResult

    Raises:
        ValueError: Unknown montage or mismatched buffers/labels
        MontageError: Too few channels for the montage
    """
    kind = MontageKind.parse(kind)
    if len(buffers) != len(labels):
        raise ValueError(
            f"Got {len(buffers)} buffers but {len(labels)} labels"
        )

    result = _MONTAGES[kind](buffers, labels)

    if result.sanitized:
        logger.warning(
            f"{kind.value} montage replaced {result.sanitized} non-finite value(s) with 0.0"
        )
    logger.info(
        f"Applied {kind.value} montage: {len(buffers)} -> {len(result.buffers)} channels"
    )
    return result
