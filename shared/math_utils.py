"""
Exhibit Mathematical Utilities
==============================

Byte-level statistics backed by NumPy.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


FloatArray = NDArray[np.floating]


def frequency_distribution(data: bytes) -> FloatArray:
    """Compute a 256-bin byte-value frequency histogram.

    Returns the raw count of each byte value (0-255) as a NumPy array.
    Divide by ``len(data)`` to obtain relative frequencies.

    Args:
        data: Raw byte sequence.

    Returns:
        1-D float64 array of length 256 containing occurrence counts.
    """
    hist = np.zeros(256, dtype=np.float64)
    if not data:
        return hist

    byte_arr = np.frombuffer(data, dtype=np.uint8)
    hist[:] = np.bincount(byte_arr, minlength=256)
    return hist


def shannon_entropy(data: bytes) -> float:
    """Compute the Shannon entropy of a byte sequence.

    .. math::

        H = -\\sum_{i=0}^{255} p_i \\, \\log_2(p_i)

    where :math:`p_i` is the relative frequency of byte value *i*; only
    nonzero buckets contribute.  The result is in **bits per byte** and
    ranges from 0.0 (constant stream) to 8.0 (uniform over 256 symbols).

    Args:
        data: Raw byte sequence to analyse.

    Returns:
        Shannon entropy in bits per byte. Returns 0.0 for empty input.
    """
    if not data:
        return 0.0

    counts = frequency_distribution(data)
    probs = counts[counts > 0] / len(data)
    entropy = float(-np.sum(probs * np.log2(probs)))
    # -0.0 for single-symbol input
    return min(8.0, max(0.0, entropy))
