"""
Whole-file entropy scoring.

Wraps :func:`shared.math_utils.shannon_entropy` and maps the score onto
the human-readable bands used in console output.
"""

from __future__ import annotations

from shared.math_utils import shannon_entropy

# ---------------------------------------------------------------------------
# Entropy classification thresholds (bits per byte)
# ---------------------------------------------------------------------------

ENTROPY_NULL: float = 1.0
ENTROPY_CODE_HIGH: float = 4.5
ENTROPY_STRUCTURED_HIGH: float = 6.5
ENTROPY_COMPRESSED_HIGH: float = 7.0
ENTROPY_PACKED_HIGH: float = 7.5


def file_entropy(data: bytes) -> float:
    """Shannon entropy of the entire buffer, in [0, 8]."""
    return shannon_entropy(data)


def classify_entropy(entropy: float) -> str:
    """Classify an entropy value into a human-readable band."""
    if entropy < ENTROPY_NULL:
        return "null/empty"
    elif entropy < ENTROPY_CODE_HIGH:
        return "text/code"
    elif entropy < ENTROPY_STRUCTURED_HIGH:
        return "structured data"
    elif entropy < ENTROPY_COMPRESSED_HIGH:
        return "compressed or dense binary"
    elif entropy <= ENTROPY_PACKED_HIGH:
        return "likely compressed"
    else:
        return "encrypted/compressed"
