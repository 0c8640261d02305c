"""
Format-independent anomaly heuristics.

Applied by the engine after parsing, so entropy computation stays
independent of any parser.
"""

from __future__ import annotations

HIGH_ENTROPY_THRESHOLD: float = 7.5

WARN_HIGH_ENTROPY = (
    "High entropy ({entropy:.4f} bits/byte): content may be encrypted or compressed"
)


def entropy_warnings(entropy: float) -> list[str]:
    """Warn when *entropy* is strictly above :data:`HIGH_ENTROPY_THRESHOLD`."""
    if entropy > HIGH_ENTROPY_THRESHOLD:
        return [WARN_HIGH_ENTROPY.format(entropy=entropy)]
    return []
