"""
Cryptographic digests of a complete file.

All four digests are computed over every byte of the buffer; there is
no sampling and no early exit, so identical input always yields an
identical :class:`HashSet`.
"""

from __future__ import annotations

import hashlib

from exhibit.core.models import HashSet

HASH_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512")


def compute_hashes(data: bytes) -> HashSet:
    """Compute MD5, SHA-1, SHA-256 and SHA-512 of *data* as lowercase hex."""
    view = memoryview(data)
    digests = {name: hashlib.new(name, view).hexdigest() for name in HASH_ALGORITHMS}
    return HashSet(**digests)
