"""
Exhibit -- Forensic File Analysis Engine
========================================

Offline, deterministic inspection of arbitrary files: cryptographic
digests, Shannon entropy, printable strings and format-specific
structural metadata (JPEG EXIF/XMP/GPS, PNG chunk layout, PDF
document information, DOCX package properties), with anomaly warnings
for temporal inconsistencies, embedded scripts, editing-tool
signatures and high entropy.
"""

__version__ = "1.0.0"
