"""Format-independent analysers: digests, entropy and printable strings."""
