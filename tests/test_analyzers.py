"""
Tests for the format-independent analysers: digests, entropy, strings.
"""

import pytest

from exhibit.analyzers.entropy import classify_entropy, file_entropy
from exhibit.analyzers.hashes import compute_hashes
from exhibit.analyzers.strings import (
    StringCategory,
    StringExtractor,
    categorize_string,
    extract_printable_strings,
)
from exhibit.core.heuristics import HIGH_ENTROPY_THRESHOLD, entropy_warnings


class TestHashes:
    def test_empty_buffer_vectors(self):
        hashes = compute_hashes(b"")
        assert hashes.md5 == "d41d8cd98f00b204e9800998ecf8427e"
        assert hashes.sha1 == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
        assert hashes.sha256 == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_abc_vectors(self):
        hashes = compute_hashes(b"abc")
        assert hashes.md5 == "900150983cd24fb0d6963f7d28e17f72"
        assert hashes.sha1 == "a9993e364706816aba3e25717850c26c9cd0d89d"
        assert hashes.sha256 == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )
        assert hashes.sha512 == (
            "ddaf35a193617abacc417349ae20413112e6fa4e89a97ea20a9eeee64b55d39a"
            "2192992a274fc1a836ba3c23a3feebbd454d4423643ce80e2a9ac94fa54ca49f"
        )

    def test_deterministic(self):
        data = bytes(range(256)) * 7
        assert compute_hashes(data) == compute_hashes(bytes(data))

    def test_single_byte_changes_every_digest(self):
        a = compute_hashes(b"evidence-1")
        b = compute_hashes(b"evidence-2")
        assert a.md5 != b.md5
        assert a.sha1 != b.sha1
        assert a.sha256 != b.sha256
        assert a.sha512 != b.sha512


class TestEntropy:
    def test_empty_is_zero(self):
        assert file_entropy(b"") == 0.0

    def test_constant_stream_is_zero(self):
        assert file_entropy(b"\x00" * 1024) == 0.0

    def test_two_symbols_is_one_bit(self):
        assert file_entropy(b"ab" * 500) == pytest.approx(1.0)

    def test_uniform_is_eight_bits(self):
        assert file_entropy(bytes(range(256)) * 16) == pytest.approx(8.0)

    def test_within_bounds(self):
        value = file_entropy(b"The quick brown fox jumps over the lazy dog")
        assert 0.0 <= value <= 8.0

    def test_classification_bands(self):
        assert classify_entropy(0.0) == "null/empty"
        assert classify_entropy(4.0) == "text/code"
        assert classify_entropy(HIGH_ENTROPY_THRESHOLD) == "likely compressed"
        assert classify_entropy(7.9) == "encrypted/compressed"


class TestEntropyHeuristic:
    def test_threshold_is_strict(self):
        assert entropy_warnings(HIGH_ENTROPY_THRESHOLD) == []

    def test_above_threshold_warns(self):
        warnings = entropy_warnings(7.9)
        assert len(warnings) == 1
        assert "High entropy" in warnings[0]
        assert "7.9000" in warnings[0]

    def test_low_entropy_silent(self):
        assert entropy_warnings(3.2) == []


class TestPrintableStrings:
    def test_runs_split_on_non_printable(self):
        assert extract_printable_strings(b"AB\x00CDEF\x01GH", 2) == ["AB", "CDEF", "GH"]

    def test_short_runs_dropped(self):
        assert extract_printable_strings(b"A\x00BCDE", 4) == ["BCDE"]

    def test_trailing_run_flushed(self):
        assert extract_printable_strings(b"\x00\x00tail", 4) == ["tail"]

    def test_whitespace_controls_are_printable(self):
        assert extract_printable_strings(b"a\tb\r\nc\x00") == ["a\tb\r\nc"]

    def test_min_length_below_one_treated_as_one(self):
        assert extract_printable_strings(b"A\x00B", 0) == ["A", "B"]

    def test_high_bytes_break_runs(self):
        assert extract_printable_strings(b"abcd\xe9efgh") == ["abcd", "efgh"]

    def test_no_dedup_and_order_kept(self):
        assert extract_printable_strings(b"same\x00same\x00other") == ["same", "same", "other"]

    def test_extractor_clamps_min_length(self):
        extractor = StringExtractor(min_length=-3)
        assert extractor.min_length == 1
        assert extractor.extract(b"x\x00yz") == ["x", "yz"]


class TestStringCategories:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("visit https://example.org/payload", StringCategory.URL),
            ("mail analyst@example.org now", StringCategory.EMAIL),
            ("beacon 192.168.10.4", StringCategory.IP_ADDRESS),
            ("<< /S /JavaScript /JS (app.alert(1)) >>", StringCategory.SCRIPT),
            (r"C:\Users\victim\Documents\notes.txt", StringCategory.FILE_PATH),
            ("just some words", StringCategory.GENERAL),
        ],
    )
    def test_categorize(self, value, expected):
        assert categorize_string(value) == expected
