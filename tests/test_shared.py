"""
Tests for the shared configuration, logging and numeric helpers.
"""

import json

import numpy as np
import pytest

from shared.config import AnalysisConfig, ExhibitConfig, GlobalConfig, get_config
from shared.logger import ExhibitLogger
from shared.math_utils import frequency_distribution, shannon_entropy


@pytest.fixture
def config_file(tmp_path):
    """Write a partial config.toml with one unknown key.

    Returns:
        Path to the written file.
    """
    path = tmp_path / "config.toml"
    path.write_text(
        "[global]\n"
        'log_level = "DEBUG"\n'
        "max_workers = 2\n"
        "\n"
        "[analysis]\n"
        "min_string_length = 8\n"
        "sniff_content = true\n"
        'not_a_setting = "ignored"\n',
        encoding="utf-8",
    )
    return path


class TestConfig:
    def test_defaults(self):
        config = ExhibitConfig()
        assert config.analysis == AnalysisConfig()
        assert config.global_settings == GlobalConfig()
        assert config.analysis.min_string_length == 4
        assert config.analysis.sniff_content is False

    def test_load_overrides_and_ignores_unknown(self, config_file):
        config = ExhibitConfig.load(config_file)
        assert config.global_settings.log_level == "DEBUG"
        assert config.global_settings.max_workers == 2
        assert config.analysis.min_string_length == 8
        assert config.analysis.sniff_content is True
        assert config.analysis.max_file_size == AnalysisConfig().max_file_size

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExhibitConfig.load(tmp_path / "nope.toml")

    def test_to_dict(self):
        data = ExhibitConfig().to_dict()
        assert data["analysis"]["file_timeout"] == 0.0
        assert data["global_settings"]["version"] == "1.0.0"


class TestLogger:
    def test_json_file_records(self, tmp_path):
        log_file = tmp_path / "logs" / "exhibit.jsonl"
        log = ExhibitLogger(
            "jsontest", log_file=log_file, json_logs=True, console_output=False
        )
        with log.operation("analyze:memo.docx"):
            log.info("Detected %s", "DOCX", warnings=1)
        log.info("outside")

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        assert lines[0]["message"] == "Detected DOCX"
        assert lines[0]["component"] == "jsontest"
        assert lines[0]["operation"] == "analyze:memo.docx"
        assert lines[0]["extra"] == {"warnings": 1}
        assert "operation" not in lines[1]

        for handler in log.underlying.handlers:
            handler.close()

    def test_child_propagates_to_parent_handlers(self, tmp_path):
        log_file = tmp_path / "child.jsonl"
        parent = ExhibitLogger(
            "parenttest", log_file=log_file, json_logs=True, console_output=False
        )
        child = parent.child("pdf")
        child.warning("PDF parse failed")

        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert record["logger"] == "exhibit.parenttest.pdf"
        assert record["component"] == "pdf"

        for handler in parent.underlying.handlers:
            handler.close()

    def test_exception_records_traceback(self, tmp_path):
        log_file = tmp_path / "errors.jsonl"
        log = ExhibitLogger(
            "exctest", log_file=log_file, json_logs=True, console_output=False
        )
        try:
            raise ValueError("bad state")
        except ValueError as exc:
            log.exception("Analysis of %s failed: %s", "odd.bin", exc)

        record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert record["level"] == "ERROR"
        assert record["message"] == "Analysis of odd.bin failed: bad state"
        assert "ValueError: bad state" in record["exc_info"]

        for handler in log.underlying.handlers:
            handler.close()

    def test_quiet_logger_has_no_output_handlers(self):
        log = ExhibitLogger.quiet("quiettest")
        assert all(
            type(handler).__name__ == "NullHandler" for handler in log.underlying.handlers
        )


class TestMath:
    def test_frequency_distribution(self):
        hist = frequency_distribution(b"aab")
        assert hist.shape == (256,)
        assert hist[ord("a")] == 2
        assert hist[ord("b")] == 1
        assert np.sum(hist) == 3

    def test_entropy_bounds(self):
        assert shannon_entropy(b"") == 0.0
        assert shannon_entropy(bytes(range(256))) == pytest.approx(8.0)


def test_get_config_caches(config_file):
    first = get_config(config_file)
    assert get_config() is first
    assert first.analysis.min_string_length == 8
