"""
Tests for the run outcome reported by the enrichment pipeline.
"""
import pytest

pytest.importorskip("pyspark")

from taxi_periods.logging_config import PipelineLogger  # noqa: E402
from taxi_periods.pipeline import (  # noqa: E402
    STATUS_LOW_RETENTION,
    STATUS_SUCCESS,
    build_result,
)


def _logger_with_counts(name: str, loaded: int, admitted: int) -> PipelineLogger:
    plog = PipelineLogger(name)
    plog.stage_start("load")
    plog.stage_end("load", row_count=loaded)
    plog.stage_start("validate")
    plog.stage_end("validate", row_count=admitted)
    return plog


def _result(plog: PipelineLogger) -> dict:
    counts = {"VoidedPayment": plog.metrics["load"]["row_count"] - plog.metrics["validate"]["row_count"]}
    retention_ok = plog.verify_retention("load", "validate")
    return build_result(plog, counts, retention_ok, "out/enriched", "reports/summary.json")


def test_good_retention_is_success():
    result = _result(_logger_with_counts("tests.pipeline_ok", 100, 95))
    assert result["status"] == STATUS_SUCCESS
    assert result["retention_ok"] is True
    assert result["loaded"] == 100
    assert result["admitted"] == 95
    assert result["rejected"] == {"VoidedPayment": 5}


def test_warning_band_is_still_success():
    result = _result(_logger_with_counts("tests.pipeline_warn", 100, 85))
    assert result["status"] == STATUS_SUCCESS


def test_low_retention_is_not_success():
    result = _result(_logger_with_counts("tests.pipeline_low", 100, 50))
    assert result["status"] == STATUS_LOW_RETENTION
    assert result["retention_ok"] is False
    assert result["admitted"] == 50


def test_low_retention_logged_as_error(caplog):
    plog = _logger_with_counts("tests.pipeline_low_log", 100, 10)
    plog.logger.propagate = True
    with caplog.at_level("ERROR", logger="tests.pipeline_low_log"):
        _result(plog)
    assert any("status=low_retention" in r.getMessage() for r in caplog.records)


def test_nothing_loaded_is_not_success():
    result = _result(_logger_with_counts("tests.pipeline_empty", 0, 0))
    assert result["status"] == STATUS_LOW_RETENTION
