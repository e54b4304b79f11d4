#!/usr/bin/env python3
"""Tests for report results, error kinds and cancellation."""

import threading

import pytest

from income_analytics.core.cancellation import CancellationToken
from income_analytics.core.results import (
    ErrorKind,
    InvalidParameterError,
    OperationCancelled,
    ReportResult,
    UpstreamFailure,
)


@pytest.mark.unit
class TestErrorKinds:
    @pytest.mark.parametrize(
        "error,kind",
        [
            (UpstreamFailure("down"), ErrorKind.UPSTREAM),
            (InvalidParameterError("bad"), ErrorKind.INVALID_PARAMETER),
            (OperationCancelled("stop"), ErrorKind.CANCELLED),
        ],
    )
    def test_each_error_carries_its_kind(self, error, kind):
        assert error.kind == kind

    def test_invalid_parameter_is_value_error(self):
        assert isinstance(InvalidParameterError("bad"), ValueError)


@pytest.mark.unit
class TestReportResult:
    """Test ReportResult success and failure paths."""

    def test_ok_result(self):
        result = ReportResult.ok({"total": 1.0})

        assert result.success
        assert not result.is_failed
        assert result.unwrap() == {"total": 1.0}
        assert result.to_dict() == {"success": True, "value": {"total": 1.0}}

    def test_fail_result_keeps_message_verbatim(self):
        result = ReportResult.fail(UpstreamFailure("store offline"))

        assert result.is_failed
        assert result.error_kind == ErrorKind.UPSTREAM
        assert result.error_message == "store offline"
        assert result.to_dict() == {
            "success": False,
            "error_kind": "upstream_failure",
            "error_message": "store offline",
        }

    def test_unwrap_failure_raises(self):
        result = ReportResult.fail(InvalidParameterError("days_back must be positive"))

        with pytest.raises(RuntimeError, match="invalid_parameter: days_back must be positive"):
            result.unwrap()


@pytest.mark.unit
class TestCancellationToken:
    """Test CancellationToken."""

    def test_fresh_token_is_not_cancelled(self):
        token = CancellationToken()

        assert not token.is_cancelled
        token.raise_if_cancelled()

    def test_cancel_raises(self):
        token = CancellationToken()
        token.cancel()

        assert token.is_cancelled
        with pytest.raises(OperationCancelled):
            token.raise_if_cancelled()

    def test_cancel_from_another_thread(self):
        token = CancellationToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()

        assert token.is_cancelled
