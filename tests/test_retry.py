"""
Tests for failure classification and retry-on-conflict
"""

from unittest.mock import Mock, patch

import pytest

from dataverse import (
    AuthenticationError,
    ConflictError,
    FailureKind,
    NetworkError,
    RemoteError,
    RetryBudgetExhaustedError,
    RetryPolicy,
    WaitInterruptedError,
    classify_failure,
    retry_on_conflict,
)


class TestClassifyFailure:
    """Only the 409 conflict is transient"""

    def test_conflict_is_transient(self):
        assert classify_failure(ConflictError("Dataset is awaiting indexing")) is FailureKind.TRANSIENT

    def test_plain_remote_error_with_409_is_transient(self):
        assert classify_failure(RemoteError("busy", 409)) is FailureKind.TRANSIENT

    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    def test_other_statuses_are_terminal(self, status_code):
        assert classify_failure(RemoteError("nope", status_code)) is FailureKind.TERMINAL

    @pytest.mark.parametrize(
        "error",
        [
            AuthenticationError("Bad API key", 401),
            NetworkError("connection refused"),
            ValueError("unrelated"),
        ],
    )
    def test_non_conflict_errors_are_terminal(self, error):
        assert classify_failure(error) is FailureKind.TERMINAL


class TestRetryOnConflict:
    """Test the retry wrapper for mutating calls"""

    def test_success_on_first_attempt(self, mock_sleep):
        op = Mock(return_value="published")

        assert retry_on_conflict(op, RetryPolicy(5, 10), sleep=mock_sleep) == "published"
        assert op.call_count == 1
        mock_sleep.assert_not_called()

    def test_succeeds_after_three_conflicts(self, mock_sleep):
        op = Mock(
            side_effect=[
                ConflictError("awaiting indexing"),
                ConflictError("awaiting indexing"),
                ConflictError("awaiting indexing"),
                "published",
            ]
        )

        result = retry_on_conflict(op, RetryPolicy(5, 10), sleep=mock_sleep)

        assert result == "published"
        assert op.call_count == 4
        assert mock_sleep.call_count == 3
        mock_sleep.assert_called_with(0.01)

    def test_validation_error_fails_fast(self, mock_sleep):
        rejection = RemoteError("Invalid metadata", 400)
        op = Mock(side_effect=rejection)

        with pytest.raises(RemoteError) as exc_info:
            retry_on_conflict(op, RetryPolicy(5, 10), sleep=mock_sleep)

        assert exc_info.value is rejection
        assert op.call_count == 1
        mock_sleep.assert_not_called()

    def test_network_error_fails_fast(self, mock_sleep):
        op = Mock(side_effect=NetworkError("read timeout"))

        with pytest.raises(NetworkError):
            retry_on_conflict(op, RetryPolicy(5, 10), sleep=mock_sleep)

        assert op.call_count == 1

    @pytest.mark.parametrize("max_attempts", [1, 2, 4])
    def test_budget_exhausted_after_exactly_n_attempts(self, max_attempts, mock_sleep):
        last = ConflictError("awaiting indexing")
        op = Mock(side_effect=last)

        with pytest.raises(RetryBudgetExhaustedError) as exc_info:
            retry_on_conflict(op, RetryPolicy(max_attempts, 10), sleep=mock_sleep, description="publish dataset")

        err = exc_info.value
        assert op.call_count == max_attempts
        assert mock_sleep.call_count == max_attempts - 1
        assert err.attempts == max_attempts
        assert err.max_attempts == max_attempts
        assert err.status_code == 409
        assert err.__cause__ is last
        assert "publish dataset" in str(err)

    def test_budget_exhausted_is_still_a_conflict(self, mock_sleep):
        op = Mock(side_effect=ConflictError("awaiting indexing"))

        with pytest.raises(ConflictError):
            retry_on_conflict(op, RetryPolicy(2, 0), sleep=mock_sleep)

    def test_terminal_error_after_conflicts_propagates(self, mock_sleep):
        op = Mock(side_effect=[ConflictError("awaiting indexing"), RemoteError("Forbidden", 403)])

        with pytest.raises(RemoteError) as exc_info:
            retry_on_conflict(op, RetryPolicy(5, 0), sleep=mock_sleep)

        assert exc_info.value.status_code == 403
        assert op.call_count == 2

    def test_interrupted_sleep_aborts(self):
        conflict = ConflictError("awaiting indexing")
        op = Mock(side_effect=conflict)
        sleep = Mock(side_effect=InterruptedError())

        with pytest.raises(WaitInterruptedError) as exc_info:
            retry_on_conflict(op, RetryPolicy(5, 10), sleep=sleep)

        assert exc_info.value.last_observed is conflict
        assert op.call_count == 1

    def test_defaults_to_time_sleep(self):
        op = Mock(side_effect=[ConflictError("awaiting indexing"), "ok"])

        with patch("time.sleep") as mock_time_sleep:
            assert retry_on_conflict(op, RetryPolicy(3, 1500)) == "ok"

        mock_time_sleep.assert_called_once_with(1.5)
