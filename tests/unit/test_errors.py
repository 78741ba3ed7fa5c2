"""Tests for dl_common.errors and dl_common.response."""

import pytest

from src.dl_common.errors import (
    AppError,
    CapabilityDeniedError,
    ConfirmationMismatchError,
    ErrorCategory,
    InvalidAmountError,
    PartialMappingFailureError,
    PaymentNotRecordedError,
    RemoteApiError,
)
from src.dl_common.response import parse_envelope, total_pages_of, unwrap_envelope


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.category == ErrorCategory.INTERNAL

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_capability_denied(self) -> None:
        err = CapabilityDeniedError("delete donations")
        assert err.code == 1002
        assert err.category == ErrorCategory.CAPABILITY
        assert "delete donations" in err.message

    def test_invalid_amount_is_validation(self) -> None:
        assert InvalidAmountError().category == ErrorCategory.VALIDATION

    def test_confirmation_names_token(self) -> None:
        assert "CONFIRM" in ConfirmationMismatchError("CONFIRM").message

    def test_remote_error_is_transient(self) -> None:
        err = RemoteApiError("boom", status_code=503)
        assert err.category == ErrorCategory.TRANSIENT
        assert err.status_code == 503

    def test_partial_failure_lists_failed_operations(self) -> None:
        err = PartialMappingFailureError(failed=["add m2"], succeeded=["add m1", "remove m3"])
        assert err.category == ErrorCategory.PARTIAL_FAILURE
        assert "add m2" in err.message
        assert "1 of 3" in err.message
        assert err.failed == ["add m2"]

    def test_payment_not_recorded_is_distinct(self) -> None:
        err = PaymentNotRecordedError("pay_123", "timeout")
        assert err.category == ErrorCategory.SETTLEMENT_UNRECORDED
        assert err.settlement_reference == "pay_123"
        assert "pay_123" in err.message


class TestEnvelope:
    def test_unwrap_success(self) -> None:
        body = {"success": True, "message": "ok", "data": {"id": "d1"}}
        assert unwrap_envelope(body, 200, "fallback") == {"id": "d1"}

    def test_unwrap_http_error_uses_server_message(self) -> None:
        body = {"success": False, "message": "Subcategory not found", "data": None}
        with pytest.raises(RemoteApiError, match="Subcategory not found") as exc_info:
            unwrap_envelope(body, 404, "fallback")
        assert exc_info.value.status_code == 404

    def test_unwrap_success_false_on_200(self) -> None:
        with pytest.raises(RemoteApiError, match="fallback"):
            unwrap_envelope({"success": False, "message": "", "data": None}, 200, "fallback")

    def test_empty_body(self) -> None:
        env = parse_envelope(None)
        assert env.success is False
        assert env.message == "Empty response"

    def test_malformed_body(self) -> None:
        with pytest.raises(RemoteApiError):
            parse_envelope({"success": "maybe-not"})


class TestTotalPages:
    def test_declared_total(self) -> None:
        assert total_pages_of({"page": 1, "totalPages": 4}, 1) == 4

    def test_missing_pagination_means_last_page(self) -> None:
        assert total_pages_of(None, 3) == 3
        assert total_pages_of({"page": 2}, 2) == 2
