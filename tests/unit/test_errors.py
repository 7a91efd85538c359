"""Tests for pay_common.errors and pay_common.response."""

from src.pay_common.errors import (
    AppError,
    ConflictError,
    InvalidApiKeyError,
    InvalidInputError,
    InvalidProviderError,
    NotFoundError,
    PaymentMethodInactiveError,
    PhoneExistsError,
    ProviderInUseError,
    ProviderNotFoundError,
    RequestTimeoutError,
    UserNotFoundError,
    ValidationFailedError,
)
from src.pay_common.pagination import Page
from src.pay_common.response import (
    ApiResponse,
    error_response,
    paginated_response,
    success_response,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1002, message="Phone taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestErrorKinds:
    def test_not_found_kind(self) -> None:
        err = UserNotFoundError("u-1")
        assert isinstance(err, NotFoundError)
        assert err.code == 1001
        assert err.http_status == 404
        assert "u-1" in err.message

    def test_conflict_kind(self) -> None:
        err = PhoneExistsError()
        assert isinstance(err, ConflictError)
        assert err.http_status == 409

    def test_provider_in_use_reports_count(self) -> None:
        err = ProviderInUseError("p-1", 3)
        assert err.code == 2003
        assert err.http_status == 409
        assert "3" in err.message

    def test_invalid_provider_is_invalid_input(self) -> None:
        err = InvalidProviderError("p-1")
        assert isinstance(err, InvalidInputError)
        assert err.http_status == 400
        assert err.code == 3003

    def test_inactive_method_is_invalid_input(self) -> None:
        err = PaymentMethodInactiveError("m-1")
        assert isinstance(err, InvalidInputError)
        assert err.code == 3004

    def test_code_ranges(self) -> None:
        assert 1000 <= InvalidApiKeyError().code < 2000
        assert 2000 <= ProviderNotFoundError("x").code < 3000
        assert 9000 <= ValidationFailedError("bad").code < 10000

    def test_auth_error_is_401(self) -> None:
        assert InvalidApiKeyError().http_status == 401

    def test_timeout_is_504(self) -> None:
        assert RequestTimeoutError().http_status == 504


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "1"}, "ok")
        assert isinstance(resp, ApiResponse)
        assert resp.success is True
        assert resp.code == 0
        assert resp.message == "ok"
        assert resp.data == {"id": "1"}
        assert resp.pagination is None
        assert resp.request_id.startswith("req_")
        assert resp.timestamp

    def test_error_response(self) -> None:
        resp = error_response(1002, "Phone number already registered", "PhoneExistsError")
        assert resp.success is False
        assert resp.code == 1002
        assert resp.error == "PhoneExistsError"
        assert resp.data is None

    def test_paginated_response(self) -> None:
        page = Page(items=["a", "b"], total=21, page=2, limit=10)
        resp = paginated_response(page, ["a", "b"])
        assert resp.pagination is not None
        assert resp.pagination.model_dump() == {"page": 2, "limit": 10, "total": 21, "pages": 3}
