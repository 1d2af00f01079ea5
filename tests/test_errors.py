"""Tests for errors.py -- exception hierarchy and status code mapping."""

import pytest

from juicewrld_api.errors import (
    APIError,
    AuthenticationError,
    JuiceWRLDError,
    NotFoundError,
    RateLimitError,
    RequestCancelledError,
    ResponseDecodeError,
    TransportError,
    ValidationError,
    error_for_status,
)


class TestExceptionHierarchy:
    def test_api_errors_inherit_from_api_error(self):
        assert issubclass(RateLimitError, APIError)
        assert issubclass(NotFoundError, APIError)
        assert issubclass(AuthenticationError, APIError)
        assert issubclass(ValidationError, APIError)

    def test_low_level_errors_are_not_api_errors(self):
        for exc_type in (TransportError, RequestCancelledError, ResponseDecodeError):
            assert issubclass(exc_type, JuiceWRLDError)
            assert not issubclass(exc_type, APIError)

    def test_base_is_exception(self):
        assert issubclass(JuiceWRLDError, Exception)


class TestAPIError:
    def test_attributes_and_message(self):
        err = APIError(500, "boom")
        assert err.status_code == 500
        assert err.message == "boom"
        assert str(err) == "api error: 500 - boom"

    def test_zero_status_shows_message_only(self):
        assert str(APIError(0, "plain")) == "plain"

    def test_validation_error_has_no_status(self):
        err = ValidationError("bad input")
        assert err.status_code == 0
        assert str(err) == "bad input"


class TestErrorForStatus:
    @pytest.mark.parametrize(
        ("code", "exc_type"),
        [
            (429, RateLimitError),
            (404, NotFoundError),
            (401, AuthenticationError),
            (500, APIError),
            (400, APIError),
            (403, APIError),
        ],
    )
    def test_error_codes(self, code, exc_type):
        exc = error_for_status(code, "body")
        assert type(exc) is exc_type
        assert exc.status_code == code
        assert exc.message == "body"

    @pytest.mark.parametrize("code", [200, 204, 206, 301])
    def test_success_codes(self, code):
        assert error_for_status(code, "") is None
