"""
Unit tests for API request/response models.

Tests Pydantic model validation for registration, verification and login endpoints.
"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    DeliveryErrorResponse,
    ErrorResponse,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    VerifyRequest,
    VerifyResponse,
)


class TestRegisterRequest:
    """Tests for RegisterRequest model."""

    def test_valid_register_request(self) -> None:
        request = RegisterRequest(identity="a@x.com", display_name="A", secret="pw1")
        assert request.identity == "a@x.com"
        assert request.display_name == "A"
        assert request.secret == "pw1"

    def test_invalid_email_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest(identity="not-an-email", display_name="A", secret="pw1")
        assert "identity" in str(exc_info.value)

    def test_empty_display_name_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest(identity="a@x.com", display_name="", secret="pw1")
        assert "display_name" in str(exc_info.value)

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RegisterRequest(identity="a@x.com", display_name="A", secret="")
        assert "secret" in str(exc_info.value)

    def test_short_secret_accepted(self) -> None:
        """Only non-empty is required; strength policy is not enforced here."""
        assert RegisterRequest(identity="a@x.com", display_name="A", secret="p").secret == "p"


class TestVerifyRequest:
    """Tests for VerifyRequest model."""

    def test_valid_verify_request(self) -> None:
        request = VerifyRequest(token="tok", otp="012345")
        assert request.otp == "012345"

    @pytest.mark.parametrize("otp", ["", "12a456", "123", "1234567890123", " 12345"])
    def test_malformed_code_rejected(self, otp: str) -> None:
        with pytest.raises(ValidationError):
            VerifyRequest(token="tok", otp=otp)

    def test_token_required(self) -> None:
        with pytest.raises(ValidationError):
            VerifyRequest(token="", otp="123456")


class TestResponses:
    def test_register_response(self) -> None:
        response = RegisterResponse(message="Verification code sent", token="tok", expires_in_seconds=600)
        assert response.model_dump() == {
            "message": "Verification code sent",
            "token": "tok",
            "expires_in_seconds": 600,
        }

    def test_verify_response(self) -> None:
        assert VerifyResponse(message="ok", account_id="id").account_id == "id"

    def test_login_response_has_no_credential(self) -> None:
        assert set(LoginResponse.model_fields) == {"account_id", "display_name"}

    def test_error_responses(self) -> None:
        assert ErrorResponse(detail="x").detail == "x"
        assert DeliveryErrorResponse(detail="x", token="tok").token == "tok"
