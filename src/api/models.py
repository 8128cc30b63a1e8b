"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request model for starting a registration."""

    identity: EmailStr
    display_name: str = Field(..., min_length=1, max_length=100, description="Name shown for the account")
    secret: str = Field(..., min_length=1, description="Account password")


class RegisterResponse(BaseModel):
    """Response model for an issued registration."""

    message: str
    token: str
    expires_in_seconds: int


class VerifyRequest(BaseModel):
    """Request model for finalizing a registration."""

    token: str = Field(..., min_length=1, description="Token returned by /register")
    otp: str = Field(
        ...,
        min_length=4,
        max_length=12,
        pattern=r"^\d+$",
        description="Numeric verification code (6 digits by default)",
    )


class VerifyResponse(BaseModel):
    """Response model for a created account."""

    message: str
    account_id: str


class LoginResponse(BaseModel):
    """Response model for successful authentication."""

    account_id: str
    display_name: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class DeliveryErrorResponse(BaseModel):
    """Error response when the code could not be sent; the token stays usable."""

    detail: str
    token: str
