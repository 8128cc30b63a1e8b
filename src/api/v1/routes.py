"""
API v1 routes.

Defines REST endpoints for the OTP Registration API.

Service calls run in the threadpool: bcrypt is intentionally slow and
must not stall the event loop for unrelated requests.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.api.dependencies import get_basic_auth_credentials, get_registration_service
from src.api.models import (
    DeliveryErrorResponse,
    ErrorResponse,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    VerifyRequest,
    VerifyResponse,
)
from src.config.settings import get_settings
from src.domain.exceptions import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    InvalidCodeError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from src.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Identity already registered"},
        422: {"description": "Validation error"},
        502: {"model": DeliveryErrorResponse, "description": "Verification code not delivered"},
    },
    summary="Register a new user",
    description="Submit identity, display name and secret to begin registration. "
    "A 6-digit verification code will be sent to the provided email. "
    "Registering again for the same email invalidates the previous code.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse | JSONResponse:
    """
    Start registration and send verification code.

    - **identity**: Valid email address to register
    - **display_name**: Name shown for the account
    - **secret**: Account password

    Returns the token to present with the code, and its lifetime.
    """
    try:
        ticket = await run_in_threadpool(
            service.initiate_registration,
            request_data.identity,
            request_data.display_name,
            request_data.secret,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None
    except DeliveryError as e:
        # The pending record survives; hand the token back so the client can still verify.
        body = DeliveryErrorResponse(
            detail="Verification code could not be delivered",
            token=e.token,
        )
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content=body.model_dump())

    return RegisterResponse(
        message="Verification code sent",
        token=ticket.token,
        expires_in_seconds=get_settings().otp_ttl_seconds,
    )


@router.post(
    "/verify",
    response_model=VerifyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Wrong verification code"},
        404: {"model": ErrorResponse, "description": "Unknown or already used token"},
        409: {"model": ErrorResponse, "description": "Identity already registered"},
        410: {"model": ErrorResponse, "description": "Verification code expired"},
        422: {"description": "Validation error"},
    },
    summary="Verify code and create account",
    description="Submit the registration token together with the verification code "
    "received via email. A token can be used for exactly one successful verification.",
)
async def verify(
    request_data: VerifyRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> VerifyResponse:
    """
    Finalize registration with verification code.

    - **token**: Token returned by /register
    - **otp**: Verification code from email

    A wrong code can be retried until the code expires.
    """
    try:
        account = await run_in_threadpool(
            service.finalize_registration, request_data.token, request_data.otp
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from None
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No pending registration",
        ) from None
    except ExpiredError:
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Verification code expired",
        ) from None
    except InvalidCodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification code",
        ) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None

    return VerifyResponse(message="Registered successfully", account_id=account.id)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
    summary="Check account credentials",
    description="Submit credentials via HTTP BASIC AUTH. No session is created.",
)
async def login(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    service: RegistrationService = Depends(get_registration_service),
) -> LoginResponse:
    """
    Authenticate against a confirmed account.

    Credentials (identity:secret) are provided via HTTP BASIC AUTH header.
    """
    identity, secret = credentials

    try:
        account = await run_in_threadpool(service.authenticate, identity, secret)
    except (ValidationError, NotFoundError, InvalidCredentialError):
        # Unknown identity and wrong secret look the same to prevent enumeration
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        ) from None

    return LoginResponse(account_id=account.id, display_name=account.display_name)
