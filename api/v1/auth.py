"""
Authentication endpoints.

Handles customer registration with phone verification, customer and staff
login, and access token refresh.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, status
from pydantic import Field

from ..deps import ServicesDep
from .schemas import ApiResponse, CamelModel, TokenResponse, UserResponse, StaffResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response models

class RegisterRequest(CamelModel):
    """Customer registration request."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password (min 6 chars)")
    phone: str = Field(..., description="Phone number (e.g., +5511999999999)")
    first_name: Optional[str] = Field(None, description="First name")
    last_name: Optional[str] = Field(None, description="Last name")


class LoginRequest(CamelModel):
    """Email/password login request (customers and staff)."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class VerifyOTPRequest(CamelModel):
    """Phone verification request."""
    user_id: str = Field(..., description="Id returned by register or login")
    code: str = Field(..., description="Code received by SMS")


class ResendOTPRequest(CamelModel):
    """Request a fresh verification code."""
    user_id: str = Field(..., description="Id returned by register or login")


class RefreshRequest(CamelModel):
    """Token refresh request."""
    refresh_token: str = Field(..., description="Valid refresh token")


class VerificationData(CamelModel):
    """Returned while the phone is still unverified."""
    user_id: str
    requires_verification: bool = True


class UserAuthData(CamelModel):
    """Authenticated customer with tokens."""
    user: UserResponse
    tokens: TokenResponse


class StaffAuthData(CamelModel):
    """Authenticated staff member with tokens."""
    staff: StaffResponse
    tokens: TokenResponse


class AccessTokenData(CamelModel):
    """Freshly minted access token."""
    access_token: str


# Endpoints

@router.post(
    "/register",
    response_model=ApiResponse[VerificationData],
    status_code=status.HTTP_201_CREATED
)
async def register(request: RegisterRequest, services: ServicesDep):
    """
    Register a new customer.

    Creates an unverified account and sends a verification code to the phone.
    Tokens are issued by /verify-otp.
    """
    result = services.auth.register_user(
        email=request.email,
        password=request.password,
        phone=request.phone,
        first_name=request.first_name,
        last_name=request.last_name
    )

    return ApiResponse(
        message="Registration successful. Please verify your phone number.",
        data=VerificationData(user_id=result.user_id)
    )


@router.post("/login", response_model=ApiResponse[Union[UserAuthData, VerificationData]])
async def login(request: LoginRequest, services: ServicesDep):
    """
    Login with email and password.

    Customers whose phone is not verified get their user id back with
    requiresVerification=true instead of tokens.
    """
    result = services.auth.login_user(request.email, request.password)

    if result.requires_verification:
        return ApiResponse(
            message="Phone verification required",
            data=VerificationData(user_id=result.user_id)
        )

    return ApiResponse(
        message="Login successful",
        data=UserAuthData(
            user=UserResponse.from_user(result.user),
            tokens=TokenResponse.from_tokens(result.tokens)
        )
    )


@router.post("/verify-otp", response_model=ApiResponse[UserAuthData])
async def verify_otp(request: VerifyOTPRequest, services: ServicesDep):
    """Verify the phone with a one-time code and get tokens."""
    result = services.auth.verify_otp(request.user_id, request.code)

    return ApiResponse(
        message="Phone verified successfully",
        data=UserAuthData(
            user=UserResponse.from_user(result.user),
            tokens=TokenResponse.from_tokens(result.tokens)
        )
    )


@router.post("/resend-otp", response_model=ApiResponse[None])
async def resend_otp(request: ResendOTPRequest, services: ServicesDep):
    """Send a fresh verification code. Older codes stay valid until they expire."""
    services.auth.resend_otp(request.user_id)
    return ApiResponse(message="OTP code resent successfully")


@router.post("/refresh-token", response_model=ApiResponse[AccessTokenData])
async def refresh_token(request: RefreshRequest, services: ServicesDep):
    """
    Mint a new access token.

    The refresh token itself is not rotated.
    """
    access_token = services.auth.refresh(request.refresh_token)
    return ApiResponse(data=AccessTokenData(access_token=access_token))


@router.post("/staff/login", response_model=ApiResponse[StaffAuthData])
async def staff_login(request: LoginRequest, services: ServicesDep):
    """Login a staff member with email and password."""
    result = services.auth.login_staff(request.email, request.password)

    return ApiResponse(
        message="Login successful",
        data=StaffAuthData(
            staff=StaffResponse.from_staff(result.staff),
            tokens=TokenResponse.from_tokens(result.tokens)
        )
    )


@router.post("/staff/refresh-token", response_model=ApiResponse[AccessTokenData])
async def staff_refresh_token(request: RefreshRequest, services: ServicesDep):
    """Same as /refresh-token; kept as a separate path for staff clients."""
    return await refresh_token(request, services)
