"""Account endpoints: signup, verification, OTP login and sessions."""

from fastapi import APIRouter, Request, Response

from estatehub.api.cookies import clear_session_cookies, set_access_cookie, set_session_cookies
from estatehub.api.deps import ClientIP, ContextDep, CurrentAccount, SessionDep
from estatehub.constants import REFRESH_TOKEN_COOKIE
from estatehub.models import AccountRead
from estatehub.schemas.auth import (
    AccountResponse,
    LoginRequest,
    LoginResponse,
    ProfileUpdateRequest,
    RefreshResponse,
    ResendOtpRequest,
    SignupRequest,
    SignupResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from estatehub.schemas.common import MessageResponse
from estatehub.services.auth import AuthService

router = APIRouter()


@router.post("/signup", response_model=SignupResponse)
async def signup(data: SignupRequest, session: SessionDep, ctx: ContextDep, client_ip: ClientIP):
    """Stage a registration and email a verification link."""
    result = await AuthService(session, ctx).request_signup(data, client_ip)
    return SignupResponse(
        message=result.message,
        verification_link=(
            f"/api/user/verify/{result.token}" if ctx.settings.is_development else None
        ),
    )


@router.post("/verify/{token}", response_model=AccountResponse)
async def verify_signup(token: str, session: SessionDep, ctx: ContextDep):
    account = await AuthService(session, ctx).confirm_signup(token)
    return AccountResponse(
        message="Email verified successfully. Account created.",
        user=AccountRead.model_validate(account),
    )


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, session: SessionDep, ctx: ContextDep, client_ip: ClientIP):
    """Check credentials and send a one-time passcode. No session is issued here."""
    await AuthService(session, ctx).login(data.email, data.password, client_ip)
    return LoginResponse(message="OTP sent to your email. Please verify to complete login.")


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(
    data: VerifyOtpRequest, response: Response, session: SessionDep, ctx: ContextDep
):
    account, tokens = await AuthService(session, ctx).verify_otp(data.email, data.otp)
    set_session_cookies(response, tokens, ctx.settings)
    return VerifyOtpResponse(
        message="Login successful",
        token=tokens.access_token,
        user=AccountRead.model_validate(account),
    )


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    data: ResendOtpRequest, session: SessionDep, ctx: ContextDep, client_ip: ClientIP
):
    await AuthService(session, ctx).resend_otp(data.email, client_ip)
    return MessageResponse(message="A new OTP has been sent to your email.")


@router.post("/refresh-token", response_model=RefreshResponse)
async def refresh_token(request: Request, response: Response, session: SessionDep, ctx: ContextDep):
    """Mint a new access token from the refresh cookie."""
    access_token = await AuthService(session, ctx).refresh(request.cookies.get(REFRESH_TOKEN_COOKIE))
    set_access_cookie(response, access_token, ctx.settings)
    return RefreshResponse(message="Access token refreshed", access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(account: CurrentAccount, response: Response, session: SessionDep, ctx: ContextDep):
    await AuthService(session, ctx).logout(account)
    clear_session_cookies(response, ctx.settings)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AccountResponse)
async def get_me(account: CurrentAccount):
    return AccountResponse(message="Profile fetched", user=AccountRead.model_validate(account))


@router.put("/update-profile", response_model=AccountResponse)
async def update_profile(
    data: ProfileUpdateRequest, account: CurrentAccount, session: SessionDep, ctx: ContextDep
):
    account = await AuthService(session, ctx).update_profile(account, data)
    return AccountResponse(
        message="Profile updated successfully", user=AccountRead.model_validate(account)
    )
