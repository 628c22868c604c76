from fastapi import APIRouter, Depends, Request

from tourbook.config import get_settings
from tourbook.deps import get_otp_service, get_user_store
from tourbook.rate_limit import limiter
from tourbook.schemas import (
    EmailSendOtpIn,
    EmailVerifyOtpIn,
    LoginIn,
    LoginOut,
    RefreshIn,
    SendOtpIn,
    SendOtpOut,
    Token,
    UserOut,
    VerifyOtpIn,
    VerifyOtpOut,
)
from tourbook.services import auth_service
from tourbook.services.otp_service import IssueResult, OtpService, RegistrationData, VerifyResult
from tourbook.services.otp_store import PendingUserData
from tourbook.services.user_store import UserIdentity, UserStore
from tourbook.utils.masking import mask_email

router = APIRouter(prefix="/api/auth", tags=["auth"])

settings = get_settings()
OTP_REQUEST_LIMIT = settings.OTP_REQUEST_RATE_LIMIT


def _user_out(user: UserIdentity) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        phone=user.phone,
        createdAt=user.created_at,
    )


def _send_response(result: IssueResult, message: str, *, show_email: bool = False) -> SendOtpOut:
    response = SendOtpOut(message=message)
    if show_email:
        email = result.identifier.value
        response.email = mask_email(email) if get_settings().is_production else email
    if not get_settings().is_production:
        response.debug = {"otp": result.code}
    return response


def _verify_response(result: VerifyResult) -> VerifyOtpOut:
    tokens = auth_service.try_issue_tokens(result.user)
    message = (
        "OTP verified and user registered successfully"
        if result.is_new_user
        else "OTP verified and logged in successfully"
    )
    return VerifyOtpOut(
        message=message,
        user=_user_out(result.user),
        isNewUser=result.is_new_user,
        token=Token(access_token=tokens[0], refresh_token=tokens[1]) if tokens else None,
    )


@router.get("/health")
async def health():
    return {"success": True, "message": "healthy"}


@router.post("/send-otp", response_model=SendOtpOut, response_model_exclude_none=True)
@limiter.limit(OTP_REQUEST_LIMIT)
async def route_send_otp(
    request: Request,
    payload: SendOtpIn,
    otp_service: OtpService = Depends(get_otp_service),
):
    """Send an OTP by SMS. Rate limited per client IP."""
    result = await otp_service.issue(
        payload.phone,
        PendingUserData(name=payload.name, phone=payload.phone, email=payload.email),
    )
    return _send_response(result, "OTP sent successfully")


@router.post("/verify-otp", response_model=VerifyOtpOut, response_model_exclude_none=True)
async def route_verify_otp(
    payload: VerifyOtpIn,
    otp_service: OtpService = Depends(get_otp_service),
):
    """Verify an SMS OTP and register the user."""
    result = await otp_service.verify(
        payload.phone,
        payload.otp,
        RegistrationData(name=payload.name, email=payload.email, password=payload.password),
    )
    return _verify_response(result)


@router.post("/email/send-otp", response_model=SendOtpOut, response_model_exclude_none=True)
@limiter.limit(OTP_REQUEST_LIMIT)
async def route_send_email_otp(
    request: Request,
    payload: EmailSendOtpIn,
    otp_service: OtpService = Depends(get_otp_service),
):
    """Send an OTP by email. Rate limited per client IP."""
    result = await otp_service.issue(
        payload.email,
        PendingUserData(name=payload.name, phone=payload.phone, email=payload.email),
    )
    return _send_response(result, "OTP sent to your email", show_email=True)


@router.post("/email/verify-otp", response_model=VerifyOtpOut, response_model_exclude_none=True)
async def route_verify_email_otp(
    payload: EmailVerifyOtpIn,
    otp_service: OtpService = Depends(get_otp_service),
):
    """Verify an email OTP and register the user."""
    result = await otp_service.verify(
        payload.email,
        payload.otp,
        RegistrationData(name=payload.name, phone=payload.phone, password=payload.password),
    )
    return _verify_response(result)


@router.post("/login", response_model=LoginOut)
async def route_login(payload: LoginIn, users: UserStore = Depends(get_user_store)):
    """Email + password login for users who registered with a password."""
    (access_token, refresh_token), user = await auth_service.login_with_password(
        users, email=payload.email or "", password=payload.password or ""
    )
    return LoginOut(
        user=_user_out(user),
        token=Token(access_token=access_token, refresh_token=refresh_token),
    )


@router.post("/refresh", response_model=Token)
async def route_refresh(payload: RefreshIn, users: UserStore = Depends(get_user_store)):
    access_token, refresh_token = await auth_service.refresh_access_token(users, payload.refresh_token)
    return Token(access_token=access_token, refresh_token=refresh_token)
