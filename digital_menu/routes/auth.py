from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from digital_menu.core.database import get_db
from digital_menu.core.security import get_bearer_token, require_user_id
from digital_menu.models.user import User
from digital_menu.services.auth_service import AuthService
from digital_menu.services.email_service import EmailService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

# Pydantic Models
class SendCodeRequest(BaseModel):
    email: EmailStr

class VerifyAndRegisterRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    name: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=100)

class VerifyAndLoginRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)

class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    country: str

class SendCodeResponse(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None

class AuthResponse(BaseModel):
    token: str
    user: UserResponse

class LogoutResponse(BaseModel):
    success: bool


def get_email_service() -> EmailService:
    return EmailService()


def get_auth_service(
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
) -> AuthService:
    return AuthService(db, email_service=email_service)


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        country=user.country
    )


@router.post("/send-code", response_model=SendCodeResponse, response_model_exclude_none=True)
async def send_verification_code(
    request: SendCodeRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Issue a one-time code for an email address
    """
    result = await auth.send_verification_code(request.email)
    return SendCodeResponse(**result)


@router.post("/verify-register", response_model=AuthResponse)
async def verify_and_register(
    request: VerifyAndRegisterRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Verify a code and create (or update) the account it belongs to
    """
    token, user = auth.verify_and_register(
        request.email,
        request.code,
        request.name,
        request.country
    )
    return AuthResponse(token=token, user=_user_response(user))


@router.post("/verify-login", response_model=AuthResponse)
async def verify_and_login(
    request: VerifyAndLoginRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Verify a code and sign in. Unknown emails get an account with placeholder details.
    """
    token, user = auth.verify_and_login(request.email, request.code)
    return AuthResponse(token=token, user=_user_response(user))


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    user_id: str = Depends(require_user_id),
    auth: AuthService = Depends(get_auth_service)
):
    return _user_response(auth.get_current_user(user_id))


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service)
):
    """
    Revoke the bearer token of this request. Always succeeds.
    """
    auth.logout(token)
    return LogoutResponse(success=True)
