from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from signingconnect.database import get_db
from signingconnect.dependencies import get_current_user
from signingconnect.limiter import auth_limit
from signingconnect.models.user import User
from signingconnect.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserOut,
    UserProfileOut,
    UserResponse,
)
from signingconnect.schemas.common import MessageResponse
from signingconnect.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_to_response(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        user_type=user.user_type,
        profile=user.profile,
        created_at=user.created_at,
        last_login=user.last_login,
    )


def _profile_to_response(user: User) -> UserProfileOut:
    return UserProfileOut(
        **_user_to_response(user).model_dump(),
        status=user.status,
        total_jobs_completed=user.total_jobs_completed or 0,
        average_rating=user.average_rating or 0.0,
        on_time_percentage=user.on_time_percentage if user.on_time_percentage is not None else 100,
        total_earnings=user.total_earnings or 0,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
@auth_limit
async def register(request: Request, req: RegisterRequest, db: Session = Depends(get_db)):
    user, token = auth_service.register(db, req, request=request)
    return AuthResponse(message="Account created successfully", token=token, user=_user_to_response(user))


@router.post("/login", response_model=AuthResponse)
@auth_limit
async def login(request: Request, req: LoginRequest, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, req.email, req.password, req.user_type)
    return AuthResponse(message="Login successful", token=token, user=_user_to_response(user))


@router.get("/verify", response_model=UserResponse)
async def verify(user: User = Depends(get_current_user)):
    return UserResponse(user=_user_to_response(user))


@router.post("/forgot-password", response_model=MessageResponse)
@auth_limit
async def forgot_password(request: Request, req: ForgotPasswordRequest, db: Session = Depends(get_db)):
    message = auth_service.forgot_password(db, req.email, request=request)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
@auth_limit
async def reset_password(request: Request, req: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, req.token, req.new_password)
    return MessageResponse(message="Password has been reset successfully")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(user: User = Depends(get_current_user)):
    return ProfileResponse(user=_profile_to_response(user))


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(req: ProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user = auth_service.update_profile(db, user, req.profile)
    return ProfileResponse(user=_profile_to_response(user))


@router.post("/change-password", response_model=MessageResponse)
@router.patch("/change-password", response_model=MessageResponse)
async def change_password(
    req: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, user, req.current_password, req.new_password)
    return MessageResponse(message="Password changed successfully")
