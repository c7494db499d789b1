from typing import Any

from signingconnect.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    user_type: str = "company"
    email: str | None = None
    password: str | None = None
    company_name: str | None = None
    contact_name: str | None = None
    phone: str | None = None
    address: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    user_type: str | None = None


class ForgotPasswordRequest(CamelModel):
    email: str | None = None


class ResetPasswordRequest(CamelModel):
    token: str | None = None
    new_password: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str | None = None
    new_password: str | None = None


class ProfileUpdate(CamelModel):
    profile: dict[str, Any]


class UserOut(CamelModel):
    id: int
    email: str
    user_type: str
    profile: dict[str, Any] | None = None
    created_at: str | None = None
    last_login: str | None = None


class UserProfileOut(UserOut):
    status: str
    total_jobs_completed: int = 0
    average_rating: float = 0.0
    on_time_percentage: int = 100
    total_earnings: int = 0


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    token: str
    user: UserOut


class UserResponse(CamelModel):
    success: bool = True
    user: UserOut


class ProfileResponse(CamelModel):
    success: bool = True
    user: UserProfileOut
