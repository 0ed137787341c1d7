from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from datetime import datetime
import logging
from app.models.database import get_db, User
from app.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ProfileUpdate,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.core.config import settings
from app.services.auth import (
    authenticate_user,
    change_password,
    create_user,
    create_token_for_user,
    get_current_user_dependency as get_current_user,
    request_password_reset,
    reset_password,
    send_password_reset_email,
)
from app.services.rate_limit import auth_rate_limiter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"], dependencies=[Depends(auth_rate_limiter)])

FORGOT_PASSWORD_MESSAGE = "If the email is registered, you will receive instructions to reset your password"

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user_create: UserCreate, db: Session = Depends(get_db)):
    """Register a new user"""
    user = create_user(db, user_create)
    return {
        "message": "User registered successfully",
        "user": UserResponse.model_validate(user),
        "token": create_token_for_user(user),
    }

@router.post("/login")
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and receive access token"""
    user = authenticate_user(db, credentials.email, credentials.password)

    # Update last login
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    logger.info(f"User {user.id} logged in")
    return {
        "message": "Login successful",
        "user": UserResponse.model_validate(user),
        "token": create_token_for_user(user),
    }

@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return {"user": UserResponse.model_validate(current_user)}

@router.put("/profile")
def update_profile(
    update: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update name and/or preferences"""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return {
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(current_user),
    }

@router.post("/change-password")
def change_password_endpoint(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    change_password(db, current_user, request.current_password, request.new_password)
    logger.info(f"User {current_user.id} changed password")
    return {"message": "Password updated successfully"}

@router.post("/forgot-password")
def forgot_password(request: ForgotPasswordRequest, http_request: Request, db: Session = Depends(get_db)):
    """Start a password reset; the answer never reveals whether the email exists"""
    response = {"message": FORGOT_PASSWORD_MESSAGE}

    result = request_password_reset(db, request.email)
    if result is None:
        return response

    user, reset_token = result
    reset_url = f"{http_request.base_url}v1/auth/reset-password/{reset_token}"
    send_password_reset_email(user, reset_url)

    if settings.is_development:
        response["reset_token"] = reset_token
        response["reset_url"] = reset_url
    return response

@router.post("/reset-password/{token}")
def reset_password_endpoint(token: str, request: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = reset_password(db, token, request.password)
    logger.info(f"User {user.id} reset password")
    return {"message": "Password reset successfully"}

@router.post("/refresh")
def refresh_token(current_user: User = Depends(get_current_user)):
    """Refresh access token"""
    return {"token": create_token_for_user(current_user)}
