#/backend/services/auth.py

from datetime import datetime, timedelta
from typing import Optional, Tuple
import logging
import secrets

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.models.database import User, UserRole, get_db
from app.schemas.user import UserCreate
from app.core.config import settings
from app.core.errors import BadRequestError, ForbiddenError, UnauthorizedError

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

# Bearer tokens; missing headers are reported by get_current_user_dependency
bearer_scheme = HTTPBearer(auto_error=False)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT settings
SECRET_KEY = settings.secret_key
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password"""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def create_token_for_user(user: User, expires_delta: Optional[timedelta] = None) -> str:
    role = user.role.value if isinstance(user.role, UserRole) else (user.role or UserRole.USER.value)
    return create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": role},
        expires_delta=expires_delta,
    )

def verify_token(token: str) -> dict:
    """Decode a JWT token, raising 401 for expired or malformed tokens"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired", "TOKEN_EXPIRED")
    except JWTError:
        raise UnauthorizedError("Invalid authentication token", "INVALID_TOKEN")

def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate a user by email and password"""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise UnauthorizedError("Invalid credentials")
    if not user.is_active:
        raise UnauthorizedError("This account is inactive or blocked")
    if not verify_password(password, user.hashed_password):
        raise UnauthorizedError("Invalid credentials")
    return user

def create_user(db: Session, user_create: UserCreate) -> User:
    """Create a new user"""
    existing_user = db.query(User).filter(User.email == user_create.email).first()
    if existing_user:
        raise BadRequestError("Email already registered")

    user = User(
        name=user_create.name,
        email=user_create.email,
        hashed_password=get_password_hash(user_create.password),
        preferences={},
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user

def get_current_user(db: Session, token: str) -> User:
    """Get current user from JWT token"""
    payload = verify_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid authentication token", "INVALID_TOKEN")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise ForbiddenError("User is inactive or blocked")
    return user


def get_current_user_dependency(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency version of get_current_user
    Use this in API endpoints with Depends()
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError("No authentication token provided")
    return get_current_user(db, credentials.credentials)

def require_admin(current_user: User = Depends(get_current_user_dependency)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError("Access denied: administrator privileges required")
    return current_user

def change_password(db: Session, user: User, current_password: str, new_password: str):
    if not verify_password(current_password, user.hashed_password):
        raise UnauthorizedError("Current password is incorrect")
    user.hashed_password = get_password_hash(new_password)
    db.commit()

def request_password_reset(db: Session, email: str) -> Optional[Tuple[User, str]]:
    """
    Store a one-hour reset token for the user with this email.
    Returns None for unknown emails so callers can answer identically either way.
    """
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None

    reset_token = secrets.token_hex(32)
    user.reset_token = reset_token
    user.reset_token_expiry = datetime.utcnow() + timedelta(minutes=settings.password_reset_expire_minutes)
    db.commit()
    return user, reset_token

def reset_password(db: Session, token: str, new_password: str) -> User:
    user = db.query(User).filter(
        User.reset_token == token,
        User.reset_token_expiry > datetime.utcnow()
    ).first()
    if not user:
        raise BadRequestError("Invalid or expired token")

    user.hashed_password = get_password_hash(new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    db.commit()
    return user

def send_password_reset_email(user: User, reset_url: str) -> bool:
    """Send the reset link via SendGrid; skipped when no API key is configured"""
    if not settings.sendgrid_api_key:
        logger.info("SendGrid not configured - password reset email skipped")
        return False

    message = Mail(
        from_email=settings.from_email,
        to_emails=user.email,
        subject="Restablecimiento de contraseña - Alacena Inteligente",
        html_content=(
            f"<p>Hola {user.name},</p>"
            "<p>Has solicitado restablecer tu contraseña. Haz clic en el siguiente enlace:</p>"
            f'<p><a href="{reset_url}">Restablecer contraseña</a></p>'
            "<p>El enlace es válido por 1 hora.</p>"
            "<p>Si no solicitaste restablecer tu contraseña, ignora este mensaje.</p>"
        ),
    )
    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(message)
        logger.info(f"Password reset email sent to user {user.id} (status {response.status_code})")
        return True
    except Exception as e:
        logger.error(f"Failed to send password reset email: {str(e)}")
        return False
