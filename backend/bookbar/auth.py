from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import get_settings
from .errors import NotFoundError, Unauthorized, ValidationError
from .services.business import get_or_create_settings

ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_admin_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.admin_token_days))
    return jwt.encode(
        {"email": email, "iat": now, "exp": expire},
        settings.jwt_secret,
        algorithm=ALGORITHM,
    )


def decode_admin_token(token: str) -> Optional[dict]:
    """Claims of a valid admin token, or None."""
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if not payload.get("email"):
        return None
    return payload


def validate_admin_credentials(db: Session, email: str, password: str) -> bool:
    row = get_or_create_settings(db)
    if not row.admin_login_email or not row.admin_password_hash:
        return False
    if row.admin_login_email.lower() != email.lower():
        return False
    return verify_password(password, row.admin_password_hash)


def login(db: Session, email: str, password: str) -> str:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Email and password required")
    if not validate_admin_credentials(db, email, password):
        raise Unauthorized("Invalid email or password")
    return create_admin_token(email)


def change_password(db: Session, admin_email: str, current_password: str, new_password: str) -> None:
    if not current_password or not new_password:
        raise ValidationError("current_password and new_password required")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")

    row = get_or_create_settings(db)
    if not row.admin_password_hash or (row.admin_login_email or "").lower() != admin_email.lower():
        raise NotFoundError("Admin not found")
    if not verify_password(current_password, row.admin_password_hash):
        raise Unauthorized("Current password is incorrect")

    row.admin_password_hash = hash_password(new_password)
    db.commit()


# FastAPI dependency
def get_current_admin(
    authorization: Optional[str] = Header(default=None),
    x_admin_token: Optional[str] = Header(default=None),
) -> dict:
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
    elif x_admin_token:
        token = x_admin_token.strip()
    if not token:
        raise Unauthorized("Unauthorized")

    payload = decode_admin_token(token)
    if payload is None:
        raise Unauthorized("Unauthorized")
    return {"email": payload["email"]}
