import hmac
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from renewals.core.config import settings
from renewals.core.errors import AuthorizationError

# PBKDF2 avoids bcrypt backend/version issues and the 72-byte bcrypt input limit.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ALGO = "HS256"
ADMIN_SUBJECT = "admin"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def check_admin_password(password: str, plain: str | None = None, password_hash: str | None = None) -> bool:
    """Hash takes precedence; with neither configured nobody gets in."""
    plain = settings.ADMIN_PASSWORD if plain is None else plain
    password_hash = settings.ADMIN_PASSWORD_HASH if password_hash is None else password_hash
    if not password:
        return False
    if password_hash:
        return verify_password(password, password_hash)
    if plain:
        return hmac.compare_digest(password.encode(), plain.encode())
    return False


def create_admin_token(expires_hours: int | None = None) -> str:
    if expires_hours is None:
        expires_hours = settings.ADMIN_SESSION_HOURS
    exp = datetime.now(timezone.utc) + timedelta(hours=expires_hours)
    payload = {"sub": ADMIN_SUBJECT, "type": "admin", "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])


def verify_cron_secret(provided: str | None, expected: str) -> None:
    """Raise AuthorizationError unless a secret is configured and matches."""
    if not expected:
        raise AuthorizationError("cron secret not configured")
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise AuthorizationError("invalid cron secret")
