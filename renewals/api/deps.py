import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from renewals.core.config import settings
from renewals.core.errors import AuthorizationError
from renewals.core.security import decode_token, verify_cron_secret
from renewals.services.offsets import get_offsets

logger = logging.getLogger(__name__)

ADMIN_COOKIE = "admin_session"
CRON_HEADER = "x-cron-secret"

bearer = HTTPBearer(auto_error=False)

def require_admin(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> dict:
    token = creds.credentials if creds else request.cookies.get(ADMIN_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("type") != "admin":
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload

def require_cron_secret(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> None:
    """Accepts the secret either as `x-cron-secret: <secret>` or `Authorization: Bearer <secret>`."""
    provided = request.headers.get(CRON_HEADER) or (creds.credentials if creds else None)
    try:
        verify_cron_secret(provided, settings.CRON_SECRET)
    except AuthorizationError as e:
        logger.warning("Rejected cron call from %s: %s", request.client.host if request.client else "unknown", e)
        raise HTTPException(status_code=401, detail="Unauthorized")

def reminder_offsets() -> list[int]:
    return get_offsets()
