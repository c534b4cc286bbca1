from fastapi import APIRouter, Depends, HTTPException, Response

from renewals.api.deps import ADMIN_COOKIE, require_admin
from renewals.core.config import settings
from renewals.core.security import check_admin_password, create_admin_token
from renewals.schemas.delivery import AdminLoginIn, AdminLoginOut

router = APIRouter(tags=["auth"])

@router.post("/admin/auth", response_model=AdminLoginOut)
def admin_login(body: AdminLoginIn, response: Response):
    if not (settings.ADMIN_PASSWORD or settings.ADMIN_PASSWORD_HASH):
        raise HTTPException(status_code=500, detail="Admin password not configured")
    if not check_admin_password(body.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    token = create_admin_token()
    response.set_cookie(
        ADMIN_COOKIE,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.ADMIN_SESSION_HOURS * 3600,
        path="/",
    )
    return AdminLoginOut(access_token=token)


@router.post("/admin/logout")
def admin_logout(response: Response):
    response.delete_cookie(ADMIN_COOKIE, path="/")
    return {"ok": True}


@router.get("/admin/me")
def admin_me(admin: dict = Depends(require_admin)):
    return {"ok": True, "sub": admin.get("sub")}
