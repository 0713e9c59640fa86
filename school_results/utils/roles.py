from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.core.database import get_db
from school_results.core.jwt import verify_token
from school_results.core.logger import logger
from school_results.models import Admin
from school_results.services.auth import AuthService


async def get_optional_admin(
        request: Request,
        db: AsyncSession = Depends(get_db)
) -> Optional[Admin]:
    """
    The administrator behind the session cookie, or None.

    A missing, expired or forged cookie, or one naming a deleted admin, all
    resolve to None. The cookie name and signing key come from the settings
    the application was built with.
    """
    app_settings = request.app.state.settings
    token = request.cookies.get(app_settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    payload = verify_token(token, app_settings)
    if not payload:
        return None

    admin = await AuthService.get_admin(payload["id"], db)
    if not admin:
        logger.warning(f"[AUTHENTICATION] Token for a missing admin: {payload['sub']}")
        return None
    return admin


async def get_current_admin(admin: Optional[Admin] = Depends(get_optional_admin)) -> Admin:
    """
    Dependency for admin-only endpoints.

    Raises:
        HTTPException: 401 - No valid admin session
    """
    if admin is None:
        logger.warning("[AUTHORIZATION] Admin session required")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Admin access required"
        )
    return admin


async def open_write_guard(
        request: Request,
        admin: Optional[Admin] = Depends(get_optional_admin)
) -> Optional[Admin]:
    """
    Dependency for writes that are open to anyone unless the application runs
    with REQUIRE_ADMIN_FOR_ALL_WRITES.
    """
    if request.app.state.settings.REQUIRE_ADMIN_FOR_ALL_WRITES and admin is None:
        logger.warning(f"[AUTHORIZATION] Admin session required for {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Admin access required"
        )
    return admin
