from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.auth import AdminResponse, LoginRequest, RegisterAdmin
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services.auth import AuthService
from school_results.utils.roles import get_current_admin, get_optional_admin

router = APIRouter(tags=["Auth"])


@router.get("/user", response_model=AdminResponse)
async def get_user(admin=Depends(get_optional_admin)):
    """
    The logged-in administrator.

    Raises:
        HTTPException: 401 - Not logged in
    """
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in"
        )
    return AdminResponse.from_model(admin)


@router.post("/login", response_model=AdminResponse)
async def login(
        credentials: LoginRequest,
        request: Request,
        response: Response,
        db: AsyncSession = Depends(get_db),
):
    """
    Check email and password and open an admin session.

    The session is a signed JWT stored in an HTTP-only cookie.

    Raises:
        HTTPException: 401 - Wrong email or password
    """
    admin = await AuthService.authenticate(credentials.email, credentials.password, db)

    if not admin:
        logger.warning(f"[LOGIN] Failed login attempt for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    app_settings = request.app.state.settings
    response.set_cookie(
        key=app_settings.SESSION_COOKIE_NAME,
        value=AuthService.create_token(admin, app_settings),
        max_age=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=app_settings.COOKIE_SECURE,
        samesite="lax",
    )
    logger.info(f"[LOGIN] Admin logged in: {admin.email}")
    return AdminResponse.from_model(admin)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(request: Request):
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=request.app.state.settings.SESSION_COOKIE_NAME,
        secure=request.app.state.settings.COOKIE_SECURE,
        httponly=True,
        samesite="lax"
    )
    return response


@router.post("/register", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def register(
        admin_data: RegisterAdmin,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    """
    Register another administrator. Only a logged-in admin may do this.

    Raises:
        HTTPException: 400 - Email already registered
        HTTPException: 401 - Not logged in
        HTTPException: 500 - Internal server error
    """
    try:
        admin = await AuthService.register_admin(
            name=admin_data.name,
            email=admin_data.email,
            password=admin_data.password,
            db=db
        )
        logger.info(f"[REGISTRATION] {current_admin.email} registered {admin.email}")
        return AdminResponse.from_model(admin)

    except ValueError as e:
        logger.warning(f"[REGISTRATION] Rejected: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        ) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[REGISTRATION] Failed to register {admin_data.email}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create admin"
        ) from e
