from datetime import timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.core.config import Settings
from school_results.core.jwt import create_access_token
from school_results.core.logger import logger
from school_results.models import Admin
from school_results.services.counter import CounterService
from school_results.utils.security import hash_password, verify_password


class AuthService:
    @staticmethod
    async def get_admin(admin_id: int, db: AsyncSession) -> Optional[Admin]:
        result = await db.execute(select(Admin).where(Admin.id == admin_id))
        return result.scalars().first()

    @staticmethod
    async def get_admin_by_email(email: str, db: AsyncSession) -> Optional[Admin]:
        result = await db.execute(select(Admin).where(Admin.email == email.strip().lower()))
        return result.scalars().first()

    @staticmethod
    async def authenticate(email: str, password: str, db: AsyncSession) -> Optional[Admin]:
        """
        Check an administrator's credentials.

        Args:
            email: Login email
            password: Plain-text password
            db: Async SQLAlchemy session

        Returns:
            Optional[Admin]: The administrator, or None for unknown email / wrong password
        """
        admin = await AuthService.get_admin_by_email(email, db)

        if not admin:
            logger.warning(f"[AUTHENTICATION] Unknown email: {email}")
            return None

        if not verify_password(password, admin.password):
            logger.warning(f"[AUTHENTICATION] Wrong password for {email}")
            return None

        logger.info(f"[AUTHENTICATION] Authenticated: {email}")
        return admin

    @staticmethod
    def create_token(admin: Admin, app_settings: Settings) -> str:
        logger.info(f"[TOKEN] Issued for {admin.email}")
        return create_access_token(
            data={"sub": admin.email, "id": admin.id},
            app_settings=app_settings,
            expires_delta=timedelta(minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

    @staticmethod
    async def register_admin(
            name: str,
            email: str,
            password: str,
            db: AsyncSession,
            is_super_admin: bool = False
    ) -> Admin:
        """
        Register an administrator.

        Args:
            name: Display name
            email: Login email, unique
            password: Plain-text password, stored hashed
            db: Async SQLAlchemy session
            is_super_admin: Only set by startup seeding

        Returns:
            Admin: The registered administrator

        Raises:
            ValueError: The email is already registered
            HTTPException: 500 - Database error
        """
        email = email.strip().lower()
        if await AuthService.get_admin_by_email(email, db):
            logger.warning(f"[REGISTRATION] Email already registered: {email}")
            raise ValueError(f"An admin with email {email} already exists")

        try:
            admin_id = await CounterService.next_id("admins", db)
            admin = Admin(
                id=admin_id,
                email=email,
                password=hash_password(password),
                name=name,
                is_super_admin=is_super_admin
            )
            db.add(admin)
            await db.commit()
            logger.info(f"[REGISTRATION] Admin {email} registered")
            return admin

        except IntegrityError as e:
            # Another registration for the same email committed first.
            await db.rollback()
            logger.warning(f"[REGISTRATION] Email already registered: {email}")
            raise ValueError(f"An admin with email {email} already exists") from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[REGISTRATION] Database error for {email}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to create admin"
            ) from e
