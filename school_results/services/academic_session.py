from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from school_results.models import AcademicSession
from school_results.core.logger import logger
from school_results.api.schemas.academic_session import CreateSession
from school_results.services.cascade import CascadeService
from school_results.services.counter import CounterService


class SessionService:
    @staticmethod
    async def get_sessions(db: AsyncSession) -> List[AcademicSession]:
        try:
            result = await db.execute(select(AcademicSession).order_by(AcademicSession.id))
            sessions = result.scalars().all()
            logger.info(f"[SESSION LIST] {len(sessions)} sessions loaded")
            return list(sessions)

        except SQLAlchemyError as e:
            logger.error(f"[SESSION LIST] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to load sessions"
            ) from e

    @staticmethod
    async def get_session(session_id: int, db: AsyncSession) -> Optional[AcademicSession]:
        result = await db.execute(select(AcademicSession).where(AcademicSession.id == session_id))
        return result.scalars().first()

    @staticmethod
    async def get_session_by_name(name: str, db: AsyncSession) -> Optional[AcademicSession]:
        result = await db.execute(select(AcademicSession).where(AcademicSession.name == name))
        return result.scalars().first()

    @staticmethod
    async def create_session(session_data: CreateSession, db: AsyncSession) -> AcademicSession:
        """
        Create an academic session.

        Args:
            session_data: Session name and active flag
            db: Async SQLAlchemy session

        Returns:
            AcademicSession: The created session

        Raises:
            HTTPException: 400 - A session with this name already exists
            HTTPException: 500 - Database error
        """
        try:
            if await SessionService.get_session_by_name(session_data.name, db):
                logger.warning(f"[SESSION CREATE] Duplicate session name: {session_data.name}")
                raise HTTPException(
                    status_code=400,
                    detail=f"Session {session_data.name} already exists"
                )

            session_id = await CounterService.next_id("sessions", db)
            new_session = AcademicSession(
                id=session_id,
                name=session_data.name,
                is_active=session_data.isActive
            )
            db.add(new_session)
            await db.commit()

            logger.info(f"[SESSION CREATE] Created session ID {new_session.id}, name: {new_session.name}")
            return new_session

        except IntegrityError as e:
            # A concurrent request created the same name after the check above.
            await db.rollback()
            logger.warning(f"[SESSION CREATE] Duplicate session name: {session_data.name}")
            raise HTTPException(
                status_code=400,
                detail=f"Session {session_data.name} already exists"
            ) from e
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SESSION CREATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to create session"
            ) from e

    @staticmethod
    async def delete_session(session_id: int, db: AsyncSession) -> bool:
        """
        Delete a session together with its classes, their students, subjects and marks.

        Returns:
            bool: False when there was no such session (nothing is changed)
        """
        try:
            deleted = await CascadeService.purge_session(session_id, db)
            await db.commit()

            if deleted:
                logger.info(f"[SESSION DELETE] Session deleted: ID {session_id}")
            else:
                logger.warning(f"[SESSION DELETE] Session not found: ID {session_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SESSION DELETE] Database error for ID {session_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to delete session"
            ) from e
