from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from school_results.models import AcademicSession, SchoolClass
from school_results.core.logger import logger
from school_results.api.schemas.school_class import CreateClass
from school_results.services.cascade import CascadeService
from school_results.services.counter import CounterService


class ClassService:
    @staticmethod
    async def get_classes(db: AsyncSession, session_id: Optional[int] = None) -> List[SchoolClass]:
        """
        List classes, optionally only those of one session.

        Raises:
            HTTPException: 500 - Database error
        """
        try:
            stmt = select(SchoolClass).order_by(SchoolClass.id)
            if session_id is not None:
                stmt = stmt.where(SchoolClass.session_id == session_id)

            result = await db.execute(stmt)
            classes = result.scalars().all()
            logger.info(f"[CLASS LIST] {len(classes)} classes loaded (session: {session_id})")
            return list(classes)

        except SQLAlchemyError as e:
            logger.error(f"[CLASS LIST] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to load classes"
            ) from e

    @staticmethod
    async def get_class(class_id: int, db: AsyncSession) -> Optional[SchoolClass]:
        result = await db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
        return result.scalars().first()

    @staticmethod
    async def create_class(class_data: CreateClass, db: AsyncSession) -> SchoolClass:
        """
        Create a class inside an existing session.

        Args:
            class_data: Class name and owning session id
            db: Async SQLAlchemy session

        Returns:
            SchoolClass: The created class

        Raises:
            HTTPException: 400 - Session not found
            HTTPException: 500 - Database error
        """
        try:
            session_result = await db.execute(
                select(AcademicSession).where(AcademicSession.id == class_data.sessionId)
            )
            if not session_result.scalars().first():
                logger.warning(f"[CLASS CREATE] Session not found: ID {class_data.sessionId}")
                raise HTTPException(
                    status_code=400,
                    detail="Session not found"
                )

            class_id = await CounterService.next_id("classes", db)
            new_class = SchoolClass(
                id=class_id,
                name=class_data.name,
                session_id=class_data.sessionId
            )
            db.add(new_class)
            await db.commit()

            logger.info(f"[CLASS CREATE] Created class ID {new_class.id}, name: {new_class.name}")
            return new_class

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[CLASS CREATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to create class"
            ) from e

    @staticmethod
    async def delete_class(class_id: int, db: AsyncSession) -> bool:
        """
        Delete a class with all of its students, subjects and their marks.

        Returns:
            bool: False when there was no such class
        """
        try:
            deleted = await CascadeService.purge_class(class_id, db)
            await db.commit()

            if deleted:
                logger.info(f"[CLASS DELETE] Class deleted: ID {class_id}")
            else:
                logger.warning(f"[CLASS DELETE] Class not found: ID {class_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[CLASS DELETE] Database error for ID {class_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to delete class"
            ) from e
