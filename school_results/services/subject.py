from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import SchoolClass, Subject
from school_results.core.logger import logger
from school_results.api.schemas.subject import CreateSubject, UpdateSubject
from school_results.services.cascade import CascadeService
from school_results.services.counter import CounterService


class SubjectService:
    @staticmethod
    async def get_subjects(db: AsyncSession, class_id: Optional[int] = None) -> List[Subject]:
        try:
            stmt = select(Subject).order_by(Subject.id)
            if class_id is not None:
                stmt = stmt.where(Subject.class_id == class_id)

            result = await db.execute(stmt)
            subjects = result.scalars().all()
            logger.info(f"[SUBJECT LIST] {len(subjects)} subjects loaded (class: {class_id})")
            return list(subjects)

        except SQLAlchemyError as e:
            logger.error(f"[SUBJECT LIST] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to load subjects"
            ) from e

    @staticmethod
    async def get_subject(subject_id: int, db: AsyncSession) -> Optional[Subject]:
        result = await db.execute(select(Subject).where(Subject.id == subject_id))
        return result.scalars().first()

    @staticmethod
    async def find_by_name(class_id: int, name: str, db: AsyncSession) -> Optional[Subject]:
        result = await db.execute(
            select(Subject)
            .where(Subject.class_id == class_id, Subject.name == name)
            .order_by(Subject.id)
        )
        return result.scalars().first()

    @staticmethod
    async def add_subject(subject_data: CreateSubject, db: AsyncSession) -> Subject:
        """
        Insert a subject and provision zero marks for the students of its class.
        Runs in the caller's transaction and does not commit.

        Raises:
            HTTPException: 400 - Class not found
        """
        class_result = await db.execute(select(SchoolClass).where(SchoolClass.id == subject_data.classId))
        if not class_result.scalars().first():
            logger.warning(f"[SUBJECT CREATE] Class not found: ID {subject_data.classId}")
            raise HTTPException(
                status_code=400,
                detail="Class not found"
            )

        subject_id = await CounterService.next_id("subjects", db)
        new_subject = Subject(
            id=subject_id,
            name=subject_data.name,
            date=subject_data.date or None,
            max_marks=subject_data.maxMarks,
            class_id=subject_data.classId
        )
        db.add(new_subject)
        await db.flush()

        provisioned = await CascadeService.provision_subject(new_subject, db)
        logger.info(
            f"[SUBJECT CREATE] Created subject ID {new_subject.id}, name: {new_subject.name}, "
            f"{provisioned} zero marks provisioned"
        )
        return new_subject

    @staticmethod
    async def create_subject(subject_data: CreateSubject, db: AsyncSession) -> Subject:
        """
        Create a subject for a class; every student of that class gets a zero mark.

        Args:
            subject_data: Name, max marks, optional date and class id
            db: Async SQLAlchemy session

        Returns:
            Subject: The created subject

        Raises:
            HTTPException: 400 - Class not found
            HTTPException: 500 - Database error
        """
        try:
            new_subject = await SubjectService.add_subject(subject_data, db)
            await db.commit()
            return new_subject

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT CREATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to create subject"
            ) from e

    @staticmethod
    def apply_update(subject: Subject, subject_data: UpdateSubject) -> None:
        # Existing marks keep their value; percentages follow the new maximum.
        # An explicit null clears the date; name and maxMarks cannot be cleared.
        update_data = subject_data.model_dump(exclude_unset=True)
        if update_data.get("name") is not None:
            subject.name = update_data["name"]
        if update_data.get("maxMarks") is not None:
            subject.max_marks = update_data["maxMarks"]
        if "date" in update_data:
            subject.date = update_data["date"] or None

    @staticmethod
    async def update_subject(subject_id: int, subject_data: UpdateSubject, db: AsyncSession) -> Subject:
        """
        Apply a partial name/max marks/date update.

        Raises:
            HTTPException: 404 - Subject not found
            HTTPException: 500 - Database error
        """
        try:
            result = await db.execute(select(Subject).where(Subject.id == subject_id))
            subject = result.scalars().first()

            if not subject:
                logger.warning(f"[SUBJECT UPDATE] Subject not found: ID {subject_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Subject not found"
                )

            SubjectService.apply_update(subject, subject_data)
            await db.commit()

            logger.info(f"[SUBJECT UPDATE] Subject updated: ID {subject_id}")
            return subject

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT UPDATE] Database error for ID {subject_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to update subject"
            ) from e

    @staticmethod
    async def delete_subject(subject_id: int, db: AsyncSession) -> bool:
        try:
            deleted = await CascadeService.purge_subject(subject_id, db)
            await db.commit()

            if deleted:
                logger.info(f"[SUBJECT DELETE] Subject deleted: ID {subject_id}")
            else:
                logger.warning(f"[SUBJECT DELETE] Subject not found: ID {subject_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SUBJECT DELETE] Database error for ID {subject_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to delete subject"
            ) from e
