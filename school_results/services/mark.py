from typing import List, Set

from fastapi import HTTPException
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import Mark, Student, Subject
from school_results.core.logger import logger
from school_results.api.schemas.mark import BulkMarkEntry
from school_results.api.schemas.subject import CreateSubject
from school_results.services.cascade import CascadeService
from school_results.services.subject import SubjectService


class MarkService:
    @staticmethod
    async def update_mark(student_id: int, subject_id: int, obtained: str, db: AsyncSession) -> Mark:
        """
        Set a student's score on one subject, creating the mark if there is none.

        Args:
            student_id: Student id
            subject_id: Subject id
            obtained: Score as text
            db: Async SQLAlchemy session

        Returns:
            Mark: The single mark row for the pair

        Raises:
            HTTPException: 404 - Student or subject not found
            HTTPException: 500 - Database error
        """
        try:
            student = (await db.execute(select(Student).where(Student.id == student_id))).scalars().first()
            if not student:
                logger.warning(f"[MARK UPDATE] Student not found: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Student not found"
                )

            subject = (await db.execute(select(Subject).where(Subject.id == subject_id))).scalars().first()
            if not subject:
                logger.warning(f"[MARK UPDATE] Subject not found: ID {subject_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Subject not found"
                )

            mark = await CascadeService.upsert_mark(student_id, subject_id, obtained, db)
            await db.commit()

            logger.info(f"[MARK UPDATE] Mark ID {mark.id}: student {student_id}, subject {subject_id} -> {obtained}")
            return mark

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[MARK UPDATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to update mark"
            ) from e

    @staticmethod
    async def delete_mark(mark_id: int, db: AsyncSession) -> bool:
        try:
            result = await db.execute(delete(Mark).where(Mark.id == mark_id))
            await db.commit()
            logger.info(f"[MARK DELETE] Mark ID {mark_id} removed: {result.rowcount > 0}")
            return result.rowcount > 0

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[MARK DELETE] Database error for ID {mark_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to delete mark"
            ) from e

    @staticmethod
    async def _resolve_subject(student: Student, entry: BulkMarkEntry, db: AsyncSession) -> Subject:
        mark_id = entry.existing_mark_id()
        if mark_id is not None:
            existing = (await db.execute(
                select(Mark).where(Mark.id == mark_id, Mark.student_id == student.id)
            )).scalars().first()
            subject = await SubjectService.get_subject(existing.subject_id, db) if existing else None
            if subject:
                subject.name = entry.subject
                subject.max_marks = entry.max
                subject.date = entry.date or None
                return subject

        subject = await SubjectService.find_by_name(student.class_id, entry.subject, db)
        if subject:
            subject.max_marks = entry.max
            subject.date = entry.date or None
            return subject

        return await SubjectService.add_subject(
            CreateSubject(
                name=entry.subject,
                maxMarks=entry.max,
                date=entry.date,
                classId=student.class_id,
            ),
            db
        )

    @staticmethod
    async def bulk_update(student_id: int, entries: List[BulkMarkEntry], db: AsyncSession) -> dict:
        """
        Replace a student's whole mark set.

        Each entry is matched to a subject (through its existing mark id, else
        by subject name within the student's class, else a new subject is
        created), its mark is upserted, and any previous mark of the student
        that no entry touched is deleted.

        Args:
            student_id: Student id
            entries: The complete desired mark set
            db: Async SQLAlchemy session

        Returns:
            dict: Counts of upserted and deleted marks

        Raises:
            HTTPException: 404 - Student not found
            HTTPException: 500 - Database error
        """
        try:
            student = (await db.execute(select(Student).where(Student.id == student_id))).scalars().first()
            if not student:
                logger.warning(f"[BULK MARKS] Student not found: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Student not found"
                )

            previous_ids: Set[int] = set((await db.execute(
                select(Mark.id).where(Mark.student_id == student_id)
            )).scalars().all())

            touched_ids: Set[int] = set()
            for entry in entries:
                subject = await MarkService._resolve_subject(student, entry, db)
                await db.flush()
                mark = await CascadeService.upsert_mark(student_id, subject.id, entry.obtained, db)
                touched_ids.add(mark.id)

            stale_ids = previous_ids - touched_ids
            if stale_ids:
                await db.execute(delete(Mark).where(Mark.id.in_(stale_ids)))

            await db.commit()

            logger.info(
                f"[BULK MARKS] Student ID {student_id}: {len(touched_ids)} marks upserted, "
                f"{len(stale_ids)} removed"
            )
            return {"updated_count": len(touched_ids), "deleted_count": len(stale_ids)}

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[BULK MARKS] Database error for student ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to update marks"
            ) from e
