from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import AcademicSession, Mark, SchoolClass, Student, Subject
from school_results.core.logger import logger
from school_results.services.counter import CounterService

ZERO_MARK = "0"


class CascadeService:
    """
    Referential integrity between sessions, classes, students, subjects and marks.

    Nothing here commits. Callers run these inside their own transaction and
    commit once, so a cascade is either fully applied or not at all. Children
    are always removed before their parent.
    """

    @staticmethod
    async def upsert_mark(student_id: int, subject_id: int, obtained: str, db: AsyncSession) -> Mark:
        """
        Single write path for marks: at most one row per (student, subject) pair.

        Args:
            student_id: Student id
            subject_id: Subject id
            obtained: Score as text
            db: Async SQLAlchemy session

        Returns:
            Mark: The updated or newly created mark
        """
        result = await db.execute(
            select(Mark).where(
                Mark.student_id == student_id,
                Mark.subject_id == subject_id
            )
        )
        existing_mark = result.scalars().first()

        if existing_mark:
            existing_mark.obtained = str(obtained)
            await db.flush()
            return existing_mark

        mark_id = await CounterService.next_id("marks", db)
        new_mark = Mark(id=mark_id, student_id=student_id, subject_id=subject_id, obtained=str(obtained))
        db.add(new_mark)
        await db.flush()
        return new_mark

    @staticmethod
    async def provision_student(student: Student, db: AsyncSession) -> int:
        """
        Give a student a zero mark for every subject of its class it has no mark for.

        Returns:
            int: Number of marks created
        """
        subjects = (await db.execute(
            select(Subject).where(Subject.class_id == student.class_id).order_by(Subject.id)
        )).scalars().all()
        covered = set((await db.execute(
            select(Mark.subject_id).where(Mark.student_id == student.id)
        )).scalars().all())

        created = 0
        for subject in subjects:
            if subject.id in covered:
                continue
            await CascadeService.upsert_mark(student.id, subject.id, ZERO_MARK, db)
            created += 1

        logger.debug(f"[PROVISIONING] Student ID {student.id}: {created} zero marks created")
        return created

    @staticmethod
    async def provision_subject(subject: Subject, db: AsyncSession) -> int:
        """
        Give every student of the subject's class a zero mark for it, skipping
        students that already have one.

        Returns:
            int: Number of marks created
        """
        students = (await db.execute(
            select(Student).where(Student.class_id == subject.class_id).order_by(Student.id)
        )).scalars().all()
        covered = set((await db.execute(
            select(Mark.student_id).where(Mark.subject_id == subject.id)
        )).scalars().all())

        created = 0
        for student in students:
            if student.id in covered:
                continue
            await CascadeService.upsert_mark(student.id, subject.id, ZERO_MARK, db)
            created += 1

        logger.debug(f"[PROVISIONING] Subject ID {subject.id}: {created} zero marks created")
        return created

    @staticmethod
    async def purge_student(student_id: int, db: AsyncSession) -> bool:
        """Delete a student's marks, then the student. False if there was no such student."""
        marks_result = await db.execute(delete(Mark).where(Mark.student_id == student_id))
        student_result = await db.execute(delete(Student).where(Student.id == student_id))
        logger.debug(
            f"[CASCADE] Student ID {student_id}: {marks_result.rowcount} marks removed"
        )
        return student_result.rowcount > 0

    @staticmethod
    async def purge_subject(subject_id: int, db: AsyncSession) -> bool:
        """Delete a subject's marks, then the subject. False if there was no such subject."""
        marks_result = await db.execute(delete(Mark).where(Mark.subject_id == subject_id))
        subject_result = await db.execute(delete(Subject).where(Subject.id == subject_id))
        logger.debug(
            f"[CASCADE] Subject ID {subject_id}: {marks_result.rowcount} marks removed"
        )
        return subject_result.rowcount > 0

    @staticmethod
    async def purge_class(class_id: int, db: AsyncSession) -> bool:
        student_ids = (await db.execute(
            select(Student.id).where(Student.class_id == class_id)
        )).scalars().all()
        for student_id in student_ids:
            await CascadeService.purge_student(student_id, db)

        subject_ids = (await db.execute(
            select(Subject.id).where(Subject.class_id == class_id)
        )).scalars().all()
        for subject_id in subject_ids:
            await CascadeService.purge_subject(subject_id, db)

        result = await db.execute(delete(SchoolClass).where(SchoolClass.id == class_id))
        logger.debug(
            f"[CASCADE] Class ID {class_id}: {len(student_ids)} students, {len(subject_ids)} subjects removed"
        )
        return result.rowcount > 0

    @staticmethod
    async def purge_session(session_id: int, db: AsyncSession) -> bool:
        class_ids = (await db.execute(
            select(SchoolClass.id).where(SchoolClass.session_id == session_id)
        )).scalars().all()
        for class_id in class_ids:
            await CascadeService.purge_class(class_id, db)

        result = await db.execute(delete(AcademicSession).where(AcademicSession.id == session_id))
        logger.debug(f"[CASCADE] Session ID {session_id}: {len(class_ids)} classes removed")
        return result.rowcount > 0

