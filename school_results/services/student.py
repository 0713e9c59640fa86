from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import Mark, SchoolClass, Student, Subject
from school_results.core.logger import logger
from school_results.api.schemas.student import CreateStudent, UpdateStudent, StudentWithMarks, MarkWithSubject
from school_results.api.schemas.subject import SubjectResponse, UNKNOWN_SUBJECT
from school_results.services.cascade import CascadeService
from school_results.services.counter import CounterService


def _join_marks(
        students: List[Student],
        marks: List[Mark],
        subjects: Dict[int, SubjectResponse]
) -> List[StudentWithMarks]:
    marks_by_student: Dict[int, List[MarkWithSubject]] = {}
    for mark in marks:
        marks_by_student.setdefault(mark.student_id, []).append(
            MarkWithSubject(
                id=mark.id,
                studentId=mark.student_id,
                subjectId=mark.subject_id,
                obtained=mark.obtained,
                subject=subjects.get(mark.subject_id, UNKNOWN_SUBJECT),
            )
        )

    return [
        StudentWithMarks(
            id=student.id,
            rollNo=student.roll_no,
            name=student.name,
            classId=student.class_id,
            isPaid=student.is_paid,
            marks=marks_by_student.get(student.id, []),
        )
        for student in students
    ]


class StudentService:
    @staticmethod
    async def get_students(db: AsyncSession, class_id: Optional[int] = None) -> List[StudentWithMarks]:
        """
        List students, each joined with its marks and every mark with its subject.

        A mark whose subject row is gone is reported against a placeholder
        "Unknown" subject instead of failing the whole listing.

        Args:
            db: Async SQLAlchemy session
            class_id: Only students of this class, when given

        Returns:
            List[StudentWithMarks]: Students in id order, marks in id order

        Raises:
            HTTPException: 500 - Database error
        """
        try:
            stmt = select(Student).order_by(Student.id)
            if class_id is not None:
                stmt = stmt.where(Student.class_id == class_id)
            students = (await db.execute(stmt)).scalars().all()

            marks_stmt = select(Mark).order_by(Mark.id)
            if class_id is not None:
                marks_stmt = marks_stmt.where(Mark.student_id.in_([s.id for s in students]))
            marks = (await db.execute(marks_stmt)).scalars().all()

            subjects = (await db.execute(select(Subject))).scalars().all()
            subjects_by_id = {s.id: SubjectResponse.from_model(s) for s in subjects}

            logger.info(f"[STUDENT LIST] {len(students)} students loaded (class: {class_id})")
            return _join_marks(list(students), list(marks), subjects_by_id)

        except SQLAlchemyError as e:
            logger.error(f"[STUDENT LIST] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to load students"
            ) from e

    @staticmethod
    async def get_student(student_id: int, db: AsyncSession) -> Optional[StudentWithMarks]:
        """
        One student joined with its marks, or None when there is no such student.

        Raises:
            HTTPException: 500 - Database error
        """
        try:
            result = await db.execute(select(Student).where(Student.id == student_id))
            student = result.scalars().first()

            if not student:
                logger.warning(f"[STUDENT GET] Student not found: ID {student_id}")
                return None

            marks = (await db.execute(
                select(Mark).where(Mark.student_id == student_id).order_by(Mark.id)
            )).scalars().all()
            subject_ids = {m.subject_id for m in marks}
            subjects = (await db.execute(
                select(Subject).where(Subject.id.in_(subject_ids))
            )).scalars().all() if subject_ids else []

            return _join_marks(
                [student],
                list(marks),
                {s.id: SubjectResponse.from_model(s) for s in subjects}
            )[0]

        except SQLAlchemyError as e:
            logger.error(f"[STUDENT GET] Database error for ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to load student"
            ) from e

    @staticmethod
    async def create_student(student_data: CreateStudent, db: AsyncSession) -> Student:
        """
        Create a student and give it a zero mark for every subject of its class.

        Args:
            student_data: Roll number, name and class id
            db: Async SQLAlchemy session

        Returns:
            Student: The created student

        Raises:
            HTTPException: 400 - Class not found
            HTTPException: 500 - Database error
        """
        try:
            class_result = await db.execute(select(SchoolClass).where(SchoolClass.id == student_data.classId))
            if not class_result.scalars().first():
                logger.warning(f"[STUDENT CREATE] Class not found: ID {student_data.classId}")
                raise HTTPException(
                    status_code=400,
                    detail="Class not found"
                )

            student_id = await CounterService.next_id("students", db)
            new_student = Student(
                id=student_id,
                roll_no=student_data.rollNo,
                name=student_data.name,
                class_id=student_data.classId,
                is_paid=student_data.isPaid
            )
            db.add(new_student)
            await db.flush()

            provisioned = await CascadeService.provision_student(new_student, db)
            await db.commit()

            logger.info(
                f"[STUDENT CREATE] Created student ID {new_student.id}, roll {new_student.roll_no}, "
                f"{provisioned} zero marks provisioned"
            )
            return new_student

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[STUDENT CREATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to create student"
            ) from e

    @staticmethod
    async def update_student(student_id: int, student_data: UpdateStudent, db: AsyncSession) -> Student:
        """
        Apply a partial name/roll number update.

        Raises:
            HTTPException: 404 - Student not found
            HTTPException: 500 - Database error
        """
        try:
            result = await db.execute(select(Student).where(Student.id == student_id))
            student = result.scalars().first()

            if not student:
                logger.warning(f"[STUDENT UPDATE] Student not found: ID {student_id}")
                raise HTTPException(
                    status_code=404,
                    detail="Student not found"
                )

            update_data = student_data.model_dump(exclude_unset=True, exclude_none=True)
            if "rollNo" in update_data:
                student.roll_no = update_data["rollNo"]
            if "name" in update_data:
                student.name = update_data["name"]

            await db.commit()

            logger.info(f"[STUDENT UPDATE] Student updated: ID {student_id}")
            return student

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[STUDENT UPDATE] Database error for ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to update student"
            ) from e

    @staticmethod
    async def delete_student(student_id: int, db: AsyncSession) -> bool:
        """
        Delete a student and its marks in one transaction.

        Returns:
            bool: False when there was no such student
        """
        try:
            deleted = await CascadeService.purge_student(student_id, db)
            await db.commit()

            if deleted:
                logger.info(f"[STUDENT DELETE] Student deleted: ID {student_id}")
            else:
                logger.warning(f"[STUDENT DELETE] Student not found: ID {student_id}")
            return deleted

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[STUDENT DELETE] Database error for ID {student_id}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to delete student"
            ) from e
