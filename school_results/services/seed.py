from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.core.config import Settings
from school_results.core.logger import logger
from school_results.models import SchoolClass, Student
from school_results.api.schemas.academic_session import CreateSession
from school_results.api.schemas.school_class import CreateClass
from school_results.api.schemas.student import CreateStudent
from school_results.api.schemas.subject import CreateSubject
from school_results.services.academic_session import SessionService
from school_results.services.auth import AuthService
from school_results.services.mark import MarkService
from school_results.services.school_class import ClassService
from school_results.services.student import StudentService
from school_results.services.subject import SubjectService

DEMO_SESSION = "2025-26"
DEMO_CLASS = "10th Grade"
DEMO_SUBJECT = CreateSubject(name="IIC Annual Test 2026", date="2026-01-18", maxMarks=80, classId=0)

# (roll number, name, obtained out of 80)
DEMO_ROSTER = [
    (1, "Aakash Yadav", 54), (2, "Aryan Kumar", 51), (3, "Rahul Kumar", 70),
    (4, "Aman Kumar", 46), (5, "Prince Kumar", 0), (6, "Faiz Raza", 58),
    (7, "Meraj Alam", 0), (8, "Afroz", 0), (9, "Ismail", 0),
    (10, "Khusboo", 62), (11, "Salma Parveen", 0), (12, "Aaisha Khatoon", 49),
    (13, "Sahima", 0), (14, "Aashiya", 45), (15, "Shanzida", 36),
    (16, "Maimuna", 68), (17, "Soha", 56), (18, "Naziya (U)", 58),
    (19, "Jashmin", 56), (20, "Usha Kumari", 38), (21, "Gungun", 54),
    (22, "Naziya (D)", 45), (23, "Shahina Khatoon", 60), (24, "Sonam Kumari", 40),
    (25, "Farzana", 65), (26, "Muskan Khatoon", 53), (27, "Sabina", 60),
    (28, "Farhin", 0), (29, "Sanaa Parveen", 66), (30, "Rani Parveen", 56),
    (31, "Gulafsa", 68), (32, "Sajiya Khatoon", 54), (33, "Amarjit Kumar", 47),
    (34, "Prince Yadav", 21), (35, "Tabrez", 41), (36, "Faiz", 0),
    (37, "Muskan II", 0), (38, "Tahir", 40), (39, "Anshu Kumari", 0),
]


class SeedService:
    @staticmethod
    async def seed_admin(app_settings: Settings, db: AsyncSession) -> None:
        if not app_settings.SEED_ADMIN_EMAIL or not app_settings.SEED_ADMIN_PASSWORD:
            logger.warning("[SEED] SEED_ADMIN_EMAIL / SEED_ADMIN_PASSWORD not set, no admin seeded")
            return

        if await AuthService.get_admin_by_email(app_settings.SEED_ADMIN_EMAIL, db):
            return

        await AuthService.register_admin(
            name=app_settings.SEED_ADMIN_NAME,
            email=app_settings.SEED_ADMIN_EMAIL,
            password=app_settings.SEED_ADMIN_PASSWORD,
            db=db,
            is_super_admin=True
        )
        logger.info(f"[SEED] Super admin {app_settings.SEED_ADMIN_EMAIL} created")

    @staticmethod
    async def seed_demo_class(db: AsyncSession) -> Optional[SchoolClass]:
        session = await SessionService.get_session_by_name(DEMO_SESSION, db)
        if not session:
            session = await SessionService.create_session(CreateSession(name=DEMO_SESSION, isActive=True), db)
            logger.info(f"[SEED] Session {DEMO_SESSION} created")

        school_class = (await db.execute(
            select(SchoolClass).where(SchoolClass.session_id == session.id, SchoolClass.name == DEMO_CLASS)
        )).scalars().first()
        if not school_class:
            school_class = await ClassService.create_class(
                CreateClass(name=DEMO_CLASS, sessionId=session.id), db
            )
            logger.info(f"[SEED] Class {DEMO_CLASS} created")

        student_count = await db.scalar(
            select(func.count(Student.id)).where(Student.class_id == school_class.id)
        )
        if student_count:
            return school_class

        subject = await SubjectService.create_subject(
            DEMO_SUBJECT.model_copy(update={"classId": school_class.id}), db
        )
        for roll_no, name, obtained in DEMO_ROSTER:
            student = await StudentService.create_student(
                CreateStudent(rollNo=roll_no, name=name, classId=school_class.id), db
            )
            await MarkService.update_mark(student.id, subject.id, str(obtained), db)

        logger.info(f"[SEED] {len(DEMO_ROSTER)} demo students created in {DEMO_CLASS}")
        return school_class

    @staticmethod
    async def seed(app_settings: Settings, db: AsyncSession) -> None:
        """Idempotent: existing admin, session, class or roster are left alone."""
        await SeedService.seed_admin(app_settings, db)
        if app_settings.SEED_DEMO_DATA:
            await SeedService.seed_demo_class(db)
