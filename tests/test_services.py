import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from school_results.api.schemas.academic_session import CreateSession
from school_results.api.schemas.mark import BulkMarkEntry
from school_results.api.schemas.school_class import CreateClass
from school_results.api.schemas.student import CreateStudent, UpdateStudent
from school_results.api.schemas.subject import CreateSubject, UpdateSubject
from school_results.models import AcademicSession, Admin, Mark, SchoolClass, Student, Subject
from school_results.services.academic_session import SessionService
from school_results.services.auth import AuthService
from school_results.services.cascade import CascadeService
from school_results.services.mark import MarkService
from school_results.services.school_class import ClassService
from school_results.services.setting import SettingService
from school_results.services.student import StudentService
from school_results.services.subject import SubjectService


async def count(db, model, *criteria):
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return await db.scalar(stmt)


async def make_class(db, session_name="2025-26", class_name="10th Grade"):
    session = await SessionService.create_session(CreateSession(name=session_name, isActive=True), db)
    return await ClassService.create_class(CreateClass(name=class_name, sessionId=session.id), db)


async def add_student(db, class_id, roll_no, name):
    return await StudentService.create_student(CreateStudent(rollNo=roll_no, name=name, classId=class_id), db)


async def add_subject(db, class_id, name, max_marks=80, date=None):
    return await SubjectService.create_subject(
        CreateSubject(name=name, maxMarks=max_marks, date=date, classId=class_id), db
    )


class TestProvisioning:
    async def test_new_student_gets_zero_mark_per_class_subject(self, db):
        school_class = await make_class(db)
        other_class = await ClassService.create_class(CreateClass(name="9th Grade", sessionId=school_class.session_id), db)
        await add_subject(db, school_class.id, "Unit Test 1")
        await add_subject(db, school_class.id, "Unit Test 2")
        await add_subject(db, other_class.id, "Elsewhere")

        student = await add_student(db, school_class.id, 1, "Aakash Yadav")

        marks = (await db.execute(select(Mark).where(Mark.student_id == student.id))).scalars().all()
        assert len(marks) == 2
        assert {m.obtained for m in marks} == {"0"}

    async def test_new_subject_provisions_same_class_students_only(self, db):
        school_class = await make_class(db)
        other_class = await ClassService.create_class(CreateClass(name="9th Grade", sessionId=school_class.session_id), db)
        for roll_no in range(1, 4):
            await add_student(db, school_class.id, roll_no, f"Student {roll_no}")
        await add_student(db, other_class.id, 1, "Outsider")

        subject = await add_subject(db, school_class.id, "Half Yearly")

        assert await count(db, Mark, Mark.subject_id == subject.id) == 3

    async def test_provisioning_twice_creates_nothing_new(self, db):
        school_class = await make_class(db)
        await add_student(db, school_class.id, 1, "A")
        await add_student(db, school_class.id, 2, "B")
        subject = await add_subject(db, school_class.id, "Unit Test 1")

        assert await CascadeService.provision_subject(subject, db) == 0
        assert await count(db, Mark) == 2

    async def test_unknown_class_is_rejected(self, db):
        with pytest.raises(HTTPException) as exc_info:
            await add_student(db, 999, 1, "Nobody")
        assert exc_info.value.status_code == 400

        with pytest.raises(HTTPException) as exc_info:
            await add_subject(db, 999, "Nothing")
        assert exc_info.value.status_code == 400


class TestMarks:
    async def test_upsert_keeps_one_mark_per_pair(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        subject = await add_subject(db, school_class.id, "Unit Test 1")

        first = await MarkService.update_mark(student.id, subject.id, "54", db)
        second = await MarkService.update_mark(student.id, subject.id, "61", db)

        assert first.id == second.id
        assert await count(db, Mark, Mark.student_id == student.id, Mark.subject_id == subject.id) == 1
        assert second.obtained == "61"

    async def test_update_mark_requires_existing_student_and_subject(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")

        with pytest.raises(HTTPException) as exc_info:
            await MarkService.update_mark(student.id, 404, "10", db)
        assert exc_info.value.status_code == 404

        with pytest.raises(HTTPException) as exc_info:
            await MarkService.update_mark(404, 1, "10", db)
        assert exc_info.value.status_code == 404

    async def test_bulk_update_replaces_the_mark_set(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        kept = await add_subject(db, school_class.id, "Unit Test 1", date="2025-08-10")
        dropped = await add_subject(db, school_class.id, "Unit Test 2", date="2025-09-10")
        kept_mark = (await db.execute(
            select(Mark).where(Mark.student_id == student.id, Mark.subject_id == kept.id)
        )).scalars().one()

        result = await MarkService.bulk_update(student.id, [
            BulkMarkEntry(id=kept_mark.id, subject="Unit Test 1 (revised)", date="2025-08-11", obtained=40, max=50),
            BulkMarkEntry(id="new-1", subject="Half Yearly", date="2025-10-01", obtained="72", max=100),
        ], db)

        assert result == {"updated_count": 2, "deleted_count": 1}

        loaded = await StudentService.get_student(student.id, db)
        by_subject = {m.subject.name: m for m in loaded.marks}
        assert set(by_subject) == {"Unit Test 1 (revised)", "Half Yearly"}
        assert by_subject["Unit Test 1 (revised)"].id == kept_mark.id
        assert by_subject["Unit Test 1 (revised)"].obtained == "40"
        assert by_subject["Unit Test 1 (revised)"].subject.maxMarks == 50
        assert by_subject["Half Yearly"].obtained == "72"

        # The subject itself stays; only this student's mark for it is gone.
        assert await SubjectService.get_subject(dropped.id, db) is not None
        assert await count(db, Mark, Mark.student_id == student.id, Mark.subject_id == dropped.id) == 0

    async def test_bulk_update_matches_subject_by_name(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        classmate = await add_student(db, school_class.id, 2, "B")
        subject = await add_subject(db, school_class.id, "Unit Test 1")

        await MarkService.bulk_update(student.id, [
            BulkMarkEntry(subject="Unit Test 1", date="2025-08-10", obtained="33", max=80),
            BulkMarkEntry(subject="Pre Board", date="2026-01-05", obtained="12", max=20),
        ], db)

        assert await count(db, Subject, Subject.class_id == school_class.id) == 2
        assert await count(db, Mark, Mark.student_id == student.id, Mark.subject_id == subject.id) == 1

        # A subject created by bulk entry is provisioned for the rest of the class.
        pre_board = await SubjectService.find_by_name(school_class.id, "Pre Board", db)
        classmate_mark = (await db.execute(
            select(Mark).where(Mark.student_id == classmate.id, Mark.subject_id == pre_board.id)
        )).scalars().one()
        assert classmate_mark.obtained == "0"

    async def test_bulk_update_unknown_student(self, db):
        with pytest.raises(HTTPException) as exc_info:
            await MarkService.bulk_update(42, [], db)
        assert exc_info.value.status_code == 404

    async def test_subject_update_does_not_rescale_marks(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        subject = await add_subject(db, school_class.id, "Unit Test 1", max_marks=80)
        await MarkService.update_mark(student.id, subject.id, "40", db)

        updated = await SubjectService.update_subject(subject.id, UpdateSubject(maxMarks=100), db)

        assert updated.max_marks == 100
        mark = (await db.execute(select(Mark).where(Mark.subject_id == subject.id))).scalars().one()
        assert mark.obtained == "40"


class TestCascades:
    async def test_delete_student_removes_its_marks(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        other = await add_student(db, school_class.id, 2, "B")
        await add_subject(db, school_class.id, "Unit Test 1")

        assert await StudentService.delete_student(student.id, db) is True

        assert await count(db, Mark, Mark.student_id == student.id) == 0
        assert await count(db, Mark, Mark.student_id == other.id) == 1

    async def test_delete_subject_removes_its_marks(self, db):
        school_class = await make_class(db)
        await add_student(db, school_class.id, 1, "A")
        subject = await add_subject(db, school_class.id, "Unit Test 1")

        assert await SubjectService.delete_subject(subject.id, db) is True
        assert await count(db, Mark) == 0

    async def test_delete_class_removes_students_subjects_and_marks(self, db):
        school_class = await make_class(db)
        survivor_class = await ClassService.create_class(
            CreateClass(name="9th Grade", sessionId=school_class.session_id), db
        )
        await add_student(db, school_class.id, 1, "A")
        await add_subject(db, school_class.id, "Unit Test 1")
        await add_student(db, survivor_class.id, 1, "Z")
        await add_subject(db, survivor_class.id, "Unit Test 1")

        assert await ClassService.delete_class(school_class.id, db) is True

        assert await count(db, Student, Student.class_id == school_class.id) == 0
        assert await count(db, Subject, Subject.class_id == school_class.id) == 0
        assert await count(db, Student) == 1
        assert await count(db, Mark) == 1

    async def test_delete_session_removes_everything_below_it(self, db):
        school_class = await make_class(db)
        await add_student(db, school_class.id, 1, "A")
        await add_subject(db, school_class.id, "Unit Test 1")
        kept_class = await make_class(db, session_name="2026-27")

        assert await SessionService.delete_session(school_class.session_id, db) is True

        assert await count(db, AcademicSession) == 1
        assert await count(db, SchoolClass) == 1
        assert await ClassService.get_class(kept_class.id, db) is not None
        assert await count(db, Student) == 0
        assert await count(db, Subject) == 0
        assert await count(db, Mark) == 0

    async def test_deleting_absent_ids_is_a_no_op(self, db):
        assert await StudentService.delete_student(77, db) is False
        assert await SubjectService.delete_subject(77, db) is False
        assert await ClassService.delete_class(77, db) is False
        assert await SessionService.delete_session(77, db) is False


class TestRepository:
    async def test_duplicate_session_name(self, db):
        await SessionService.create_session(CreateSession(name="2025-26"), db)
        with pytest.raises(HTTPException) as exc_info:
            await SessionService.create_session(CreateSession(name="2025-26"), db)
        assert exc_info.value.status_code == 400

    async def test_class_requires_session(self, db):
        with pytest.raises(HTTPException) as exc_info:
            await ClassService.create_class(CreateClass(name="10th Grade", sessionId=5), db)
        assert exc_info.value.status_code == 400

    async def test_get_classes_filters_by_session(self, db):
        first = await make_class(db)
        await make_class(db, session_name="2026-27")

        classes = await ClassService.get_classes(db, session_id=first.session_id)
        assert [c.id for c in classes] == [first.id]
        assert len(await ClassService.get_classes(db)) == 2

    async def test_get_student_returns_none_when_absent(self, db):
        assert await StudentService.get_student(1, db) is None

    async def test_update_student(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")

        updated = await StudentService.update_student(student.id, UpdateStudent(name="Aakash"), db)
        assert updated.name == "Aakash"
        assert updated.roll_no == 1

        with pytest.raises(HTTPException) as exc_info:
            await StudentService.update_student(999, UpdateStudent(rollNo=2), db)
        assert exc_info.value.status_code == 404

    async def test_dangling_mark_reports_unknown_subject(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        await CascadeService.upsert_mark(student.id, 555, "12", db)
        await db.commit()

        loaded = await StudentService.get_student(student.id, db)
        assert loaded.marks[0].subject.name == "Unknown"
        assert loaded.marks[0].subject.maxMarks == 100

    async def test_settings_upsert(self, db):
        assert await SettingService.get_setting("schoolName", db) is None

        await SettingService.set_setting("schoolName", "IIC", db)
        await SettingService.set_setting("schoolName", "IIC Academy", db)

        assert await SettingService.get_setting("schoolName", db) == "IIC Academy"

    async def test_get_session(self, db):
        session = await SessionService.create_session(CreateSession(name="2025-26", isActive=True), db)

        loaded = await SessionService.get_session(session.id, db)
        assert loaded.name == "2025-26"
        assert loaded.is_active is True
        assert await SessionService.get_session(session.id + 1, db) is None

    async def test_delete_mark(self, db):
        school_class = await make_class(db)
        student = await add_student(db, school_class.id, 1, "A")
        subject = await add_subject(db, school_class.id, "Unit Test 1")
        mark = await MarkService.update_mark(student.id, subject.id, "9", db)

        assert await MarkService.delete_mark(mark.id, db) is True
        assert await MarkService.delete_mark(mark.id, db) is False
        assert await count(db, Mark) == 0


async def _nothing_found(*args):
    return None


class TestConcurrentDuplicates:
    """The unique constraint still holds when the duplicate check is passed."""

    async def test_duplicate_session_name_from_the_database(self, db, monkeypatch):
        await SessionService.create_session(CreateSession(name="2025-26"), db)
        monkeypatch.setattr(SessionService, "get_session_by_name", _nothing_found)

        with pytest.raises(HTTPException) as exc_info:
            await SessionService.create_session(CreateSession(name="2025-26"), db)

        assert exc_info.value.status_code == 400
        assert await count(db, AcademicSession) == 1

    async def test_duplicate_admin_email_from_the_database(self, db, monkeypatch):
        await AuthService.register_admin("Office", "office@school.test", "secret1", db)
        monkeypatch.setattr(AuthService, "get_admin_by_email", _nothing_found)

        with pytest.raises(ValueError):
            await AuthService.register_admin("Office 2", "office@school.test", "secret2", db)

        assert await count(db, Admin) == 1
