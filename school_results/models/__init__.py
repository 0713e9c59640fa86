from .academic_session import AcademicSession
from .admin import Admin
from .counter import Counter
from .mark import Mark
from .school_class import SchoolClass
from .setting import Setting
from .student import Student
from .subject import Subject

__all__ = [
    "AcademicSession",
    "Admin",
    "Counter",
    "Mark",
    "SchoolClass",
    "Setting",
    "Student",
    "Subject",
]
