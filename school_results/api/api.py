from fastapi import APIRouter
from school_results.api.endpoints import academic_session, auth, mark, school_class, setting, student, subject

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(academic_session.router)
api_router.include_router(school_class.router)
api_router.include_router(student.router)
api_router.include_router(subject.router)
api_router.include_router(mark.router)
api_router.include_router(setting.router)
