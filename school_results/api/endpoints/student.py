from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.report import MarksheetResponse
from school_results.api.schemas.student import CreateStudent, StudentResponse, StudentWithMarks, UpdateStudent
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services import aggregation
from school_results.services.student import StudentService
from school_results.utils.roles import get_current_admin, open_write_guard

router = APIRouter(prefix="/students", tags=["Student"])


@router.get("", response_model=List[StudentWithMarks], status_code=status.HTTP_200_OK)
async def get_students(
        class_id: Optional[int] = Query(None, alias="classId"),
        db: AsyncSession = Depends(get_db),
):
    """
    All students (or those of one class) with their marks and subjects.

    Raises:
        HTTPException: 500 - Internal server error
    """
    return await StudentService.get_students(db, class_id=class_id)


@router.get("/{student_id}", response_model=StudentWithMarks, status_code=status.HTTP_200_OK)
async def get_student(
        student_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    student = await StudentService.get_student(student_id, db)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )
    return student


@router.get("/{student_id}/marksheet", response_model=MarksheetResponse)
async def get_marksheet(
        student_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    """
    Per-subject percentages with pass/fail, ordered by test date, and overall totals.

    Raises:
        HTTPException: 404 - Student not found
    """
    student = await StudentService.get_student(student_id, db)
    if not student:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found"
        )
    return aggregation.build_marksheet(student)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
        student_data: CreateStudent,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    """
    Create a student; it receives a zero mark for every subject of its class.

    Raises:
        HTTPException: 400 - Class not found
        HTTPException: 401 - Not logged in
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.create_student(student_data, db)
        logger.info(f"[STUDENT CREATE] Created by {current_admin.email}: ID {student.id}")
        return StudentResponse.from_model(student)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[STUDENT CREATE] Failed to create student: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create student"
        ) from e


@router.patch("/{student_id}", response_model=StudentResponse, status_code=status.HTTP_200_OK)
async def update_student(
        student_data: UpdateStudent,
        student_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    """
    Update a student's name and/or roll number.

    Raises:
        HTTPException: 404 - Student not found
        HTTPException: 500 - Internal server error
    """
    try:
        student = await StudentService.update_student(student_id, student_data, db)
        return StudentResponse.from_model(student)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[STUDENT UPDATE] Failed to update student ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update student"
        ) from e


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
        student_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    try:
        await StudentService.delete_student(student_id, db)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[STUDENT DELETE] Failed to delete student ID {student_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete student"
        ) from e
