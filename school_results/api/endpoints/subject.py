from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.subject import CreateSubject, SubjectResponse, UpdateSubject
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services.subject import SubjectService
from school_results.utils.roles import get_current_admin, open_write_guard

router = APIRouter(prefix="/subjects", tags=["Subject"])


@router.get("", response_model=List[SubjectResponse], status_code=status.HTTP_200_OK)
async def get_subjects(
        class_id: Optional[int] = Query(None, alias="classId"),
        db: AsyncSession = Depends(get_db),
):
    subjects = await SubjectService.get_subjects(db, class_id=class_id)
    return [SubjectResponse.from_model(s) for s in subjects]


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
        subject_data: CreateSubject,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    """
    Create a subject (test); every student of the class receives a zero mark for it.

    Raises:
        HTTPException: 400 - Class not found
        HTTPException: 500 - Internal server error
    """
    try:
        subject = await SubjectService.create_subject(subject_data, db)
        return SubjectResponse.from_model(subject)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SUBJECT CREATE] Failed to create subject: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create subject"
        ) from e


@router.patch("/{subject_id}", response_model=SubjectResponse, status_code=status.HTTP_200_OK)
async def update_subject(
        subject_data: UpdateSubject,
        subject_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    try:
        subject = await SubjectService.update_subject(subject_id, subject_data, db)
        return SubjectResponse.from_model(subject)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SUBJECT UPDATE] Failed to update subject ID {subject_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update subject"
        ) from e


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(
        subject_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    try:
        await SubjectService.delete_subject(subject_id, db)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SUBJECT DELETE] Failed to delete subject ID {subject_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete subject"
        ) from e
