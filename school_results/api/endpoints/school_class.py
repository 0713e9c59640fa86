from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.report import LeaderboardResponse
from school_results.api.schemas.school_class import ClassResponse, CreateClass
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services import aggregation
from school_results.services.school_class import ClassService
from school_results.services.student import StudentService
from school_results.utils.roles import open_write_guard

router = APIRouter(prefix="/classes", tags=["Class"])


@router.get("", response_model=List[ClassResponse], status_code=status.HTTP_200_OK)
async def get_classes(
        session_id: Optional[int] = Query(None, alias="sessionId"),
        db: AsyncSession = Depends(get_db),
):
    classes = await ClassService.get_classes(db, session_id=session_id)
    return [ClassResponse.from_model(c) for c in classes]


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
        class_data: CreateClass,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    """
    Create a class in an existing session.

    Raises:
        HTTPException: 400 - Session not found
        HTTPException: 500 - Internal server error
    """
    try:
        school_class = await ClassService.create_class(class_data, db)
        return ClassResponse.from_model(school_class)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[CLASS CREATE] Failed to create class: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create class"
        ) from e


@router.get("/{class_id}/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
        class_id: int = Path(...),
        db: AsyncSession = Depends(get_db),
):
    """
    Ranked standings of a class with its subject columns and average percentage.

    Raises:
        HTTPException: 404 - Class not found
    """
    school_class = await ClassService.get_class(class_id, db)
    if not school_class:
        logger.warning(f"[LEADERBOARD] Class not found: ID {class_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found"
        )

    students = await StudentService.get_students(db, class_id=class_id)
    standings = aggregation.rank_students(students)

    return LeaderboardResponse(
        classId=class_id,
        columns=aggregation.subject_columns(students),
        averagePercentage=aggregation.class_average(standings),
        standings=standings,
    )


@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
        class_id: int = Path(..., description="Class to delete with its students and subjects"),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    try:
        await ClassService.delete_class(class_id, db)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[CLASS DELETE] Failed to delete class ID {class_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete class"
        ) from e
