from typing import Union

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.mark import BulkMarkResult, MarkBody, MarkResponse, MarkUpdate
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services.mark import MarkService
from school_results.utils.roles import get_current_admin

router = APIRouter(prefix="/marks", tags=["Mark"])


@router.post("", response_model=Union[MarkResponse, BulkMarkResult], status_code=status.HTTP_200_OK)
async def update_marks(
        marks_data: MarkBody = Body(...),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    """
    Enter marks.

    Two body shapes are accepted:
        {studentId, subjectId, obtained}: upsert one mark, returns the mark
        {studentId, marks: [{id?, subject, date, obtained, max}, ...]}: the list
            is the student's complete mark set; marks left out are deleted

    Raises:
        HTTPException: 401 - Not logged in
        HTTPException: 404 - Student or subject not found
        HTTPException: 500 - Internal server error
    """
    body = marks_data.root
    try:
        if isinstance(body, MarkUpdate):
            mark = await MarkService.update_mark(body.studentId, body.subjectId, body.obtained, db)
            return MarkResponse.from_model(mark)

        result = await MarkService.bulk_update(body.studentId, body.marks, db)
        return BulkMarkResult(message="Marks updated", **result)

    except HTTPException:
        raise
    except ValueError as e:
        logger.warning(f"[MARKS] Invalid data: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        ) from e
    except Exception as e:
        logger.error(f"[MARKS] Failed to update marks: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update marks"
        ) from e
