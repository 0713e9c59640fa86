from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.academic_session import CreateSession, SessionResponse
from school_results.core.database import get_db
from school_results.core.logger import logger
from school_results.services.academic_session import SessionService
from school_results.utils.roles import open_write_guard

router = APIRouter(prefix="/sessions", tags=["Session"])


@router.get("", response_model=List[SessionResponse], status_code=status.HTTP_200_OK)
async def get_sessions(db: AsyncSession = Depends(get_db)):
    sessions = await SessionService.get_sessions(db)
    return [SessionResponse.from_model(s) for s in sessions]


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
        session_data: CreateSession,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    """
    Create an academic session.

    Raises:
        HTTPException: 400 - Session name already used
        HTTPException: 500 - Internal server error
    """
    try:
        session = await SessionService.create_session(session_data, db)
        return SessionResponse.from_model(session)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SESSION CREATE] Failed to create session: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create session"
        ) from e


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
        session_id: int = Path(..., description="Session to delete with all of its classes"),
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(open_write_guard),
):
    """
    Delete a session, its classes and everything in them.

    Returns:
        Response: 204 No Content, also when the session did not exist

    Raises:
        HTTPException: 500 - Internal server error
    """
    try:
        await SessionService.delete_session(session_id, db)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[SESSION DELETE] Failed to delete session ID {session_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete session"
        ) from e
