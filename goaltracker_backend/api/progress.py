from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Literal
import logging
import uuid

from api import schemas
from auth.dependencies import get_current_user
from database.database import get_db
from database.models import User
from services import goal_progress

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/goals/{goal_id}/progress")
def list_progress(
    goal_id: uuid.UUID,
    sort: Literal["created_at"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = goal_progress.list_goal_progress(
        db, current_user.id, str(goal_id), order=order, page=page, page_size=page_size
    )
    return {"data": result}

@router.post("/goals/{goal_id}/progress", status_code=status.HTTP_201_CREATED)
def create_progress(
    goal_id: uuid.UUID,
    payload: schemas.ProgressCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Log a progress entry on an active goal and return the goal's new totals."""
    result = goal_progress.create_goal_progress_entry(
        db, current_user.id, str(goal_id), value=payload.value, notes=payload.notes
    )
    return {"data": result}

@router.patch("/progress/{progress_id}")
def update_progress(
    progress_id: uuid.UUID,
    payload: schemas.ProgressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entry = goal_progress.update_progress_entry(
        db, current_user.id, str(progress_id), payload.model_dump(exclude_unset=True)
    )
    return {"data": {"progress": entry}}

@router.delete("/progress/{progress_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_progress(
    progress_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal_progress.delete_progress_entry(db, current_user.id, str(progress_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
