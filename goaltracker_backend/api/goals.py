from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Literal, Optional
import logging
import uuid

from api import schemas
from auth.dependencies import get_current_user
from database.database import get_db
from database.models import GoalStatus, User
from services import goal_history, goal_lifecycle, goal_service
from services.exceptions import BadRequestError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/goals")
def list_goals(
    goal_status: Optional[GoalStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None, min_length=1, max_length=200),
    parent_goal_id: Optional[uuid.UUID] = Query(None, alias="parentGoalId"),
    root: bool = Query(False),
    sort: Literal["created_at", "deadline"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List the current user's goals with computed progress fields.

    root=true keeps only chain roots and cannot be combined with parentGoalId.
    """
    if root and parent_goal_id:
        raise BadRequestError("invalid_query_params")
    if q is not None:
        q = q.strip()
        if not q:
            raise BadRequestError("invalid_query_params")

    result = goal_service.list_goals(
        db,
        current_user.id,
        status=goal_status.value if goal_status else None,
        q=q,
        parent_goal_id=str(parent_goal_id) if parent_goal_id else None,
        root=root,
        sort=sort,
        order=order,
        page=page,
        page_size=page_size,
    )
    return {"data": result}

@router.post("/goals", status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: schemas.GoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_service.create_goal(
        db,
        current_user.id,
        name=payload.name,
        target_value=payload.target_value,
        deadline=payload.deadline,
        parent_goal_id=str(payload.parent_goal_id) if payload.parent_goal_id else None,
    )
    logger.info(f"User {current_user.id} created goal {goal['id']}")
    return {"data": {"goal": goal}}

# Must be registered before the /goals/{goal_id} routes
@router.post("/goals/sync-statuses")
async def sync_goal_statuses(
    payload: Optional[schemas.SyncStatusesRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Fail active goals whose deadline day has passed without reaching the target."""
    goal_ids = None
    if payload and payload.goal_ids:
        goal_ids = [str(goal_id) for goal_id in payload.goal_ids]
    result = await goal_lifecycle.sync_statuses(db, current_user.id, goal_ids)
    return {"data": result}

@router.get("/goals/{goal_id}")
def get_goal(
    goal_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"data": {"goal": goal_service.get_goal_details(db, current_user.id, str(goal_id))}}

@router.patch("/goals/{goal_id}")
def update_goal(
    goal_id: uuid.UUID,
    payload: schemas.GoalUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    goal = goal_service.update_goal(db, current_user.id, str(goal_id), changes)
    return {"data": {"goal": goal}}

@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal_service.delete_goal(db, current_user.id, str(goal_id))
    logger.info(f"User {current_user.id} deleted goal {goal_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/goals/{goal_id}/abandon")
def abandon_goal(
    goal_id: uuid.UUID,
    payload: schemas.AbandonGoalRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_lifecycle.abandon_goal(db, current_user.id, str(goal_id), payload.reason)
    return {"data": {"goal": goal}}

@router.patch("/goals/{goal_id}/complete")
async def complete_goal(
    goal_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = await goal_lifecycle.complete_goal(db, current_user.id, str(goal_id))
    return {"data": {"goal": goal}}

@router.post("/goals/{goal_id}/retry", status_code=status.HTTP_201_CREATED)
def retry_goal(
    goal_id: uuid.UUID,
    payload: schemas.RetryGoalRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_lifecycle.retry_goal(
        db,
        current_user.id,
        str(goal_id),
        target_value=payload.target_value,
        deadline=payload.deadline,
        name=payload.name,
    )
    return {"data": {"goal": goal}}

@router.post("/goals/{goal_id}/continue", status_code=status.HTTP_201_CREATED)
def continue_goal(
    goal_id: uuid.UUID,
    payload: schemas.ContinueGoalRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = goal_lifecycle.continue_goal(
        db,
        current_user.id,
        str(goal_id),
        name=payload.name,
        target_value=payload.target_value,
        deadline=payload.deadline,
    )
    return {"data": {"goal": goal}}

@router.get("/goals/{goal_id}/history")
def get_goal_history(
    goal_id: uuid.UUID,
    sort: Literal["created_at"] = Query("created_at"),
    order: Literal["asc", "desc"] = Query("desc"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Every iteration of the chain the goal belongs to."""
    return {"data": goal_history.get_goal_history(db, current_user.id, str(goal_id), order=order)}
