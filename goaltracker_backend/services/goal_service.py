"""
Goal CRUD: listing with computed fields, details, creation, edits and deletion.

Lifecycle transitions (abandon, complete, retry, continue, deadline sync) live
in services.goal_lifecycle.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from database import crud
from database.models import Goal, GoalStatus
from services.exceptions import ConflictError, NotFoundError
from services.goal_history import validate_iteration_chain_for_new_goal
from services.metrics import compute_goal_metrics, format_decimal, is_goal_locked

logger = logging.getLogger(__name__)

LOCKED_FIELDS = ("name", "target_value", "deadline")


def serialize_goal(goal: Goal, values: List[Decimal], include_entries_count: bool = False) -> Dict[str, Any]:
    metrics = compute_goal_metrics(goal, values)
    return {
        "id": goal.id,
        "parent_goal_id": goal.parent_goal_id,
        "name": goal.name,
        "target_value": format_decimal(goal.target_value),
        "deadline": goal.deadline.isoformat(),
        "status": goal.status.value,
        "reflection_notes": goal.reflection_notes,
        "ai_summary": goal.ai_summary,
        "ai_generation_attempts": goal.ai_generation_attempts,
        "abandonment_reason": goal.abandonment_reason,
        "created_at": goal.created_at.isoformat(),
        "updated_at": goal.updated_at.isoformat(),
        "computed": metrics.to_dict(include_entries_count=include_entries_count),
    }


def get_goal_or_404(db: Session, user_id: str, goal_id: str) -> Goal:
    goal = crud.get_goal(db, goal_id, user_id)
    if goal is None:
        raise NotFoundError("goal_not_found")
    return goal


def assert_parent_goal_accessible(db: Session, user_id: str, parent_goal_id: str) -> Goal:
    parent = crud.get_goal(db, parent_goal_id, user_id)
    if parent is None:
        raise NotFoundError("parent_goal_not_found")
    return parent


def list_goals(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    q: Optional[str] = None,
    parent_goal_id: Optional[str] = None,
    root: bool = False,
    sort: str = "created_at",
    order: str = "desc",
    page: int = 1,
    page_size: int = 20,
) -> Dict[str, Any]:
    goals, total = crud.list_goals(
        db,
        user_id,
        status=status,
        q=q,
        parent_goal_id=parent_goal_id,
        root=root,
        sort=sort,
        order=order,
        skip=(page - 1) * page_size,
        limit=page_size,
    )
    values = crud.get_goal_progress_values(db, [goal.id for goal in goals])
    return {
        "items": [serialize_goal(goal, values.get(goal.id, [])) for goal in goals],
        "page": page,
        "pageSize": page_size,
        "total": total,
    }


def get_goal_details(db: Session, user_id: str, goal_id: str) -> Dict[str, Any]:
    goal = get_goal_or_404(db, user_id, goal_id)
    values = crud.get_goal_progress_values(db, [goal.id])
    return serialize_goal(goal, values[goal.id], include_entries_count=True)


def create_goal(
    db: Session,
    user_id: str,
    name: str,
    target_value: Decimal,
    deadline: date,
    parent_goal_id: Optional[str] = None,
) -> Dict[str, Any]:
    if parent_goal_id:
        assert_parent_goal_accessible(db, user_id, parent_goal_id)
        validate_iteration_chain_for_new_goal(db, user_id, parent_goal_id)

    goal = crud.create_goal(db, user_id, name, target_value, deadline, parent_goal_id)
    return {
        "id": goal.id,
        "status": goal.status.value,
        "name": goal.name,
        "target_value": format_decimal(goal.target_value),
        "deadline": goal.deadline.isoformat(),
        "parent_goal_id": goal.parent_goal_id,
    }


def update_goal(db: Session, user_id: str, goal_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply a partial update.

    name, target_value and deadline may only change while the goal is unlocked
    (active with no progress). ai_summary may only be set on a closed goal.
    reflection_notes can always be edited.
    """
    goal = get_goal_or_404(db, user_id, goal_id)
    entries_count = crud.count_goal_progress(db, goal.id)
    locked = is_goal_locked(goal.status, entries_count)

    if locked and any(field in changes for field in LOCKED_FIELDS):
        raise ConflictError("goal_locked")

    if "ai_summary" in changes and goal.status == GoalStatus.ACTIVE:
        raise ConflictError("goal_not_closed")

    goal = crud.update_goal(db, goal, changes)

    result: Dict[str, Any] = {"id": goal.id, "updated_at": goal.updated_at.isoformat()}
    for field in changes:
        value = getattr(goal, field)
        if field == "target_value":
            value = format_decimal(value)
        elif field == "deadline":
            value = value.isoformat()
        result[field] = value
    return result


def delete_goal(db: Session, user_id: str, goal_id: str) -> None:
    goal = get_goal_or_404(db, user_id, goal_id)
    if crud.count_goal_progress(db, goal.id) > 0:
        raise ConflictError("goal_has_progress")
    crud.delete_goal(db, goal)
