import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from database import crud
from database.models import GoalProgress, GoalStatus
from services.exceptions import ConflictError, NotFoundError
from services.metrics import format_decimal, progress_percent, sum_progress

logger = logging.getLogger(__name__)


def serialize_progress(entry: GoalProgress) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "goal_id": entry.goal_id,
        "value": format_decimal(entry.value),
        "notes": entry.notes,
        "created_at": entry.created_at.isoformat(),
        "updated_at": entry.updated_at.isoformat(),
    }


def _get_goal_or_404(db: Session, user_id: str, goal_id: str):
    goal = crud.get_goal(db, goal_id, user_id)
    if goal is None:
        raise NotFoundError("goal_not_found")
    return goal


def _get_owned_entry_of_active_goal(db: Session, user_id: str, progress_id: str) -> GoalProgress:
    entry = crud.get_progress_entry(db, progress_id)
    # Entries of other users' goals are reported as missing
    if entry is None or entry.goal.user_id != user_id:
        raise NotFoundError("progress_not_found")
    if entry.goal.status != GoalStatus.ACTIVE:
        raise ConflictError("goal_not_active")
    return entry


def list_goal_progress(
    db: Session,
    user_id: str,
    goal_id: str,
    order: str = "desc",
    page: int = 1,
    page_size: int = 20,
) -> Dict[str, Any]:
    _get_goal_or_404(db, user_id, goal_id)
    entries, total = crud.list_goal_progress(db, goal_id, order=order, skip=(page - 1) * page_size, limit=page_size)
    return {
        "items": [serialize_progress(entry) for entry in entries],
        "page": page,
        "pageSize": page_size,
        "total": total,
    }


def create_goal_progress_entry(
    db: Session,
    user_id: str,
    goal_id: str,
    value: Decimal,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    goal = _get_goal_or_404(db, user_id, goal_id)
    if goal.status != GoalStatus.ACTIVE:
        raise ConflictError("goal_not_active")

    entry = crud.create_progress_entry(db, goal.id, value, notes)
    current_value = sum_progress(crud.get_goal_progress_values(db, [goal.id])[goal.id])
    logger.info(f"Logged progress {entry.id} on goal {goal.id}: {format_decimal(value)}")

    return {
        "progress": {
            "id": entry.id,
            "goal_id": entry.goal_id,
            "value": format_decimal(entry.value),
            "notes": entry.notes,
        },
        "goal": {"id": goal.id, "status": goal.status.value},
        "computed": {
            "current_value": format_decimal(current_value),
            "progress_percent": progress_percent(current_value, goal.target_value),
        },
    }


def update_progress_entry(db: Session, user_id: str, progress_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    entry = _get_owned_entry_of_active_goal(db, user_id, progress_id)
    entry = crud.update_progress_entry(db, entry, changes)
    return {
        "id": entry.id,
        "goal_id": entry.goal_id,
        "value": format_decimal(entry.value),
        "notes": entry.notes,
        "updated_at": entry.updated_at.isoformat(),
    }


def delete_progress_entry(db: Session, user_id: str, progress_id: str) -> None:
    entry = _get_owned_entry_of_active_goal(db, user_id, progress_id)
    crud.delete_progress_entry(db, entry)
