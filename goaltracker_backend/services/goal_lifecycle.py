"""
Goal lifecycle transitions.

    active --abandon--> abandoned
    active --complete (target reached)--> completed_success
    active --deadline day passed, target missed--> completed_failure

Closed goals spawn new iterations: retry after completed_failure/abandoned,
continue after completed_success. Success is never applied automatically.
"""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from config.settings import SERVER_TIMEZONE, get_current_time
from database import crud
from database.models import GoalStatus
from services.ai_summary_service import MIN_PROGRESS_ENTRIES, generate_ai_summary
from services.exceptions import ConflictError, GoalTrackerError, NotFoundError
from services.goal_history import validate_iteration_chain_for_new_goal
from services.metrics import sum_progress

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (GoalStatus.COMPLETED_FAILURE, GoalStatus.ABANDONED)


def _get_goal_or_404(db: Session, user_id: str, goal_id: str):
    goal = crud.get_goal(db, goal_id, user_id)
    if goal is None:
        raise NotFoundError("goal_not_found")
    return goal


def abandon_goal(db: Session, user_id: str, goal_id: str, reason: str) -> Dict[str, Any]:
    goal = _get_goal_or_404(db, user_id, goal_id)
    if goal.status != GoalStatus.ACTIVE:
        raise ConflictError("goal_not_active")

    goal = crud.update_goal_status(db, goal, GoalStatus.ABANDONED, abandonment_reason=reason)
    return {"id": goal.id, "status": goal.status.value, "abandonment_reason": goal.abandonment_reason}


async def complete_goal(db: Session, user_id: str, goal_id: str) -> Dict[str, Any]:
    """Mark an active goal as completed_success once its progress reaches the target."""
    goal = _get_goal_or_404(db, user_id, goal_id)
    if goal.status != GoalStatus.ACTIVE:
        raise ConflictError("goal_not_active")

    values = crud.get_goal_progress_values(db, [goal.id])[goal.id]
    if sum_progress(values) < Decimal(goal.target_value):
        raise ConflictError("target_not_reached")

    goal = crud.update_goal_status(db, goal, GoalStatus.COMPLETED_SUCCESS)

    await try_generate_ai_summary(db, user_id, goal.id)

    db.refresh(goal)
    return {
        "id": goal.id,
        "status": goal.status.value,
        "ai_summary": goal.ai_summary,
        "ai_generation_attempts": goal.ai_generation_attempts,
    }


def _create_iteration(db: Session, user_id: str, source, name: str, target_value: Decimal, deadline: date) -> Dict[str, Any]:
    validate_iteration_chain_for_new_goal(db, user_id, source.id)
    new_goal = crud.create_goal(db, user_id, name, target_value, deadline, parent_goal_id=source.id)
    return {"id": new_goal.id, "parent_goal_id": new_goal.parent_goal_id, "status": new_goal.status.value}


def retry_goal(
    db: Session,
    user_id: str,
    goal_id: str,
    target_value: Decimal,
    deadline: date,
    name: Optional[str] = None,
) -> Dict[str, Any]:
    """New iteration after a failed or abandoned goal; the name defaults to the source's."""
    source = _get_goal_or_404(db, user_id, goal_id)
    if source.status not in RETRYABLE_STATUSES:
        raise ConflictError("goal_not_retryable")
    return _create_iteration(db, user_id, source, name or source.name, target_value, deadline)


def continue_goal(
    db: Session,
    user_id: str,
    goal_id: str,
    name: str,
    target_value: Decimal,
    deadline: date,
) -> Dict[str, Any]:
    source = _get_goal_or_404(db, user_id, goal_id)
    if source.status != GoalStatus.COMPLETED_SUCCESS:
        raise ConflictError("goal_not_continuable")
    return _create_iteration(db, user_id, source, name, target_value, deadline)


def end_of_deadline_day(deadline: date) -> datetime:
    return datetime.combine(deadline, time.max, tzinfo=SERVER_TIMEZONE)


def determine_new_status(
    status: GoalStatus,
    current_value: Decimal,
    target_value: Decimal,
    deadline: date,
    now: Optional[datetime] = None,
) -> Optional[GoalStatus]:
    """The status an automatic sync should move the goal to, or None to leave it alone."""
    if status != GoalStatus.ACTIVE:
        return None
    now = now or get_current_time()
    if now > end_of_deadline_day(deadline) and current_value < Decimal(target_value):
        return GoalStatus.COMPLETED_FAILURE
    return None


async def sync_statuses(
    db: Session,
    user_id: str,
    goal_ids: Optional[Iterable[str]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, List[Dict[str, str]]]:
    """
    Fail every active goal whose deadline day has passed without reaching the target.

    Idempotent: goals already closed are never selected. Newly failed goals
    get a best-effort AI summary, one after another.
    """
    goals = crud.get_active_goals(db, user_id, goal_ids)
    if not goals:
        return {"updated": []}

    values = crud.get_goal_progress_values(db, [goal.id for goal in goals])
    updated = []
    for goal in goals:
        new_status = determine_new_status(goal.status, sum_progress(values[goal.id]), goal.target_value, goal.deadline, now)
        if new_status and new_status != goal.status:
            old_status = goal.status
            crud.update_goal_status(db, goal, new_status)
            updated.append({"id": goal.id, "from": old_status.value, "to": new_status.value})

    if updated:
        logger.info(f"Synced statuses for user {user_id}: {len(updated)} goal(s) failed")

    for transition in updated:
        if transition["to"] == GoalStatus.COMPLETED_FAILURE.value:
            await try_generate_ai_summary(db, user_id, transition["id"])

    return {"updated": updated}


async def try_generate_ai_summary(db: Session, user_id: str, goal_id: str) -> None:
    """
    Generate a summary for a freshly closed goal if it has none and enough entries.

    Never raises: the status change that triggered it has already been committed.
    """
    goal = crud.get_goal(db, goal_id, user_id)
    if goal is None:
        logger.error(f"[AI Auto-Gen] Goal {goal_id} not found")
        return
    if goal.ai_summary:
        logger.debug(f"[AI Auto-Gen] Goal {goal_id} already has AI summary, skipping")
        return

    entries_count = crud.count_goal_progress(db, goal_id)
    if entries_count < MIN_PROGRESS_ENTRIES:
        logger.debug(f"[AI Auto-Gen] Goal {goal_id} has insufficient entries ({entries_count}), skipping")
        return

    try:
        await generate_ai_summary(db, user_id, goal_id, force=False)
        logger.info(f"[AI Auto-Gen] Generated AI summary for goal {goal_id}")
    except GoalTrackerError as e:
        db.rollback()
        logger.warning(f"[AI Auto-Gen] Failed to auto-generate AI summary for goal {goal_id}: {e.code}")
    except Exception as e:
        db.rollback()
        logger.error(f"[AI Auto-Gen] Unexpected error generating AI summary for goal {goal_id}: {e}", exc_info=True)
