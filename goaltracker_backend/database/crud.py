from sqlalchemy.orm import Session
from sqlalchemy import func
from database.models import User, Goal, GoalProgress, GoalStatus
from auth.security import get_password_hash
from typing import Any, Dict, Iterable, List, Optional, Tuple
from datetime import date
from decimal import Decimal
from config.settings import get_current_time
import logging

logger = logging.getLogger(__name__)

# User CRUD operations
def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

def get_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    return db.query(User).order_by(User.created_at).offset(skip).limit(limit).all()

def create_user(db: Session, email: str, password: str) -> User:
    now = get_current_time()
    db_user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        created_at=now,
        updated_at=now
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Created user {db_user.id}")
    return db_user

# Goal CRUD operations
def get_goal(db: Session, goal_id: str, user_id: str) -> Optional[Goal]:
    """Fetch a goal only if it belongs to the given user."""
    return db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()

def get_user_goals(db: Session, user_id: str) -> List[Goal]:
    return db.query(Goal).filter(Goal.user_id == user_id).order_by(Goal.created_at).all()

def list_goals(
    db: Session,
    user_id: str,
    status: Optional[str] = None,
    q: Optional[str] = None,
    parent_goal_id: Optional[str] = None,
    root: bool = False,
    sort: str = "created_at",
    order: str = "desc",
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Goal], int]:
    """Filtered, sorted page of a user's goals plus the total row count before paging."""
    query = db.query(Goal).filter(Goal.user_id == user_id)

    if status:
        query = query.filter(Goal.status == GoalStatus(status))
    if q:
        query = query.filter(Goal.name.ilike(f"%{q}%"))
    if parent_goal_id:
        query = query.filter(Goal.parent_goal_id == parent_goal_id)
    if root:
        query = query.filter(Goal.parent_goal_id.is_(None))

    total = query.count()

    sort_column = Goal.deadline if sort == "deadline" else Goal.created_at
    if order == "asc":
        query = query.order_by(sort_column.asc(), Goal.id.asc())
    else:
        query = query.order_by(sort_column.desc(), Goal.id.desc())

    goals = query.offset(skip).limit(limit).all()
    return goals, total

def get_newest_goals(db: Session, user_id: str, exclude_goal_id: str, limit: int = 3) -> List[Goal]:
    return (
        db.query(Goal)
        .filter(Goal.user_id == user_id, Goal.id != exclude_goal_id)
        .order_by(Goal.created_at.desc())
        .limit(limit)
        .all()
    )

def get_active_goals(db: Session, user_id: str, goal_ids: Optional[Iterable[str]] = None) -> List[Goal]:
    query = db.query(Goal).filter(Goal.user_id == user_id, Goal.status == GoalStatus.ACTIVE)
    if goal_ids:
        query = query.filter(Goal.id.in_(list(goal_ids)))
    return query.all()

def create_goal(
    db: Session,
    user_id: str,
    name: str,
    target_value: Decimal,
    deadline: date,
    parent_goal_id: Optional[str] = None,
) -> Goal:
    now = get_current_time()
    db_goal = Goal(
        user_id=user_id,
        parent_goal_id=parent_goal_id,
        name=name,
        target_value=target_value,
        deadline=deadline,
        status=GoalStatus.ACTIVE,
        ai_generation_attempts=0,
        created_at=now,
        updated_at=now
    )
    db.add(db_goal)
    db.commit()
    db.refresh(db_goal)
    logger.info(f"Created goal {db_goal.id} for user {user_id} (parent: {parent_goal_id})")
    return db_goal

def update_goal(db: Session, goal: Goal, update_data: Dict[str, Any]) -> Goal:
    for key, value in update_data.items():
        setattr(goal, key, value)
    goal.updated_at = get_current_time()
    db.commit()
    db.refresh(goal)
    return goal

def update_goal_status(db: Session, goal: Goal, status: GoalStatus, abandonment_reason: Optional[str] = None) -> Goal:
    old_status = goal.status
    goal.status = status
    if abandonment_reason is not None:
        goal.abandonment_reason = abandonment_reason
    goal.updated_at = get_current_time()
    db.commit()
    db.refresh(goal)
    logger.info(f"Goal {goal.id} status changed: {old_status.value} -> {status.value}")
    return goal

def increment_ai_generation_attempts(db: Session, goal: Goal) -> Goal:
    goal.ai_generation_attempts = (goal.ai_generation_attempts or 0) + 1
    db.commit()
    db.refresh(goal)
    return goal

def delete_goal(db: Session, goal: Goal) -> None:
    goal_id = goal.id
    db.delete(goal)
    db.commit()
    logger.info(f"Deleted goal {goal_id}")

# Goal progress CRUD operations
def count_goal_progress(db: Session, goal_id: str) -> int:
    return db.query(func.count(GoalProgress.id)).filter(GoalProgress.goal_id == goal_id).scalar() or 0

def get_goal_progress_values(db: Session, goal_ids: List[str]) -> Dict[str, List[Decimal]]:
    """Progress values grouped by goal id; goals without entries map to an empty list."""
    values: Dict[str, List[Decimal]] = {goal_id: [] for goal_id in goal_ids}
    if not goal_ids:
        return values
    rows = db.query(GoalProgress.goal_id, GoalProgress.value).filter(GoalProgress.goal_id.in_(goal_ids)).all()
    for goal_id, value in rows:
        values.setdefault(goal_id, []).append(value)
    return values

def get_goal_progress_entries(db: Session, goal_id: str) -> List[GoalProgress]:
    """All entries of a goal, oldest first."""
    return (
        db.query(GoalProgress)
        .filter(GoalProgress.goal_id == goal_id)
        .order_by(GoalProgress.created_at.asc())
        .all()
    )

def list_goal_progress(
    db: Session,
    goal_id: str,
    order: str = "desc",
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[GoalProgress], int]:
    query = db.query(GoalProgress).filter(GoalProgress.goal_id == goal_id)
    total = query.count()
    if order == "asc":
        query = query.order_by(GoalProgress.created_at.asc(), GoalProgress.id.asc())
    else:
        query = query.order_by(GoalProgress.created_at.desc(), GoalProgress.id.desc())
    return query.offset(skip).limit(limit).all(), total

def get_progress_entry(db: Session, progress_id: str) -> Optional[GoalProgress]:
    return db.query(GoalProgress).filter(GoalProgress.id == progress_id).first()

def create_progress_entry(db: Session, goal_id: str, value: Decimal, notes: Optional[str] = None) -> GoalProgress:
    now = get_current_time()
    db_entry = GoalProgress(
        goal_id=goal_id,
        value=value,
        notes=notes,
        created_at=now,
        updated_at=now
    )
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    return db_entry

def update_progress_entry(db: Session, entry: GoalProgress, update_data: Dict[str, Any]) -> GoalProgress:
    for key, value in update_data.items():
        setattr(entry, key, value)
    entry.updated_at = get_current_time()
    db.commit()
    db.refresh(entry)
    return entry

def delete_progress_entry(db: Session, entry: GoalProgress) -> None:
    db.delete(entry)
    db.commit()
