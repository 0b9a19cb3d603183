import logging
from collections import defaultdict
from typing import Dict, List

from sqlalchemy.orm import Session

from database import crud
from database.models import Goal, GoalStatus
from services.exceptions import ConflictError, NotFoundError
from services.metrics import format_decimal, sum_progress

logger = logging.getLogger(__name__)

MAX_CHAIN_DEPTH = 100


def get_goal_chain(db: Session, user_id: str, goal_id: str) -> List[Goal]:
    """
    Every iteration in the history chain containing goal_id, oldest first.

    Walks up parent_goal_id to the root, then collects all descendants of the
    root. Both walks stop after MAX_CHAIN_DEPTH levels and never revisit a goal.
    """
    goals_by_id: Dict[str, Goal] = {goal.id: goal for goal in crud.get_user_goals(db, user_id)}
    goal = goals_by_id.get(goal_id)
    if goal is None:
        raise NotFoundError("goal_not_found")

    root = goal
    seen = {root.id}
    depth = 0
    while root.parent_goal_id and root.parent_goal_id in goals_by_id and depth < MAX_CHAIN_DEPTH:
        parent = goals_by_id[root.parent_goal_id]
        if parent.id in seen:
            logger.warning(f"Cycle detected in goal history at {parent.id}")
            break
        seen.add(parent.id)
        root = parent
        depth += 1

    children = defaultdict(list)
    for candidate in goals_by_id.values():
        if candidate.parent_goal_id:
            children[candidate.parent_goal_id].append(candidate)

    chain = [root]
    visited = {root.id}
    frontier = [root]
    depth = 0
    while frontier and depth < MAX_CHAIN_DEPTH:
        next_frontier = []
        for node in frontier:
            for child in children.get(node.id, []):
                if child.id not in visited:
                    visited.add(child.id)
                    chain.append(child)
                    next_frontier.append(child)
        frontier = next_frontier
        depth += 1

    chain.sort(key=lambda g: (g.created_at, g.id))
    return chain


def validate_iteration_chain_for_new_goal(db: Session, user_id: str, goal_id: str) -> None:
    """
    A new iteration may only branch off the youngest goal of a chain that has no active goal.

    Raises ConflictError with active_goal_exists or goal_not_youngest.
    """
    chain = get_goal_chain(db, user_id, goal_id)
    if any(goal.status == GoalStatus.ACTIVE for goal in chain):
        raise ConflictError("active_goal_exists")
    if chain[-1].id != goal_id:
        raise ConflictError("goal_not_youngest")


def get_goal_history(db: Session, user_id: str, goal_id: str, order: str = "desc") -> Dict[str, List[dict]]:
    chain = get_goal_chain(db, user_id, goal_id)
    if order == "desc":
        chain = list(reversed(chain))

    values = crud.get_goal_progress_values(db, [goal.id for goal in chain])
    items = [
        {
            "id": goal.id,
            "parent_goal_id": goal.parent_goal_id,
            "name": goal.name,
            "status": goal.status.value,
            "deadline": goal.deadline.isoformat(),
            "created_at": goal.created_at.isoformat(),
            "updated_at": goal.updated_at.isoformat(),
            "computed": {"current_value": format_decimal(sum_progress(values.get(goal.id, [])))},
            "ai_summary": goal.ai_summary,
        }
        for goal in chain
    ]
    return {"items": items}
