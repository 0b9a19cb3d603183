from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from config.settings import get_today
from database.models import Goal, GoalStatus


def format_decimal(value) -> str:
    """Render a Numeric column value as a plain decimal string: Decimal('12.5000') -> '12.5'."""
    if value is None:
        return "0"
    d = Decimal(value)
    if d == 0:
        return "0"
    return format(d.normalize(), "f")


@dataclass
class GoalMetrics:
    current_value: Decimal
    progress_ratio: float
    progress_percent: int
    days_remaining: int
    entries_count: int
    is_locked: bool

    def to_dict(self, include_entries_count: bool = False) -> dict:
        computed = {
            "current_value": format_decimal(self.current_value),
            "progress_ratio": self.progress_ratio,
            "progress_percent": self.progress_percent,
            "is_locked": self.is_locked,
            "days_remaining": self.days_remaining,
        }
        if include_entries_count:
            computed["entries_count"] = self.entries_count
        return computed


def sum_progress(values: Iterable) -> Decimal:
    return sum((Decimal(v) for v in values), Decimal("0"))


def progress_ratio(current_value: Decimal, target_value: Decimal) -> float:
    if target_value is None or Decimal(target_value) <= 0:
        return 0.0
    return float(Decimal(current_value) / Decimal(target_value))


def progress_percent(current_value: Decimal, target_value: Decimal) -> int:
    # Half-up rounding, so 12.5% shows as 13
    ratio = progress_ratio(current_value, target_value)
    return int(Decimal(str(ratio * 100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def days_remaining(deadline: date, today: Optional[date] = None) -> int:
    """Whole days from today until the deadline; negative once it has passed."""
    return (deadline - (today or get_today())).days


def is_goal_locked(status: GoalStatus, entries_count: int) -> bool:
    return status != GoalStatus.ACTIVE or entries_count >= 1


def compute_goal_metrics(goal: Goal, values: Iterable, today: Optional[date] = None) -> GoalMetrics:
    values = list(values)
    current = sum_progress(values)
    return GoalMetrics(
        current_value=current,
        progress_ratio=progress_ratio(current, goal.target_value),
        progress_percent=progress_percent(current, goal.target_value),
        days_remaining=days_remaining(goal.deadline, today),
        entries_count=len(values),
        is_locked=is_goal_locked(goal.status, len(values)),
    )
