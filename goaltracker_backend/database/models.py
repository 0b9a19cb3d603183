"""
Database Models for the GoalTracker application

This module defines the SQLAlchemy ORM models. The schema has three tables:
1. users - accounts that own goals
2. goals - goal definitions, lifecycle status and closing notes
3. goal_progress - individual progress entries logged against a goal

Goals form history chains through the self-referencing parent_goal_id column:
the root iteration has no parent, each retry or continuation points at the
iteration it was created from.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, Numeric, CheckConstraint, Index
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
import enum
import uuid
from database.database import Base
from database.uuid_type import StringUUID

# Column limits shared with the validation layer
GOAL_NAME_MAX_LENGTH = 50
GOAL_ITERATION_NAME_MAX_LENGTH = 500
REFLECTION_NOTES_MAX_LENGTH = 1000
AI_SUMMARY_MAX_LENGTH = 5000
ABANDONMENT_REASON_MAX_LENGTH = 2000
PROGRESS_NOTES_MAX_LENGTH = 150
# Numeric columns hold at most VALUE_PRECISION digits, VALUE_SCALE of them after the point
VALUE_PRECISION = 14
VALUE_SCALE = 4

class GoalStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED_SUCCESS = "completed_success"
    COMPLETED_FAILURE = "completed_failure"
    ABANDONED = "abandoned"

class User(Base):
    __tablename__ = "users"

    id = Column(StringUUID, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    goals = relationship("Goal", back_populates="user", cascade="all, delete-orphan")

class Goal(Base):
    """
    A user-defined target with a numeric value and a deadline.

    Lifecycle:
    1. Created -> status='active'
    2. Closed manually -> 'completed_success' (target reached) or 'abandoned' (with reason)
    3. Deadline day passed without reaching the target -> 'completed_failure'

    Closed goals can spawn a new iteration (retry after failure/abandonment,
    continue after success) which references them through parent_goal_id.
    """
    __tablename__ = "goals"
    __table_args__ = (
        CheckConstraint("target_value > 0", name="check_target_value_positive"),
        CheckConstraint(f"length(name) <= {GOAL_ITERATION_NAME_MAX_LENGTH}", name="check_name_length"),
        CheckConstraint(
            f"reflection_notes IS NULL OR length(reflection_notes) <= {REFLECTION_NOTES_MAX_LENGTH}",
            name="check_reflection_notes_length",
        ),
        CheckConstraint(
            f"ai_summary IS NULL OR length(ai_summary) <= {AI_SUMMARY_MAX_LENGTH}",
            name="check_ai_summary_length",
        ),
        Index("goals_user_id_status_idx", "user_id", "status"),
        Index("goals_user_id_created_at_idx", "user_id", "created_at"),
    )

    id = Column(StringUUID, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(StringUUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_goal_id = Column(StringUUID, ForeignKey("goals.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(Text, nullable=False)
    target_value = Column(Numeric(VALUE_PRECISION, VALUE_SCALE), nullable=False)
    deadline = Column(Date, nullable=False)
    status = Column(
        SAEnum(GoalStatus, name="goal_status", values_callable=lambda e: [member.value for member in e]),
        nullable=False,
        default=GoalStatus.ACTIVE,
    )
    reflection_notes = Column(Text, nullable=True)
    ai_summary = Column(Text, nullable=True)
    ai_generation_attempts = Column(Integer, nullable=False, default=0)
    abandonment_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    user = relationship("User", back_populates="goals")
    progress_entries = relationship(
        "GoalProgress",
        back_populates="goal",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GoalProgress.created_at",
    )

class GoalProgress(Base):
    __tablename__ = "goal_progress"
    __table_args__ = (
        CheckConstraint(
            f"notes IS NULL OR length(notes) <= {PROGRESS_NOTES_MAX_LENGTH}",
            name="check_notes_length",
        ),
    )

    id = Column(StringUUID, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    goal_id = Column(StringUUID, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Numeric(VALUE_PRECISION, VALUE_SCALE), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    goal = relationship("Goal", back_populates="progress_entries")
