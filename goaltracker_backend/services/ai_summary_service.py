"""
AI summaries for closed goals.

A summary can be generated once a goal is no longer active and has at least
three progress entries. The prompt carries the goal, its progress and its
reflection notes plus the three newest other goals of the user, so the model
can spot patterns across attempts. The model answers with a JSON object
{"summary": "..."}.
"""

import json
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from config import settings
from database import crud
from database.models import Goal, GoalProgress, GoalStatus, AI_SUMMARY_MAX_LENGTH
from services.exceptions import AIProviderError, ConflictError, NotFoundError, PreconditionFailedError
from services.metrics import format_decimal, sum_progress
from services.openrouter_client import get_openrouter_client
from utils.date_format import format_date

logger = logging.getLogger(__name__)

MIN_PROGRESS_ENTRIES = 3
HISTORICAL_GOALS_LIMIT = 3

_FINAL_STATUS_LABELS = {
    GoalStatus.ABANDONED: "Abandoned",
    GoalStatus.COMPLETED_SUCCESS: "Successfully completed",
    GoalStatus.COMPLETED_FAILURE: "Not completed (deadline passed)",
}

PROMPT_INSTRUCTIONS = """You are an AI assistant that analyzes goal progress and provides constructive feedback.

Your task:
1. Provide a comprehensive summary (3-4 paragraphs) of the person's journey toward this goal, written in second-person (addressing them as "you")
2. Highlight what went well and areas for improvement
3. Include a suggestion for a next goal at the end of the summary with clear justification for why this next goal makes sense based on their journey and patterns

You will receive:
- The current goal being analyzed with its progress entries
- Up to 3 previous goals with their reflection notes and progress entries for context

Important instructions:
- Write in second-person perspective (use "you" and "your" instead of "the user")
- Respond in the SAME LANGUAGE as the goal information and progress notes provided by the user
- Make it conversational and personal
- Use insights from previous goals to identify patterns and provide more personalized recommendations
- The next goal suggestion should be embedded naturally within the summary text, not as a separate field
- Explain WHY the suggested next goal is appropriate based on their history, patterns, and progress

Respond in JSON format:
{
  "summary": "Your complete summary here, including the next goal suggestion with justification at the end..."
}"""

PROMPT_CLOSING = """## Your Task
Analyze this goal and provide:
1. A comprehensive summary (3-4 paragraphs) of their journey, written directly to them using "you" and "your"
2. Highlight what went well and areas for improvement
3. A suggested next goal embedded naturally at the end of the summary with clear justification

Remember:
- Write in the same language as the goal name and progress notes above
- Address the person directly using second-person perspective
- Use the previous goals context to provide more personalized insights about their goal-setting patterns and progress
- Include the next goal suggestion within the summary text itself, explaining WHY it's a good next step based on their history and patterns"""


def _format_entry(entry: GoalProgress) -> str:
    notes = f" ({entry.notes})" if entry.notes else ""
    return f"{format_date(entry.created_at)}: {format_decimal(entry.value)}{notes}"


def build_ai_prompt(
    goal: Goal,
    progress_entries: List[GoalProgress],
    historical_goals: List[Dict],
) -> List[Dict[str, str]]:
    """
    Build the chat messages for a goal summary.

    historical_goals holds dicts with "goal" (a Goal) and "progress_entries"
    (its entries, oldest first).
    """
    total_progress = sum_progress(entry.value for entry in progress_entries)
    target = format_decimal(goal.target_value)

    sections = [
        PROMPT_INSTRUCTIONS,
        "---",
        "## Current Goal Being Analyzed\n"
        f"- Name: {goal.name}\n"
        f"- Target: {target}\n"
        f"- Deadline: {goal.deadline.isoformat()}\n"
        f"- Final Status: {_FINAL_STATUS_LABELS.get(goal.status, goal.status.value)}\n"
        f"- Total Progress: {format_decimal(total_progress)} / {target}",
    ]

    if goal.reflection_notes:
        sections.append(f"## Reflection Notes\n{goal.reflection_notes}")

    entries_text = "\n".join(f"- {_format_entry(entry)}" for entry in progress_entries)
    sections.append(f"## Progress Entries\n{entries_text}")

    if historical_goals:
        lines = ["## Previous Goals (for context)"]
        for index, item in enumerate(historical_goals, start=1):
            h_goal = item["goal"]
            h_entries = item["progress_entries"]
            h_target = format_decimal(h_goal.target_value)
            h_total = format_decimal(sum_progress(entry.value for entry in h_entries))
            lines.append(f"\n### Goal {index}: {h_goal.name}")
            lines.append(f"- Target: {h_target}")
            lines.append(f"- Status: {h_goal.status.value}")
            lines.append(f"- Total Progress: {h_total} / {h_target}")
            if h_goal.reflection_notes:
                lines.append(f"- Reflection Notes: {h_goal.reflection_notes}")
            if h_entries:
                lines.append("- Progress Entries:")
                lines.extend(f"  - {_format_entry(entry)}" for entry in h_entries)
        sections.append("\n".join(lines))

    sections.append(PROMPT_CLOSING)
    return [{"role": "user", "content": "\n\n".join(sections)}]


def parse_ai_response(response_content: str) -> str:
    """Extract the summary from the model output, tolerating ```json fences around it."""
    cleaned = response_content.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {e}")
        raise AIProviderError() from e

    summary = parsed.get("summary") if isinstance(parsed, dict) else None
    if not summary or not isinstance(summary, str):
        logger.error(f"Invalid AI response structure: {parsed!r}")
        raise AIProviderError()
    return summary.strip()[:AI_SUMMARY_MAX_LENGTH]


def _get_goal_or_404(db: Session, user_id: str, goal_id: str) -> Goal:
    goal = crud.get_goal(db, goal_id, user_id)
    if goal is None:
        raise NotFoundError("goal_not_found")
    return goal


async def generate_ai_summary(db: Session, user_id: str, goal_id: str, force: bool = False) -> Dict[str, Optional[str]]:
    """
    Generate (or return the stored) AI summary of a closed goal.

    Raises:
        NotFoundError: goal_not_found
        ConflictError: invalid_goal_state while the goal is active
        PreconditionFailedError: not_enough_data below three progress entries
        AIProviderError: provider failure, timeout or unusable answer
        MissingAPIKeyError: no OpenRouter key configured
    """
    goal = _get_goal_or_404(db, user_id, goal_id)

    if goal.status == GoalStatus.ACTIVE:
        raise ConflictError("invalid_goal_state")

    if goal.ai_summary and not force:
        return {"id": goal.id, "ai_summary": goal.ai_summary}

    progress_entries = crud.get_goal_progress_entries(db, goal.id)
    if len(progress_entries) < MIN_PROGRESS_ENTRIES:
        raise PreconditionFailedError("not_enough_data")

    historical_goals = [
        {"goal": h_goal, "progress_entries": crud.get_goal_progress_entries(db, h_goal.id)}
        for h_goal in crud.get_newest_goals(db, user_id, goal.id, limit=HISTORICAL_GOALS_LIMIT)
    ]
    messages = build_ai_prompt(goal, progress_entries, historical_goals)

    client = get_openrouter_client()
    crud.increment_ai_generation_attempts(db, goal)
    logger.info(f"Generating AI summary for goal {goal.id} (attempt {goal.ai_generation_attempts}, force={force})")

    try:
        response_content = await client.generate_chat_completion(
            messages,
            temperature=settings.AI_SUMMARY_TEMPERATURE,
            max_tokens=settings.AI_SUMMARY_MAX_TOKENS,
            json_response=True,
        )
    finally:
        await client.close()
    summary = parse_ai_response(response_content)

    goal = crud.update_goal(db, goal, {"ai_summary": summary})
    return {"id": goal.id, "ai_summary": goal.ai_summary}


def update_ai_summary(db: Session, user_id: str, goal_id: str, ai_summary: str) -> Dict[str, Optional[str]]:
    """Manually replace the summary; only allowed once the goal is closed."""
    goal = _get_goal_or_404(db, user_id, goal_id)
    if goal.status == GoalStatus.ACTIVE:
        raise ConflictError("goal_not_closed")
    goal = crud.update_goal(db, goal, {"ai_summary": ai_summary})
    return {"id": goal.id, "ai_summary": goal.ai_summary}
