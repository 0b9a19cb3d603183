from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Dict, Optional
import logging
import uuid

from api import schemas
from auth.dependencies import get_current_user
from database.database import get_db
from database.models import User
from services import ai_summary_service
from services.exceptions import RateLimitedError
from services.rate_limiter import RateLimitPresets, RateLimitResult, check_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter()

def _rate_limit_headers(result: RateLimitResult, limit: int) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": result.reset_at.isoformat(),
    }
    if result.retry_after is not None:
        headers["Retry-After"] = str(result.retry_after)
    return headers

@router.post("/goals/{goal_id}/ai-summary/generate")
async def generate_ai_summary(
    goal_id: uuid.UUID,
    payload: Optional[schemas.GenerateAiSummaryRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Generate the AI summary of a closed goal.

    Limited per user to AI_RATE_LIMIT_MAX_REQUESTS calls per sliding window.
    Successful and rate-limited responses carry the X-RateLimit-* headers.
    """
    config = RateLimitPresets.AI_GENERATION
    rate_limit = check_rate_limit(current_user.id, config)
    headers = _rate_limit_headers(rate_limit, config.max_requests)

    if not rate_limit.allowed:
        raise RateLimitedError(
            details={"retryAfter": rate_limit.retry_after, "resetAt": rate_limit.reset_at.isoformat()},
            headers=headers,
        )

    force = payload.force if payload else False
    goal = await ai_summary_service.generate_ai_summary(db, current_user.id, str(goal_id), force=force)
    return JSONResponse(content={"data": {"goal": goal}}, headers=headers)

@router.patch("/goals/{goal_id}/ai-summary")
def update_ai_summary(
    goal_id: uuid.UUID,
    payload: schemas.AiSummaryUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    goal = ai_summary_service.update_ai_summary(db, current_user.id, str(goal_id), payload.ai_summary)
    return {"data": {"goal": goal}}
