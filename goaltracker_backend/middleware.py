from fastapi import Request
import logging

from auth import security
from auth.dependencies import get_token_from_request
from user_context import negotiate_locale, set_current_locale, set_current_user_id

logger = logging.getLogger(__name__)

async def user_context_middleware(request: Request, call_next):
    """
    Middleware to set the request language and the authenticated user id in
    the request context, for localized messages and log records.

    The token is only decoded here; endpoints still load the user through
    the get_current_user dependency.
    """
    set_current_locale(negotiate_locale(request.headers.get("accept-language")))

    token = get_token_from_request(request)
    user_id = security.verify_token(token) if token else None
    set_current_user_id(user_id)
    if user_id:
        logger.debug(f"Set current user context: {user_id}")

    # Continue with the request
    response = await call_next(request)
    return response
