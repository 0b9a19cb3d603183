from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import crud, models
from database.database import get_db
from auth import security
from services.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

def get_token_from_request(request: Request) -> Optional[str]:
    """
    Read the access token from the HttpOnly cookie, falling back to an Authorization: Bearer header.
    """
    token = request.cookies.get("access_token")
    if token:
        return token

    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None

def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    token = get_token_from_request(request)
    if not token:
        logger.debug(f"Authentication failed: no token on {request.method} {request.url.path}")
        raise AuthenticationError("not_authenticated")

    user_id = security.verify_token(token)
    if user_id is None:
        logger.debug("Authentication failed: token verification failed")
        raise AuthenticationError("not_authenticated")

    user = crud.get_user(db, user_id)
    if user is None:
        logger.warning(f"Token subject {user_id} does not match any user")
        raise AuthenticationError("not_authenticated")
    return user
