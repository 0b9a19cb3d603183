from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Dict
import logging

from database import crud, models
from database.database import get_db
from auth import security
from auth.dependencies import get_current_user
from api import schemas
from config.settings import ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_DAYS
from services.exceptions import AuthenticationError, ConflictError

logger = logging.getLogger(__name__)

router = APIRouter()

def _user_payload(user: models.User) -> dict:
    return schemas.UserPublic.model_validate(user).model_dump()

def _issue_tokens(user: models.User) -> Dict[str, str]:
    return {
        "access_token": security.create_access_token(data={"sub": user.id}),
        "refresh_token": security.create_refresh_token(data={"sub": user.id}),
    }

def _set_auth_cookies(request: Request, response: Response, tokens: Dict[str, str]) -> None:
    # Secure cookies only over HTTPS so local development over HTTP keeps working
    is_secure = request.url.scheme == "https"
    cookie_settings = {"httponly": True, "secure": is_secure, "samesite": "strict", "path": "/"}

    response.set_cookie(
        key="access_token",
        value=tokens["access_token"],
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **cookie_settings
    )
    response.set_cookie(
        key="refresh_token",
        value=tokens["refresh_token"],
        max_age=REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **cookie_settings
    )

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(request: Request, payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, payload.email):
        raise ConflictError("email_already_in_use")

    user = crud.create_user(db, email=payload.email, password=payload.password)
    logger.info(f"Registered user {user.id}")

    # A fresh account is signed in straight away
    response = JSONResponse(status_code=status.HTTP_201_CREATED, content={"data": {"user": _user_payload(user)}})
    _set_auth_cookies(request, response, _issue_tokens(user))
    return response

@router.post("/login")
def login(request: Request, payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, payload.email)
    if not user or not security.verify_password(payload.password, user.hashed_password):
        logger.info("Failed login attempt")
        raise AuthenticationError("invalid_credentials")

    tokens = _issue_tokens(user)
    response = JSONResponse(content={"data": {**tokens, "user": _user_payload(user)}})
    _set_auth_cookies(request, response, tokens)
    return response

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(current_user: models.User = Depends(get_current_user)):
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key="access_token", path="/")
    response.delete_cookie(key="refresh_token", path="/")
    return response

@router.get("/me")
def read_users_me(current_user: models.User = Depends(get_current_user)):
    """Get current user information (protected endpoint)"""
    return {"data": {"user": _user_payload(current_user)}}
