"""
Авторизация: email/пароль.
Все эндпоинты выдачи токенов возвращают пару access + refresh.
Новый пользователь получает SIGNUP_CREDITS приветственных кредитов.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pymongo.errors import DuplicateKeyError

from resume_ats.core.config import settings
from resume_ats.core.database import get_users_collection
from resume_ats.core.errors import Unauthorized
from resume_ats.core.security import (
    create_token_pair,
    decode_refresh_token,
    find_user,
    get_current_user,
    hash_password,
    verify_password,
)
from resume_ats.schemas.common import ErrorResponse, SuccessResponse
from resume_ats.schemas.user import RefreshRequest, Token, User, UserCreate
from resume_ats.services.credits import grant

router = APIRouter(prefix="/auth", tags=["auth"])


def _doc_to_user(doc: dict) -> User:
    """Конвертировать документ MongoDB в User."""
    return User(
        id=str(doc["_id"]),
        email=doc["email"],
        full_name=doc.get("full_name"),
        credits=int(doc.get("credits", 0)),
        last_login=doc.get("last_login"),
        created_at=doc["created_at"],
    )


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "email_taken", "message": "Email already registered"},
    )


@router.post(
    "/register",
    response_model=SuccessResponse[Token],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def register(data: UserCreate):
    """Регистрация через email и пароль."""
    users = get_users_collection()

    if users.find_one({"email": data.email}):
        raise _email_taken()

    now = datetime.now(timezone.utc)
    user_doc = {
        "email": data.email,
        "password_hash": hash_password(data.password),
        "full_name": data.full_name,
        "credits": 0,
        "last_login": now,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = users.insert_one(user_doc)
    except DuplicateKeyError:
        raise _email_taken()

    if settings.SIGNUP_CREDITS > 0:
        grant(result.inserted_id, settings.SIGNUP_CREDITS, "welcome_credits")

    access, refresh = create_token_pair(str(result.inserted_id))
    return SuccessResponse(data=Token(access_token=access, refresh_token=refresh))


@router.post(
    "/login",
    response_model=SuccessResponse[Token],
    responses={401: {"model": ErrorResponse}},
)
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    """Вход через email и пароль. OAuth2 форма (username = email)."""
    users = get_users_collection()

    user = users.find_one({"email": form_data.username})
    if not user or not user.get("password_hash"):
        raise Unauthorized("Invalid email or password")
    if not verify_password(form_data.password, user["password_hash"]):
        raise Unauthorized("Invalid email or password")

    users.update_one(
        {"_id": user["_id"]},
        {"$set": {"last_login": datetime.now(timezone.utc)}},
    )

    access, refresh = create_token_pair(str(user["_id"]))
    return SuccessResponse(data=Token(access_token=access, refresh_token=refresh))


@router.post(
    "/refresh",
    response_model=SuccessResponse[Token],
    responses={401: {"model": ErrorResponse}},
)
async def refresh(data: RefreshRequest):
    """Обновить токены по refresh_token. Возвращает новую пару."""
    payload = decode_refresh_token(data.refresh_token)
    if payload is None or not payload.get("sub"):
        raise Unauthorized("Invalid or expired refresh token")

    user = find_user(payload["sub"])
    if not user:
        raise Unauthorized("User not found")

    access, new_refresh = create_token_pair(str(user["_id"]))
    return SuccessResponse(data=Token(access_token=access, refresh_token=new_refresh))


@router.get(
    "/me",
    response_model=SuccessResponse[User],
    responses={401: {"model": ErrorResponse}},
)
async def me(current_user: dict = Depends(get_current_user)):
    """Текущий пользователь с балансом кредитов."""
    return SuccessResponse(data=_doc_to_user(current_user))
