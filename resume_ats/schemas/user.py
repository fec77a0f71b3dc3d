"""
Схемы для пользователей и авторизации.
"""
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    """Регистрация через email."""

    email: EmailStr
    password: str = Field(min_length=8)
    full_name: str | None = None


class User(BaseModel):
    """Пользователь в ответах API. credits — последний известный баланс."""

    id: str
    email: str
    full_name: str | None = None
    credits: int = 0
    last_login: datetime | None = None
    created_at: datetime


class Token(BaseModel):
    """Пара JWT токенов."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """Запрос на обновление токенов."""

    refresh_token: str
