"""
Безопасность: JWT токены (access + refresh) и хеширование паролей.

get_current_user — провайдер идентичности для всех защищённых эндпоинтов:
bearer-токен -> документ пользователя, иначе Unauthorized.
"""
from datetime import datetime, timedelta, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from resume_ats.core.config import settings
from resume_ats.core.database import get_users_collection
from resume_ats.core.errors import Unauthorized

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# auto_error=False: без заголовка тоже Unauthorized в общем формате ошибок
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def hash_password(password: str) -> str:
    """Хешировать пароль."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверить пароль."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict) -> str:
    """Создать короткоживущий access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict) -> str:
    """Создать долгоживущий refresh token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, secret: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    """Декодировать access token. Возвращает None при ошибке."""
    return _decode(token, settings.JWT_SECRET, "access")


def decode_refresh_token(token: str) -> dict | None:
    """Декодировать refresh token. Возвращает None при ошибке."""
    return _decode(token, settings.JWT_REFRESH_SECRET, "refresh")


def create_token_pair(user_id: str) -> tuple[str, str]:
    """Создать пару access + refresh токенов."""
    access = create_access_token({"sub": user_id})
    refresh = create_refresh_token({"sub": user_id})
    return access, refresh


def find_user(user_id: str) -> dict | None:
    """Пользователь по строковому id или None."""
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    return get_users_collection().find_one({"_id": oid})


def resolve_user(token: str | None) -> dict | None:
    """Токен -> документ пользователя. None, если токена нет или он невалиден."""
    if not token:
        return None
    payload = decode_access_token(token)
    if payload is None or not payload.get("sub"):
        return None
    return find_user(payload["sub"])


async def get_current_user(token: str | None = Depends(oauth2_scheme)) -> dict:
    """
    Dependency для получения текущего пользователя из JWT access token.
    Возвращает документ пользователя из MongoDB.
    """
    user = resolve_user(token)
    if user is None:
        raise Unauthorized()
    return user


async def get_optional_user(token: str | None = Depends(oauth2_scheme)) -> dict | None:
    """Как get_current_user, но для публичных эндпоинтов: без токена — None."""
    return resolve_user(token)
