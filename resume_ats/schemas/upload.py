"""
Схемы для загрузки фото профиля.
"""
from pydantic import BaseModel, Field


class PresignedUrlRequest(BaseModel):
    """Запрос на генерацию presigned URL."""

    file_name: str = Field(min_length=1)
    content_type: str = Field(default="image/png", description="image/jpeg | image/png")
    upload_type: str = Field(default="profile_image", description="Пока только profile_image")


class PresignedUrlResponse(BaseModel):
    """Ответ с presigned URL. file_key сохраняется в personalInfo.profileImageRef."""

    upload_url: str
    file_key: str
