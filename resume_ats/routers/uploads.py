"""
Загрузка фото профиля через S3 presigned URL.
"""
from fastapi import APIRouter, Depends, HTTPException

from resume_ats.core.security import get_current_user
from resume_ats.core.storage import (
    IMAGE_EXTENSIONS,
    generate_presigned_upload_url,
    profile_image_key,
    storage_configured,
)
from resume_ats.schemas.common import SuccessResponse
from resume_ats.schemas.upload import PresignedUrlRequest, PresignedUrlResponse

router = APIRouter(prefix="/uploads", tags=["uploads"])

ALLOWED_UPLOAD_TYPES = {"profile_image"}


@router.post("/presigned-url", response_model=SuccessResponse[PresignedUrlResponse])
async def get_presigned_url(
    data: PresignedUrlRequest,
    current_user: dict = Depends(get_current_user),
):
    """Сгенерировать presigned URL для клиентской загрузки в S3."""
    if not storage_configured():
        raise HTTPException(501, detail="S3 storage not configured")

    if data.upload_type not in ALLOWED_UPLOAD_TYPES:
        raise HTTPException(400, detail=f"upload_type must be one of: {', '.join(sorted(ALLOWED_UPLOAD_TYPES))}")
    if data.content_type not in IMAGE_EXTENSIONS:
        raise HTTPException(400, detail="content_type must be image/jpeg or image/png")

    file_key = profile_image_key(str(current_user["_id"]), data.content_type)
    upload_url = generate_presigned_upload_url(
        key=file_key,
        content_type=data.content_type,
    )

    return SuccessResponse(
        data=PresignedUrlResponse(upload_url=upload_url, file_key=file_key)
    )
