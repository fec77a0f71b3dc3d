"""
Резюме: CRUD владельца, публичный просмотр, превью, экспорт (печать, Word) и QR-код.

CRUD защищён JWT, пользователь меняет только свои резюме.
Просмотр и экспорт: владельцу — всегда, остальным — только если isPublic.
Удаление жёсткое.
"""
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response

from resume_ats.core.config import settings
from resume_ats.core.database import get_resumes_collection
from resume_ats.core.errors import AccessDenied, NotFound
from resume_ats.core.security import get_current_user, get_optional_user
from resume_ats.rendering.encoders import (
    WORD_MEDIA_TYPE,
    render_preview_html,
    render_print_html,
    render_word_html,
    word_filename,
)
from resume_ats.rendering.qr import SVG_MEDIA_TYPE, public_resume_url, qr_svg
from resume_ats.rendering.renderer import RenderedResume, render_resume
from resume_ats.schemas.common import ErrorResponse, SuccessResponse
from resume_ats.schemas.preview import RenderRequest, ResumePreview
from resume_ats.schemas.resume import (
    Resume,
    ResumeCreate,
    ResumeDocument,
    ResumeUpdate,
    TemplateSelection,
)

router = APIRouter(prefix="/resumes", tags=["resumes"])

VIEW_RESPONSES = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


def _doc_to_resume(doc: dict) -> Resume:
    return Resume(
        id=str(doc["_id"]),
        user_id=str(doc["user_id"]),
        template_name=doc["template_name"],
        theme_color=doc["theme_color"],
        resume_data=ResumeDocument.model_validate(doc.get("resume_data") or {}),
        is_public=doc.get("is_public", False),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


def _parse_id(resume_id: str) -> ObjectId:
    try:
        return ObjectId(resume_id)
    except InvalidId:
        raise NotFound()


def _get_own_resume(resume_id: str, user_id: ObjectId) -> dict:
    """Получить резюме, проверив владельца. 404 если не найдено или чужое."""
    doc = get_resumes_collection().find_one({"_id": _parse_id(resume_id), "user_id": user_id})
    if not doc:
        raise NotFound()
    return doc


def _get_viewable_resume(resume_id: str, viewer: dict | None) -> Resume:
    """Публичное — любому, приватное — только владельцу (иначе 403)."""
    doc = get_resumes_collection().find_one({"_id": _parse_id(resume_id)})
    if not doc:
        raise NotFound()
    if not doc.get("is_public", False) and (viewer is None or viewer["_id"] != doc["user_id"]):
        raise AccessDenied()
    return _doc_to_resume(doc)


def _render_stored(resume: Resume, language: str) -> RenderedResume:
    return render_resume(resume.resume_data, resume.selection(), language)


@router.get("", response_model=SuccessResponse[list[Resume]])
async def list_resumes(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
):
    """Список резюме текущего пользователя (pagination)."""
    coll = get_resumes_collection()
    cursor = (
        coll.find({"user_id": current_user["_id"]})
        .sort("created_at", -1)
        .skip(offset)
        .limit(limit)
    )
    data = [_doc_to_resume(doc) for doc in cursor]
    return SuccessResponse(data=data)


@router.post("", response_model=SuccessResponse[Resume], status_code=201)
async def create_resume(
    data: ResumeCreate,
    current_user: dict = Depends(get_current_user),
):
    """Первое сохранение резюме."""
    now = datetime.now(timezone.utc)
    doc = {
        "user_id": current_user["_id"],
        "template_name": data.template_name.value,
        "theme_color": data.theme_color,
        "resume_data": data.resume_data.model_dump(by_alias=True),
        "is_public": data.is_public,
        "created_at": now,
        "updated_at": now,
    }
    result = get_resumes_collection().insert_one(doc)
    doc["_id"] = result.inserted_id
    return SuccessResponse(data=_doc_to_resume(doc))


@router.post("/render", response_model=SuccessResponse[ResumePreview])
async def render_draft(data: RenderRequest):
    """Превью несохранённого черновика."""
    selection = TemplateSelection(template_name=data.template_name, theme_color=data.theme_color)
    rendered = render_resume(data.resume_data, selection, data.language)
    return SuccessResponse(data=ResumePreview(rendered=rendered, html=render_preview_html(rendered)))


@router.get("/public/{resume_id}", response_model=SuccessResponse[Resume], responses=VIEW_RESPONSES)
async def get_public_resume(resume_id: str):
    """Публичное резюме без авторизации."""
    return SuccessResponse(data=_get_viewable_resume(resume_id, None))


@router.get("/{resume_id}", response_model=SuccessResponse[Resume])
async def get_resume(
    resume_id: str,
    current_user: dict = Depends(get_current_user),
):
    """Получить своё резюме."""
    doc = _get_own_resume(resume_id, current_user["_id"])
    return SuccessResponse(data=_doc_to_resume(doc))


@router.put("/{resume_id}", response_model=SuccessResponse[Resume])
async def update_resume(
    resume_id: str,
    data: ResumeUpdate,
    current_user: dict = Depends(get_current_user),
):
    """Обновить резюме (шаблон, цвет, данные, публичность)."""
    doc = _get_own_resume(resume_id, current_user["_id"])

    update_fields: dict = {"updated_at": datetime.now(timezone.utc)}
    if data.template_name is not None:
        update_fields["template_name"] = data.template_name.value
    if data.theme_color is not None:
        update_fields["theme_color"] = data.theme_color
    if data.resume_data is not None:
        update_fields["resume_data"] = data.resume_data.model_dump(by_alias=True)
    if data.is_public is not None:
        update_fields["is_public"] = data.is_public

    coll = get_resumes_collection()
    coll.update_one({"_id": doc["_id"]}, {"$set": update_fields})
    updated = coll.find_one({"_id": doc["_id"]})
    return SuccessResponse(data=_doc_to_resume(updated))


@router.delete("/{resume_id}", response_model=SuccessResponse[None])
async def delete_resume(
    resume_id: str,
    current_user: dict = Depends(get_current_user),
):
    """Удалить резюме безвозвратно."""
    doc = _get_own_resume(resume_id, current_user["_id"])
    get_resumes_collection().delete_one({"_id": doc["_id"]})
    return SuccessResponse(data=None)


@router.get("/{resume_id}/preview", response_model=SuccessResponse[ResumePreview], responses=VIEW_RESPONSES)
async def preview_resume(
    resume_id: str,
    language: str = Query("en", max_length=8),
    viewer: dict | None = Depends(get_optional_user),
):
    """Дерево секций и HTML-фрагмент для превью."""
    rendered = _render_stored(_get_viewable_resume(resume_id, viewer), language)
    return SuccessResponse(data=ResumePreview(rendered=rendered, html=render_preview_html(rendered)))


@router.get("/{resume_id}/export/print", response_class=HTMLResponse, responses=VIEW_RESPONSES)
async def export_print(
    resume_id: str,
    language: str = Query("en", max_length=8),
    viewer: dict | None = Depends(get_optional_user),
):
    """HTML для печати / сохранения в PDF (A4)."""
    rendered = _render_stored(_get_viewable_resume(resume_id, viewer), language)
    return HTMLResponse(render_print_html(rendered))


@router.get("/{resume_id}/export/word", responses=VIEW_RESPONSES)
async def export_word(
    resume_id: str,
    language: str = Query("en", max_length=8),
    viewer: dict | None = Depends(get_optional_user),
):
    """Документ Word (.doc, HTML с разметкой Office)."""
    rendered = _render_stored(_get_viewable_resume(resume_id, viewer), language)
    return Response(
        content=render_word_html(rendered),
        media_type=WORD_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{word_filename(rendered)}"'},
    )


@router.get("/{resume_id}/qr", responses=VIEW_RESPONSES)
async def resume_qr(
    resume_id: str,
    viewer: dict | None = Depends(get_optional_user),
):
    """QR-код со ссылкой на публичную страницу резюме."""
    resume = _get_viewable_resume(resume_id, viewer)
    url = public_resume_url(settings.PUBLIC_ORIGIN, resume.id)
    return Response(content=qr_svg(url), media_type=SVG_MEDIA_TYPE, headers={"X-Resume-Url": url})
