"""
Схемы превью: дерево секций + HTML-фрагмент.
"""
from resume_ats.rendering.renderer import RenderedResume
from resume_ats.schemas.resume import CamelModel, ResumeDocument, TemplateName, DEFAULT_THEME_COLOR


class RenderRequest(CamelModel):
    """Несохранённый черновик из редактора."""

    resume_data: ResumeDocument
    template_name: TemplateName = TemplateName.PROFESSIONAL
    theme_color: str = DEFAULT_THEME_COLOR
    language: str = "en"


class ResumePreview(CamelModel):
    rendered: RenderedResume
    html: str
