"""
Кодировщики дерева резюме в HTML: превью, печать (A4/PDF), Word.

Все три принимают RenderedResume и выводят секции в одном порядке
(атрибут data-section), различаются только разметкой и CSS.
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from resume_ats.rendering.labels import label
from resume_ats.rendering.renderer import RenderedResume

WORD_MEDIA_TYPE = "application/msword"

env = Environment(
    loader=FileSystemLoader(Path(__file__).parent / "templates"),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _render(template_name: str, rendered: RenderedResume) -> str:
    title = label("document_title", rendered.language)
    return env.get_template(template_name).render(r=rendered, title=title)


def render_preview_html(rendered: RenderedResume) -> str:
    """HTML-фрагмент <article> для интерактивного превью."""
    return _render("preview.html", rendered)


def render_print_html(rendered: RenderedResume) -> str:
    """Полный HTML-документ для печати / сохранения в PDF."""
    return _render("print.html", rendered)


def render_word_html(rendered: RenderedResume) -> str:
    """HTML с разметкой Word (xmlns:w), открывается как .doc."""
    return _render("word.html", rendered)


def word_filename(rendered: RenderedResume) -> str:
    """Имя файла для скачивания: resume-john-doe.doc (только ASCII, иначе resume-resume.doc)."""
    words = ["".join(ch for ch in word if ch.isascii() and ch.isalnum()) for word in rendered.header.name.lower().split()]
    slug = "-".join(word for word in words if word) or "resume"
    return f"resume-{slug}.doc"
