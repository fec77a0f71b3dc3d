"""
Рендерер резюме: (ResumeDocument, TemplateSelection) -> RenderedResume.

Чистая функция без сети и глобального состояния. Результат — дерево секций,
которое одинаково потребляют превью, печать и экспорт в Word.

Правила:
- секция без данных (или только с пустыми строками) не выводится вовсе;
- каждый пункт списка обрезается, пустые пункты отбрасываются;
- Creative — две колонки, Professional и Corporate — одна;
- Corporate всегда чёрный, цвет темы игнорируется.
"""
import re

from pydantic import Field

from resume_ats.rendering.labels import label, normalize_language
from resume_ats.schemas.resume import (
    DEFAULT_THEME_COLOR,
    CamelModel,
    Education,
    PersonalInfo,
    ResumeDocument,
    TemplateName,
    TemplateSelection,
    WorkExperience,
)

SECTION_ORDER = ("summary", "skills", "work_experience", "education", "certifications", "awards")

CREATIVE_COLUMNS = (
    ("summary", "work_experience", "certifications"),
    ("skills", "education", "awards"),
)

CONTACT_SEPARATOR = " • "
HEADING_SEPARATOR = " — "
DATE_SEPARATOR = " – "

CORPORATE_BLACK = "#000000"

# Именованные темы редактора
NAMED_THEMES = {
    "slate": "#475569",
    "blue": "#2563eb",
    "emerald": "#059669",
    "violet": "#7c3aed",
    "rose": "#e11d48",
}

_HEX_COLOR = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$")
_COLOR_KEYWORD = re.compile(r"^[a-z]{3,20}$")


class RenderedEntry(CamelModel):
    heading: str
    meta: str = ""
    bullets: list[str] = Field(default_factory=list)


class RenderedSection(CamelModel):
    id: str
    title: str
    text: str | None = None
    items: list[str] = Field(default_factory=list)
    entries: list[RenderedEntry] = Field(default_factory=list)


class RenderedHeader(CamelModel):
    prefix: str | None = None
    name: str
    age_label: str | None = None
    contacts: list[str] = Field(default_factory=list)
    contact_line: str = ""


class Palette(CamelModel):
    accent: str
    header: str
    header_style: str  # "filled" | "rule"


class RenderedResume(CamelModel):
    template: TemplateName
    layout: str  # "single-column" | "two-column"
    language: str
    palette: Palette
    header: RenderedHeader
    sections: list[RenderedSection]
    columns: list[list[str]]

    def section(self, section_id: str) -> RenderedSection | None:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def column_sections(self) -> list[list[RenderedSection]]:
        """Секции по колонкам. Все кодировщики выводят секции в этом порядке."""
        by_id = {s.id: s for s in self.sections}
        return [[by_id[sid] for sid in column] for column in self.columns]


def clean_lines(values: list[str] | None) -> list[str]:
    """Обрезать пункты и выкинуть пустые."""
    return [v.strip() for v in values or [] if v and v.strip()]


def _join(parts, separator: str) -> str:
    return separator.join(p.strip() for p in parts if p and p.strip())


def resolve_theme_color(color: str | None) -> str:
    """Имя темы или CSS-цвет -> цвет для вывода; мусор -> цвет по умолчанию."""
    value = (color or "").strip().lower()
    if value in NAMED_THEMES:
        return NAMED_THEMES[value]
    if _HEX_COLOR.match(value) or _COLOR_KEYWORD.match(value):
        return value
    return DEFAULT_THEME_COLOR


def build_palette(selection: TemplateSelection) -> Palette:
    if selection.template_name == TemplateName.CORPORATE:
        return Palette(accent=CORPORATE_BLACK, header=CORPORATE_BLACK, header_style="rule")
    color = resolve_theme_color(selection.theme_color)
    return Palette(accent=color, header=color, header_style="filled")


def _render_header(info: PersonalInfo, language: str) -> RenderedHeader:
    contacts = clean_lines(
        [info.phone, info.email, info.linkedin, info.portfolio, info.website, info.address]
    )
    prefix = (info.prefix or "").strip() or None
    return RenderedHeader(
        prefix=prefix,
        name=info.full_name.strip() or label("placeholder_name", language),
        age_label=label("age", language, age=info.age) if info.age is not None else None,
        contacts=contacts,
        contact_line=CONTACT_SEPARATOR.join(contacts),
    )


def _work_entry(exp: WorkExperience) -> RenderedEntry | None:
    if not (exp.position.strip() or exp.company.strip()):
        return None
    dates = _join([exp.start_date, exp.end_date], DATE_SEPARATOR)
    return RenderedEntry(
        heading=_join([exp.position, exp.company], HEADING_SEPARATOR),
        meta=_join([dates, exp.location], CONTACT_SEPARATOR),
        bullets=clean_lines(exp.description),
    )


def _education_entry(edu: Education, language: str) -> RenderedEntry | None:
    if not (edu.degree.strip() or edu.institution.strip()):
        return None
    bullets = []
    if edu.gpa and edu.gpa.strip():
        bullets.append(label("gpa", language, gpa=edu.gpa.strip()))
    bullets.extend(clean_lines((edu.projects or "").split("\n")))
    return RenderedEntry(
        heading=edu.degree.strip() or edu.institution.strip(),
        meta=_join([edu.institution if edu.degree.strip() else "", edu.location, edu.graduation_year], CONTACT_SEPARATOR),
        bullets=bullets,
    )


def _render_sections(doc: ResumeDocument, language: str) -> list[RenderedSection]:
    sections: list[RenderedSection] = []

    def add(section_id: str, **content) -> None:
        sections.append(RenderedSection(id=section_id, title=label(section_id, language), **content))

    summary = doc.summary.strip()
    if summary:
        add("summary", text=summary)

    skills = clean_lines(doc.skills)
    if skills:
        add("skills", items=skills)

    jobs = [e for e in (_work_entry(x) for x in doc.work_experience) if e is not None]
    if jobs:
        add("work_experience", entries=jobs)

    schools = [e for e in (_education_entry(x, language) for x in doc.education) if e is not None]
    if schools:
        add("education", entries=schools)

    certifications = clean_lines(doc.certifications)
    if certifications:
        add("certifications", items=certifications)

    awards = clean_lines(doc.awards)
    if awards:
        add("awards", items=awards)

    return sections


def render_resume(
    document: ResumeDocument,
    selection: TemplateSelection,
    language: str = "en",
) -> RenderedResume:
    """Построить дерево резюме для выбранного шаблона."""
    lang = normalize_language(language)
    sections = _render_sections(document, lang)
    present = {s.id for s in sections}

    if selection.template_name == TemplateName.CREATIVE:
        layout = "two-column"
        columns = [[sid for sid in column if sid in present] for column in CREATIVE_COLUMNS]
    else:
        layout = "single-column"
        columns = [[sid for sid in SECTION_ORDER if sid in present]]

    return RenderedResume(
        template=selection.template_name,
        layout=layout,
        language=lang,
        palette=build_palette(selection),
        header=_render_header(document.personal_info, lang),
        sections=sections,
        columns=columns,
    )
