"""
Схемы для резюме.

ResumeDocument — каноническая структура резюме. Имена полей в API — camelCase
(как хранит клиент-редактор), в Python — snake_case.
Пустые строки в списках сохраняются как есть: их отбрасывает только рендерер.
"""
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_THEME_COLOR = "#0b6efd"

_BIRTH_DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")


def derive_age(birth_date: str | None, today: date) -> int | None:
    """
    Возраст по дате рождения (DD/MM/YYYY или YYYY-MM-DD) на дату today.
    Если день рождения в этом году ещё не наступил — минус год.
    """
    if not birth_date or not birth_date.strip():
        return None
    born = None
    for fmt in _BIRTH_DATE_FORMATS:
        try:
            born = datetime.strptime(birth_date.strip(), fmt).date()
            break
        except ValueError:
            continue
    if born is None or born > today:
        return None
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PersonalInfo(CamelModel):
    prefix: str | None = None
    full_name: str = ""
    phone: str = ""
    email: str = ""
    linkedin: str = ""
    portfolio: str | None = None
    website: str | None = None
    address: str | None = None
    profile_image_ref: str | None = None
    birth_date: str | None = None
    age: int | None = None

    @model_validator(mode="after")
    def _derive_age(self):
        # age всегда производный от birth_date, присланное значение не используется
        self.age = derive_age(self.birth_date, date.today())
        return self


class WorkExperience(CamelModel):
    id: str = ""
    position: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: list[str] = Field(default_factory=list)


class Education(CamelModel):
    id: str = ""
    degree: str = ""
    institution: str = ""
    location: str = ""
    graduation_year: str = ""
    gpa: str | None = None
    projects: str | None = None


class ResumeDocument(CamelModel):
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    work_experience: list[WorkExperience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    awards: list[str] = Field(default_factory=list)


class TemplateName(str, Enum):
    PROFESSIONAL = "Professional"
    CREATIVE = "Creative"
    CORPORATE = "Corporate"


class TemplateSelection(CamelModel):
    template_name: TemplateName = TemplateName.PROFESSIONAL
    theme_color: str = DEFAULT_THEME_COLOR


class ResumeCreate(CamelModel):
    """Первое сохранение резюме."""

    template_name: TemplateName = TemplateName.PROFESSIONAL
    theme_color: str = Field(default=DEFAULT_THEME_COLOR, max_length=64)
    resume_data: ResumeDocument = Field(default_factory=ResumeDocument)
    is_public: bool = False


class ResumeUpdate(CamelModel):
    """Обновление резюме (частичное)."""

    template_name: TemplateName | None = None
    theme_color: str | None = Field(default=None, max_length=64)
    resume_data: ResumeDocument | None = None
    is_public: bool | None = None


class Resume(CamelModel):
    """Резюме в ответах API."""

    id: str
    user_id: str
    template_name: TemplateName
    theme_color: str
    resume_data: ResumeDocument
    is_public: bool = False
    created_at: datetime
    updated_at: datetime

    def selection(self) -> TemplateSelection:
        return TemplateSelection(template_name=self.template_name, theme_color=self.theme_color)
