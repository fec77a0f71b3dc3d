"""
Общая таблица подписей для всех кодировщиков (превью, печать, Word).

Ключ — идентификатор секции или подписи, значение — перевод по языкам.
Новый язык или подпись добавляется только здесь.
"""
DEFAULT_LANGUAGE = "en"

LABELS: dict[str, dict[str, str]] = {
    "summary": {"en": "Professional Summary", "th": "สรุปประสบการณ์"},
    "skills": {"en": "Skills", "th": "ความสามารถ/ทักษะ"},
    "work_experience": {"en": "Work Experience", "th": "ประสบการณ์ทำงาน"},
    "education": {"en": "Education", "th": "การศึกษา"},
    "certifications": {"en": "Certifications", "th": "ใบรับรอง"},
    "awards": {"en": "Awards", "th": "รางวัลและเกียรติยศ"},
    "placeholder_name": {"en": "Your Name", "th": "ชื่อ นามสกุล"},
    "document_title": {"en": "Resume", "th": "เรซูเม่"},
    "age": {"en": "Age {age}", "th": "อายุ {age} ปี"},
    "gpa": {"en": "GPA: {gpa}", "th": "เกรดเฉลี่ย: {gpa}"},
}

SUPPORTED_LANGUAGES = frozenset(lang for entry in LABELS.values() for lang in entry)


def normalize_language(language: str | None) -> str:
    lang = (language or "").strip().lower()
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def label(key: str, language: str, **values) -> str:
    """Подпись по ключу; нет перевода — английский вариант."""
    entry = LABELS[key]
    text = entry.get(language) or entry[DEFAULT_LANGUAGE]
    return text.format(**values) if values else text
