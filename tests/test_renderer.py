import unittest

from resume_ats.rendering.labels import label, normalize_language
from resume_ats.rendering.renderer import (
    CONTACT_SEPARATOR,
    CORPORATE_BLACK,
    NAMED_THEMES,
    SECTION_ORDER,
    render_resume,
    resolve_theme_color,
)
from resume_ats.schemas.resume import DEFAULT_THEME_COLOR, ResumeDocument, TemplateName, TemplateSelection
from tests.support import SAMPLE_RESUME


def _selection(template=TemplateName.PROFESSIONAL, color="#123456"):
    return TemplateSelection(template_name=template, theme_color=color)


class RendererTests(unittest.TestCase):
    def setUp(self):
        self.doc = ResumeDocument.model_validate(SAMPLE_RESUME)

    def test_blank_list_sections_are_omitted(self):
        rendered = render_resume(self.doc, _selection())
        # awards содержит только пробельные строки
        self.assertIsNone(rendered.section("awards"))
        self.assertNotIn("awards", rendered.columns[0])

        empty = ResumeDocument.model_validate({"skills": ["", " "], "certifications": [], "summary": "  "})
        self.assertEqual(render_resume(empty, _selection()).sections, [])

    def test_entries_without_heading_are_dropped(self):
        doc = ResumeDocument.model_validate(
            {"workExperience": [{"position": " ", "company": "", "description": ["Led X"]}]}
        )
        self.assertIsNone(render_resume(doc, _selection()).section("work_experience"))

    def test_blank_bullets_are_dropped(self):
        rendered = render_resume(self.doc, _selection())
        entry = rendered.section("work_experience").entries[0]
        self.assertEqual(entry.bullets, ["Led X"])
        self.assertEqual(entry.heading, "Senior Engineer — Acme")
        self.assertEqual(entry.meta, "2019 – Present • Bangkok")

    def test_skills_are_trimmed(self):
        rendered = render_resume(self.doc, _selection())
        self.assertEqual(rendered.section("skills").items, ["Python", "FastAPI"])

    def test_education_bullets(self):
        entry = render_resume(self.doc, _selection()).section("education").entries[0]
        self.assertEqual(entry.heading, "B.Sc. Computer Science")
        self.assertEqual(entry.bullets, ["GPA: 3.50", "Compiler project", "Distributed cache"])

    def test_corporate_ignores_theme_color(self):
        for color in ("#ff0000", "rose", "", "javascript:alert(1)"):
            rendered = render_resume(self.doc, _selection(TemplateName.CORPORATE, color))
            self.assertEqual(rendered.palette.accent, CORPORATE_BLACK)
            self.assertEqual(rendered.palette.header, CORPORATE_BLACK)
            self.assertEqual(rendered.palette.header_style, "rule")

    def test_theme_color_resolution(self):
        self.assertEqual(resolve_theme_color("Rose"), NAMED_THEMES["rose"])
        self.assertEqual(resolve_theme_color("#ABCDEF"), "#abcdef")
        self.assertEqual(resolve_theme_color("red; background:url(x)"), DEFAULT_THEME_COLOR)
        self.assertEqual(resolve_theme_color(None), DEFAULT_THEME_COLOR)

        rendered = render_resume(self.doc, _selection(TemplateName.PROFESSIONAL, "emerald"))
        self.assertEqual(rendered.palette.accent, NAMED_THEMES["emerald"])
        self.assertEqual(rendered.palette.header_style, "filled")

    def test_rendering_is_deterministic(self):
        first = render_resume(self.doc, _selection(TemplateName.CREATIVE))
        second = render_resume(self.doc, _selection(TemplateName.CREATIVE))
        self.assertEqual(first.model_dump_json(), second.model_dump_json())

    def test_single_column_order(self):
        rendered = render_resume(self.doc, _selection())
        self.assertEqual(rendered.layout, "single-column")
        self.assertEqual(len(rendered.columns), 1)
        expected = [sid for sid in SECTION_ORDER if rendered.section(sid) is not None]
        self.assertEqual(rendered.columns[0], expected)

    def test_creative_two_columns(self):
        rendered = render_resume(self.doc, _selection(TemplateName.CREATIVE))
        self.assertEqual(rendered.layout, "two-column")
        self.assertEqual(rendered.columns[0], ["summary", "work_experience", "certifications"])
        self.assertEqual(rendered.columns[1], ["skills", "education"])

    def test_header(self):
        header = render_resume(self.doc, _selection()).header
        self.assertEqual(header.prefix, "Mr.")
        self.assertEqual(header.name, "John Doe")
        self.assertEqual(
            header.contact_line,
            CONTACT_SEPARATOR.join(["+66 81 234 5678", "john@example.com", "linkedin.com/in/johndoe", "Bangkok"]),
        )
        self.assertTrue(header.age_label.startswith("Age "))

    def test_placeholder_name(self):
        rendered = render_resume(ResumeDocument(), _selection())
        self.assertEqual(rendered.header.name, "Your Name")
        self.assertEqual(rendered.header.contact_line, "")
        self.assertIsNone(rendered.header.age_label)

    def test_thai_labels(self):
        rendered = render_resume(self.doc, _selection(), language="th")
        self.assertEqual(rendered.language, "th")
        self.assertEqual(rendered.section("skills").title, label("skills", "th"))
        self.assertEqual(rendered.section("education").entries[0].bullets[0], "เกรดเฉลี่ย: 3.50")

    def test_unknown_language_falls_back_to_english(self):
        self.assertEqual(normalize_language("xx"), "en")
        rendered = render_resume(self.doc, _selection(), language="xx")
        self.assertEqual(rendered.section("summary").title, "Professional Summary")
