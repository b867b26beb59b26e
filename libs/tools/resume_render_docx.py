from __future__ import annotations

import io

from docx import Document
from docx.shared import Inches, Pt

from libs.core.models import ResumeDocument
from libs.tools.resume_layout import build_resume_layout


def _apply_theme(document: Document) -> None:
    normal_style = document.styles["Normal"]
    normal_style.font.name = "Calibri"
    normal_style.font.size = Pt(11)
    normal_style.paragraph_format.space_after = Pt(3)
    normal_style.paragraph_format.line_spacing = 1.1
    try:
        heading_style = document.styles["Heading 1"]
        heading_style.font.size = Pt(12)
        heading_style.font.bold = True
        heading_style.paragraph_format.space_before = Pt(10)
        heading_style.paragraph_format.space_after = Pt(2)
    except KeyError:
        pass
    section = document.sections[0]
    section.top_margin = Inches(0.8)
    section.bottom_margin = Inches(0.8)
    section.left_margin = Inches(0.9)
    section.right_margin = Inches(0.9)


def _add_bullets(document: Document, items: list[str]) -> None:
    for item in items:
        document.add_paragraph(item, style="List Bullet")


def render_resume_docx(document: ResumeDocument, lang: str = "en") -> bytes:
    layout = build_resume_layout(document, lang)
    docx_document = Document()
    _apply_theme(docx_document)

    name = docx_document.add_paragraph()
    name_run = name.add_run(layout.name or "Curriculum Vitae")
    name_run.bold = True
    name_run.font.size = Pt(16)
    if layout.title:
        docx_document.add_paragraph(layout.title)
    for line in (layout.contact_line, layout.links_line):
        if line:
            contact = docx_document.add_paragraph()
            contact.add_run(line).font.size = Pt(9)

    if layout.summary:
        docx_document.add_heading(layout.headings["summary"], level=1)
        docx_document.add_paragraph(layout.summary)

    if layout.skill_lines:
        docx_document.add_heading(layout.headings["skills"], level=1)
        for line in layout.skill_lines:
            docx_document.add_paragraph(line)

    if layout.roles:
        docx_document.add_heading(layout.headings["experience"], level=1)
        for role in layout.roles:
            if role.heading:
                docx_document.add_paragraph().add_run(role.heading).bold = True
            if role.meta:
                docx_document.add_paragraph().add_run(role.meta).italic = True
            _add_bullets(docx_document, role.bullets)

    for key, lines in (
        ("education", layout.education_lines),
        ("certifications", layout.certification_lines),
        ("extras", layout.extras),
    ):
        if lines:
            docx_document.add_heading(layout.headings[key], level=1)
            _add_bullets(docx_document, lines)

    buffer = io.BytesIO()
    docx_document.save(buffer)
    return buffer.getvalue()
