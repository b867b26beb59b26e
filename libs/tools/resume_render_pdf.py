from __future__ import annotations

import io
import re
from typing import Dict, List
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Flowable, HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from libs.core.models import ResumeDocument
from libs.tools.resume_layout import build_resume_layout

RAW_TEXT_TITLE = "Curriculum Vitae (ATS Friendly)"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()["Normal"]
    return {
        "name": ParagraphStyle(
            "Name", parent=base, fontName="Helvetica-Bold", fontSize=16, leading=19, spaceAfter=2
        ),
        "title": ParagraphStyle("Title", parent=base, fontName="Helvetica", fontSize=11, leading=14),
        "contact": ParagraphStyle(
            "Contact", parent=base, fontName="Helvetica", fontSize=9, leading=11, spaceAfter=1
        ),
        "heading": ParagraphStyle(
            "Heading",
            parent=base,
            fontName="Helvetica-Bold",
            fontSize=11,
            leading=13,
            spaceBefore=8,
            spaceAfter=2,
            alignment=TA_LEFT,
        ),
        "body": ParagraphStyle("Body", parent=base, fontName="Helvetica", fontSize=10, leading=12.5),
        "role": ParagraphStyle(
            "Role", parent=base, fontName="Helvetica-Bold", fontSize=10, leading=12.5, spaceBefore=4
        ),
        "meta": ParagraphStyle(
            "Meta", parent=base, fontName="Helvetica-Oblique", fontSize=9, leading=11, spaceAfter=1
        ),
        "bullet": ParagraphStyle(
            "Bullet", parent=base, fontName="Helvetica", fontSize=10, leading=12.5, leftIndent=10
        ),
    }


def _markup(text: str) -> str:
    return escape(_CONTROL_CHARS.sub("", text)).replace("\n", "<br/>")


def _section(story: List[Flowable], heading: str, styles: Dict[str, ParagraphStyle]) -> None:
    story.append(Paragraph(_markup(heading), styles["heading"]))
    story.append(HRFlowable(width="100%", thickness=0.5, spaceBefore=0, spaceAfter=3))


def _build_pdf(story: List[Flowable], title: str) -> bytes:
    buffer = io.BytesIO()
    pdf = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=0.8 * inch,
        rightMargin=0.8 * inch,
        topMargin=0.7 * inch,
        bottomMargin=0.7 * inch,
        title=title,
    )
    pdf.build(story)
    return buffer.getvalue()


def render_resume_pdf(document: ResumeDocument, lang: str = "en") -> bytes:
    layout = build_resume_layout(document, lang)
    styles = _styles()
    story: List[Flowable] = []

    story.append(Paragraph(_markup(layout.name or "Curriculum Vitae"), styles["name"]))
    if layout.title:
        story.append(Paragraph(_markup(layout.title), styles["title"]))
    for line in (layout.contact_line, layout.links_line):
        if line:
            story.append(Paragraph(_markup(line), styles["contact"]))
    story.append(Spacer(1, 6))

    if layout.summary:
        _section(story, layout.headings["summary"], styles)
        story.append(Paragraph(_markup(layout.summary), styles["body"]))

    if layout.skill_lines:
        _section(story, layout.headings["skills"], styles)
        for line in layout.skill_lines:
            story.append(Paragraph(_markup(line), styles["body"]))

    if layout.roles:
        _section(story, layout.headings["experience"], styles)
        for role in layout.roles:
            if role.heading:
                story.append(Paragraph(_markup(role.heading), styles["role"]))
            if role.meta:
                story.append(Paragraph(_markup(role.meta), styles["meta"]))
            for bullet in role.bullets:
                story.append(Paragraph(f"• {_markup(bullet)}", styles["bullet"]))

    for key, lines in (
        ("education", layout.education_lines),
        ("certifications", layout.certification_lines),
        ("extras", layout.extras),
    ):
        if not lines:
            continue
        _section(story, layout.headings[key], styles)
        for line in lines:
            story.append(Paragraph(f"• {_markup(line)}", styles["bullet"]))

    return _build_pdf(story, title=f"{layout.name or 'Resume'} - CV")


def render_text_pdf(text: str, title: str = RAW_TEXT_TITLE) -> bytes:
    """Plain document used when no structured resume is available."""
    styles = _styles()
    story: List[Flowable] = [Paragraph(_markup(title), styles["name"]), Spacer(1, 8)]
    blocks = [block.strip() for block in (text or "").split("\n\n") if block.strip()]
    for block in blocks:
        story.append(Paragraph(_markup(block), styles["body"]))
        story.append(Spacer(1, 6))
    return _build_pdf(story, title=title)
