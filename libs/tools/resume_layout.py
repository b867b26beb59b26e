from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from libs.core.models import ResumeDocument

_SECTION_HEADINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "summary": "SUMMARY",
        "skills": "SKILLS",
        "experience": "EXPERIENCE",
        "education": "EDUCATION",
        "certifications": "CERTIFICATIONS",
        "extras": "ADDITIONAL INFORMATION",
        "core": "Core",
        "tools": "Tools",
        "languages": "Languages",
    },
    "id": {
        "summary": "RINGKASAN",
        "skills": "KEAHLIAN",
        "experience": "PENGALAMAN KERJA",
        "education": "PENDIDIKAN",
        "certifications": "SERTIFIKASI",
        "extras": "INFORMASI TAMBAHAN",
        "core": "Utama",
        "tools": "Perangkat",
        "languages": "Bahasa",
    },
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


@dataclass(frozen=True)
class RoleBlock:
    heading: str
    meta: str
    bullets: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ResumeLayout:
    name: str
    title: str
    contact_line: str
    links_line: str
    summary: str
    skill_lines: List[str]
    roles: List[RoleBlock]
    education_lines: List[str]
    certification_lines: List[str]
    extras: List[str]
    headings: Dict[str, str]


def section_headings(lang: str) -> Dict[str, str]:
    return _SECTION_HEADINGS["id"] if lang == "id" else _SECTION_HEADINGS["en"]


def _visible(text: str) -> str:
    return _CONTROL_CHARS.sub("", text or "").strip()


def _joined(parts: List[str], separator: str = " | ") -> str:
    return separator.join(_visible(part) for part in parts if _visible(part))


def _format_dates(start: Optional[str], end: Optional[str]) -> str:
    s = (start or "").strip()
    e = (end or "").strip()
    if s and e:
        return f"{s} - {e}"
    if s:
        return s
    if e:
        return e
    return ""


def _clean_items(items: List[str]) -> List[str]:
    return [_visible(item) for item in items if _visible(item)]


def build_resume_layout(document: ResumeDocument, lang: str = "en") -> ResumeLayout:
    headings = section_headings(lang)
    header = document.header

    skill_lines: List[str] = []
    for key in ("core", "tools", "languages"):
        items = _clean_items(getattr(document.skills, key))
        if items:
            skill_lines.append(f"{headings[key]}: {', '.join(items)}")

    roles: List[RoleBlock] = []
    for role in document.experience:
        heading = _joined([role.role, role.company])
        meta = _joined(
            [role.location, role.employment_type, _format_dates(role.start_date, role.end_date)]
        )
        bullets = _clean_items(role.bullets)
        if heading or meta or bullets:
            roles.append(RoleBlock(heading=heading, meta=meta, bullets=bullets))

    education_lines = [
        line
        for line in (
            _joined(
                [
                    edu.degree,
                    edu.school,
                    edu.location,
                    _format_dates(edu.start_date, edu.end_date),
                ]
            )
            for edu in document.education
        )
        if line
    ]

    return ResumeLayout(
        name=_visible(header.full_name),
        title=_visible(header.title),
        contact_line=_joined([header.location, header.phone, header.email]),
        links_line=_joined(_clean_items(header.links)),
        summary=_visible(document.summary),
        skill_lines=skill_lines,
        roles=roles,
        education_lines=education_lines,
        certification_lines=_clean_items(document.certifications),
        extras=_clean_items(document.extras),
        headings=headings,
    )
