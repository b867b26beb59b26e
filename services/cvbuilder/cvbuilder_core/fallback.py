from __future__ import annotations

import re

from libs.core.models import ResumeDocument, ResumeHeader, ResumeInputFields

PLACEHOLDER_NAME = "Your Name"
PLACEHOLDER_SUMMARY = {
    "en": "Motivated professional ready to contribute to a new team.",
    "id": "Profesional yang termotivasi dan siap berkontribusi pada tim baru.",
}

_LINK_SEPARATORS = re.compile(r"[\s,;]+")


def _placeholder_summary(lang: str) -> str:
    return PLACEHOLDER_SUMMARY["en"] if lang == "en" else PLACEHOLDER_SUMMARY["id"]


def split_links(links: str) -> list[str]:
    return [link for link in _LINK_SEPARATORS.split(links or "") if link]


def synthesize(fields: ResumeInputFields, lang: str = "id") -> ResumeDocument:
    """Build a minimal schema-valid document from the form fields alone.

    Free-text experience and education are not segmented without a model, so
    every array section stays empty.
    """
    full_name = " ".join(part for part in (fields.first_name, fields.last_name) if part)
    location = ", ".join(part for part in (fields.city, fields.province) if part)
    return ResumeDocument(
        header=ResumeHeader(
            full_name=full_name or PLACEHOLDER_NAME,
            title=fields.title,
            location=location,
            email=fields.email,
            phone=fields.phone,
            links=split_links(fields.links),
        ),
        summary=fields.summary or _placeholder_summary(lang),
    )


def synthesize_from_text(text: str, lang: str = "id") -> ResumeDocument:
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    full_name = lines[0] if lines else PLACEHOLDER_NAME
    summary = " ".join(lines[1:4])
    return ResumeDocument(
        header=ResumeHeader(full_name=full_name),
        summary=summary or _placeholder_summary(lang),
    )
