from __future__ import annotations

import re
from typing import Any, Dict

from libs.core.models import ResumeInputFields

# Character caps per input field.
FIELD_LIMITS: Dict[str, int] = {
    "first_name": 60,
    "last_name": 60,
    "email": 120,
    "phone": 40,
    "city": 80,
    "province": 80,
    "title": 120,
    "links": 400,
    "skills": 1200,
    "experience": 6000,
    "education": 2000,
    "summary": 1500,
}
RAW_TEXT_LIMIT = 12000

_BULLET_GLYPHS = re.compile("[•·●▪◦‣∙■□►➤★○]")
_LEADING_ASTERISK = re.compile(r"(?m)^(\s*)\*(?=\s)")
_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" ?\n ?")
_BLANK_LINE_RUNS = re.compile(r"\n{3,}")
_SKILL_COUNTERS = re.compile(r"\+?\d+\s*skills?\b", re.IGNORECASE)
_DOUBLED_WORDS = re.compile(r"\b([A-Za-z][a-z]+)[ \t]+\1\b", re.IGNORECASE)


def normalize(raw: Any, limit: int) -> str:
    if raw is None:
        return ""
    text = str(raw).replace("\r", "")
    text = _BULLET_GLYPHS.sub("-", text)
    text = _LEADING_ASTERISK.sub(r"\1-", text)
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _BLANK_LINE_RUNS.sub("\n\n", text)
    return text.strip()[: max(0, limit)]


def strip_profile_noise(text: str) -> str:
    """Drop profile-export noise: "+5 skills" counters and same-line doubled words."""
    cleaned = _SKILL_COUNTERS.sub("", text or "")
    return _DOUBLED_WORDS.sub(r"\1", cleaned)


def normalize_fields(fields: ResumeInputFields) -> ResumeInputFields:
    updates = {
        name: normalize(getattr(fields, name), limit) for name, limit in FIELD_LIMITS.items()
    }
    return fields.model_copy(update=updates)


def normalize_raw_text(text: str) -> str:
    return normalize(strip_profile_noise(text), RAW_TEXT_LIMIT)
