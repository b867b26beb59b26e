from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from libs.core import logging as core_logging
from libs.core.models import RESUME_DOCUMENT_KEYS, ResumeDocument

LOGGER = core_logging.get_logger("cvbuilder")

_FENCE = re.compile(r"```[A-Za-z0-9_-]*")
_ESCAPED_CHAR = re.compile(r'\\(["\\n])')
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_INVISIBLE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b-\u200f\u2028\u2029\u2060\ufeff]")
_UNESCAPED = {'"': '"', "\\": "\\", "n": "\n"}

Strategy = Callable[[str], Optional[Dict[str, Any]]]


@dataclass
class CoercionAttempt:
    raw_text: str
    strategies: List[str] = field(default_factory=list)
    payload: Optional[Dict[str, Any]] = None
    document: Optional[ResumeDocument] = None
    rejected_reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.document is not None


def strip_fences(text: str) -> str:
    return _FENCE.sub("", text or "")


def _loads(text: str, *, strict: bool = True) -> Any:
    try:
        return json.loads(text, strict=strict)
    except (ValueError, RecursionError):
        return None


def _as_object(parsed: Any, *, strict: bool = True) -> Optional[Dict[str, Any]]:
    if isinstance(parsed, dict):
        return parsed
    if isinstance(parsed, str):
        inner = _loads(parsed.strip(), strict=strict)
        if isinstance(inner, dict):
            return inner
    return None


def _outer_span(text: str) -> Optional[str]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _looks_escaped(text: str) -> bool:
    return '\\"' in text or "\\n" in text


def _unescape(text: str) -> str:
    return _ESCAPED_CHAR.sub(lambda match: _UNESCAPED[match.group(1)], text)


def _drop_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(r"\1", text)


def parse_direct(text: str) -> Optional[Dict[str, Any]]:
    return _as_object(_loads(text.strip()))


def parse_outer_span(text: str) -> Optional[Dict[str, Any]]:
    span = _outer_span(text)
    if span is None:
        return None
    return _as_object(_loads(span))


def parse_unescaped(text: str) -> Optional[Dict[str, Any]]:
    span = _outer_span(text)
    if span is None or not _looks_escaped(span):
        return None
    repaired = _drop_trailing_commas(_unescape(span))
    return _as_object(_loads(repaired, strict=False), strict=False)


def parse_printable(text: str) -> Optional[Dict[str, Any]]:
    visible = _INVISIBLE.sub("", text)
    span = _outer_span(visible)
    if span is None:
        return None
    candidates = [span]
    if _looks_escaped(span):
        candidates.append(_unescape(span))
    for candidate in candidates:
        parsed = _as_object(_loads(_drop_trailing_commas(candidate), strict=False), strict=False)
        if parsed is not None:
            return parsed
    return None


# Tried in order; the first JSON object found wins.
STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("direct", parse_direct),
    ("outer_span", parse_outer_span),
    ("unescape", parse_unescaped),
    ("printable", parse_printable),
)


def extract_json_object(raw_text: Any) -> CoercionAttempt:
    """Run the repair strategies in order and stop at the first JSON object."""
    raw = raw_text if isinstance(raw_text, str) else ("" if raw_text is None else str(raw_text))
    attempt = CoercionAttempt(raw_text=raw)
    text = strip_fences(raw)
    for name, strategy in STRATEGIES:
        attempt.strategies.append(name)
        payload = strategy(text)
        if payload is not None:
            attempt.payload = payload
            break
    return attempt


def conform(payload: Dict[str, Any]) -> Tuple[Optional[ResumeDocument], str]:
    if not any(key in payload for key in RESUME_DOCUMENT_KEYS):
        return None, "no_known_sections"
    try:
        return ResumeDocument.model_validate(payload), ""
    except ValidationError as exc:
        return None, f"schema_mismatch:{exc.error_count()}"


def run_coercion(raw_text: Any) -> CoercionAttempt:
    attempt = extract_json_object(raw_text)
    if attempt.payload is None:
        attempt.rejected_reason = "no_json_object"
    else:
        attempt.document, attempt.rejected_reason = conform(attempt.payload)
    LOGGER.info(
        "coercion_finished",
        raw_chars=len(attempt.raw_text),
        strategies=list(attempt.strategies),
        succeeded=attempt.succeeded,
        rejected_reason=attempt.rejected_reason or None,
    )
    return attempt


def coerce(raw_text: Any) -> Optional[ResumeDocument]:
    return run_coercion(raw_text).document
