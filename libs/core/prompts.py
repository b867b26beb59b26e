from __future__ import annotations

from libs.core.models import ResumeInputFields

SYSTEM_PROMPT = "You are a strict JSON-only resume generator."

RESUME_SCHEMA_TEXT = (
    "{\n"
    '  "header": { "full_name": "", "title": "", "location": "", "email": "", "phone": "", "links": [] },\n'
    '  "summary": "",\n'
    '  "skills": { "core": [], "tools": [], "languages": [] },\n'
    '  "experience": [\n'
    "    {\n"
    '      "company": "", "role": "", "location": "", "employment_type": "",\n'
    '      "start_date": "MMM YYYY", "end_date": "MMM YYYY or Present",\n'
    '      "bullets": ["", ""]\n'
    "    }\n"
    "  ],\n"
    '  "education": [\n'
    '    { "degree": "", "school": "", "location": "", "start_date": "", "end_date": "" }\n'
    "  ],\n"
    '  "certifications": [],\n'
    '  "extras": []\n'
    "}"
)

_LANGUAGE_NAMES = {"en": "English", "id": "Bahasa Indonesia"}


def language_name(lang: str) -> str:
    return _LANGUAGE_NAMES["en"] if lang == "en" else _LANGUAGE_NAMES["id"]


def _instructions(lang: str) -> str:
    language = language_name(lang)
    return (
        "You are an expert CV writer. Rewrite the candidate data below into a clean, "
        f"ATS-optimized resume written in {language}.\n"
        "\n"
        "CONTENT RULES:\n"
        "- Merge repeated job titles and duplicated role descriptions into one role.\n"
        "- Write 3-6 bullets per role, each starting with a strong action verb.\n"
        "- Prefer measurable results and concrete impact.\n"
        "- Preserve accurate chronology and company names. Do not invent employers, dates or degrees.\n"
        "- Leave a field as an empty string or empty array when the data does not provide it.\n"
        "\n"
        "OUTPUT RULES:\n"
        "- Respond with a single minified JSON object only.\n"
        "- No markdown, no code fences, no commentary, no surrounding quotes.\n"
        "- Follow this schema exactly (same keys, same nesting):\n"
        f"{RESUME_SCHEMA_TEXT}\n"
    )


def _block(label: str, value: str) -> str:
    return f"{label}:\n{value or '-'}\n"


def build_prompt(fields: ResumeInputFields, lang: str) -> str:
    full_name = " ".join(part for part in (fields.first_name, fields.last_name) if part)
    location = ", ".join(part for part in (fields.city, fields.province) if part)
    blocks = [
        _block("FULL_NAME", full_name),
        _block("TARGET_TITLE", fields.title),
        _block("LOCATION", location),
        _block("EMAIL", fields.email),
        _block("PHONE", fields.phone),
        _block("LINKS", fields.links),
        _block("SUMMARY", fields.summary),
        _block("SKILLS", fields.skills),
        _block("EXPERIENCE", fields.experience),
        _block("EDUCATION", fields.education),
    ]
    return f"{_instructions(lang)}\nCANDIDATE_DATA:\n" + "\n".join(blocks).strip()


def build_text_prompt(text: str, lang: str) -> str:
    return f"{_instructions(lang)}\nRAW_CV:\n{text or '-'}"


def build_reformat_prompt(raw_output: str) -> str:
    return (
        "The text below was supposed to be a single JSON object but could not be parsed.\n"
        "Re-emit it as corrected, bare JSON.\n"
        "- Return ONLY one valid minified JSON object.\n"
        "- No markdown, no code fences, no explanations, no surrounding quotes.\n"
        "- Preserve keys and values as much as possible; fix only syntax and escaping.\n"
        "- The object must follow this schema:\n"
        f"{RESUME_SCHEMA_TEXT}\n"
        "\n"
        "MALFORMED_OUTPUT:\n"
        f"{raw_output}"
    )
