from __future__ import annotations

from libs.core.models import ResumeDocument, ResumeInputFields
from services.cvbuilder.cvbuilder_core.fallback import (
    PLACEHOLDER_NAME,
    PLACEHOLDER_SUMMARY,
    split_links,
    synthesize,
    synthesize_from_text,
)


def test_synthesize_is_total_for_empty_fields() -> None:
    document = synthesize(ResumeInputFields())

    assert isinstance(document, ResumeDocument)
    assert document.header.full_name == PLACEHOLDER_NAME
    assert document.summary == PLACEHOLDER_SUMMARY["id"]
    assert document.header.links == []
    assert document.experience == []
    assert document.education == []
    assert document.certifications == []
    assert document.extras == []
    assert document.skills.core == []


def test_synthesize_copies_header_fields() -> None:
    fields = ResumeInputFields.model_validate(
        {
            "firstName": "Ana",
            "lastName": "Putri",
            "email": "ana@example.com",
            "phone": "0812",
            "city": "Bandung",
            "province": "Jawa Barat",
            "title": "Data Analyst",
            "links": "https://a.example, https://b.example\nhttps://c.example",
            "summary": "Numbers person.",
            "experience": "PT Maju 2020-2023",
        }
    )

    document = synthesize(fields, "en")

    assert document.header.full_name == "Ana Putri"
    assert document.header.location == "Bandung, Jawa Barat"
    assert document.header.email == "ana@example.com"
    assert document.header.phone == "0812"
    assert document.header.title == "Data Analyst"
    assert document.header.links == ["https://a.example", "https://b.example", "https://c.example"]
    assert document.summary == "Numbers person."
    assert document.experience == []


def test_synthesize_uses_available_location_parts_and_language_placeholder() -> None:
    document = synthesize(ResumeInputFields(last_name="Putri", province="Bali"), "en")

    assert document.header.full_name == "Putri"
    assert document.header.location == "Bali"
    assert document.summary == PLACEHOLDER_SUMMARY["en"]


def test_synthesize_is_deterministic() -> None:
    fields = ResumeInputFields(first_name="Ana", links="x y")

    assert synthesize(fields) == synthesize(fields)


def test_split_links_ignores_empty_segments() -> None:
    assert split_links(" a ;; b,\n\nc ") == ["a", "b", "c"]
    assert split_links("") == []


def test_synthesize_from_text_uses_first_line_as_name() -> None:
    text = "Ana Putri\nData Analyst\nBandung\nSQL, Excel\nPT Maju"

    document = synthesize_from_text(text, "en")

    assert document.header.full_name == "Ana Putri"
    assert document.summary == "Data Analyst Bandung SQL, Excel"
    assert document.experience == []


def test_synthesize_from_text_handles_empty_text() -> None:
    document = synthesize_from_text("", "id")

    assert document.header.full_name == PLACEHOLDER_NAME
    assert document.summary == PLACEHOLDER_SUMMARY["id"]
