from __future__ import annotations

from libs.core import prompts
from libs.core.models import ResumeInputFields


def _fields(**overrides) -> ResumeInputFields:
    data = {
        "firstName": "Siti",
        "lastName": "Rahma",
        "email": "siti@example.com",
        "city": "Bandung",
        "province": "Jawa Barat",
        "title": "Data Analyst",
        "experience": "Analyst at PT Maju 2020-2023",
    }
    data.update(overrides)
    return ResumeInputFields.model_validate(data)


def test_build_prompt_is_deterministic() -> None:
    fields = _fields()

    assert prompts.build_prompt(fields, "en") == prompts.build_prompt(fields, "en")


def test_build_prompt_names_language_and_embeds_schema() -> None:
    english = prompts.build_prompt(_fields(), "en")
    indonesian = prompts.build_prompt(_fields(), "id")

    assert "written in English" in english
    assert "written in Bahasa Indonesia" in indonesian
    assert prompts.RESUME_SCHEMA_TEXT in english
    assert "single minified JSON object" in english


def test_build_prompt_includes_candidate_blocks_and_dashes_for_empty() -> None:
    prompt = prompts.build_prompt(_fields(), "en")

    assert "FULL_NAME:\nSiti Rahma\n" in prompt
    assert "LOCATION:\nBandung, Jawa Barat\n" in prompt
    assert "EXPERIENCE:\nAnalyst at PT Maju 2020-2023\n" in prompt
    assert "PHONE:\n-\n" in prompt
    assert prompt.index("CANDIDATE_DATA:") > prompt.index("OUTPUT RULES:")


def test_build_text_prompt_carries_raw_cv() -> None:
    prompt = prompts.build_text_prompt("Siti Rahma\nData Analyst", "id")

    assert prompt.endswith("RAW_CV:\nSiti Rahma\nData Analyst")
    assert "Bahasa Indonesia" in prompt


def test_reformat_prompt_embeds_raw_output_verbatim() -> None:
    raw = 'Sure! ```json {"header": {"full_name": "A"},} ```'

    prompt = prompts.build_reformat_prompt(raw)

    assert prompt.endswith(raw)
    assert "bare JSON" in prompt
    assert prompts.RESUME_SCHEMA_TEXT in prompt


def test_input_fields_coerce_nulls_numbers_and_lists() -> None:
    fields = ResumeInputFields.model_validate(
        {
            "first_name": None,
            "phone": 628123,
            "skills": ["SQL", " Python ", None, ""],
            "summary": "  trimmed  ",
            "unknown": "ignored",
        }
    )

    assert fields.first_name == ""
    assert fields.phone == "628123"
    assert fields.skills == "SQL\nPython"
    assert fields.summary == "trimmed"
