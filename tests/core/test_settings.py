from __future__ import annotations

import pytest

from libs.core.llm_provider import MockLLMProvider, WorkersAIProvider
from services.cvbuilder.cvbuilder_core.errors import BuilderError
from services.cvbuilder.cvbuilder_core.settings import (
    BuilderSettings,
    create_provider,
    normalize_lang,
)


def test_from_env_defaults() -> None:
    settings = BuilderSettings.from_env({})

    assert settings.llm_provider == "mock"
    assert settings.max_tokens == 1400
    assert settings.temperature == 0.3
    assert settings.allowed_origin == "https://arrafahvg.github.io"
    assert settings.default_lang == "id"
    assert settings.model == "mock"


def test_from_env_reads_overrides() -> None:
    settings = BuilderSettings.from_env(
        {
            "LLM_PROVIDER": " Workers_AI ",
            "CF_ACCOUNT_ID": "acct",
            "CF_API_TOKEN": "tok",
            "LLM_MAX_TOKENS": "800",
            "LLM_TEMPERATURE": "0",
            "LLM_TIMEOUT_S": "10",
            "ALLOWED_ORIGIN": "https://cv.example.org",
            "DEFAULT_LANG": "en",
        }
    )

    assert settings.llm_provider == "workers_ai"
    assert settings.max_tokens == 800
    assert settings.temperature == 0.0
    assert settings.timeout_s == 10.0
    assert settings.allowed_origin == "https://cv.example.org"
    assert settings.default_lang == "en"
    assert settings.model == "@cf/meta/llama-3-8b-instruct"


def test_from_env_ignores_invalid_numbers() -> None:
    settings = BuilderSettings.from_env(
        {"LLM_MAX_TOKENS": "lots", "LLM_TEMPERATURE": "warm", "LLM_TIMEOUT_S": "-3"}
    )

    assert settings.max_tokens == 1400
    assert settings.temperature == 0.3
    assert settings.timeout_s == 25.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [("en", "en"), (" EN ", "en"), ("id", "id"), ("fr", "id"), ("", "id"), (None, "id")],
)
def test_normalize_lang(value, expected) -> None:
    assert normalize_lang(value) == expected


def test_normalize_lang_uses_given_default_for_blank() -> None:
    assert normalize_lang("  ", default="en") == "en"


def test_create_provider_rejects_missing_credentials() -> None:
    settings = BuilderSettings(llm_provider="workers_ai", cf_account_id="acct")

    with pytest.raises(BuilderError) as excinfo:
        create_provider(settings)

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail == "backend_not_configured"


def test_create_provider_builds_backends() -> None:
    workers = create_provider(
        BuilderSettings(llm_provider="workers_ai", cf_account_id="acct", cf_api_token="tok")
    )

    assert isinstance(workers, WorkersAIProvider)
    assert workers.model == "@cf/meta/llama-3-8b-instruct"
    assert isinstance(create_provider(BuilderSettings()), MockLLMProvider)
