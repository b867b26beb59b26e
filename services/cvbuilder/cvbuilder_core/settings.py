from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from libs.core import llm_provider

from .errors import BuilderError

_DEFAULT_ALLOWED_ORIGIN = "https://arrafahvg.github.io"
_DEFAULT_WORKERS_AI_MODEL = "@cf/meta/llama-3-8b-instruct"
_DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
_DEFAULT_MAX_TOKENS = 1400
_DEFAULT_TEMPERATURE = 0.3
_DEFAULT_TIMEOUT_S = 25.0


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_optional_int(value: str | None) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def normalize_lang(value: str | None, default: str = "id") -> str:
    if value is None or not str(value).strip():
        return default
    return "en" if str(value).strip().lower() == "en" else "id"


@dataclass(frozen=True)
class BuilderSettings:
    llm_provider: str = "mock"
    cf_account_id: str = ""
    cf_api_token: str = ""
    workers_ai_model: str = _DEFAULT_WORKERS_AI_MODEL
    workers_ai_base_url: str = "https://api.cloudflare.com/client/v4"
    openai_api_key: str = ""
    openai_model: str = _DEFAULT_OPENAI_MODEL
    openai_base_url: str = "https://api.openai.com"
    max_tokens: int = _DEFAULT_MAX_TOKENS
    temperature: float = _DEFAULT_TEMPERATURE
    timeout_s: float = _DEFAULT_TIMEOUT_S
    allowed_origin: str = _DEFAULT_ALLOWED_ORIGIN
    default_lang: str = "id"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BuilderSettings":
        env = os.environ if environ is None else environ
        max_tokens = _parse_optional_int(env.get("LLM_MAX_TOKENS"))
        temperature = _parse_optional_float(env.get("LLM_TEMPERATURE"))
        timeout_s = _parse_optional_float(env.get("LLM_TIMEOUT_S"))
        return cls(
            llm_provider=env.get("LLM_PROVIDER", "mock").strip().lower() or "mock",
            cf_account_id=env.get("CF_ACCOUNT_ID", "").strip(),
            cf_api_token=env.get("CF_API_TOKEN", "").strip(),
            workers_ai_model=env.get("WORKERS_AI_MODEL", "").strip() or _DEFAULT_WORKERS_AI_MODEL,
            workers_ai_base_url=env.get("WORKERS_AI_BASE_URL", "").strip()
            or "https://api.cloudflare.com/client/v4",
            openai_api_key=env.get("OPENAI_API_KEY", "").strip(),
            openai_model=env.get("OPENAI_MODEL", "").strip() or _DEFAULT_OPENAI_MODEL,
            openai_base_url=env.get("OPENAI_BASE_URL", "").strip() or "https://api.openai.com",
            max_tokens=max_tokens if max_tokens and max_tokens > 0 else _DEFAULT_MAX_TOKENS,
            temperature=temperature if temperature is not None else _DEFAULT_TEMPERATURE,
            timeout_s=timeout_s if timeout_s and timeout_s > 0 else _DEFAULT_TIMEOUT_S,
            allowed_origin=env.get("ALLOWED_ORIGIN", "").strip() or _DEFAULT_ALLOWED_ORIGIN,
            default_lang=normalize_lang(env.get("DEFAULT_LANG")),
            log_level=env.get("LOG_LEVEL", "").strip() or "INFO",
        )

    @property
    def model(self) -> str:
        if self.llm_provider == "workers_ai":
            return self.workers_ai_model
        if self.llm_provider == "openai":
            return self.openai_model
        return "mock"


def create_provider(settings: BuilderSettings) -> llm_provider.LLMProvider:
    """Build the configured backend; missing credentials are a request-fatal 500."""
    is_workers_ai = settings.llm_provider == "workers_ai"
    try:
        return llm_provider.resolve_provider(
            settings.llm_provider,
            account_id=settings.cf_account_id,
            api_token=settings.cf_api_token,
            api_key=settings.openai_api_key,
            model=settings.workers_ai_model if is_workers_ai else settings.openai_model,
            base_url=settings.workers_ai_base_url if is_workers_ai else settings.openai_base_url,
            timeout_s=settings.timeout_s,
        )
    except ValueError as exc:
        raise BuilderError(
            "backend_not_configured",
            status_code=500,
            extra=str(exc),
        ) from exc
