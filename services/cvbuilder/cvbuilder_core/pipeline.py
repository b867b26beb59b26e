from __future__ import annotations

import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, List, Tuple

from prometheus_client import Counter, Histogram
from pydantic import ValidationError

from libs.core import logging as core_logging, prompts
from libs.core.llm_provider import InferenceResult, LLMProvider
from libs.core.models import ResumeDocument, ResumeInputFields

from .coercion import CoercionAttempt, run_coercion
from .errors import BuilderError
from .fallback import synthesize, synthesize_from_text
from .normalize import normalize_fields, normalize_raw_text
from .settings import BuilderSettings

LOGGER = core_logging.get_logger("cvbuilder")

SOURCE_MODEL = "model"
SOURCE_REFORMAT = "reformat"
SOURCE_FALLBACK = "fallback"

llm_calls_total = Counter("llm_calls_total", "Model backend calls", ["outcome"])
llm_call_seconds = Histogram("llm_call_seconds", "Model backend call duration in seconds")


@dataclass(frozen=True)
class PreparedRequest:
    prompt: str
    fallback: Callable[[], ResumeDocument]


@dataclass(frozen=True)
class GenerationOutcome:
    document: ResumeDocument
    source: str
    attempts: Tuple[CoercionAttempt, ...]
    model_calls: int


def prepare_request(inputs: Any, lang: str) -> PreparedRequest:
    if isinstance(inputs, str):
        text = normalize_raw_text(inputs)
        return PreparedRequest(
            prompt=prompts.build_text_prompt(text, lang),
            fallback=partial(synthesize_from_text, text, lang),
        )
    if isinstance(inputs, ResumeInputFields):
        fields = inputs
    elif isinstance(inputs, dict):
        try:
            fields = ResumeInputFields.model_validate(inputs)
        except ValidationError as exc:
            raise BuilderError(
                "invalid_inputs",
                extra=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()],
            ) from exc
    else:
        raise BuilderError("inputs_required")
    fields = normalize_fields(fields)
    return PreparedRequest(
        prompt=prompts.build_prompt(fields, lang),
        fallback=partial(synthesize, fields, lang),
    )


def run_model(provider: LLMProvider, prompt: str, settings: BuilderSettings) -> InferenceResult:
    started_at = time.monotonic()
    result = provider.run_model(
        prompt,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        system_prompt=prompts.SYSTEM_PROMPT,
    )
    duration_s = max(0.0, time.monotonic() - started_at)
    llm_call_seconds.observe(duration_s)
    llm_calls_total.labels(outcome="ok" if result.ok else "error").inc()
    fields = {
        "provider": provider.name,
        "model": provider.model,
        "status": result.status,
        "prompt_chars": len(prompt),
        "duration_ms": int(duration_s * 1000),
    }
    if result.ok:
        LOGGER.info("llm_run_finished", response_chars=len(result.raw_text), **fields)
    else:
        LOGGER.warning("llm_run_failed", error=result.error, **fields)
    return result


def generate_resume(
    inputs: Any,
    lang: str,
    provider: LLMProvider,
    settings: BuilderSettings,
) -> GenerationOutcome:
    """Model call, one reformat retry, then the input-only fallback.

    Only a transport failure on the first call raises; malformed output always
    ends in a document.
    """
    request = prepare_request(inputs, lang)
    attempts: List[CoercionAttempt] = []

    first = run_model(provider, request.prompt, settings)
    if not first.ok:
        raise BuilderError(
            "model_request_failed",
            status_code=502,
            extra={"status": first.status, "error": first.error},
        )
    attempts.append(run_coercion(first.raw_text))
    if attempts[-1].document is not None:
        return _finish(attempts[-1].document, SOURCE_MODEL, attempts, model_calls=1)

    retry = run_model(provider, prompts.build_reformat_prompt(first.raw_text), settings)
    if retry.ok:
        attempts.append(run_coercion(retry.raw_text))
        if attempts[-1].document is not None:
            return _finish(attempts[-1].document, SOURCE_REFORMAT, attempts, model_calls=2)

    return _finish(request.fallback(), SOURCE_FALLBACK, attempts, model_calls=2)


def _finish(
    document: ResumeDocument,
    source: str,
    attempts: List[CoercionAttempt],
    *,
    model_calls: int,
) -> GenerationOutcome:
    LOGGER.info(
        "resume_generated",
        source=source,
        attempts=len(attempts),
        model_calls=model_calls,
        experience_entries=len(document.experience),
    )
    return GenerationOutcome(
        document=document,
        source=source,
        attempts=tuple(attempts),
        model_calls=model_calls,
    )
