from __future__ import annotations

import http.client
import json
import socket
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

_ERROR_SNIPPET_CHARS = 500


@dataclass(frozen=True)
class InferenceResult:
    ok: bool
    status: int
    raw_text: str = ""
    error: str = ""


class LLMProvider:
    name = "base"
    model = ""

    def run_model(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        system_prompt: Optional[str] = None,
    ) -> InferenceResult:  # pragma: no cover - interface
        raise NotImplementedError


class MockLLMProvider(LLMProvider):
    name = "mock"
    model = "mock"

    def run_model(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        system_prompt: Optional[str] = None,
    ) -> InferenceResult:
        return InferenceResult(ok=True, status=200, raw_text="Mock response")


class WorkersAIProvider(LLMProvider):
    """Cloudflare Workers AI text generation (`/ai/run/{model}`)."""

    name = "workers_ai"

    def __init__(
        self,
        account_id: str,
        api_token: str,
        model: str,
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout_s: float = 25.0,
    ) -> None:
        self.account_id = account_id
        self.api_token = api_token
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def run_model(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        system_prompt: Optional[str] = None,
    ) -> InferenceResult:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        payload = {"messages": messages, "max_tokens": max_tokens, "temperature": temperature}
        status, data, error = _post_json(
            f"{self.base_url}/accounts/{self.account_id}/ai/run/{self.model}",
            payload,
            self.api_token,
            self.timeout_s,
        )
        if error:
            return InferenceResult(ok=False, status=status, error=error)
        return InferenceResult(ok=True, status=status, raw_text=_extract_workers_ai_text(data))


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com",
        timeout_s: float = 25.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def run_model(
        self,
        prompt: str,
        *,
        max_tokens: int,
        temperature: float,
        system_prompt: Optional[str] = None,
    ) -> InferenceResult:
        payload: Dict[str, Any] = {
            "model": self.model,
            "input": prompt,
            "max_output_tokens": max_tokens,
        }
        if system_prompt:
            payload["instructions"] = system_prompt
        if _model_supports_temperature(self.model):
            payload["temperature"] = temperature
        status, data, error = _post_json(
            f"{self.base_url}/v1/responses", payload, self.api_key, self.timeout_s
        )
        if error:
            return InferenceResult(ok=False, status=status, error=error)
        return InferenceResult(ok=True, status=status, raw_text=_extract_output_text(data))


def resolve_provider(
    provider_name: str,
    *,
    account_id: Optional[str] = None,
    api_token: Optional[str] = None,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> LLMProvider:
    name = (provider_name or "mock").strip().lower()
    if name == "workers_ai":
        if not account_id or not api_token:
            raise ValueError("CF_ACCOUNT_ID and CF_API_TOKEN are required when LLM_PROVIDER=workers_ai")
        if not model:
            raise ValueError("WORKERS_AI_MODEL is required when LLM_PROVIDER=workers_ai")
        return WorkersAIProvider(
            account_id=account_id,
            api_token=api_token,
            model=model,
            base_url=base_url or "https://api.cloudflare.com/client/v4",
            timeout_s=timeout_s or 25.0,
        )
    if name == "openai":
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER=openai")
        if not model:
            raise ValueError("OPENAI_MODEL is required when LLM_PROVIDER=openai")
        return OpenAIProvider(
            api_key=api_key,
            model=model,
            base_url=base_url or "https://api.openai.com",
            timeout_s=timeout_s or 25.0,
        )
    if name == "mock":
        return MockLLMProvider()
    raise ValueError(f"Unsupported LLM_PROVIDER: {provider_name}")


def _post_json(
    url: str, payload: Dict[str, Any], token: str, timeout_s: float
) -> tuple[int, Dict[str, Any], str]:
    request = Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        method="POST",
    )
    try:
        with urlopen(request, timeout=timeout_s) as response:
            status = int(getattr(response, "status", 200) or 200)
            body = response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace") if exc.fp else str(exc)
        return int(exc.code), {}, (detail or str(exc))[:_ERROR_SNIPPET_CHARS]
    except (TimeoutError, socket.timeout) as exc:
        return 504, {}, f"timeout: {exc}"
    except URLError as exc:
        if isinstance(exc.reason, (TimeoutError, socket.timeout)):
            return 504, {}, f"timeout: {exc.reason}"
        return 0, {}, f"connection error: {exc.reason}"
    except (OSError, http.client.HTTPException) as exc:
        return 0, {}, f"connection error: {exc!r}"
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return status, data, ""


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _extract_workers_ai_text(response: Dict[str, Any]) -> str:
    result = response.get("result")
    if isinstance(result, dict):
        return _stringify(result.get("response"))
    return _stringify(result)


def _extract_output_text(response: Dict[str, Any]) -> str:
    parts: list[str] = []
    for item in response.get("output", []):
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        for content in item.get("content", []):
            if isinstance(content, dict) and content.get("type") == "output_text":
                parts.append(content.get("text", ""))
    return "".join(parts).strip()


def _model_supports_temperature(model: str) -> bool:
    normalized = (model or "").strip().lower()
    # GPT-5 responses currently reject temperature.
    return not normalized.startswith("gpt-5")
