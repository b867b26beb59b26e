from __future__ import annotations

from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, make_asgi_app
from pydantic import BaseModel, ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from libs.core import logging as core_logging
from libs.core.llm_provider import LLMProvider
from libs.core.models import ResumeDocument
from libs.tools.resume_render_docx import render_resume_docx
from libs.tools.resume_render_pdf import render_resume_pdf
from services.cvbuilder.cvbuilder_core import (
    BuilderError,
    BuilderSettings,
    create_provider,
    generate_resume,
    normalize_lang,
)
from services.cvbuilder.cvbuilder_core.pipeline import run_model

SETTINGS = BuilderSettings.from_env()
core_logging.configure_logging("cvbuilder", SETTINGS.log_level)
LOGGER = core_logging.get_logger("cvbuilder")

DEBUG_PROMPT = "Reply with the single word OK."
DEBUG_SNIPPET_CHARS = 200
_TRUTHY = {"1", "true", "yes", "on"}
_RENDERERS = {
    "pdf": ("application/pdf", render_resume_pdf),
    "docx": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        render_resume_docx,
    ),
}

resume_requests_total = Counter(
    "resume_requests_total", "Generated resumes by document source", ["source"]
)


class GenerateRequest(BaseModel):
    inputs: Union[Dict[str, Any], str, None] = None
    lang: Optional[str] = None


def origin_headers(allowed_origin: str) -> Dict[str, str]:
    # Allow-list of one: other origins get the same value, never a reflection.
    return {
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS, GET",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Vary": "Origin",
    }


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: Any, allowed_origin: str) -> None:
        super().__init__(app)
        self.headers = origin_headers(allowed_origin)

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        if request.method == "OPTIONS":
            return Response(
                status_code=204, headers={**self.headers, "Access-Control-Max-Age": "86400"}
            )
        try:
            response = await call_next(request)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error(
                "request_failed",
                path=request.url.path,
                status_code=500,
                error=str(exc) or exc.__class__.__name__,
            )
            response = JSONResponse(
                {"error": str(exc) or exc.__class__.__name__}, status_code=500
            )
        response.headers.update(self.headers)
        return response


def _error_body(error: BuilderError) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error.detail}
    if error.extra is not None:
        body["detail"] = error.extra
    return body


def _credential_flags(settings: BuilderSettings) -> Dict[str, bool]:
    if settings.llm_provider == "workers_ai":
        return {
            "cf_account_id": bool(settings.cf_account_id),
            "cf_api_token": bool(settings.cf_api_token),
        }
    if settings.llm_provider == "openai":
        return {"openai_api_key": bool(settings.openai_api_key)}
    return {}


def create_app(settings: BuilderSettings, provider: Optional[LLMProvider] = None) -> FastAPI:
    app = FastAPI(title="CV Builder Proxy")
    app.state.settings = settings
    app.state.provider = provider
    app.add_middleware(OriginPolicyMiddleware, allowed_origin=settings.allowed_origin)
    app.mount("/metrics", make_asgi_app())

    def _provider() -> LLMProvider:
        if app.state.provider is not None:
            return app.state.provider
        return create_provider(settings)

    @app.exception_handler(BuilderError)
    async def _builder_error_handler(request: Request, exc: BuilderError) -> JSONResponse:
        LOGGER.warning(
            "request_failed",
            path=request.url.path,
            status_code=exc.status_code,
            error=exc.detail,
        )
        return JSONResponse(_error_body(exc), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()
        ]
        LOGGER.warning(
            "request_failed", path=request.url.path, status_code=400, error="invalid_request"
        )
        return JSONResponse({"error": "invalid_request", "detail": detail}, status_code=400)

    @app.get("/")
    def liveness(debug: Optional[str] = None) -> Dict[str, Any]:
        if not debug or debug.strip().lower() not in _TRUTHY:
            return {"ok": True, "provider": settings.llm_provider, "model": settings.model}
        flags = _credential_flags(settings)
        try:
            backend = _provider()
        except BuilderError as exc:
            raise BuilderError(
                exc.detail,
                status_code=exc.status_code,
                extra={"has_credentials": flags, "reason": exc.extra},
            ) from exc
        result = run_model(backend, DEBUG_PROMPT, settings)
        return {
            "ok": result.ok,
            "provider": backend.name,
            "model": backend.model,
            "has_credentials": flags,
            "status": result.status,
            "snippet": (result.raw_text if result.ok else result.error)[:DEBUG_SNIPPET_CHARS],
        }

    @app.post("/")
    @app.post("/generate")
    def generate(request: GenerateRequest) -> JSONResponse:
        lang = normalize_lang(request.lang, default=settings.default_lang)
        if request.inputs is None:
            raise BuilderError("inputs_required")
        outcome = generate_resume(request.inputs, lang, _provider(), settings)
        resume_requests_total.labels(source=outcome.source).inc()
        return JSONResponse(
            outcome.document.model_dump(mode="json"),
            headers={"X-Resume-Source": outcome.source},
        )

    @app.post("/render")
    def render(
        document: Dict[str, Any],
        output_format: str = Query("pdf", alias="format"),
        lang: Optional[str] = Query(None),
    ) -> Response:
        extension = output_format.strip().lower()
        renderer = _RENDERERS.get(extension)
        if renderer is None:
            raise BuilderError("unsupported_format", extra={"supported": sorted(_RENDERERS)})
        try:
            resume = ResumeDocument.model_validate(document)
        except ValidationError as exc:
            raise BuilderError(
                "invalid_document",
                extra=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()],
            ) from exc
        media_type, render_fn = renderer
        content = render_fn(resume, normalize_lang(lang, default=settings.default_lang))
        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f'attachment; filename="ATS_CV.{extension}"'},
        )

    return app


app = create_app(SETTINGS)
