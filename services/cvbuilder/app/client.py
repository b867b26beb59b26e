"""Command-line client for the CV builder proxy.

Reads candidate fields from a JSON file (or stdin), asks the proxy for a
structured resume and writes it as a PDF. When the proxy cannot be used the
combined raw text is written instead, so a PDF is always produced.

Usage:
  cvbuilder-client fields.json --url http://localhost:8000/generate --lang en
"""

from __future__ import annotations

import argparse
import http.client
import json
import socket
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import ValidationError

from libs.core import logging as core_logging
from libs.core.models import ResumeDocument
from libs.tools.resume_render_pdf import render_resume_pdf, render_text_pdf

LOGGER = core_logging.get_logger("cvbuilder-client")

DEFAULT_URL = "http://localhost:8000/generate"
DEFAULT_TIMEOUT_S = 20.0
DEFAULT_OUTPUT = "ATS_CV.pdf"

# Browser form order.
FORM_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "city",
    "province",
    "title",
    "links",
    "summary",
    "skills",
    "experience",
    "education",
)


class ProxyError(Exception):
    pass


def _field_value(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None and name in ("firstName", "lastName"):
        value = fields.get("first_name" if name == "firstName" else "last_name")
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(str(item).strip() for item in value if str(item).strip())
    return str(value).strip()


def combine_form_data(fields: Mapping[str, Any]) -> str:
    values = [_field_value(fields, name) for name in FORM_FIELDS]
    return "\n".join(value for value in values if value)


def request_resume(
    url: str, inputs: Any, lang: str, timeout_s: float = DEFAULT_TIMEOUT_S
) -> ResumeDocument:
    request = Request(
        url,
        data=json.dumps({"inputs": inputs, "lang": lang}).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urlopen(request, timeout=timeout_s) as response:
            body = response.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        raise ProxyError(f"proxy returned HTTP {exc.code}") from exc
    except (TimeoutError, socket.timeout) as exc:
        raise ProxyError(f"proxy timed out after {timeout_s}s") from exc
    except URLError as exc:
        raise ProxyError(f"proxy unreachable: {exc.reason}") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise ProxyError(f"proxy connection failed: {exc!r}") from exc
    try:
        return ResumeDocument.model_validate(json.loads(body))
    except (ValueError, ValidationError) as exc:
        raise ProxyError("proxy response is not a resume document") from exc


def build_pdf(
    fields: Mapping[str, Any],
    *,
    url: str = DEFAULT_URL,
    lang: str = "id",
    timeout_s: float = DEFAULT_TIMEOUT_S,
    as_text: bool = False,
) -> tuple[bytes, str]:
    """Return the PDF bytes and which path produced them ("proxy" or "raw_text")."""
    raw_text = combine_form_data(fields)
    inputs: Any = raw_text if as_text else dict(fields)
    try:
        document = request_resume(url, inputs, lang, timeout_s)
    except ProxyError as exc:
        LOGGER.warning("proxy_request_failed", url=url, error=str(exc))
        return render_text_pdf(raw_text), "raw_text"
    return render_resume_pdf(document, lang), "proxy"


def _load_fields(path: str) -> Dict[str, Any]:
    source = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
    data = json.loads(source)
    if not isinstance(data, dict):
        raise ValueError("fields file must contain a JSON object")
    return data


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Build an ATS-friendly CV through the proxy")
    parser.add_argument("fields", help="JSON file with the form fields, or - for stdin")
    parser.add_argument("--url", default=DEFAULT_URL, help="Proxy generate endpoint")
    parser.add_argument("--lang", default="id", choices=["id", "en"], help="Resume language")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help="Output PDF path")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT_S, help="Request timeout in seconds"
    )
    parser.add_argument(
        "--as-text", action="store_true", help="Send the fields as one combined text block"
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level")
    args = parser.parse_args(argv)

    core_logging.configure_logging("cvbuilder-client", args.log_level)
    try:
        fields = _load_fields(args.fields)
    except (OSError, ValueError) as exc:
        parser.error(f"cannot read fields: {exc}")

    pdf_bytes, produced_by = build_pdf(
        fields,
        url=args.url,
        lang=args.lang,
        timeout_s=args.timeout,
        as_text=args.as_text,
    )
    Path(args.output).write_bytes(pdf_bytes)
    LOGGER.info("pdf_written", path=args.output, source=produced_by, size=len(pdf_bytes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
