from __future__ import annotations

import json
import socket
from http.client import IncompleteRead, RemoteDisconnected
from pathlib import Path
from urllib.error import HTTPError

from services.cvbuilder.app import client as client_module
from services.cvbuilder.app.client import build_pdf, combine_form_data, main


class _FakeHTTPResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "_FakeHTTPResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


FIELDS = {
    "firstName": " Ana ",
    "lastName": "Putri",
    "email": "",
    "skills": "SQL, Excel",
    "experience": "PT Maju 2020-2023",
}


def test_combine_form_data_keeps_form_order_and_drops_empty_values() -> None:
    assert combine_form_data(FIELDS) == "Ana\nPutri\nSQL, Excel\nPT Maju 2020-2023"


def test_combine_form_data_accepts_snake_case_names() -> None:
    assert combine_form_data({"first_name": "Ana", "last_name": "Putri"}) == "Ana\nPutri"


def test_build_pdf_renders_proxy_document(monkeypatch) -> None:
    captured: list = []

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured.append((json.loads(request.data.decode("utf-8")), timeout))
        return _FakeHTTPResponse(json.dumps({"header": {"full_name": "Ana Putri"}}).encode("utf-8"))

    monkeypatch.setattr(client_module, "urlopen", _fake_urlopen)

    content, produced_by = build_pdf(FIELDS, lang="en", timeout_s=5.0)

    assert produced_by == "proxy"
    assert content.startswith(b"%PDF")
    body, timeout = captured[0]
    assert body == {"inputs": FIELDS, "lang": "en"}
    assert timeout == 5.0


def test_build_pdf_can_send_combined_text(monkeypatch) -> None:
    captured: list = []

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        captured.append(json.loads(request.data.decode("utf-8")))
        return _FakeHTTPResponse(b'{"summary": "ok"}')

    monkeypatch.setattr(client_module, "urlopen", _fake_urlopen)

    build_pdf(FIELDS, as_text=True)

    assert captured[0]["inputs"] == combine_form_data(FIELDS)


def test_build_pdf_falls_back_to_raw_text_on_timeout(monkeypatch) -> None:
    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise socket.timeout("timed out")

    monkeypatch.setattr(client_module, "urlopen", _fake_urlopen)

    content, produced_by = build_pdf(FIELDS)

    assert produced_by == "raw_text"
    assert content.startswith(b"%PDF")


def test_build_pdf_falls_back_on_http_error_and_bad_body(monkeypatch) -> None:
    def _http_error(request, timeout=0):  # type: ignore[no-untyped-def]
        raise HTTPError(url=request.full_url, code=500, msg="error", hdrs=None, fp=None)

    monkeypatch.setattr(client_module, "urlopen", _http_error)
    assert build_pdf(FIELDS)[1] == "raw_text"

    monkeypatch.setattr(
        client_module, "urlopen", lambda request, timeout=0: _FakeHTTPResponse(b"<html>oops</html>")
    )
    assert build_pdf(FIELDS)[1] == "raw_text"


def test_build_pdf_falls_back_when_connection_drops(monkeypatch) -> None:
    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise RemoteDisconnected("Remote end closed connection without response")

    monkeypatch.setattr(client_module, "urlopen", _fake_urlopen)

    content, produced_by = build_pdf(FIELDS)

    assert produced_by == "raw_text"
    assert content.startswith(b"%PDF")


def test_build_pdf_falls_back_on_truncated_body(monkeypatch) -> None:
    class _TruncatedResponse(_FakeHTTPResponse):
        def read(self) -> bytes:
            raise IncompleteRead(b'{"header"', expected=500)

    monkeypatch.setattr(
        client_module, "urlopen", lambda request, timeout=0: _TruncatedResponse(b"")
    )

    assert build_pdf(FIELDS)[1] == "raw_text"


def test_main_writes_pdf(tmp_path: Path, monkeypatch) -> None:
    fields_path = tmp_path / "fields.json"
    fields_path.write_text(json.dumps(FIELDS), encoding="utf-8")
    output_path = tmp_path / "cv.pdf"

    def _fake_urlopen(request, timeout=0):  # type: ignore[no-untyped-def]
        raise socket.timeout("timed out")

    monkeypatch.setattr(client_module, "urlopen", _fake_urlopen)

    exit_code = main([str(fields_path), "--output", str(output_path), "--lang", "en"])

    assert exit_code == 0
    assert output_path.read_bytes().startswith(b"%PDF")
