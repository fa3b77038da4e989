from __future__ import annotations

import base64
import binascii
import json
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl

from starlette.datastructures import Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from .errors import BodyParseError
from .models import UploadedFile


class BodyKind(str, Enum):
    FORM = "application/x-www-form-urlencoded"
    JSON = "application/json"
    MULTIPART = "multipart/form-data"
    RAW = "raw"


def classify_content_type(content_type: str | None) -> BodyKind:
    """Pick the body decoding strategy from a Content-Type header value.

    Only the media type before the first ``;`` counts and the comparison is
    case-insensitive. A missing or unknown type means the body is left raw.
    """
    if not content_type:
        return BodyKind.RAW
    media_type = content_type.split(";", 1)[0].strip().lower()
    try:
        return BodyKind(media_type)
    except ValueError:
        return BodyKind.RAW


def _add_value(mapping: dict[str, Any], key: str, value: Any) -> None:
    # repeated names collect into a list
    if key not in mapping:
        mapping[key] = value
    elif isinstance(mapping[key], list):
        mapping[key].append(value)
    else:
        mapping[key] = [mapping[key], value]


def parse_form(raw: str) -> dict[str, Any]:
    form: dict[str, Any] = {}
    try:
        pairs = parse_qsl(raw, keep_blank_values=True, errors="strict")
    except (UnicodeDecodeError, ValueError) as exc:
        raise BodyParseError("Invalid form-encoded body") from exc
    for key, value in pairs:
        _add_value(form, key, value)
    return form


def parse_json(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise BodyParseError("Invalid JSON body") from exc


async def parse_multipart(headers: dict[str, str], raw: bytes) -> tuple[dict[str, Any], list[UploadedFile]]:
    """Decode a multipart payload into its field mapping and its uploads.

    Uploads appear in the mapping under their field name and, in order, in
    the returned list.
    """

    async def stream():
        yield raw

    parser = MultiPartParser(Headers(headers=headers), stream())
    try:
        form = await parser.parse()
    except MultiPartException as exc:
        raise BodyParseError(exc.message) from exc
    except ValueError as exc:
        # python-multipart parse errors derive from ValueError
        raise BodyParseError("Invalid multipart body") from exc

    body: dict[str, Any] = {}
    files: list[UploadedFile] = []
    try:
        for name, value in form.multi_items():
            if isinstance(value, UploadFile):
                value = UploadedFile(
                    field_name=name,
                    filename=value.filename,
                    content_type=value.content_type,
                    content=await value.read(),
                )
                files.append(value)
            _add_value(body, name, value)
    finally:
        await form.close()
    return body, files


class Request:
    """Normalized view of an API Gateway proxy event.

    Accepts both REST API (payload 1.0) and HTTP API (payload 2.0) events.
    Multipart bodies are decoded lazily: ``body`` stays ``None`` and
    ``body_pending`` is true until :meth:`wait_for_body` has run. Uploaded
    files are then also listed in ``files``.
    """

    def __init__(self, event: dict[str, Any]):
        http_ctx = (event.get("requestContext") or {}).get("http") or {}
        self.method: str | None = event.get("httpMethod") or http_ctx.get("method")
        self.path: str | None = event.get("path") or event.get("rawPath")
        self.headers: dict[str, str] = {
            name.lower(): value for name, value in (event.get("headers") or {}).items()
        }
        self.query: dict[str, Any] = event.get("queryStringParameters") or {}
        self.params: dict[str, Any] = event.get("pathParameters") or {}
        self.custom: dict[str, Any] = {}
        self.body: Any = None
        self.files: list[UploadedFile] = []
        self.body_kind = classify_content_type(self.get_header("Content-Type"))
        self._pending_multipart: bytes | None = None

        raw = event.get("body")
        if self.body_kind is BodyKind.RAW:
            self.body = raw
            return

        if event.get("isBase64Encoded") and raw is not None:
            try:
                data = base64.b64decode(raw, validate=True)
            except binascii.Error as exc:
                raise BodyParseError("Invalid base64 body") from exc
        else:
            data = raw.encode("utf-8") if raw is not None else None

        if self.body_kind is BodyKind.MULTIPART:
            self._pending_multipart = data or b""
            return

        text = None
        if data is not None:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise BodyParseError("Request body is not valid UTF-8") from exc
        if self.body_kind is BodyKind.JSON:
            self.body = parse_json(text)
        else:
            self.body = parse_form(text or "")

    @property
    def body_pending(self) -> bool:
        return self._pending_multipart is not None

    def get_header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    async def wait_for_body(self) -> None:
        if self._pending_multipart is None:
            return
        raw, self._pending_multipart = self._pending_multipart, None
        self.body, self.files = await parse_multipart(self.headers, raw)
