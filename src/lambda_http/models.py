from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class LambdaResponse(TypedDict):
    statusCode: int
    headers: dict[str, str]
    body: str


class UploadedFile(BaseModel):
    field_name: str
    filename: str | None = None
    content_type: str | None = None
    content: bytes = b""

    @field_serializer("content", when_used="json")
    def serialize_content(self, content: bytes) -> str:
        return base64.b64encode(content).decode("ascii")


class ValidationRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    # anything pydantic.TypeAdapter accepts, or a TypeAdapter instance
    query: Any = None
    params: Any = None
    body: Any = None


class HandlerOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    validation: ValidationRules = Field(default_factory=ValidationRules)
    middleware: list[Callable[..., Any]] = Field(default_factory=list)
