from __future__ import annotations

from typing import Any

import pydantic
from aws_lambda_powertools import Tracer
from pydantic import TypeAdapter

from .errors import ValidationError
from .models import ValidationRules
from .request import Request

tracer = Tracer()


def _adapter(schema: Any) -> TypeAdapter[Any]:
    return schema if isinstance(schema, TypeAdapter) else TypeAdapter(schema)


def _describe(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]


def check(target: str, schema: Any, value: Any) -> None:
    if schema is None:
        return
    try:
        _adapter(schema).validate_python(value)
    except pydantic.ValidationError as exc:
        raise ValidationError(target, _describe(exc)) from exc


@tracer.capture_method
def validate_request(request: Request, rules: ValidationRules) -> None:
    """Check query, then path parameters, then body; stop at the first failure."""
    check("query", rules.query, request.query)
    check("params", rules.params, request.params)
    check("body", rules.body, request.body)
