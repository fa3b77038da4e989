from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Sequence
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic_core import to_json

from .errors import error_payload, map_error, metrics
from .models import HandlerOptions, LambdaResponse
from .request import Request
from .response import ResponseBuilder
from .validation import validate_request

logger = Logger()
tracer = Tracer()

Handler = Callable[[Request, ResponseBuilder], Any]
Middleware = Callable[[Request, ResponseBuilder], Any]


async def _call(fn: Callable[..., Any], request: Request, response: ResponseBuilder) -> Any:
    result = fn(request, response)
    if inspect.isawaitable(result):
        result = await result
    return result


@tracer.capture_method
async def run_middleware(
    middleware: Sequence[Middleware], request: Request, response: ResponseBuilder
) -> None:
    for step in middleware:
        await _call(step, request, response)


def serialize_body(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return to_json(value, bytes_mode="base64").decode("utf-8")


async def dispatch(
    event: dict[str, Any], handler: Handler, options: HandlerOptions | None = None
) -> LambdaResponse:
    """Run one event through normalize, validate, middleware and handler.

    Never raises for request-level failures: every exception is mapped to an
    HTTP error response. Headers set before the failure are kept.
    """
    options = options or HandlerOptions()
    response = ResponseBuilder()
    request: Request | None = None
    try:
        request = Request(event)
        await request.wait_for_body()
        validate_request(request, options.validation)
        await run_middleware(options.middleware, request, response)
        body = serialize_body(await _call(handler, request, response))
    except Exception as exc:
        error = map_error(
            exc,
            path=request.path if request else event.get("path"),
            method=request.method if request else event.get("httpMethod"),
        )
        return {
            "statusCode": error.status_code,
            "headers": response.headers,
            "body": serialize_body(error_payload(error)),
        }

    logger.debug("Request handled", extra={"path": request.path, "status_code": response.status_code})
    return {"statusCode": response.status_code, "headers": response.headers, "body": body}


def handle(
    handler: Handler, options: HandlerOptions | None = None
) -> Callable[[dict[str, Any], LambdaContext], LambdaResponse]:
    """Build a Lambda entry point around ``handler``.

    The returned function is what the Lambda runtime invokes; its return
    value is the proxy response, produced exactly once per invocation.
    """
    options = options or HandlerOptions()

    @metrics.log_metrics
    @tracer.capture_lambda_handler
    def lambda_handler(event: dict[str, Any], context: LambdaContext) -> LambdaResponse:
        return asyncio.run(dispatch(event, handler, options))

    return lambda_handler
