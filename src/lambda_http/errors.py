from __future__ import annotations

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    ServiceError,
)
from aws_lambda_powertools.metrics import Metrics, MetricUnit

logger = Logger()
metrics = Metrics(namespace="LambdaHttp")

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"

__all__ = [
    "BodyParseError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
    "error_payload",
    "map_error",
]


class BodyParseError(BadRequestError):
    """The request body could not be decoded for its declared content type."""


class ValidationError(BadRequestError):
    """A query, path parameter or body schema check failed."""

    def __init__(self, target: str, msg: str):
        super().__init__(msg)
        self.target = target


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


def error_payload(error: ServiceError) -> dict[str, Any]:
    # 5xx payloads never carry the raised message
    message = INTERNAL_ERROR_MESSAGE if error.status_code >= 500 else error.msg
    return {
        "statusCode": error.status_code,
        "error": _reason(error.status_code),
        "message": message,
    }


def map_error(exc: BaseException, *, path: str | None = None, method: str | None = None) -> ServiceError:
    """Turn any failure raised by the pipeline into an HTTP-mapped error.

    Client-fault errors (every ``ServiceError``) are returned as they are.
    Anything else is logged with its traceback and replaced by a generic
    500 so that implementation details never reach the caller.
    """
    if isinstance(exc, ServiceError):
        logger.info(
            "Request failed with client error",
            extra={"path": path, "method": method, "status_code": exc.status_code, "error_message": exc.msg},
        )
        metrics.add_metric(name="ClientError", unit=MetricUnit.Count, value=1)
        return exc

    logger.exception(
        "Unhandled error while processing request",
        exc_info=exc,
        extra={"path": path, "method": method, "error_type": type(exc).__name__},
    )
    metrics.add_metric(name="InternalError", unit=MetricUnit.Count, value=1)
    return InternalServerError(INTERNAL_ERROR_MESSAGE)
