from __future__ import annotations

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from . import files
from .errors import NotFoundError

logger = Logger()


class ResponseBuilder:
    """Mutable response state shared by the middleware and the handler of one invocation."""

    def __init__(self) -> None:
        self.status_code: int = HTTPStatus.OK.value
        self.headers: dict[str, str] = {}

    def set_status(self, status_code: int) -> None:
        self.status_code = int(status_code)

    def set_header(self, name: str, value: Any) -> None:
        self.headers[name] = str(value)

    def redirect(self, location: str, *, status_code: int = HTTPStatus.FOUND) -> None:
        self.set_header("Location", location)
        self.set_status(status_code)

    async def read_file(self, path: str, encoding: str = "utf-8") -> str:
        try:
            return await files.read_file(path, encoding)
        except Exception as exc:
            # missing, unreadable and undecodable files all look the same to the caller
            logger.info("File read failed", extra={"path": path, "error_type": type(exc).__name__})
            raise NotFoundError(f"File not found: {path}") from exc
