from .errors import BodyParseError, NotFoundError, ServiceError, ValidationError
from .models import HandlerOptions, LambdaResponse, UploadedFile, ValidationRules
from .pipeline import dispatch, handle
from .request import BodyKind, Request, classify_content_type
from .response import ResponseBuilder

__all__ = [
    "BodyKind",
    "BodyParseError",
    "HandlerOptions",
    "LambdaResponse",
    "NotFoundError",
    "Request",
    "ResponseBuilder",
    "ServiceError",
    "UploadedFile",
    "ValidationError",
    "ValidationRules",
    "classify_content_type",
    "dispatch",
    "handle",
]
