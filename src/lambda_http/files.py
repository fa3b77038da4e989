from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import boto3
from aws_lambda_powertools import Logger, Tracer
from starlette.concurrency import run_in_threadpool

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any  # type: ignore[assignment]

logger = Logger()
tracer = Tracer()
ASSET_ROOT = os.environ.get("ASSET_ROOT", ".")
S3_SCHEME = "s3://"

_s3: S3Client | None = None


def _s3_client() -> S3Client:
    global _s3
    if _s3 is None:
        _s3 = boto3.client("s3")
    return _s3


def split_s3_uri(uri: str) -> tuple[str, str]:
    bucket, _, key = uri[len(S3_SCHEME):].partition("/")
    if not bucket or not key:
        raise ValueError(f"Invalid S3 location: {uri}")
    return bucket, key


def _read_s3(uri: str, encoding: str) -> str:
    bucket, key = split_s3_uri(uri)
    resp = _s3_client().get_object(Bucket=bucket, Key=key)
    return resp["Body"].read().decode(encoding)


def _read_local(path: str, encoding: str) -> str:
    root = Path(ASSET_ROOT).resolve()
    target = (root / path).resolve()
    # absolute paths and ../ must not escape the asset root
    if not target.is_relative_to(root):
        raise FileNotFoundError(f"Outside asset root: {path}")
    return target.read_text(encoding=encoding)


@tracer.capture_method(capture_response=False)
async def read_file(path: str, encoding: str = "utf-8") -> str:
    """Read a resource from the local asset root or from ``s3://bucket/key``.

    Errors from the filesystem or S3 propagate unchanged.
    """
    logger.debug("Reading file", extra={"path": path, "encoding": encoding})
    if path.startswith(S3_SCHEME):
        return await run_in_threadpool(_read_s3, path, encoding)
    return await run_in_threadpool(_read_local, path, encoding)
