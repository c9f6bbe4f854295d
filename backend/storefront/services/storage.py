"""S3 / MinIO presigned-URL helpers for assets stored by object key."""

import logging
from urllib.parse import urlparse, urlunparse

import boto3
from botocore.config import Config

from storefront.core.config import settings

logger = logging.getLogger(__name__)

PRESIGN_DOWNLOAD_EXPIRES = 900  # 15 min


def _get_s3_client():  # type: ignore[no-untyped-def]
    config_kwargs: dict = {"signature_version": "s3v4"}
    if settings.S3_ENDPOINT_URL:
        config_kwargs["s3"] = {"addressing_style": "path"}
    kwargs: dict = {
        "service_name": "s3",
        "region_name": settings.AWS_REGION,
        "config": Config(**config_kwargs),
    }
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    return boto3.client(**kwargs)


def _rewrite_presigned_url(url: str) -> str:
    """Swap scheme+netloc to S3_PUBLIC_ENDPOINT so browsers can reach MinIO."""
    if not settings.S3_PUBLIC_ENDPOINT:
        return url
    public = urlparse(settings.S3_PUBLIC_ENDPOINT)
    parsed = urlparse(url)
    return urlunparse(parsed._replace(scheme=public.scheme, netloc=public.netloc))


def presign_get(
    key: str,
    expires: int = PRESIGN_DOWNLOAD_EXPIRES,
) -> str:
    """Generate a presigned GET URL for downloading from S3."""
    client = _get_s3_client()
    url = client.generate_presigned_url(
        "get_object",
        Params={
            "Bucket": settings.S3_BUCKET,
            "Key": key,
        },
        ExpiresIn=expires,
    )
    logger.debug("Presigned asset key %s", key)
    return _rewrite_presigned_url(url)
