"""boto3 client construction and error classification for the object store."""

import logging

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError, ConnectionError as BotoConnectionError, HTTPClientError

from config import ObjectStoreConfig

logger = logging.getLogger(__name__)

TRANSIENT_ERROR_CODES = {
    'SlowDown',
    'RequestTimeout',
    'RequestTimeTooSkewed',
    'InternalError',
    'ServiceUnavailable',
    'Throttling',
}


def create_s3_client(store_config: ObjectStoreConfig):
    """Create an S3 client for the configured endpoint.

    Botocore's own retries are disabled; retrying is decided by the caller.
    """
    boto_config = BotoConfig(
        region_name=store_config.region,
        retries={'max_attempts': 1, 'mode': 'standard'}
    )
    logger.debug(f"Creating S3 client for {store_config.endpoint_url} ({store_config.region})")
    return boto3.client(
        's3',
        endpoint_url=store_config.endpoint_url,
        aws_access_key_id=store_config.access_key_id,
        aws_secret_access_key=store_config.secret_access_key.get_secret_value(),
        config=boto_config
    )


def is_transient_error(error: Exception) -> bool:
    """True for errors worth retrying: dropped connections, timeouts, 5xx, throttling."""
    if isinstance(error, (BotoConnectionError, HTTPClientError)):
        return True
    if isinstance(error, ClientError):
        code = error.response.get('Error', {}).get('Code', '')
        status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode') or 0
        return code in TRANSIENT_ERROR_CODES or status >= 500
    return False


def describe_error(error: Exception) -> str:
    """Operator-facing text for a store error."""
    if isinstance(error, ClientError):
        err = error.response.get('Error', {})
        code = err.get('Code', 'Unknown')
        message = err.get('Message') or str(error)
        return f"{code} - {message}"
    return str(error)
