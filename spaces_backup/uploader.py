"""Upload backup artifacts to the object store."""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from tqdm import tqdm

from config import ObjectStoreConfig, RetrySettings
from spaces_backup.errors import UploadFailed
from spaces_backup.models import UploadDescriptor, UploadResult
from spaces_backup.storage import describe_error, is_transient_error

logger = logging.getLogger(__name__)

UPLOAD_ERRORS = (ClientError, BotoCoreError, Boto3Error, OSError)


class ObjectStoreUploader:
    """Stream one local file to one bucket key."""

    def __init__(self, s3_client, store_config: ObjectStoreConfig,
                 retry: Optional[RetrySettings] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """Initialize the uploader.

        Args:
            s3_client: boto3 S3 client
            store_config: Bucket and endpoint settings
            retry: Retry policy; the default performs a single attempt
            sleep: Sleep function used between retries
        """
        self.s3_client = s3_client
        self.store_config = store_config
        self.retry = retry or RetrySettings()
        self._sleep = sleep

    def upload(self, local_path: Path, descriptor: UploadDescriptor) -> UploadResult:
        """Upload ``local_path`` under ``descriptor.key``.

        The file is streamed with a managed transfer so large dumps are never
        held in memory.

        Returns:
            UploadResult with bucket, key and public-style URL

        Raises:
            UploadFailed: When the store or transport rejects the upload
        """
        local_path = Path(local_path)
        bucket = self.store_config.bucket

        logger.info("☁️  Uploading backup to object storage...")
        logger.info(f"  Source: {local_path}")
        logger.info(f"  Destination: s3://{bucket}/{descriptor.key}")

        attempts = 0
        while True:
            attempts += 1
            start_time = datetime.now()
            try:
                file_size = self._put(local_path, descriptor)
                break
            except UPLOAD_ERRORS as e:
                if attempts <= self.retry.max_retries and is_transient_error(e):
                    delay = self.retry.backoff(attempts)
                    logger.warning(
                        f"Upload attempt {attempts} failed ({describe_error(e)}), "
                        f"retrying in {delay:.0f}s"
                    )
                    self._sleep(delay)
                    continue
                raise UploadFailed(descriptor.key, describe_error(e), attempts) from e

        upload_time = (datetime.now() - start_time).total_seconds()
        location = self.store_config.public_url(descriptor.key)

        logger.info(f"✓ Backup uploaded successfully to: s3://{bucket}/{descriptor.key}")
        logger.info(f"🔗 Spaces URL: {location}")

        return UploadResult(
            bucket=bucket,
            key=descriptor.key,
            location=location,
            size=file_size,
            attempts=attempts,
            upload_time=upload_time
        )

    def _put(self, local_path: Path, descriptor: UploadDescriptor) -> int:
        file_size = local_path.stat().st_size

        with tqdm(total=file_size, unit='B', unit_scale=True,
                  desc="  Uploading", leave=False, disable=None) as pbar:

            def upload_callback(bytes_amount):
                pbar.update(bytes_amount)

            with open(local_path, 'rb') as f:
                self.s3_client.upload_fileobj(
                    f,
                    self.store_config.bucket,
                    descriptor.key,
                    ExtraArgs={
                        'ContentType': descriptor.content_type,
                        'Metadata': dict(descriptor.metadata),
                    },
                    Callback=upload_callback
                )

        return file_size
