"""
Image upload with retry and exponential backoff.
"""
import logging
import os
import secrets
import time
from typing import Callable, Optional

from inventory_app.core.exceptions import UploadError
from inventory_app.core.ports.external import StoragePort

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before 1-based ``attempt``: 0, 1, 2, 4, ..."""
    if attempt <= 1:
        return 0
    return 2 ** (attempt - 2)


def object_path(filename: str, folder: str, clock: Callable[[], float] = time.time) -> str:
    """``<folder>/<random>_<millis>.<ext>``; the extension is taken from ``filename``."""
    ext = os.path.splitext(filename)[1].lstrip(".").lower() or "bin"
    return f"{folder}/{secrets.token_hex(6)}_{int(clock() * 1000)}.{ext}"


class ImageUploader:
    def __init__(
        self,
        storage: StoragePort,
        bucket: str = "public",
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.storage = storage
        self.bucket = bucket
        self.max_retries = max_retries
        self._sleep = sleep

    def upload(
        self,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        folder: str = "items",
        max_retries: Optional[int] = None,
    ) -> str:
        """
        Upload ``data`` and return its public URL.

        Args:
            filename: Original file name, used for the extension only
            data: File contents; empty payloads are uploaded as-is
            content_type: MIME type sent to storage
            folder: Top-level folder inside the bucket
            max_retries: Total number of attempts (defaults to the instance setting)

        Raises:
            ValueError: ``max_retries`` is below 1
            UploadError: every attempt failed; chained to the last failure
        """
        attempts = self.max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1")

        path = object_path(filename, folder)
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            delay = backoff_delay(attempt)
            if delay:
                logger.info(f"Retrying upload of {path} in {delay}s (attempt {attempt}/{attempts})")
                self._sleep(delay)
            try:
                self.storage.upload(self.bucket, path, data, content_type)
            except Exception as exc:
                last_error = exc
                logger.warning(f"Upload attempt {attempt}/{attempts} for {path} failed: {exc}")
                continue
            url = self.storage.public_url(self.bucket, path)
            logger.info(f"Uploaded {path}")
            return url

        raise UploadError(
            f"Failed to upload image after {attempts} attempts: {last_error}"
        ) from last_error
