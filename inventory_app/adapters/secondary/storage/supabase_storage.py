"""
Hosted object storage over its HTTP API.
"""
import logging
from typing import Optional
from urllib.parse import quote

import requests

from inventory_app.core.exceptions import StorageError
from inventory_app.core.ports.external import StoragePort

logger = logging.getLogger(__name__)


class SupabaseStorage(StoragePort):
    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{bucket}/{quote(path)}"

    def upload(self, bucket: str, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        """
        Upload one object. Never overwrites an existing path.

        Raises:
            StorageError: the service answered with a non-2xx status
            requests.exceptions.RequestException: the request never completed
        """
        url = self._object_url(bucket, path)
        logger.info(f"Uploading {len(data)} bytes to {bucket}/{path}")

        response = self.session.post(
            url,
            data=data,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": content_type or "application/octet-stream",
                "cache-control": "max-age=3600",
                "x-upsert": "false",
            },
            timeout=self.timeout,
        )

        logger.debug(f"Storage response - Status: {response.status_code}")
        if not 200 <= response.status_code < 300:
            raise StorageError(
                f"Storage upload failed with status {response.status_code}: {response.text}"
            )

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(path)}"
