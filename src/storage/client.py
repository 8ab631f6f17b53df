"""
Object storage client for dish and application images.
"""
import logging
from urllib.parse import quote
import requests
from errors import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage:
    """
    Client for a bucket-based object storage REST API.

    Objects are addressed by bucket name and path; public buckets serve
    objects at a stable public URL.
    """

    def __init__(self, base_url, api_key='', session=None, timeout=30):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

        self.headers = {"User-Agent": "restaurant-dashboard-reports/1.0"}
        if self.api_key:
            self.headers["apikey"] = self.api_key
            self.headers["Authorization"] = f"Bearer {self.api_key}"

    def _object_url(self, bucket, path):
        return f"{self.base_url}/storage/v1/object/{bucket}/{quote(path)}"

    def public_url(self, bucket, path):
        """Public URL of an object; absolute URLs are returned unchanged."""
        if not path:
            return None
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(path.lstrip('/'))}"

    @staticmethod
    def relative_path(url, bucket):
        """Object path inside `bucket` for one of its public URLs, or None."""
        marker = f"/{bucket}/"
        if not url or marker not in url:
            return None
        return url.split(marker, 1)[1]

    def download(self, bucket, path):
        try:
            response = self.session.get(
                self._object_url(bucket, path), headers=self.headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Download of {bucket}/{path} failed: {e}")
            raise StorageError(f"Failed to download {bucket}/{path}: {e}") from e
        logger.info(f"Downloaded {bucket}/{path} ({len(response.content)} bytes)")
        return response.content

    def upload(self, bucket, path, content, content_type='application/octet-stream'):
        """Upload bytes to `bucket/path`, replacing any existing object; returns the public URL."""
        headers = {**self.headers, "Content-Type": content_type, "x-upsert": "true"}
        try:
            response = self.session.post(
                self._object_url(bucket, path), data=content, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise StorageError(f"Failed to upload {bucket}/{path}: {e}") from e
        logger.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
        return self.public_url(bucket, path)
