import logging
import uuid
from typing import Optional
from urllib.parse import unquote

from firebase_admin import storage

from app.config.firebase import initialize_firebase_app
from app.core.errors import DependencyError
from app.core.settings import settings
from .base import PhotoStorageProvider, extension_for

logger = logging.getLogger(__name__)


class FirebasePhotoStorage(PhotoStorageProvider):
    """
    Uploads photos to the configured Firebase Storage bucket and returns the
    blob's public URL.
    """

    name = "firebase"

    def __init__(self, bucket_name: str, timeout: Optional[float] = None):
        self.bucket_name = bucket_name
        self.timeout = timeout if timeout is not None else settings.STORAGE_TIMEOUT_SECONDS

    def store_photo(self, data: bytes, content_type: str, filename: Optional[str] = None) -> str:
        blob_name = f"incidents/{uuid.uuid4().hex}{extension_for(content_type, filename)}"
        try:
            initialize_firebase_app()
            blob = storage.bucket(self.bucket_name).blob(blob_name)
            blob.upload_from_string(data, content_type=content_type, timeout=self.timeout)
            blob.make_public()
        except Exception as e:
            logger.error(f"Firebase Storage upload failed for {blob_name}: {e}", exc_info=True)
            raise DependencyError("Photo storage unavailable")

        logger.info(f"Uploaded photo to gs://{self.bucket_name}/{blob_name}")
        return blob.public_url

    def delete_photo(self, url: str) -> None:
        # public_url is https://storage.googleapis.com/<bucket>/<quoted blob name>
        marker = f"/{self.bucket_name}/"
        if not url or marker not in url:
            logger.warning(f"Not a photo from bucket {self.bucket_name}, nothing to delete: {url}")
            return

        blob_name = unquote(url.split(marker, 1)[1])
        try:
            initialize_firebase_app()
            storage.bucket(self.bucket_name).blob(blob_name).delete(timeout=self.timeout)
        except Exception as e:
            logger.warning(f"Could not delete orphaned photo gs://{self.bucket_name}/{blob_name}: {e}")
            return
        logger.info(f"Deleted orphaned photo gs://{self.bucket_name}/{blob_name}")
