import logging
import os
import uuid
from typing import Optional

from app.core.errors import DependencyError
from app.core.settings import settings
from .base import PhotoStorageProvider, extension_for

logger = logging.getLogger(__name__)


class LocalPhotoStorage(PhotoStorageProvider):
    """
    Writes photos under UPLOAD_DIR; app.main serves that directory at /uploads.
    Used when no Firebase Storage bucket is configured.
    """

    name = "local"
    URL_PREFIX = "/uploads"

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR

    def store_photo(self, data: bytes, content_type: str, filename: Optional[str] = None) -> str:
        stored_name = f"{uuid.uuid4().hex}{extension_for(content_type, filename)}"
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with open(os.path.join(self.upload_dir, stored_name), "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write photo to {self.upload_dir}: {e}")
            raise DependencyError("Photo storage unavailable")

        logger.info(f"Stored photo locally: {stored_name} ({len(data)} bytes)")
        return f"{self.URL_PREFIX}/{stored_name}"

    def delete_photo(self, url: str) -> None:
        prefix = f"{self.URL_PREFIX}/"
        if not url or not url.startswith(prefix):
            logger.warning(f"Not a local photo URL, nothing to delete: {url}")
            return

        path = os.path.join(self.upload_dir, os.path.basename(url[len(prefix):]))
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"Could not delete orphaned photo {path}: {e}")
            return
        logger.info(f"Deleted orphaned photo {path}")
