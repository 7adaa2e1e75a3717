import logging
from typing import Optional

from app.core.settings import settings
from .base import PhotoStorageProvider
from .local_provider import LocalPhotoStorage

logger = logging.getLogger(__name__)

_provider_instance: Optional[PhotoStorageProvider] = None


def get_photo_storage() -> PhotoStorageProvider:
    """
    Resolve the active photo store.

    Rules:
    - FIREBASE_STORAGE_BUCKET set and not in mock-DB mode: Firebase Storage.
    - Otherwise: local UPLOAD_DIR.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    if settings.FIREBASE_STORAGE_BUCKET and not settings.USE_MOCK_DB:
        from .firebase_provider import FirebasePhotoStorage
        _provider_instance = FirebasePhotoStorage(bucket_name=settings.FIREBASE_STORAGE_BUCKET)
    else:
        _provider_instance = LocalPhotoStorage()

    logger.info(f"Photo storage initialized: {_provider_instance.name}")
    return _provider_instance
