from abc import ABC, abstractmethod
from dataclasses import dataclass
import mimetypes
import logging
from typing import Optional

from app.core.errors import InvalidArgument

logger = logging.getLogger(__name__)


class PhotoStorageProvider(ABC):
    """
    Abstract photo store.

    Contract:
    - Input: raw image bytes plus content type
    - Output: an opaque URL the frontend can render
    - Raises DependencyError when the backing store fails
    - delete_photo() undoes a store whose incident was never written
    """

    name = "base"

    @abstractmethod
    def store_photo(self, data: bytes, content_type: str, filename: Optional[str] = None) -> str:
        raise NotImplementedError

    @abstractmethod
    def delete_photo(self, url: str) -> None:
        """Remove a photo this store returned. Best-effort: logs, never raises."""
        raise NotImplementedError


def validate_photo(data: Optional[bytes], content_type: Optional[str], max_bytes: int) -> None:
    """
    Reject empty, oversized or non-image uploads before anything is written.
    """
    if not data:
        raise InvalidArgument("Photo upload is empty")
    if len(data) > max_bytes:
        raise InvalidArgument(f"Photo exceeds maximum size of {max_bytes // (1024 * 1024)} MB")
    if not content_type or not content_type.lower().startswith("image/"):
        raise InvalidArgument(f"Photo must be an image, got {content_type or 'unknown type'}")


def extension_for(content_type: str, filename: Optional[str] = None) -> str:
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[-1].lower()
    return mimetypes.guess_extension(content_type) or ".img"


@dataclass(frozen=True)
class PhotoUpload:
    """An uploaded photo as received from the client."""
    data: bytes
    content_type: str
    filename: Optional[str] = None
