"""Reference photos and avatars of the signed-in user."""

from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from shared_visions.domain.errors import StorageError
from shared_visions.domain.models import UserPhoto
from shared_visions.services.events import ObservableService, ServiceEvent
from shared_visions.services.storage import StorageService

MAX_PHOTOS_PER_USER = 10


class PhotoDownloader(Protocol):
    """Interface for fetching stored photos back."""

    async def download(self, url: str) -> bytes:
        """Return the bytes behind a photo URL."""


@dataclass
class PhotoService(ObservableService):
    """Manage a user's reference photos."""

    storage: StorageService
    downloader: PhotoDownloader
    user_photos: list[UserPhoto] = field(default_factory=list)
    max_photos: int = MAX_PHOTOS_PER_USER

    async def fetch_user_photos(self, user_id: UUID) -> list[UserPhoto] | None:
        """Load the user's photos, newest first."""
        try:
            self.user_photos = self.storage.get_user_photos(user_id)
        except Exception as exc:
            self._record_error(exc, "Fetching photos")
            return None
        return self.user_photos

    async def upload_photo(
        self, user_id: UUID, data: bytes, is_primary: bool = False
    ) -> UserPhoto | None:
        """Upload a reference photo for the user."""
        try:
            existing = self.storage.get_user_photos(user_id)
            if len(existing) >= self.max_photos:
                raise StorageError(
                    f"You can upload at most {self.max_photos} photos."
                )
        except Exception as exc:
            self._record_error(exc, "Uploading photo")
            return None
        return self._store(user_id, data, is_primary)

    async def delete_photo(self, photo: UserPhoto) -> bool:
        """Delete a photo from storage and the table."""
        try:
            self.storage.delete_user_photo(photo)
        except Exception as exc:
            self._record_error(exc, "Deleting photo")
            return False
        self.user_photos = [
            current for current in self.user_photos if current.id != photo.id
        ]
        self.events.publish(ServiceEvent(kind="photo_deleted", entity_id=photo.id))
        return True

    async def set_primary_photo(self, photo: UserPhoto) -> UserPhoto | None:
        """Re-upload an existing photo flagged as primary."""
        try:
            data = await self.downloader.download(photo.photo_url)
        except Exception as exc:
            self._record_error(exc, "Downloading photo")
            return None
        return self._store(photo.user_id, data, is_primary=True)

    async def upload_avatar(self, user_id: UUID, data: bytes) -> str | None:
        """Upload a new avatar and return its URL."""
        try:
            return self.storage.upload_avatar(user_id, data)
        except Exception as exc:
            self._record_error(exc, "Uploading avatar")
            return None

    def _store(self, user_id: UUID, data: bytes, is_primary: bool) -> UserPhoto | None:
        try:
            photo = self.storage.upload_user_photo(user_id, data, is_primary)
        except Exception as exc:
            self._record_error(exc, "Uploading photo")
            return None
        if is_primary:
            self.user_photos = [
                replace(current, is_primary=False) for current in self.user_photos
            ]
        self.user_photos.insert(0, photo)
        self.events.publish(ServiceEvent(kind="photo_uploaded", entity_id=photo.id))
        return photo
