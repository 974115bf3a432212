"""Object storage for user photos, avatars and generated images."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from shared_visions.domain.errors import (
    DeleteFailedError,
    ImageEncodingError,
    UploadFailedError,
)
from shared_visions.domain.models import UserPhoto
from shared_visions.domain.visions import GeneratedImage

USER_PHOTOS_BUCKET = "user-photos"
GENERATED_IMAGES_BUCKET = "generated-images"
AVATARS_BUCKET = "avatars"

_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


class BucketStorage(Protocol):
    """Interface for a blob store organised in buckets."""

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> None:
        """Store bytes at a path."""

    def public_url(self, bucket: str, path: str) -> str:
        """Return the public URL of a stored object."""

    def remove(self, bucket: str, paths: list[str]) -> None:
        """Delete objects by path."""


class PhotoRepository(Protocol):
    """Persistence interface for user reference photos."""

    def create_photo(self, photo: UserPhoto) -> UserPhoto:
        """Insert a photo row and return it."""

    def clear_primary(self, user_id: UUID) -> None:
        """Unset the primary flag on all photos of a user."""

    def list_photos(self, user_id: UUID) -> list[UserPhoto]:
        """Return a user's photos, newest first."""

    def list_photos_for_users(
        self, user_ids: Sequence[UUID], limit: int | None = None
    ) -> list[UserPhoto]:
        """Return photos belonging to any of the users."""

    def delete_photo(self, photo_id: UUID) -> None:
        """Delete a photo row."""


class GeneratedImageRepository(Protocol):
    """Persistence interface for generated images."""

    def create_image(self, image: GeneratedImage) -> GeneratedImage:
        """Insert a generated image row and return it."""

    def get_image(self, image_id: UUID) -> GeneratedImage | None:
        """Return a generated image by id, if present."""

    def set_favorite(self, image_id: UUID, is_favorite: bool) -> None:
        """Update the favorite flag of an image."""


class ProfileAvatarRepository(Protocol):
    """Persistence interface for profile avatar URLs."""

    def set_avatar_url(self, user_id: UUID, avatar_url: str) -> None:
        """Store the avatar URL on the user's profile."""


@dataclass
class StorageService:
    """Uploads binaries to buckets and records them in tables."""

    buckets: BucketStorage
    photo_repository: PhotoRepository
    image_repository: GeneratedImageRepository
    avatar_repository: ProfileAvatarRepository

    def upload_user_photo(
        self, user_id: UUID, data: bytes, is_primary: bool = False
    ) -> UserPhoto:
        """Upload a reference photo and record it for the user."""
        content_type = _content_type(data)
        path = f"{user_id}/{uuid4()}.{_EXTENSIONS[content_type]}"
        url = self._upload(USER_PHOTOS_BUCKET, path, data, content_type)
        if is_primary:
            self.photo_repository.clear_primary(user_id)
        return self.photo_repository.create_photo(
            UserPhoto(
                id=uuid4(),
                user_id=user_id,
                photo_url=url,
                is_primary=is_primary,
                created_at=datetime.now(tz=UTC),
            )
        )

    def get_user_photos(self, user_id: UUID) -> list[UserPhoto]:
        """Return a user's photos, newest first."""
        return self.photo_repository.list_photos(user_id)

    def get_photos_for_users(
        self, user_ids: Sequence[UUID], limit: int | None = None
    ) -> list[UserPhoto]:
        """Return reference photos for a set of users."""
        if not user_ids:
            return []
        return self.photo_repository.list_photos_for_users(user_ids, limit)

    def delete_user_photo(self, photo: UserPhoto) -> None:
        """Remove the stored object, then the photo row."""
        path = _path_in_bucket(photo.photo_url, USER_PHOTOS_BUCKET)
        if path:
            try:
                self.buckets.remove(USER_PHOTOS_BUCKET, [path])
            except Exception as exc:
                raise DeleteFailedError() from exc
        self.photo_repository.delete_photo(photo.id)

    def upload_generated_image(
        self, vision_id: UUID, data: bytes, prompt: str
    ) -> GeneratedImage:
        """Upload generated image bytes and record them for the vision."""
        path = f"{vision_id}/{uuid4()}.png"
        url = self._upload(GENERATED_IMAGES_BUCKET, path, data, "image/png")
        return self.image_repository.create_image(
            GeneratedImage(
                id=uuid4(),
                vision_id=vision_id,
                image_url=url,
                prompt_used=prompt,
                is_favorite=False,
                created_at=datetime.now(tz=UTC),
            )
        )

    def upload_avatar(self, user_id: UUID, data: bytes) -> str:
        """Replace the user's avatar and return its public URL."""
        content_type = _content_type(data)
        path = f"{user_id}.{_EXTENSIONS[content_type]}"
        url = self._upload(AVATARS_BUCKET, path, data, content_type, upsert=True)
        self.avatar_repository.set_avatar_url(user_id, url)
        return url

    def _upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        try:
            self.buckets.upload(bucket, path, data, content_type, upsert=upsert)
        except Exception as exc:
            raise UploadFailedError() from exc
        return self.buckets.public_url(bucket, path)


def _content_type(data: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if not data:
        raise ImageEncodingError()
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _path_in_bucket(url: str, bucket: str) -> str | None:
    """Return the object path following ``/{bucket}/`` in a public URL."""
    marker = f"/{bucket}/"
    _, found, path = url.partition(marker)
    if not found or not path:
        return None
    return path.split("?", 1)[0]
