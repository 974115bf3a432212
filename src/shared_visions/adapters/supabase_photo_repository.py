"""Supabase-backed repositories for user photos and generated images."""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shared_visions.adapters.supabase_rows import image_from_row, photo_from_row
from shared_visions.domain.models import UserPhoto
from shared_visions.domain.visions import GeneratedImage
from shared_visions.services.storage import GeneratedImageRepository, PhotoRepository


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for the user_photos table."""

    client: Client

    def create_photo(self, photo: UserPhoto) -> UserPhoto:
        """Insert a photo row and return it."""
        response = (
            self.client.table("user_photos")
            .insert(
                {
                    "id": str(photo.id),
                    "user_id": str(photo.user_id),
                    "photo_url": photo.photo_url,
                    "is_primary": photo.is_primary,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo")
        return photo_from_row(response.data[0])

    def clear_primary(self, user_id: UUID) -> None:
        """Unset the primary flag on every photo of a user."""
        self.client.table("user_photos").update({"is_primary": False}).eq(
            "user_id", str(user_id)
        ).execute()

    def list_photos(self, user_id: UUID) -> list[UserPhoto]:
        """Return a user's photos, newest first."""
        response = (
            self.client.table("user_photos")
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [photo_from_row(row) for row in response.data or []]

    def list_photos_for_users(
        self, user_ids: Sequence[UUID], limit: int | None = None
    ) -> list[UserPhoto]:
        """Return photos of several users, primary photos first."""
        query = (
            self.client.table("user_photos")
            .select("*")
            .in_("user_id", [str(user_id) for user_id in user_ids])
            .order("is_primary", desc=True)
            .order("created_at", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [photo_from_row(row) for row in response.data or []]

    def delete_photo(self, photo_id: UUID) -> None:
        """Delete a photo row."""
        self.client.table("user_photos").delete().eq("id", str(photo_id)).execute()


@dataclass
class SupabaseGeneratedImageRepository(GeneratedImageRepository):
    """Supabase implementation for the generated_images table."""

    client: Client

    def create_image(self, image: GeneratedImage) -> GeneratedImage:
        """Insert a generated image row and return it."""
        response = (
            self.client.table("generated_images")
            .insert(
                {
                    "id": str(image.id),
                    "vision_id": str(image.vision_id),
                    "image_url": image.image_url,
                    "prompt_used": image.prompt_used,
                    "is_favorite": image.is_favorite,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create generated image")
        return image_from_row(response.data[0])

    def get_image(self, image_id: UUID) -> GeneratedImage | None:
        """Return a generated image by id, if present."""
        response = (
            self.client.table("generated_images")
            .select("*")
            .eq("id", str(image_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return image_from_row(response.data[0])

    def set_favorite(self, image_id: UUID, is_favorite: bool) -> None:
        """Update the favorite flag."""
        self.client.table("generated_images").update({"is_favorite": is_favorite}).eq(
            "id", str(image_id)
        ).execute()
