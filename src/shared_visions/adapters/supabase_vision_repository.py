"""Supabase-backed vision repository."""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shared_visions.adapters.supabase_rows import vision_from_row
from shared_visions.domain.visions import Vision, VisionStatus
from shared_visions.services.visions import VisionRepository

_VISION_COLUMNS = "*, generated_images(*)"


@dataclass
class SupabaseVisionRepository(VisionRepository):
    """Supabase implementation for the visions table."""

    client: Client

    def create_vision(self, vision: Vision) -> Vision:
        """Insert a vision row and return it."""
        response = (
            self.client.table("visions")
            .insert(
                {
                    "id": str(vision.id),
                    "group_id": str(vision.group_id),
                    "created_by": str(vision.created_by) if vision.created_by else None,
                    "title": vision.title,
                    "description": vision.description,
                    "target_members": [str(user_id) for user_id in vision.target_members],
                    "status": vision.status.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create vision")
        return vision_from_row(response.data[0])

    def get_vision(self, vision_id: UUID) -> Vision | None:
        """Return a vision with its images, if present."""
        response = (
            self.client.table("visions")
            .select(_VISION_COLUMNS)
            .eq("id", str(vision_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return vision_from_row(response.data[0])

    def list_visions(self, group_ids: Sequence[UUID] | None = None) -> list[Vision]:
        """Return visions with their images, newest first."""
        query = self.client.table("visions").select(_VISION_COLUMNS)
        if group_ids is not None:
            query = query.in_("group_id", [str(group_id) for group_id in group_ids])
        response = query.order("created_at", desc=True).execute()
        return [vision_from_row(row) for row in response.data or []]

    def update_status(self, vision_id: UUID, status: VisionStatus) -> None:
        """Persist a vision status."""
        self.client.table("visions").update({"status": status.value}).eq(
            "id", str(vision_id)
        ).execute()

    def delete_vision(self, vision_id: UUID) -> None:
        """Delete a vision row."""
        self.client.table("visions").delete().eq("id", str(vision_id)).execute()
