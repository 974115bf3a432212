"""Domain models for visions and their generated images."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

_STYLE_DESCRIPTIONS = {
    "realistic": "Photorealistic, natural lighting, candid moment",
    "artistic": "Artistic interpretation, painterly style",
    "cinematic": "Cinematic look, dramatic lighting, movie-like",
    "dreamy": "Soft focus, ethereal, dreamlike quality",
}


class ImageStyle(StrEnum):
    """Visual style selector for generated images."""

    REALISTIC = "realistic"
    ARTISTIC = "artistic"
    CINEMATIC = "cinematic"
    DREAMY = "dreamy"

    @property
    def description(self) -> str:
        return _STYLE_DESCRIPTIONS[self.value]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class VisionStatus(StrEnum):
    """Lifecycle status of a vision."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GeneratedImage:
    """Image produced for a vision."""

    id: UUID
    vision_id: UUID
    image_url: str
    prompt_used: str | None = None
    is_favorite: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class Vision:
    """Aspirational scene owned by a group."""

    id: UUID
    group_id: UUID
    created_by: UUID | None
    title: str
    description: str | None = None
    target_members: list[UUID] = field(default_factory=list)
    status: VisionStatus = VisionStatus.PENDING
    created_at: datetime | None = None
    generated_images: list[GeneratedImage] = field(default_factory=list)

    @property
    def is_for_all_members(self) -> bool:
        """Empty target list means every group member."""
        return not self.target_members
