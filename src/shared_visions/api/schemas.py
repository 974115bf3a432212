"""Pydantic request models for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field

from shared_visions.domain.groups import AestheticProfile, optional_text
from shared_visions.domain.visions import ImageStyle

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class CreateGroupRequest(BaseModel):
    """Payload for creating a group."""

    name: str = Field(min_length=1, max_length=100)


class JoinGroupRequest(BaseModel):
    """Payload for joining a group by invite code."""

    invite_code: str = Field(min_length=6, max_length=6)


class AestheticProfileRequest(BaseModel):
    """Group aesthetic settings."""

    base_style: ImageStyle = ImageStyle.REALISTIC
    color_palette: str | None = None
    mood: str | None = None
    lighting: str | None = None
    composition: str | None = None
    overall_vibe: str | None = None

    def to_domain(self) -> AestheticProfile:
        """Convert to the domain value object, treating blanks as unset."""
        return AestheticProfile(
            base_style=self.base_style,
            color_palette=optional_text(self.color_palette),
            mood=optional_text(self.mood),
            lighting=optional_text(self.lighting),
            composition=optional_text(self.composition),
            overall_vibe=optional_text(self.overall_vibe),
        )


class CreateVisionRequest(BaseModel):
    """Payload for creating a vision."""

    group_id: UUID
    title: str = Field(min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    target_members: list[UUID] = Field(default_factory=list)
    generate: bool = False
    style: ImageStyle = ImageStyle.REALISTIC


class GenerateImageRequest(BaseModel):
    """Payload for generating another image."""

    style: ImageStyle = ImageStyle.REALISTIC
