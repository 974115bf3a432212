"""Domain models for groups, memberships and aesthetics."""

import secrets
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from shared_visions.domain.models import UserProfile
from shared_visions.domain.visions import ImageStyle

INVITE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 6

CONSISTENCY_CLAUSE = (
    "Keep this visual style consistent across all images for this group."
)


class GroupRole(StrEnum):
    """Membership role. Informational only."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


@dataclass(frozen=True)
class AestheticProfile:
    """Group-level visual preferences applied to every prompt."""

    base_style: ImageStyle = ImageStyle.REALISTIC
    color_palette: str | None = None
    mood: str | None = None
    lighting: str | None = None
    composition: str | None = None
    overall_vibe: str | None = None

    def prompt_suffix(self) -> str:
        """Render the aesthetic as a prompt suffix.

        A non-blank ``overall_vibe`` replaces the structured fields entirely.
        """
        if optional_text(self.overall_vibe):
            return f"{self.overall_vibe} {CONSISTENCY_CLAUSE}"
        parts = [self.base_style.description]
        labelled = (
            ("Color palette", self.color_palette),
            ("Mood", self.mood),
            ("Lighting", self.lighting),
            ("Composition", self.composition),
        )
        parts.extend(
            f"{label}: {value}" for label, value in labelled if optional_text(value)
        )
        return f"{'. '.join(parts)}. {CONSISTENCY_CLAUSE}"

    def to_json(self) -> dict[str, object]:
        """Serialize using the column's camelCase keys."""
        return {
            "baseStyle": self.base_style.value,
            "colorPalette": self.color_palette,
            "mood": self.mood,
            "lighting": self.lighting,
            "composition": self.composition,
            "overallVibe": self.overall_vibe,
        }

    @classmethod
    def from_json(cls, payload: dict[str, object]) -> "AestheticProfile":
        """Build a profile from the stored JSON column."""
        raw_style = payload.get("baseStyle")
        try:
            base_style = ImageStyle(str(raw_style))
        except ValueError:
            base_style = ImageStyle.REALISTIC
        return cls(
            base_style=base_style,
            color_palette=optional_text(payload.get("colorPalette")),
            mood=optional_text(payload.get("mood")),
            lighting=optional_text(payload.get("lighting")),
            composition=optional_text(payload.get("composition")),
            overall_vibe=optional_text(payload.get("overallVibe")),
        )


@dataclass(frozen=True)
class Group:
    """Group of users sharing visions."""

    id: UUID
    name: str
    invite_code: str | None = None
    created_by: UUID | None = None
    created_at: datetime | None = None
    aesthetic_profile: AestheticProfile | None = None


@dataclass(frozen=True)
class GroupMember:
    """Membership row, optionally with the member's profile."""

    id: UUID
    group_id: UUID
    user_id: UUID
    role: GroupRole = GroupRole.MEMBER
    joined_at: datetime | None = None
    user: UserProfile | None = None

    @property
    def full_name(self) -> str | None:
        return self.user.full_name if self.user else None


def generate_invite_code() -> str:
    """Return a random 6-character invite code without ambiguous characters."""
    return "".join(
        secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH)
    )


def optional_text(value: object) -> str | None:
    """Return the value when it is a non-blank string, otherwise None."""
    if isinstance(value, str) and value.strip():
        return value
    return None
