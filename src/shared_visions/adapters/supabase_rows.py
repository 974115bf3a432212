"""Row mapping helpers shared by the Supabase repositories."""

from datetime import datetime
from uuid import UUID

from shared_visions.domain.groups import AestheticProfile, Group, GroupMember, GroupRole
from shared_visions.domain.models import UserPhoto, UserProfile
from shared_visions.domain.visions import GeneratedImage, Vision, VisionStatus


def parse_datetime(value: object) -> datetime | None:
    """Parse an ISO timestamp column."""
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def optional_uuid(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def profile_from_row(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        id=UUID(str(row["id"])),
        username=row.get("username"),
        full_name=row.get("full_name"),
        avatar_url=row.get("avatar_url"),
        created_at=parse_datetime(row.get("created_at")),
    )


def photo_from_row(row: dict[str, object]) -> UserPhoto:
    return UserPhoto(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        photo_url=str(row["photo_url"]),
        is_primary=bool(row.get("is_primary", False)),
        created_at=parse_datetime(row.get("created_at")),
    )


def group_from_row(row: dict[str, object]) -> Group:
    aesthetic = row.get("aesthetic_profile")
    return Group(
        id=UUID(str(row["id"])),
        name=str(row["name"]),
        invite_code=row.get("invite_code"),
        created_by=optional_uuid(row.get("created_by")),
        created_at=parse_datetime(row.get("created_at")),
        aesthetic_profile=(
            AestheticProfile.from_json(aesthetic) if isinstance(aesthetic, dict) else None
        ),
    )


def member_from_row(row: dict[str, object]) -> GroupMember:
    profile = row.get("profiles")
    try:
        role = GroupRole(str(row.get("role", GroupRole.MEMBER)))
    except ValueError:
        role = GroupRole.MEMBER
    return GroupMember(
        id=UUID(str(row["id"])),
        group_id=UUID(str(row["group_id"])),
        user_id=UUID(str(row["user_id"])),
        role=role,
        joined_at=parse_datetime(row.get("joined_at")),
        user=profile_from_row(profile) if isinstance(profile, dict) else None,
    )


def image_from_row(row: dict[str, object]) -> GeneratedImage:
    return GeneratedImage(
        id=UUID(str(row["id"])),
        vision_id=UUID(str(row["vision_id"])),
        image_url=str(row["image_url"]),
        prompt_used=row.get("prompt_used"),
        is_favorite=bool(row.get("is_favorite", False)),
        created_at=parse_datetime(row.get("created_at")),
    )


def vision_from_row(row: dict[str, object]) -> Vision:
    images = row.get("generated_images") or []
    return Vision(
        id=UUID(str(row["id"])),
        group_id=UUID(str(row["group_id"])),
        created_by=optional_uuid(row.get("created_by")),
        title=str(row["title"]),
        description=row.get("description"),
        target_members=[UUID(str(value)) for value in row.get("target_members") or []],
        status=VisionStatus(str(row.get("status", VisionStatus.PENDING))),
        created_at=parse_datetime(row.get("created_at")),
        generated_images=[image_from_row(image) for image in images],
    )
