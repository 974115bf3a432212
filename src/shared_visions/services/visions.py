"""Vision lifecycle: creation, image generation and persistence."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from shared_visions.domain.groups import GroupMember
from shared_visions.domain.models import UserProfile
from shared_visions.domain.visions import (
    GeneratedImage,
    ImageStyle,
    Vision,
    VisionStatus,
)
from shared_visions.services.events import ObservableService, ServiceEvent
from shared_visions.services.generation import GenerationService
from shared_visions.services.groups import GroupRepository, MemberRepository
from shared_visions.services.members import MemberResolver
from shared_visions.services.prompts import build_prompt
from shared_visions.services.storage import GeneratedImageRepository, StorageService

MAX_REFERENCE_PHOTOS = 4

_logger = logging.getLogger(__name__)


class VisionRepository(Protocol):
    """Persistence interface for visions."""

    def create_vision(self, vision: Vision) -> Vision:
        """Insert a vision and return it."""

    def get_vision(self, vision_id: UUID) -> Vision | None:
        """Return a vision with its images, if present."""

    def list_visions(self, group_ids: Sequence[UUID] | None = None) -> list[Vision]:
        """Return visions with their images, newest first."""

    def update_status(self, vision_id: UUID, status: VisionStatus) -> None:
        """Persist a vision status."""

    def delete_vision(self, vision_id: UUID) -> None:
        """Delete a vision; its images are removed by the database."""


@dataclass(frozen=True)
class GenerationTargets:
    """Members an image should depict, with the names used for them."""

    user_ids: list[UUID]
    names: dict[UUID, str]


@dataclass
class VisionService(ObservableService):
    """Orchestrates the vision lifecycle.

    Status moves pending -> generating -> completed or failed, and a
    completed or failed vision may be generated again. Each successful run
    appends one image. Runs for the same vision are not coordinated.

    ``visions`` is a local cache of the last fetch. Shared server processes
    set ``track_created`` to False so created visions are not accumulated.
    """

    repository: VisionRepository
    group_repository: GroupRepository
    member_repository: MemberRepository
    image_repository: GeneratedImageRepository
    storage: StorageService
    generation: GenerationService
    resolver: MemberResolver
    visions: list[Vision] = field(default_factory=list)
    track_created: bool = True
    _active_generations: int = field(default=0, init=False, repr=False)
    _tasks: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    @property
    def is_generating(self) -> bool:
        return self._active_generations > 0

    async def fetch_visions(self, group_id: UUID | None = None) -> list[Vision] | None:
        """Load visions, optionally for one group."""
        try:
            self.visions = self.repository.list_visions(
                [group_id] if group_id is not None else None
            )
        except Exception as exc:
            self._record_error(exc, "Fetching visions")
            return None
        return self.visions

    async def get_vision(self, vision_id: UUID) -> Vision | None:
        """Load a single vision with its images."""
        try:
            return self.repository.get_vision(vision_id)
        except Exception as exc:
            self._record_error(exc, "Fetching vision")
            return None

    async def get_image(self, image_id: UUID) -> GeneratedImage | None:
        """Load a single generated image."""
        try:
            return self.image_repository.get_image(image_id)
        except Exception as exc:
            self._record_error(exc, "Fetching image")
            return None

    async def fetch_visions_for_user(self, user_id: UUID) -> list[Vision] | None:
        """Load visions of every group the user belongs to."""
        try:
            memberships = self.member_repository.list_memberships(user_id)
            group_ids = [membership.group_id for membership in memberships]
            self.visions = self.repository.list_visions(group_ids) if group_ids else []
        except Exception as exc:
            self._record_error(exc, "Fetching visions")
            return None
        return self.visions

    async def create_vision(  # noqa: PLR0913
        self,
        group_id: UUID,
        created_by: UUID,
        title: str,
        description: str | None = None,
        target_members: Sequence[UUID] = (),
        *,
        generate: bool = False,
        style: ImageStyle = ImageStyle.REALISTIC,
        current_user: UserProfile | None = None,
    ) -> Vision | None:
        """Persist a new pending vision, optionally starting generation."""
        try:
            vision = self.repository.create_vision(
                Vision(
                    id=uuid4(),
                    group_id=group_id,
                    created_by=created_by,
                    title=title,
                    description=description or None,
                    target_members=list(target_members),
                    status=VisionStatus.PENDING,
                    created_at=datetime.now(tz=UTC),
                )
            )
        except Exception as exc:
            self._record_error(exc, "Creating vision")
            return None
        if self.track_created:
            self.visions.insert(0, vision)
        self.events.publish(ServiceEvent(kind="vision_created", entity_id=vision.id))
        if generate:
            self.start_generation(vision, style=style, current_user=current_user)
        return vision

    def start_generation(
        self,
        vision: Vision,
        style: ImageStyle = ImageStyle.REALISTIC,
        current_user: UserProfile | None = None,
    ) -> asyncio.Task:
        """Run ``generate_image`` as a detached task."""
        task = asyncio.create_task(
            self.generate_image(vision, style=style, current_user=current_user)
        )
        self._tasks.add(task)
        task.add_done_callback(self._generation_done)
        return task

    async def generate_image(
        self,
        vision: Vision,
        style: ImageStyle = ImageStyle.REALISTIC,
        current_user: UserProfile | None = None,
    ) -> GeneratedImage | None:
        """Generate and store one more image for a vision."""
        self._active_generations += 1
        try:
            return await self._run_generation(vision, style, current_user)
        except Exception as exc:
            try:
                self.repository.update_status(vision.id, VisionStatus.FAILED)
            except Exception:
                _logger.warning(
                    "Could not mark vision %s as failed", vision.id, exc_info=True
                )
            self._update_local(vision.id, status=VisionStatus.FAILED)
            self._record_error(exc, "Image generation")
            return None
        finally:
            self._active_generations -= 1

    async def toggle_favorite(self, image: GeneratedImage) -> GeneratedImage | None:
        """Flip the favorite flag of an image."""
        updated = replace(image, is_favorite=not image.is_favorite)
        try:
            self.image_repository.set_favorite(image.id, updated.is_favorite)
        except Exception as exc:
            self._record_error(exc, "Updating favorite")
            return None
        self.visions = [
            replace(
                vision,
                generated_images=[
                    updated if current.id == image.id else current
                    for current in vision.generated_images
                ],
            )
            if vision.id == image.vision_id
            else vision
            for vision in self.visions
        ]
        self.events.publish(ServiceEvent(kind="image_updated", entity_id=image.id))
        return updated

    async def delete_vision(self, vision_id: UUID) -> bool:
        """Delete a vision and, through the database, its images."""
        try:
            self.repository.delete_vision(vision_id)
        except Exception as exc:
            self._record_error(exc, "Deleting vision")
            return False
        self.visions = [vision for vision in self.visions if vision.id != vision_id]
        self.events.publish(ServiceEvent(kind="vision_deleted", entity_id=vision_id))
        return True

    async def _run_generation(
        self,
        vision: Vision,
        style: ImageStyle,
        current_user: UserProfile | None,
    ) -> GeneratedImage:
        self._set_status(vision.id, VisionStatus.GENERATING)

        group = self.group_repository.get_group(vision.group_id)
        aesthetic = group.aesthetic_profile if group else None
        members = self.member_repository.list_members(vision.group_id)
        targets = await self._resolve_targets(vision, members, current_user)

        prompt = build_prompt(vision.title, vision.description, style, aesthetic)
        enhanced = await self.generation.enhance_prompt(
            prompt, targets.names, aesthetic
        )
        photos = self.storage.get_photos_for_users(
            targets.user_ids, limit=MAX_REFERENCE_PHOTOS
        )
        image_bytes = await self.generation.generate_image(enhanced, photos)
        image = self.storage.upload_generated_image(vision.id, image_bytes, enhanced)

        self._set_status(vision.id, VisionStatus.COMPLETED)
        self.visions = [
            replace(current, generated_images=[*current.generated_images, image])
            if current.id == vision.id
            else current
            for current in self.visions
        ]
        _logger.info("Generated image %s for vision %s", image.id, vision.id)
        self.events.publish(
            ServiceEvent(kind="image_generated", entity_id=vision.id, payload=image)
        )
        return image

    async def _resolve_targets(
        self,
        vision: Vision,
        members: list[GroupMember],
        current_user: UserProfile | None,
    ) -> GenerationTargets:
        """Pick targets: explicit list, then names in the text, then everyone."""
        names_by_id = {
            member.user_id: member.full_name for member in members if member.full_name
        }
        if vision.target_members:
            return GenerationTargets(
                user_ids=list(vision.target_members),
                names={
                    user_id: names_by_id[user_id]
                    for user_id in vision.target_members
                    if user_id in names_by_id
                },
            )

        acting_user = current_user or _creator_profile(vision, members)
        if acting_user is not None:
            text = " ".join(filter(None, [vision.title, vision.description]))
            mentioned = await self.resolver.resolve(
                text,
                members,
                acting_user.id,
                acting_user.full_name or "me",
            )
            if mentioned:
                return GenerationTargets(user_ids=list(mentioned), names=mentioned)

        return GenerationTargets(
            user_ids=[member.user_id for member in members], names=names_by_id
        )

    def _set_status(self, vision_id: UUID, status: VisionStatus) -> None:
        self.repository.update_status(vision_id, status)
        self._update_local(vision_id, status=status)
        self.events.publish(
            ServiceEvent(kind="vision_status", entity_id=vision_id, payload=status)
        )

    def _update_local(self, vision_id: UUID, **changes: object) -> None:
        self.visions = [
            replace(vision, **changes) if vision.id == vision_id else vision
            for vision in self.visions
        ]

    def _generation_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Background generation crashed", exc_info=exc)


def _creator_profile(
    vision: Vision, members: list[GroupMember]
) -> UserProfile | None:
    for member in members:
        if member.user_id == vision.created_by:
            return member.user or UserProfile(id=member.user_id)
    return None
