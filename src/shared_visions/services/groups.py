"""Group membership, invite codes and aesthetics."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from shared_visions.domain.groups import (
    AestheticProfile,
    Group,
    GroupMember,
    GroupRole,
    generate_invite_code,
)
from shared_visions.services.events import ObservableService, ServiceEvent

ALREADY_MEMBER_MESSAGE = "You're already a member of this group"
INVALID_INVITE_MESSAGE = "Invalid invite code or group not found"

_logger = logging.getLogger(__name__)


class GroupRepository(Protocol):
    """Persistence interface for groups."""

    def create_group(self, group: Group) -> Group:
        """Insert a group and return it."""

    def get_group(self, group_id: UUID) -> Group | None:
        """Return a group by id, if present."""

    def find_by_invite_code(self, invite_code: str) -> Group | None:
        """Return the group using an invite code, if any."""

    def list_groups(self, group_ids: Sequence[UUID]) -> list[Group]:
        """Return groups by id, newest first."""

    def update_invite_code(self, group_id: UUID, invite_code: str) -> None:
        """Replace a group's invite code."""

    def update_aesthetic_profile(
        self, group_id: UUID, profile: AestheticProfile
    ) -> None:
        """Replace a group's aesthetic profile."""


class MemberRepository(Protocol):
    """Persistence interface for group memberships."""

    def add_member(self, member: GroupMember) -> GroupMember:
        """Insert a membership row and return it."""

    def get_member(self, group_id: UUID, user_id: UUID) -> GroupMember | None:
        """Return a membership, if present."""

    def list_members(self, group_id: UUID) -> list[GroupMember]:
        """Return a group's members with their profiles."""

    def list_memberships(self, user_id: UUID) -> list[GroupMember]:
        """Return every membership of a user."""

    def remove_member(self, group_id: UUID, user_id: UUID) -> None:
        """Delete a membership."""


@dataclass
class GroupService(ObservableService):
    """Application service for the groups a user belongs to.

    ``groups`` caches the last fetch; ``track_created`` controls whether
    created and joined groups are added to it.
    """

    group_repository: GroupRepository
    member_repository: MemberRepository
    groups: list[Group] = field(default_factory=list)
    members: list[GroupMember] = field(default_factory=list)
    track_created: bool = True

    async def fetch_groups(self, user_id: UUID) -> list[Group] | None:
        """Load the groups the user is a member of."""
        try:
            memberships = self.member_repository.list_memberships(user_id)
            group_ids = [membership.group_id for membership in memberships]
            self.groups = (
                self.group_repository.list_groups(group_ids) if group_ids else []
            )
        except Exception as exc:
            self._record_error(exc, "Fetching groups")
            return None
        return self.groups

    async def create_group(self, name: str, created_by: UUID) -> Group | None:
        """Create a group with a fresh invite code and its owner membership."""
        now = datetime.now(tz=UTC)
        try:
            group = self.group_repository.create_group(
                Group(
                    id=uuid4(),
                    name=name,
                    invite_code=generate_invite_code(),
                    created_by=created_by,
                    created_at=now,
                )
            )
            self.member_repository.add_member(
                GroupMember(
                    id=uuid4(),
                    group_id=group.id,
                    user_id=created_by,
                    role=GroupRole.OWNER,
                    joined_at=now,
                )
            )
        except Exception as exc:
            self._record_error(exc, "Creating group")
            return None
        if self.track_created:
            self.groups.insert(0, group)
        self.events.publish(ServiceEvent(kind="group_created", entity_id=group.id))
        return group

    async def join_group(self, invite_code: str, user_id: UUID) -> bool:
        """Join the group behind an invite code.

        The duplicate-membership check is client side only.
        """
        try:
            group = self.group_repository.find_by_invite_code(
                invite_code.strip().upper()
            )
        except Exception:
            _logger.exception("Looking up invite code failed")
            group = None
        if group is None:
            self._report(INVALID_INVITE_MESSAGE)
            return False

        try:
            if self.member_repository.get_member(group.id, user_id) is not None:
                self._report(ALREADY_MEMBER_MESSAGE)
                return False
            self.member_repository.add_member(
                GroupMember(
                    id=uuid4(),
                    group_id=group.id,
                    user_id=user_id,
                    role=GroupRole.MEMBER,
                    joined_at=datetime.now(tz=UTC),
                )
            )
        except Exception as exc:
            self._record_error(exc, "Joining group")
            return False
        if self.track_created:
            self.groups.append(group)
        self.events.publish(ServiceEvent(kind="group_joined", entity_id=group.id))
        return True

    async def fetch_members(self, group_id: UUID) -> list[GroupMember] | None:
        """Load a group's members with their profiles."""
        try:
            self.members = self.member_repository.list_members(group_id)
        except Exception as exc:
            self._record_error(exc, "Fetching members")
            return None
        return self.members

    async def leave_group(self, group_id: UUID, user_id: UUID) -> bool:
        """Remove the user's membership."""
        try:
            self.member_repository.remove_member(group_id, user_id)
        except Exception as exc:
            self._record_error(exc, "Leaving group")
            return False
        self.groups = [group for group in self.groups if group.id != group_id]
        self.events.publish(ServiceEvent(kind="group_left", entity_id=group_id))
        return True

    async def regenerate_invite_code(self, group_id: UUID) -> str | None:
        """Replace the invite code and return the new one."""
        code = generate_invite_code()
        try:
            self.group_repository.update_invite_code(group_id, code)
        except Exception as exc:
            self._record_error(exc, "Regenerating invite code")
            return None
        self._replace_group(group_id, invite_code=code)
        return code

    async def update_aesthetic_profile(
        self, group_id: UUID, profile: AestheticProfile
    ) -> bool:
        """Store the group's aesthetic profile."""
        try:
            self.group_repository.update_aesthetic_profile(group_id, profile)
        except Exception as exc:
            self._record_error(exc, "Updating aesthetic profile")
            return False
        self._replace_group(group_id, aesthetic_profile=profile)
        self.events.publish(ServiceEvent(kind="group_updated", entity_id=group_id))
        return True

    def _replace_group(self, group_id: UUID, **changes: object) -> None:
        self.groups = [
            replace(group, **changes) if group.id == group_id else group
            for group in self.groups
        ]
