"""Supabase-backed repositories for groups and memberships."""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from shared_visions.adapters.supabase_rows import group_from_row, member_from_row
from shared_visions.domain.groups import AestheticProfile, Group, GroupMember
from shared_visions.services.groups import GroupRepository, MemberRepository


@dataclass
class SupabaseGroupRepository(GroupRepository):
    """Supabase implementation for the groups table."""

    client: Client

    def create_group(self, group: Group) -> Group:
        """Insert a group row and return it."""
        response = (
            self.client.table("groups")
            .insert(
                {
                    "id": str(group.id),
                    "name": group.name,
                    "invite_code": group.invite_code,
                    "created_by": str(group.created_by) if group.created_by else None,
                    "aesthetic_profile": (
                        group.aesthetic_profile.to_json()
                        if group.aesthetic_profile
                        else None
                    ),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create group")
        return group_from_row(response.data[0])

    def get_group(self, group_id: UUID) -> Group | None:
        """Return a group by id, if present."""
        response = (
            self.client.table("groups")
            .select("*")
            .eq("id", str(group_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return group_from_row(response.data[0])

    def find_by_invite_code(self, invite_code: str) -> Group | None:
        """Return the group using an invite code, if any."""
        response = (
            self.client.table("groups")
            .select("*")
            .eq("invite_code", invite_code)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return group_from_row(response.data[0])

    def list_groups(self, group_ids: Sequence[UUID]) -> list[Group]:
        """Return groups by id, newest first."""
        response = (
            self.client.table("groups")
            .select("*")
            .in_("id", [str(group_id) for group_id in group_ids])
            .order("created_at", desc=True)
            .execute()
        )
        return [group_from_row(row) for row in response.data or []]

    def update_invite_code(self, group_id: UUID, invite_code: str) -> None:
        """Replace the invite code."""
        self.client.table("groups").update({"invite_code": invite_code}).eq(
            "id", str(group_id)
        ).execute()

    def update_aesthetic_profile(
        self, group_id: UUID, profile: AestheticProfile
    ) -> None:
        """Replace the aesthetic profile JSON."""
        self.client.table("groups").update(
            {"aesthetic_profile": profile.to_json()}
        ).eq("id", str(group_id)).execute()


@dataclass
class SupabaseMemberRepository(MemberRepository):
    """Supabase implementation for the group_members table."""

    client: Client

    def add_member(self, member: GroupMember) -> GroupMember:
        """Insert a membership row and return it."""
        response = (
            self.client.table("group_members")
            .insert(
                {
                    "id": str(member.id),
                    "group_id": str(member.group_id),
                    "user_id": str(member.user_id),
                    "role": member.role.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to add group member")
        return member_from_row(response.data[0])

    def get_member(self, group_id: UUID, user_id: UUID) -> GroupMember | None:
        """Return a membership, if present."""
        response = (
            self.client.table("group_members")
            .select("*")
            .eq("group_id", str(group_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return member_from_row(response.data[0])

    def list_members(self, group_id: UUID) -> list[GroupMember]:
        """Return a group's members with their profiles."""
        response = (
            self.client.table("group_members")
            .select("*, profiles(*)")
            .eq("group_id", str(group_id))
            .execute()
        )
        return [member_from_row(row) for row in response.data or []]

    def list_memberships(self, user_id: UUID) -> list[GroupMember]:
        """Return every membership of a user."""
        response = (
            self.client.table("group_members")
            .select("*")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [member_from_row(row) for row in response.data or []]

    def remove_member(self, group_id: UUID, user_id: UUID) -> None:
        """Delete a membership."""
        self.client.table("group_members").delete().eq("group_id", str(group_id)).eq(
            "user_id", str(user_id)
        ).execute()
