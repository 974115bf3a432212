"""Resolve which group members a vision description refers to."""

import json
import logging
import re
from dataclasses import dataclass
from uuid import UUID

from shared_visions.domain.groups import GroupMember
from shared_visions.services.generation import TextGenerationClient

_logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?", re.IGNORECASE)
_SELF_REFERENCE = re.compile(r"\b(?:me|i)\b", re.IGNORECASE)

_PARSING_INSTRUCTIONS = """\
You are parsing a vision description to identify which people should appear \
in an AI-generated image.

{member_context}

User's vision description: "{prompt}"

Analyze the description and identify:
1. Does it mention "me", "I", or the current user? (ID: {current_user_id})
2. Does it mention any other group members by name?

Return a JSON object with this structure:
{{
    "mentioned_members": [
        {{
            "user_id": "uuid-string",
            "name_in_prompt": "how they're referred to in the prompt"
        }}
    ]
}}

Only include members explicitly mentioned. If the description says \
"me and Izzy", include both the current user and Izzy.
If it just says "a beach vacation" without mentioning people, return an \
empty array (meaning all members)."""


@dataclass
class MemberResolver:
    """Map a free-text description to the members it mentions.

    The text model is asked first; substring matching is the fallback. An
    empty result means nobody was named and every member should appear.
    """

    text_client: TextGenerationClient
    model: str

    async def resolve(
        self,
        prompt: str,
        members: list[GroupMember],
        current_user_id: UUID,
        current_user_name: str,
    ) -> dict[UUID, str]:
        """Return ``{user_id: name used in the prompt}`` for mentioned members."""
        instructions = _PARSING_INSTRUCTIONS.format(
            member_context=_member_context(
                members, current_user_id, current_user_name
            ),
            prompt=prompt,
            current_user_id=current_user_id,
        )
        try:
            response = await self.text_client.generate_text(
                model=self.model,
                system_prompt=None,
                user_prompt=instructions,
            )
        except Exception as exc:
            _logger.warning("Member parsing request failed, using fallback: %s", exc)
            return fallback_parse_members(prompt, members, current_user_id)

        if response:
            parsed = parse_member_json(response, members, current_user_id)
            if parsed is not None:
                return parsed
            _logger.info("Member parsing returned no usable JSON, using fallback")
        return fallback_parse_members(prompt, members, current_user_id)


def parse_member_json(
    text: str, members: list[GroupMember], current_user_id: UUID
) -> dict[UUID, str] | None:
    """Parse the model's JSON answer, or return None when it is unusable."""
    cleaned = _LEADING_FENCE.sub("", text, count=1)
    cleaned = cleaned.split("```", 1)[0].strip()
    try:
        payload = json.loads(cleaned)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    mentioned = payload.get("mentioned_members")
    if not isinstance(mentioned, list):
        return None

    known_ids = {member.user_id for member in members} | {current_user_id}
    resolved: dict[UUID, str] = {}
    for entry in mentioned:
        if not isinstance(entry, dict):
            continue
        name_in_prompt = entry.get("name_in_prompt")
        if not isinstance(name_in_prompt, str):
            continue
        try:
            user_id = UUID(str(entry.get("user_id")))
        except ValueError:
            continue
        if user_id in known_ids:
            resolved[user_id] = name_in_prompt
    return resolved


def fallback_parse_members(
    description: str, members: list[GroupMember], current_user_id: UUID
) -> dict[UUID, str]:
    """Best-effort substring matching of "me"/"I" and member names."""
    found: dict[UUID, str] = {}
    lowered = description.lower()
    if _SELF_REFERENCE.search(description):
        found[current_user_id] = "me"

    for member in members:
        full_name = (member.full_name or "").strip()
        if not full_name:
            continue
        first_name = full_name.split()[0].lower()
        if first_name in lowered or full_name.lower() in lowered:
            found[member.user_id] = first_name.capitalize()
    return found


def _member_context(
    members: list[GroupMember], current_user_id: UUID, current_user_name: str
) -> str:
    lines = ["Available group members:"]
    for member in members:
        first_name = member.user.first_name if member.user else None
        if first_name:
            lines.append(f"- {first_name} (ID: {member.user_id})")
    lines.append("")
    lines.append(f"Current user: {current_user_name} (ID: {current_user_id})")
    return "\n".join(lines)
