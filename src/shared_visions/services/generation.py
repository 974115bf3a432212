"""Prompt enhancement and image generation using remote models."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from shared_visions.domain.errors import UnsupportedOperationError
from shared_visions.domain.groups import AestheticProfile
from shared_visions.domain.models import UserPhoto

_logger = logging.getLogger(__name__)

ENHANCE_SYSTEM_PROMPT = (
    "You are a creative assistant helping couples visualize their shared "
    "dreams and goals.\n"
    "Take the user's description of their vision and enhance it into a "
    "detailed image generation prompt.\n"
    "Make it warm, positive, and aspirational. Focus on the emotional "
    "connection and shared experience.\n"
    "Keep the enhanced prompt under 200 words."
)
REFERENCE_PHOTO_PREFIX = (
    "This image should feature the specific people whose reference photos "
    "are provided. "
)


class TextGenerationClient(Protocol):
    """Interface for remote text generation."""

    async def generate_text(
        self, *, model: str, system_prompt: str | None, user_prompt: str
    ) -> str | None:
        """Return the model's text answer, or None when it produced none."""


class ImageGenerationClient(Protocol):
    """Interface for remote image generation."""

    async def generate_image(self, prompt: str) -> bytes:
        """Return raw image bytes for a prompt."""


@dataclass
class GenerationService:
    """Service that enhances prompts and requests generated images."""

    text_client: TextGenerationClient
    image_client: ImageGenerationClient
    text_model: str
    image_generation_enabled: bool = True

    async def enhance_prompt(
        self,
        description: str,
        member_names: Mapping[UUID, str] | None = None,
        aesthetic: AestheticProfile | None = None,
    ) -> str:
        """Rewrite a description into a richer image prompt.

        Falls back to the original description when the model is unavailable
        or answers with no text.
        """
        system_prompt = ENHANCE_SYSTEM_PROMPT
        if member_names:
            member_list = ", ".join(member_names.values())
            system_prompt += (
                "\n\nImportant: The image should include these specific people: "
                f"{member_list}. Make sure to represent them accurately in the scene."
            )
        if aesthetic is not None:
            system_prompt += (
                f"\n\nApply this visual aesthetic: {aesthetic.prompt_suffix()}"
            )
        try:
            text = await self.text_client.generate_text(
                model=self.text_model,
                system_prompt=system_prompt,
                user_prompt=f"User's vision: {description}",
            )
        except Exception as exc:
            _logger.warning("Prompt enhancement failed, using original: %s", exc)
            return description
        if not text or not text.strip():
            return description
        return text.strip()

    async def generate_image(
        self, prompt: str, reference_photos: Sequence[UserPhoto] = ()
    ) -> bytes:
        """Generate an image, mentioning reference photos in the prompt only."""
        if not self.image_generation_enabled:
            raise UnsupportedOperationError()
        final_prompt = prompt
        if reference_photos:
            final_prompt = REFERENCE_PHOTO_PREFIX + prompt
        _logger.info(
            "Requesting image generation (prompt_chars=%s, reference_photos=%s)",
            len(final_prompt),
            len(reference_photos),
        )
        return await self.image_client.generate_image(final_prompt)
