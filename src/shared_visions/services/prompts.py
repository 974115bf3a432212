"""Prompt construction for image generation."""

from shared_visions.domain.groups import AestheticProfile
from shared_visions.domain.visions import ImageStyle

LEAD_IN = "Create a beautiful, aspirational photograph showing:"
WARMTH_CLAUSE = (
    "The image should be warm, inviting, and represent a couple's shared "
    "dream or goal."
)
QUALITY_CLAUSE = "High quality, professional photography style."


def build_prompt(
    title: str,
    description: str | None,
    style: ImageStyle,
    aesthetic: AestheticProfile | None = None,
) -> str:
    """Assemble the image prompt for a vision."""
    lines = [f"{LEAD_IN} {title}"]
    if description and description.strip():
        lines.append(f"Details: {description}")
    lines.append(f"Style: {style.description}")
    lines.append(WARMTH_CLAUSE)
    lines.append(QUALITY_CLAUSE)
    if aesthetic is not None:
        lines.append(f"Aesthetic: {aesthetic.prompt_suffix()}")
    return "\n".join(lines)
