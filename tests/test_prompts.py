"""Tests for prompt construction and aesthetic suffixes."""

from shared_visions.domain.groups import CONSISTENCY_CLAUSE, AestheticProfile
from shared_visions.domain.visions import ImageStyle
from shared_visions.services.prompts import build_prompt


def test_build_prompt_orders_lines() -> None:
    prompt = build_prompt("Beach house", "With a porch swing", ImageStyle.DREAMY)

    assert prompt.split("\n") == [
        "Create a beautiful, aspirational photograph showing: Beach house",
        "Details: With a porch swing",
        "Style: Soft focus, ethereal, dreamlike quality",
        "The image should be warm, inviting, and represent a couple's shared "
        "dream or goal.",
        "High quality, professional photography style.",
    ]


def test_build_prompt_skips_blank_description() -> None:
    prompt = build_prompt("Road trip", "   ", ImageStyle.REALISTIC)

    assert "Details:" not in prompt
    assert prompt.startswith(
        "Create a beautiful, aspirational photograph showing: Road trip\nStyle: "
    )


def test_build_prompt_appends_aesthetic_last() -> None:
    aesthetic = AestheticProfile(overall_vibe="Warm film grain")

    prompt = build_prompt("Garden", None, ImageStyle.ARTISTIC, aesthetic)

    assert prompt.split("\n")[-1] == f"Aesthetic: Warm film grain {CONSISTENCY_CLAUSE}"


def test_prompt_suffix_prefers_overall_vibe() -> None:
    aesthetic = AestheticProfile(
        base_style=ImageStyle.CINEMATIC,
        mood="Calm",
        overall_vibe="Nostalgic 90s summer",
    )

    assert aesthetic.prompt_suffix() == (
        "Nostalgic 90s summer Keep this visual style consistent across all "
        "images for this group."
    )


def test_prompt_suffix_without_optional_fields() -> None:
    aesthetic = AestheticProfile(base_style=ImageStyle.CINEMATIC)

    assert aesthetic.prompt_suffix() == (
        f"Cinematic look, dramatic lighting, movie-like. {CONSISTENCY_CLAUSE}"
    )


def test_prompt_suffix_lists_structured_fields() -> None:
    aesthetic = AestheticProfile(
        base_style=ImageStyle.REALISTIC,
        color_palette="Earth tones",
        lighting="Golden hour",
    )

    assert aesthetic.prompt_suffix() == (
        "Photorealistic, natural lighting, candid moment. "
        "Color palette: Earth tones. Lighting: Golden hour. "
        f"{CONSISTENCY_CLAUSE}"
    )


def test_prompt_suffix_ignores_blank_fields() -> None:
    aesthetic = AestheticProfile(
        base_style=ImageStyle.DREAMY, mood="  ", overall_vibe="   "
    )

    assert aesthetic.prompt_suffix() == (
        f"Soft focus, ethereal, dreamlike quality. {CONSISTENCY_CLAUSE}"
    )
