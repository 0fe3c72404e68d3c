"""Supported platforms and tones."""

from __future__ import annotations

from repurpose_orchestrator.models import InvalidSelection, PlatformTarget

PLATFORMS: tuple[PlatformTarget, ...] = (
    PlatformTarget("twitter", "Twitter", "Short, engaging tweets", 280),
    PlatformTarget("linkedin", "LinkedIn", "Professional posts", 3000),
    PlatformTarget("instagram", "Instagram", "Visual storytelling", 2200),
    PlatformTarget("facebook", "Facebook", "Social engagement", 5000),
    PlatformTarget("youtube", "YouTube", "Video descriptions", 5000),
    PlatformTarget("blog", "Blog", "Long-form content", 10000),
)

_PLATFORMS_BY_ID: dict[str, PlatformTarget] = {p.id: p for p in PLATFORMS}

PLATFORM_INSTRUCTIONS: dict[str, str] = {
    "twitter": "Create engaging Twitter posts (max 280 chars per tweet). Use emojis and hashtags.",
    "linkedin": (
        "Create a professional LinkedIn post (max 3000 chars). "
        "Include insights and relevant hashtags."
    ),
    "instagram": (
        "Create an Instagram caption (max 2200 chars). Use storytelling, emojis, and hashtags."
    ),
    "facebook": "Create a Facebook post (max 5000 chars). Make it conversational and engaging.",
    "youtube": "Create a YouTube video description (max 5000 chars). Include clear structure.",
    "blog": "Create a blog post outline with key points and structure.",
}

TONE_INSTRUCTIONS: dict[str, str] = {
    "professional": "Use formal, business-appropriate language",
    "casual": "Use friendly, conversational tone",
    "humorous": "Add light humor and wit",
    "inspirational": "Be motivating and uplifting",
    "educational": "Focus on teaching and explaining",
}


def get_platform(platform_id: str) -> PlatformTarget:
    normalized = platform_id.strip().lower()
    try:
        return _PLATFORMS_BY_ID[normalized]
    except KeyError:
        known = ", ".join(_PLATFORMS_BY_ID)
        raise InvalidSelection(f"Unknown platform {platform_id!r} (known: {known})") from None


def resolve_platforms(platform_ids: list[str]) -> list[PlatformTarget]:
    return [get_platform(pid) for pid in platform_ids]
