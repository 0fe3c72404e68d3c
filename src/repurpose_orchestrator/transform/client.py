"""Transformation client: one generative call per (content, platform) pair."""

from __future__ import annotations

import logging

from repurpose_orchestrator.catalog import PLATFORM_INSTRUCTIONS, TONE_INSTRUCTIONS
from repurpose_orchestrator.llm.provider import LLMProvider
from repurpose_orchestrator.models import PlatformTarget

logger = logging.getLogger(__name__)


class TransformationError(RuntimeError):
    """A single transformation call failed (network, rate limit, model error)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def build_prompt(*, content: str, platform: str, content_type: str, tone: str) -> str:
    platform_instruction = PLATFORM_INSTRUCTIONS.get(platform, "Optimize for the platform")
    platform_instruction = platform_instruction.rstrip(".")
    tone_instruction = TONE_INSTRUCTIONS.get(tone, TONE_INSTRUCTIONS["professional"])
    return (
        f"Transform the following {content_type} content for {platform}. "
        f"{platform_instruction}. Tone: {tone_instruction}.\n\n"
        f"Original content: {content}\n\n"
        "Create the repurposed content now:"
    )


class TransformationClient:
    """Wraps an :class:`LLMProvider` with a typed error contract.

    Performs exactly one provider call per :meth:`transform`; retries and rate
    limiting are left to the caller.
    """

    def __init__(self, provider: LLMProvider, *, tone: str = "professional") -> None:
        self.provider = provider
        self.tone = tone

    def transform(
        self, content_body: str, platform: PlatformTarget | str, content_type: str
    ) -> str:
        """Return generated text or raise :class:`TransformationError`."""
        platform_id = platform.id if isinstance(platform, PlatformTarget) else platform

        if not content_body.strip():
            raise TransformationError("Missing required parameter: content")
        if not content_type.strip():
            raise TransformationError("Missing required parameter: contentType")

        prompt = build_prompt(
            content=content_body,
            platform=platform_id,
            content_type=content_type,
            tone=self.tone,
        )

        try:
            raw = self.provider.generate(prompt)
        except Exception as e:
            raise TransformationError(f"{type(e).__name__}: {e}") from e

        text = raw.strip()
        # Some models echo the prompt back before answering.
        if prompt in text:
            text = text.replace(prompt, "").strip()
        if not text:
            raise TransformationError(f"Empty response from model for {platform_id}")

        logger.debug(
            "Transformation succeeded", extra={"platform": platform_id, "chars": len(text)}
        )
        return text
