"""Transformation client package."""

from repurpose_orchestrator.transform.client import (
    TransformationClient,
    TransformationError,
    build_prompt,
)

__all__ = [
    "TransformationClient",
    "TransformationError",
    "build_prompt",
]
