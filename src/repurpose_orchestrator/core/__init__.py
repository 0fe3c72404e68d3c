"""Core package initialization."""

from repurpose_orchestrator.core.config import (
    LLMConfig,
    RepurposeConfig,
    RunnerConfig,
    StorageConfig,
)

__all__ = [
    "LLMConfig",
    "RepurposeConfig",
    "RunnerConfig",
    "StorageConfig",
]
