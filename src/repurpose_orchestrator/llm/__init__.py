"""LLM package initialization."""

from repurpose_orchestrator.llm.factory import LLMFactory
from repurpose_orchestrator.llm.provider import LLMProvider

__all__ = [
    "LLMFactory",
    "LLMProvider",
]
