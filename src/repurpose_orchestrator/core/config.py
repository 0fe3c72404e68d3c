"""Core configuration for the repurpose orchestrator."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from repurpose_orchestrator.core.logging import configure_logging


class LLMConfig(BaseSettings):
    """Configuration for the generative backend."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="LLM provider to use",
    )

    # OpenAI-compatible settings (OpenAI itself, Groq, ...)
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the OpenAI-compatible endpoint",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Override for OpenAI-compatible endpoints, e.g. https://api.groq.com/openai/v1",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Chat completion model to use",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_tokens: int = Field(
        default=512,
        gt=0,
        description="Maximum tokens generated per transformation",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to LLaMA model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    model_config = SettingsConfigDict(
        env_prefix="REPURPOSE_LLM_",
        env_file=".env",
        extra="ignore",
    )


class StorageConfig(BaseSettings):
    """Configuration for the local content and result stores."""

    storage_path: Path = Field(
        default=Path(".repurpose"),
        description="Directory holding content.json and results.json",
    )

    model_config = SettingsConfigDict(
        env_prefix="REPURPOSE_STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def content_file(self) -> Path:
        """Path where source content items are persisted."""
        return self.storage_path / "content.json"

    @property
    def results_file(self) -> Path:
        """Path where generated results are persisted."""
        return self.storage_path / "results.json"


class RunnerConfig(BaseSettings):
    """Configuration for batch execution."""

    concurrency: int = Field(
        default=1,
        ge=1,
        le=16,
        description="Worker count; 1 runs tasks one at a time",
    )
    task_timeout_seconds: float | None = Field(
        default=120.0,
        gt=0,
        description="Per-task limit on the external call (None disables it)",
    )
    default_tone: str = Field(
        default="professional",
        description="Tone passed to the transformation prompt",
    )
    user_id: str = Field(
        default="local-user",
        description="Owner recorded on persisted results",
    )

    model_config = SettingsConfigDict(
        env_prefix="REPURPOSE_RUNNER_",
        env_file=".env",
        extra="ignore",
    )


class RepurposeConfig(BaseSettings):
    """Main configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="LLM configuration",
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Storage configuration",
    )
    runner: RunnerConfig = Field(
        default_factory=RunnerConfig,
        description="Runner configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="REPURPOSE_",
        env_file=".env",
        extra="ignore",
    )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        configure_logging(self.log_level)

        if self.debug:
            logging.getLogger("repurpose_orchestrator").setLevel(logging.DEBUG)
