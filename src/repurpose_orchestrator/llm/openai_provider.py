"""OpenAI-compatible LLM provider implementation."""

import logging
from typing import Any

from openai import OpenAI

from repurpose_orchestrator.core.config import LLMConfig
from repurpose_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat-completions provider for OpenAI and compatible gateways (e.g. Groq)."""

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.

        Raises:
            ValueError: If API key is not provided.
        """
        if not config.openai_api_key:
            raise ValueError("OpenAI API key is required")

        self.config = config
        self.client = OpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            max_retries=0,
        )
        self.model = config.openai_model
        self.temperature = config.openai_temperature
        self.max_tokens = config.max_tokens

        logger.info(
            "OpenAI provider initialized",
            extra={"model": self.model, "base_url": config.openai_base_url},
        )

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        """Generate text completion using the chat completions API.

        Args:
            prompt: The input prompt, sent as a single user message.
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            **kwargs: Additional OpenAI-specific parameters.

        Returns:
            Generated text completion.
        """
        temp = temperature if temperature is not None else self.temperature

        logger.debug("Generating completion", extra={"prompt_chars": len(prompt)})

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens or self.max_tokens,
            temperature=temp,
            **kwargs,
        )

        if not response.choices:
            raise RuntimeError("Unexpected response format: no choices returned")

        content = response.choices[0].message.content or ""
        logger.debug("Generated completion", extra={"chars": len(content)})

        return content

    def close(self) -> None:
        self.client.close()
