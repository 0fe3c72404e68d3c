"""Local LLaMA LLM provider implementation."""

import logging
from typing import Any

from repurpose_orchestrator.core.config import LLMConfig
from repurpose_orchestrator.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLaMAProvider(LLMProvider):
    """Offline provider backed by a local GGUF model.

    Requires the ``llama`` extra:
        pip install "repurpose-orchestrator[llama]"
    """

    def __init__(self, config: LLMConfig) -> None:
        """Load the model.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for the llama provider. "
                'Install it with: pip install "repurpose-orchestrator[llama]"'
            ) from e

        self.config = config

        logger.info("Loading LLaMA model", extra={"path": str(config.llama_model_path)})

        self.llm = Llama(
            model_path=str(config.llama_model_path),
            n_ctx=config.llama_n_ctx,
            n_threads=config.llama_n_threads,
            verbose=False,
        )

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        # Local models ramble without a chat template; use the chat API so the
        # model's own template wraps the prompt.
        result = self.llm.create_chat_completion(
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens or self.config.max_tokens,
            temperature=(
                temperature if temperature is not None else self.config.openai_temperature
            ),
            **kwargs,
        )

        content = result["choices"][0]["message"]["content"] or ""
        logger.debug("Generated completion", extra={"chars": len(content)})

        return content
