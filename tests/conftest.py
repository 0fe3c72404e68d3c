"""Test configuration and fixtures."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from repurpose_orchestrator.core.config import (
    LLMConfig,
    RepurposeConfig,
    RunnerConfig,
    StorageConfig,
)
from repurpose_orchestrator.llm.provider import LLMProvider
from repurpose_orchestrator.models import ContentItem


class ScriptedProvider(LLMProvider):
    """Provider double that answers from the prompt and can be told to fail.

    ``fail_on`` holds 1-based call numbers that raise. Replies are
    ``"<title-token> for <platform>"`` where the token is the first word of
    the original content.
    """

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.prompts: list[str] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
        **kwargs: Any,
    ) -> str:
        with self._lock:
            self.prompts.append(prompt)
            call_number = len(self.prompts)
        if call_number in self.fail_on:
            raise ConnectionError(f"simulated outage on call {call_number}")

        platform = prompt.split(" content for ", 1)[1].split(".", 1)[0]
        body = prompt.split("Original content: ", 1)[1].split("\n", 1)[0]
        return f"{body.split()[0]} for {platform}"


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    """Provide a temporary state directory."""
    state_dir = tmp_path / ".repurpose"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-4o-mini",
    )


@pytest.fixture
def storage_config(temp_state_dir: Path) -> StorageConfig:
    return StorageConfig(storage_path=temp_state_dir)


@pytest.fixture
def runner_config() -> RunnerConfig:
    return RunnerConfig(concurrency=1, task_timeout_seconds=None, user_id="user-1")


@pytest.fixture
def repurpose_config(
    llm_config: LLMConfig,
    storage_config: StorageConfig,
    runner_config: RunnerConfig,
) -> RepurposeConfig:
    """Provide a test configuration."""
    return RepurposeConfig(
        log_level="DEBUG",
        debug=True,
        llm=llm_config,
        storage=storage_config,
        runner=runner_config,
    )


@pytest.fixture
def scripted_provider() -> ScriptedProvider:
    return ScriptedProvider()


def make_content(content_id: str, title: str, body: str | None = None) -> ContentItem:
    return ContentItem(
        id=content_id,
        title=title,
        body=body or f"{title.split()[-1]} is the body of {title}",
        content_type="article",
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def three_items() -> list[ContentItem]:
    return [
        make_content("c1", "Post A"),
        make_content("c2", "Post B"),
        make_content("c3", "Post C"),
    ]


@pytest.fixture
def content_factory():
    return make_content
