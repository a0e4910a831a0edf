"""Pytest configuration and shared fixtures.

The generation service is replaced by a scripted llama_index CustomLLM so the
real Generator code path runs without network access.
"""

from pathlib import Path
from typing import Any, List

import pytest
from llama_index.core.llms import CompletionResponse, CustomLLM, LLMMetadata
from llama_index.core.llms.callbacks import llm_completion_callback
from pydantic import Field

from config.settings import LLMConfig
from core.generator import Generator


class ScriptedLLM(CustomLLM):
    """LLM double: answers every prompt with ``reply`` unless told to fail."""

    reply: str = "Adds two numbers.\n@returns The sum of a and b"
    fail_when: List[str] = Field(default_factory=list)
    prompts: List[str] = Field(default_factory=list)
    stops: List[Any] = Field(default_factory=list)

    @property
    def metadata(self) -> LLMMetadata:
        return LLMMetadata(model_name="scripted")

    @llm_completion_callback()
    def complete(self, prompt: str, formatted: bool = False, **kwargs: Any) -> CompletionResponse:
        self.prompts.append(prompt)
        self.stops.append(kwargs.get("stop"))
        if any(marker in prompt for marker in self.fail_when):
            raise ConnectionError("service unavailable")
        return CompletionResponse(
            text=self.reply,
            raw={"usage": {"prompt_tokens": 12, "completion_tokens": 8}},
        )

    def stream_complete(self, prompt: str, formatted: bool = False, **kwargs: Any):
        raise NotImplementedError("streaming is not used by the generator")


@pytest.fixture
def scripted_llm():
    return ScriptedLLM()


@pytest.fixture
def generator(scripted_llm):
    """A real Generator wired to the scripted LLM."""
    return Generator(LLMConfig(api_key="test-key"), llm=scripted_llm)


@pytest.fixture
def write_source(tmp_path):
    """Create a source file under tmp_path and return its path as a string."""

    def _write(relative: str, content: str) -> str:
        path = Path(tmp_path) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        return str(path)

    return _write
