"""
Generator - asks the LLM for the documentation of one code snippet.

The engine only depends on the ``GenerationClient`` protocol:
``generate(snippet, stop) -> list of lines``, raising ``GenerationError`` when
no usable text comes back. ``Generator`` implements it with a llama_index
LLM (Cerebras by default) and keeps a ledger of token usage so the CLI can
report what a run cost.
"""

import logging
import threading
from typing import List, Optional, Protocol, Sequence

from llama_index.core.base.llms.types import ChatMessage, ChatResponse, MessageRole
from llama_index.core.llms import LLM
from pydantic import BaseModel

from config.settings import LLMConfig
from core.exceptions import GenerationError
from core.pricing import estimate_cost_usd

logger = logging.getLogger(__name__)


class GenerationClient(Protocol):
    def generate(self, context_snippet: str, stop_sequences: Sequence[str]) -> List[str]:
        ...


class Usage(BaseModel):
    """Token usage of a single completion."""
    prompt_tokens: int = 0
    completion_tokens: int = 0


class Consumption(BaseModel):
    """Aggregated usage of every completion made by one Generator."""
    completions: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost: float = 0.0


def _token_counts(response: ChatResponse) -> Usage:
    """Pull token counts out of a chat response, whatever the provider put them."""
    extra = response.additional_kwargs or {}
    if "prompt_tokens" in extra or "completion_tokens" in extra:
        return Usage(
            prompt_tokens=int(extra.get("prompt_tokens") or 0),
            completion_tokens=int(extra.get("completion_tokens") or 0),
        )

    raw = response.raw
    usage = raw.get("usage") if isinstance(raw, dict) else getattr(raw, "usage", None)
    if usage is None:
        return Usage()
    if isinstance(usage, dict):
        return Usage(
            prompt_tokens=int(usage.get("prompt_tokens") or 0),
            completion_tokens=int(usage.get("completion_tokens") or 0),
        )
    return Usage(
        prompt_tokens=int(getattr(usage, "prompt_tokens", 0) or 0),
        completion_tokens=int(getattr(usage, "completion_tokens", 0) or 0),
    )


class Generator:
    """Generates documentation lines for code snippets."""

    def __init__(self, config: Optional[LLMConfig] = None, llm: Optional[LLM] = None):
        self.config = config or LLMConfig()
        self.llm = llm if llm is not None else self._setup_llm()
        self._usage: List[Usage] = []
        self._lock = threading.Lock()

    def _setup_llm(self) -> LLM:
        """Build the LLM client from the configuration."""
        if not self.config.api_key:
            raise ValueError(
                "No API key for the generation service. "
                "Set CEREBRAS_API_KEY in the environment or in .env."
            )
        # Imported here so check runs never load the provider SDK
        from llama_index.llms.cerebras import Cerebras

        return Cerebras(
            model=self.config.model,
            api_key=self.config.api_key,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
        )

    def generate(self, context_snippet: str, stop_sequences: Sequence[str] = ()) -> List[str]:
        """
        Ask the LLM to document ``context_snippet``.

        Returns the reply split into lines. Any failure of the call, and an
        empty reply, is raised as GenerationError.
        """
        messages = [
            ChatMessage(role=MessageRole.SYSTEM, content=self.config.prompt),
            ChatMessage(role=MessageRole.USER, content=context_snippet),
        ]
        kwargs = {"stop": list(stop_sequences)} if stop_sequences else {}
        try:
            response = self.llm.chat(messages, **kwargs)
        except Exception as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc

        self._record(_token_counts(response))

        content = (response.message.content or "").strip()
        if not content:
            raise GenerationError("Generation service returned an empty completion")
        return content.split("\n")

    def _record(self, usage: Usage) -> None:
        with self._lock:
            self._usage.append(usage)

    def get_consumption(self) -> Consumption:
        """Totals over every completion so far, with the estimated cost."""
        with self._lock:
            usage = list(self._usage)
        prompt_tokens = sum(u.prompt_tokens for u in usage)
        completion_tokens = sum(u.completion_tokens for u in usage)
        return Consumption(
            completions=len(usage),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost=estimate_cost_usd(self.config.model, prompt_tokens, completion_tokens),
        )
