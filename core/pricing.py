"""
Cost estimation for generation calls - hardcoded Cerebras list prices.

Source: cerebras.ai/pricing (pay-as-you-go tier).
"""

from __future__ import annotations

DEFAULT_PRICED_MODEL = "llama-3.3-70b"

# Per-million-token costs (USD)
PRICING = {
    "llama-3.3-70b": {
        "input_per_million": 0.85,
        "output_per_million": 1.20,
    },
    "llama3.1-8b": {
        "input_per_million": 0.10,
        "output_per_million": 0.10,
    },
    "qwen-3-32b": {
        "input_per_million": 0.40,
        "output_per_million": 0.80,
    },
    "gpt-oss-120b": {
        "input_per_million": 0.25,
        "output_per_million": 0.69,
    },
}


def estimate_cost_usd(
    model_id: str, input_tokens: int, output_tokens: int
) -> float:
    """Estimate USD cost from token counts; unknown models are priced as the default."""
    pricing = PRICING.get(model_id, PRICING[DEFAULT_PRICED_MODEL])
    return (
        (input_tokens / 1_000_000) * pricing["input_per_million"]
        + (output_tokens / 1_000_000) * pricing["output_per_million"]
    )
