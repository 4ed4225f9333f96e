"""Token pricing per model family."""
from __future__ import annotations

from typing import NamedTuple

from observatory.model_identity import normalize_model_name


class ModelPricing(NamedTuple):
    """USD per million tokens."""
    input: float
    output: float
    cache_read: float
    cache_write: float


MODEL_PRICING: dict[str, ModelPricing] = {
    "opus": ModelPricing(15.0, 75.0, 1.5, 18.75),
    "sonnet": ModelPricing(3.0, 15.0, 0.3, 3.75),
    "haiku": ModelPricing(0.8, 4.0, 0.08, 1.0),
}

DEFAULT_PRICING = MODEL_PRICING["sonnet"]


def get_pricing(model: str | None) -> ModelPricing:
    return MODEL_PRICING.get(normalize_model_name(model), DEFAULT_PRICING)


def calculate_cost(
    model: str | None,
    input_tokens: int,
    output_tokens: int,
    cache_read: int = 0,
    cache_write: int = 0,
    thinking_tokens: int = 0,
) -> float:
    """USD cost of a request. Thinking tokens are billed at the output rate."""
    pricing = get_pricing(model)
    return (
        input_tokens / 1_000_000 * pricing.input
        + output_tokens / 1_000_000 * pricing.output
        + cache_read / 1_000_000 * pricing.cache_read
        + cache_write / 1_000_000 * pricing.cache_write
        + thinking_tokens / 1_000_000 * pricing.output
    )
