"""Model configuration and the single chat-completion call used by the agent."""

import os
import re
from dataclasses import dataclass

import litellm
from openai import AsyncOpenAI

from weatherbot import config

# Model shorthand mapping
MODEL_MAP = {
    "mini": "gpt-4o-mini",
    "gpt": "gpt-4o",
    "sonnet": "anthropic/claude-sonnet-4-5-20250929",
    "haiku": "anthropic/claude-haiku-4-5-20251001",
}

# Models that use native OpenAI (not LiteLLM)
OPENAI_MODELS = {"mini", "gpt"}

NO_RESPONSE = "No response"


class CompletionError(Exception):
    pass


@dataclass
class ModelConfig:
    """Configuration for the agent's model."""
    shorthand: str
    model: str
    api_key: str
    native_openai: bool = False


def get_model_config(shorthand: str | None = None) -> ModelConfig:
    """Get model configuration for the specified shorthand."""
    model_key = shorthand or config.AGENT_MODEL

    if model_key not in MODEL_MAP:
        model_key = config.AGENT_MODEL if config.AGENT_MODEL in MODEL_MAP else "mini"

    model_id = MODEL_MAP[model_key]

    if model_key in OPENAI_MODELS:
        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("OPENAI_API_KEY environment variable is not set")
        return ModelConfig(shorthand=model_key, model=model_id, api_key=api_key, native_openai=True)

    # Claude models use LiteLLM
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY environment variable is not set")

    return ModelConfig(shorthand=model_key, model=model_id, api_key=api_key)


def parse_model_tag(text: str) -> str | None:
    """Extract model shorthand from [model=X] tag in text."""
    match = re.search(r'\[model=(\w+)\]', text, re.IGNORECASE)
    if not match:
        return None

    shorthand = match.group(1).lower()
    if shorthand not in MODEL_MAP:
        return None

    return shorthand


async def complete(messages: list[dict], model_config: ModelConfig) -> str:
    """Send the conversation to the model and return its text reply.

    Returns NO_RESPONSE when the model returns no content.
    """
    try:
        if model_config.native_openai:
            async with AsyncOpenAI(api_key=model_config.api_key) as client:
                response = await client.chat.completions.create(
                    model=model_config.model,
                    messages=messages,
                )
        else:
            response = await litellm.acompletion(
                model=model_config.model,
                messages=messages,
                api_key=model_config.api_key,
            )
    except Exception as e:
        raise CompletionError(f"Completion API error: {e}") from e

    if not response.choices:
        return NO_RESPONSE
    return response.choices[0].message.content or NO_RESPONSE
