from .client import AgentClient, LoopState, MAX_ITERATIONS, messages_from_activities
from .model import get_model_config, parse_model_tag, complete, CompletionError
from .prompt import build_system_prompt

__all__ = [
    "AgentClient",
    "LoopState",
    "MAX_ITERATIONS",
    "messages_from_activities",
    "get_model_config",
    "parse_model_tag",
    "complete",
    "CompletionError",
    "build_system_prompt",
]
