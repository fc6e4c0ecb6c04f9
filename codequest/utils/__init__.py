"""codequest utilities."""

from .prompt_loader import (
    REQUIRED_PROMPTS,
    format_prompt,
    get_available_prompts,
    load_prompt,
    missing_prompts,
)

__all__ = [
    "REQUIRED_PROMPTS",
    "format_prompt",
    "get_available_prompts",
    "load_prompt",
    "missing_prompts",
]
