"""
Prompt loader utility for codequest.

Prompts are YAML documents in the bundled prompts/ directory. Each one has
a `user_template` with {placeholders}; the hint prompt also carries a table
of escalation levels.
"""

from pathlib import Path
from typing import Any
import yaml

from codequest.errors import MalformedInputError, QuestNotFoundError


# Bundled prompts directory (inside the package)
PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

# Prompts the feedback generator cannot work without
REQUIRED_PROMPTS = ("check_annotations", "hint", "plan")


def load_prompt(name: str, prompts_dir: Path | None = None) -> dict[str, Any]:
    """
    Load a prompt template by name.

    Args:
        name: Prompt name without .yaml extension (e.g., "hint")
        prompts_dir: Optional custom prompts directory

    Raises:
        QuestNotFoundError: If prompt file doesn't exist
        MalformedInputError: If the file is not YAML or lacks user_template
    """
    dir_path = prompts_dir or PROMPTS_DIR
    file_path = dir_path / f"{name}.yaml"

    if not file_path.exists():
        raise QuestNotFoundError(f"Prompt template not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            prompt = yaml.safe_load(f)
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise MalformedInputError(f"Invalid prompt template {file_path}: {e}") from e

    if not isinstance(prompt, dict) or "user_template" not in prompt:
        raise MalformedInputError(f"Prompt template {file_path} has no user_template")
    return prompt


def format_prompt(template: str, **kwargs) -> str:
    """Fill a template's {placeholders}; a placeholder without a value is an error."""
    try:
        return template.format(**kwargs)
    except KeyError as e:
        raise MalformedInputError(f"Prompt template expects a value for {e}") from e


def get_available_prompts(prompts_dir: Path | None = None) -> list[str]:
    dir_path = prompts_dir or PROMPTS_DIR
    if not dir_path.is_dir():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))


def missing_prompts(prompts_dir: Path | None = None) -> list[str]:
    """Required prompts that are not present in the prompts directory."""
    available = set(get_available_prompts(prompts_dir))
    return [name for name in REQUIRED_PROMPTS if name not in available]
