"""
Runtime configuration for codequest.

Values come from the environment, optionally seeded from a `.env` file in
the working directory:

    QUEST_DIR                directory holding plan.json / state.json (.quest)
    QUEST_GENERATOR_CMD      external feedback generator command (copilot)
    QUEST_GENERATOR_TIMEOUT  seconds to wait for the generator (300)
    QUEST_LOG_LEVEL          logging level name (WARNING)
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_QUEST_DIR = ".quest"
DEFAULT_GENERATOR_CMD = "copilot"
DEFAULT_GENERATOR_TIMEOUT = 300.0
DEFAULT_LOG_LEVEL = "WARNING"

PLAN_FILE_NAME = "plan.json"
STATE_FILE_NAME = "state.json"


@dataclass
class Settings:
    """Resolved settings for one CLI invocation."""
    quest_dir: Path = Path(DEFAULT_QUEST_DIR)
    generator_command: list[str] = field(default_factory=lambda: [DEFAULT_GENERATOR_CMD])
    generator_timeout: float = DEFAULT_GENERATOR_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Build settings from os.environ after loading `.env` (never overriding)."""
        load_dotenv(env_file or Path.cwd() / ".env")

        timeout_raw = os.environ.get("QUEST_GENERATOR_TIMEOUT", "")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_GENERATOR_TIMEOUT
        except ValueError:
            timeout = DEFAULT_GENERATOR_TIMEOUT

        command = shlex.split(os.environ.get("QUEST_GENERATOR_CMD", DEFAULT_GENERATOR_CMD))

        return cls(
            quest_dir=Path(os.environ.get("QUEST_DIR", DEFAULT_QUEST_DIR)),
            generator_command=command or [DEFAULT_GENERATOR_CMD],
            generator_timeout=timeout,
            log_level=os.environ.get("QUEST_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
