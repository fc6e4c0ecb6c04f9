"""
Health check - Report whether the quest session and environment are usable.

Critical checks cover the session files; environment checks (git, the
generator command) only produce warnings.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from codequest.config import Settings
from codequest.errors import QuestError
from codequest.utils import missing_prompts

from .store import ProgressStore

logger = logging.getLogger(__name__)


@dataclass
class HealthCheck:
    name: str
    ok: bool
    detail: str


@dataclass
class HealthReport:
    checks: list[HealthCheck] = field(default_factory=list)
    environment: list[HealthCheck] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return all(c.ok for c in self.checks)

    def add(self, name: str, ok: bool, detail: str):
        self.checks.append(HealthCheck(name, ok, detail))


def run_health_check(
    store: ProgressStore,
    settings: Optional[Settings] = None,
    root: Optional[Path] = None,
) -> HealthReport:
    """Inspect .quest and the environment without modifying anything."""
    settings = settings or Settings()
    root = Path(root) if root else Path.cwd()
    report = HealthReport()

    if store.exists():
        report.add(f"{store.quest_dir.name} folder", True, "exists")
    else:
        report.add(f"{store.quest_dir.name} folder", False, "not found - run 'quest begin' to start")

    for path in (store.plan_path, store.state_path):
        if path.exists():
            report.add(path.name, True, "exists")
        else:
            report.add(path.name, False, "not found")

    plan = None
    try:
        plan = store.load_plan()
        report.add("plan loading", True, f"loaded successfully ({plan.number_of_tasks} tasks)")
    except QuestError as e:
        report.add("plan loading", False, f"failed to load: {e}")

    try:
        state = store.load_state()
        total = plan.number_of_tasks if plan else "?"
        report.add("state loading", True, f"loaded successfully (task {state.current_task_index + 1}/{total})")
    except QuestError as e:
        report.add("state loading", False, f"failed to load: {e}")

    if (root / ".git").exists():
        report.environment.append(HealthCheck("git", True, "Git repository detected"))
    else:
        report.environment.append(
            HealthCheck("git", False, "Not in a git repository - version control recommended")
        )

    missing = missing_prompts()
    if missing:
        report.environment.append(HealthCheck("prompts", False, f"missing prompt templates: {', '.join(missing)}"))
    else:
        report.environment.append(HealthCheck("prompts", True, "Prompt templates available"))

    command = settings.generator_command[0]
    if shutil.which(command):
        report.environment.append(HealthCheck("generator", True, f"'{command}' found on PATH"))
    else:
        report.environment.append(
            HealthCheck("generator", False, f"'{command}' not found - hints and annotations unavailable")
        )

    logger.info(f"Health check finished: {'healthy' if report.healthy else 'issues found'}")
    return report
