"""
TemplateCatalog - Load bundled quest plans from templates/*.yaml.

Each template file is a full plan document plus a `catalog` header:

    catalog:
      title: REST API with Go
      description: Learn to build HTTP servers...
      tier: Quick
    version: 1
    journey: {...}
    chapters: [...]
"""

import logging
import random
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from codequest.errors import QuestNotFoundError
from codequest.schemas import Difficulty, Plan, ProjectSpec, TemplateInfo

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
DEFAULT_TEMPLATE = "go-web-api"

# Build types grouped by the bundled template that teaches them best
CLI_BUILD_TYPES = {"cli", "automation", "formatter", "linter", "scaffolder", "protocol", "client-sdk"}
CONCURRENCY_BUILD_TYPES = {"stream-processor", "worker", "pipeline", "scheduler", "aggregator", "indexer"}

# Pools for `quest begin --surprise`
SURPRISE_BUILD_TYPES = ("service", "cli", "worker", "library", "scheduler", "proxy", "stream-processor")
SURPRISE_THEMES = ("todo", "notes", "bookmarks", "expenses", "contacts", "events", "inventory")


class TemplateCatalog:
    """Read-only access to the bundled plan templates."""

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = Path(templates_dir or TEMPLATES_DIR)

    def _read(self, name: str) -> dict[str, Any]:
        file_path = self.templates_dir / f"{name}.yaml"
        if not file_path.is_file():
            raise QuestNotFoundError(f"template not found: {name}")
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f)
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise QuestNotFoundError(f"template {name} could not be parsed: {e}") from e
        if not isinstance(raw, dict):
            raise QuestNotFoundError(f"template {name} is empty")
        return raw

    def names(self) -> list[str]:
        if not self.templates_dir.exists():
            return []
        return sorted(p.stem for p in self.templates_dir.glob("*.yaml"))

    def load(self, name: str) -> Plan:
        """
        Load a template as a plan.

        A template with an empty journey name or no chapters is treated the
        same as a missing one.

        Raises:
            QuestNotFoundError: missing, unparsable or unusable template
        """
        raw = self._read(name)
        raw.pop("catalog", None)
        try:
            plan = Plan.model_validate(raw)
        except ValidationError as e:
            raise QuestNotFoundError(f"template {name} is not a valid plan: {e}") from e

        if not plan.is_acceptable():
            raise QuestNotFoundError(f"template {name} has no journey name or no chapters")
        return plan.normalized()

    def list_templates(self) -> list[TemplateInfo]:
        """Catalog entries for every template that loads."""
        infos = []
        for name in self.names():
            try:
                raw = self._read(name)
                plan = self.load(name)
            except QuestNotFoundError as e:
                logger.warning(f"Skipping template {name}: {e}")
                continue
            header = raw.get("catalog") or {}
            infos.append(TemplateInfo(
                name=name,
                title=header.get("title") or plan.journey.name,
                description=header.get("description") or plan.journey.description,
                tasks=plan.number_of_tasks,
                tier=header.get("tier", "Quick"),
            ))
        return infos


def select_template_for_spec(spec: Optional[ProjectSpec], available: Optional[list[str]] = None) -> str:
    """
    Pick a bundled template to fall back on when plan forging fails.

    An explicit spec.template wins; otherwise the build type decides.
    """
    if spec is None:
        return DEFAULT_TEMPLATE
    if spec.template:
        return spec.template

    if spec.language == "python":
        choice = "python-cli-tool"
    elif spec.build_type in CLI_BUILD_TYPES:
        choice = "go-cli-tool"
    elif spec.build_type in CONCURRENCY_BUILD_TYPES:
        choice = "go-concurrency"
    elif spec.difficulty == Difficulty.DEEP:
        choice = "go-concurrency"
    else:
        choice = DEFAULT_TEMPLATE

    if available is not None and choice not in available:
        return DEFAULT_TEMPLATE
    return choice


def load_template(name: str, templates_dir: Optional[Path] = None) -> Plan:
    """Load one bundled template by name."""
    return TemplateCatalog(templates_dir).load(name)


def surprise_spec(rng: Optional[random.Random] = None) -> ProjectSpec:
    """A random build type, difficulty and theme for a mystery quest."""
    rng = rng or random.Random()
    return ProjectSpec(
        build_type=rng.choice(SURPRISE_BUILD_TYPES),
        difficulty=rng.choice(list(Difficulty)),
        theme=rng.choice(SURPRISE_THEMES),
    )


def random_template(available: list[str], rng: Optional[random.Random] = None) -> str:
    if not available:
        raise QuestNotFoundError("no bundled templates available")
    return (rng or random.Random()).choice(available)
