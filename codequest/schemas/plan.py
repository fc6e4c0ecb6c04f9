"""
Plan schemas for codequest.

Defines Pydantic models for the curriculum document (.quest/plan.json):
- Journey metadata
- Chapter -> Quest -> Task tree
- Declarative validation rules attached to tasks

Field names are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from codequest.errors import InvalidRuleTypeError


class RuleType(str, Enum):
    EXISTS = "exists"
    GLOB_COUNT_MIN = "glob_count_min"
    FILE_CONTAINS_ANY = "file_contains_any"


class RuleOutcome(str, Enum):
    """Cached result of the last evaluation of a rule."""
    PASS = "pass"
    FAIL = "fail"


class QuestModel(BaseModel):
    """Shared config: accept both alias and attribute names."""
    model_config = ConfigDict(populate_by_name=True)


# -----------------------------------------------------------------------------
# Validation rules
# -----------------------------------------------------------------------------

class Rule(QuestModel):
    """
    One file-system-checkable condition.

    `type` is kept as the raw string from the document so that a plan with
    an unknown rule type still loads; the error surfaces when the rule is
    evaluated (see `kind`).
    """
    type: str
    name: str = ""
    description: str = ""
    path: str = ""                                            # exists
    glob: str = ""                                            # glob_count_min, file_contains_any
    min_count: int = Field(default=0, alias="min")            # glob_count_min
    patterns: list[str] = Field(default_factory=list, alias="any")  # file_contains_any (regexes)
    last_state: Optional[RuleOutcome] = Field(default=None, alias="lastState")

    @property
    def kind(self) -> RuleType:
        """Closed rule type; raises InvalidRuleTypeError for anything else."""
        try:
            return RuleType(self.type)
        except ValueError:
            raise InvalidRuleTypeError(f"invalid rule type '{self.type}'") from None

    def display_name(self, position: int) -> str:
        """Rule name, or 'Rule N' (1-based) when unnamed."""
        return self.name or f"Rule {position + 1}"


class Validation(QuestModel):
    rules: list[Rule] = []


# -----------------------------------------------------------------------------
# Curriculum tree
# -----------------------------------------------------------------------------

class Task(QuestModel):
    id: str
    title: str
    objective: str = ""
    steps: list[str] = []
    files: list[str] = []       # created automatically when the task starts
    artifacts: list[str] = []   # files the learner is expected to touch
    validation: Validation = Field(default_factory=Validation)


class Quest(QuestModel):
    id: str
    title: str
    tasks: list[Task] = []


class Chapter(QuestModel):
    id: str
    title: str
    quests: list[Quest] = []


class Journey(QuestModel):
    name: str = ""
    description: str = ""
    language: str = ""
    focus: list[str] = []


class Plan(QuestModel):
    """
    The curriculum document.

    `number_of_tasks` is a cached count of the flattened task list. It is
    recomputed by `normalized()`, which the store calls before every save.
    """
    version: int = 1
    journey: Journey = Field(default_factory=Journey)
    chapters: list[Chapter] = []
    number_of_tasks: int = Field(default=0, alias="numberOfTasks")

    @model_validator(mode="after")
    def task_ids_unique(self):
        seen: set[str] = set()
        for task in self.flatten_tasks():
            if task.id in seen:
                raise ValueError(f"Duplicate task id: {task.id}")
            seen.add(task.id)
        return self

    def flatten_tasks(self) -> list[Task]:
        """All tasks in chapter -> quest -> task order."""
        return [
            task
            for chapter in self.chapters
            for quest in chapter.quests
            for task in quest.tasks
        ]

    def count_tasks(self) -> int:
        return sum(len(quest.tasks) for chapter in self.chapters for quest in chapter.quests)

    def normalized(self) -> "Plan":
        """Refresh the cached task count in place and return self."""
        self.number_of_tasks = self.count_tasks()
        return self

    def is_acceptable(self) -> bool:
        """A usable plan has a journey name and at least one chapter."""
        return bool(self.journey.name.strip()) and len(self.chapters) > 0

    def locate(self, index: int) -> Optional[tuple[int, int]]:
        """(chapter position, quest position within chapter) for a flattened index."""
        position = 0
        for chapter_idx, chapter in enumerate(self.chapters):
            for quest_idx, quest in enumerate(chapter.quests):
                position += len(quest.tasks)
                if index < position:
                    return chapter_idx, quest_idx
        return None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
