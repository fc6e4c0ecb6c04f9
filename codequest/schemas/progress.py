"""
Progress schemas for codequest.

Defines Pydantic models for the learner state document (.quest/state.json):
- Check result of the most recent validation run
- Current position in the flattened task list
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .plan import QuestModel


class CheckStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class CheckResult(QuestModel):
    task_id: int = Field(alias="taskId")  # flattened task index the check ran against
    status: CheckStatus
    timestamp: datetime = Field(default_factory=datetime.now)
    message: str = ""


class QuestState(QuestModel):
    version: int = 1
    current_task_index: int = Field(default=0, alias="currentTaskIndex")
    completed_task_ids: list[str] = Field(default_factory=list, alias="completedTaskIds")
    last_check: Optional[CheckResult] = Field(default=None, alias="lastCheck")
    quest_started: bool = Field(default=False, alias="questStarted")
    explain_count: int = Field(default=0, alias="explainCount")  # resets on task change

    def is_completed(self, task_id: str) -> bool:
        return task_id in self.completed_task_ids

    def mark_completed(self, task_id: str) -> bool:
        """Add to the completed set. Returns False if it was already there."""
        if task_id in self.completed_task_ids:
            return False
        self.completed_task_ids.append(task_id)
        return True

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
