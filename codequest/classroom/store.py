"""
ProgressStore - Persist the quest plan and learner state in .quest/.

Stores two independent JSON documents:
- plan.json:  the curriculum (plus each rule's cached last outcome)
- state.json: the learner's position, completed tasks and last check

Writes go straight to the target file (no temp-file-and-rename); a crash
mid-write can leave a partial document.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from codequest.config import DEFAULT_QUEST_DIR, PLAN_FILE_NAME, STATE_FILE_NAME
from codequest.errors import MalformedInputError, QuestIOError, QuestNotFoundError, SessionExistsError
from codequest.schemas import Plan, QuestState

logger = logging.getLogger(__name__)


class ProgressStore:
    """
    Read and write plan.json / state.json under a quest directory.

    The directory is relative to the working directory unless an absolute
    path is given.
    """

    def __init__(self, quest_dir: Optional[Path] = None):
        """
        Initialize progress store.

        Args:
            quest_dir: Directory holding the session files (default: ./.quest)
        """
        self.quest_dir = Path(quest_dir or DEFAULT_QUEST_DIR)

    @property
    def plan_path(self) -> Path:
        return self.quest_dir / PLAN_FILE_NAME

    @property
    def state_path(self) -> Path:
        return self.quest_dir / STATE_FILE_NAME

    def exists(self) -> bool:
        """Whether a session directory is present."""
        return self.quest_dir.exists()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _read_document(self, path: Path, model: type[BaseModel]):
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise QuestNotFoundError(f"{path} not found") from None
        except OSError as e:
            raise QuestIOError(f"Failed to read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"{path} is not valid UTF-8: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"{path} is not valid JSON: {e}") from e

        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedInputError(f"{path} does not match the expected schema: {e}") from e

    def load_plan(self) -> Plan:
        """Load the plan document."""
        return self._read_document(self.plan_path, Plan)

    def load_state(self) -> QuestState:
        """Load the state document."""
        return self._read_document(self.state_path, QuestState)

    def load(self) -> tuple[Plan, QuestState]:
        """Load both documents; the plan first, as every command needs it."""
        plan = self.load_plan()
        state = self.load_state()
        logger.debug(
            f"Loaded session from {self.quest_dir}: task {state.current_task_index + 1}/{plan.number_of_tasks}"
        )
        return plan, state

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def _write_document(self, path: Path, text: str):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise QuestIOError(f"Failed to write {path}: {e}") from e

    def save_state(self, state: QuestState):
        self._write_document(self.state_path, state.to_json())

    def save_plan(self, plan: Plan):
        """Save the plan, refreshing its cached task count first."""
        plan.normalized()
        self._write_document(self.plan_path, plan.to_json())

    def save(self, plan: Plan, state: QuestState):
        """Save state, then plan. A failed state write leaves the plan untouched."""
        self.save_state(state)
        self.save_plan(plan)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def init_session(self, plan: Plan) -> QuestState:
        """
        Create the quest directory with the given plan and a fresh state.

        Raises:
            SessionExistsError: a session directory already exists
        """
        if self.exists():
            raise SessionExistsError(f"{self.quest_dir} already exists")

        state = QuestState()
        try:
            self.save(plan, state)
        except QuestIOError:
            logger.warning(f"Removing {self.quest_dir} after a failed initialization")
            shutil.rmtree(self.quest_dir, ignore_errors=True)
            raise
        logger.info(f"Initialized quest '{plan.journey.name}' with {plan.number_of_tasks} tasks")
        return state

    def destroy(self):
        """Remove all persisted plan and state data."""
        if not self.exists():
            return
        try:
            shutil.rmtree(self.quest_dir)
        except OSError as e:
            raise QuestIOError(f"Failed to remove {self.quest_dir}: {e}") from e
        logger.info(f"Removed {self.quest_dir}")
