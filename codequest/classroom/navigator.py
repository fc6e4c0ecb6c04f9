"""
TaskNavigator - Task sequencing, validation and completion bookkeeping.

Provides:
- Advance / jump through the flattened task list
- Rule checks for the current task
- Hint and review annotations delegated to the feedback patcher
- Curriculum tree with status indicators
- Session completion

States of the task machine:
    NOT_STARTED          quest_started is False
    ON_TASK(i)           0 <= i < total
    ALL_TASKS_COMPLETE   i == total
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from codequest.errors import (
    ConsistencyError,
    NoCompletedTasksError,
    QuestIOError,
    QuestNotFoundError,
    TaskIndexError,
)
from codequest.feedback.patcher import apply_annotations, comment_leader
from codequest.schemas import (
    SEVERITY,
    Annotation,
    AnnotationKind,
    CheckResult,
    CheckStatus,
    Rule,
    Task,
)

from .rules import RuleResult, evaluate_rules
from .store import ProgressStore

logger = logging.getLogger(__name__)

# (task title, objective, files, attempt) -> hints
HintSource = Callable[[str, str, list[str], int], list[Annotation]]
# (task title, rules with cached outcomes, files) -> classified annotations
ReviewSource = Callable[[str, list[Rule], list[str]], list[Annotation]]


class NavigatorState(str, Enum):
    NOT_STARTED = "not_started"
    ON_TASK = "on_task"
    ALL_TASKS_COMPLETE = "all_tasks_complete"


class TaskStatus(str, Enum):
    """Task status for summary display."""
    COMPLETED = "completed"
    CURRENT = "current"
    PENDING = "pending"


@dataclass
class AdvanceResult:
    index: int
    task: Optional[Task]           # None once every task is behind us
    completed: bool = False
    created_files: list[str] = field(default_factory=list)


@dataclass
class CheckReport:
    index: int
    task: Task
    result: CheckResult
    rule_results: list[RuleResult]

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.rule_results if r.passed)

    @property
    def failed_count(self) -> int:
        return len(self.rule_results) - self.passed_count


@dataclass
class FeedbackReport:
    """Outcome of an explain / annotate request."""
    files: list[str]
    annotations: list[Annotation]   # what the generator returned
    placed: list[Annotation]        # what actually landed in files
    attempt: int = 0
    status: Optional[CheckStatus] = None


@dataclass
class CompletionSummary:
    completed: int
    total: int
    removed: bool = False

    @property
    def all_completed(self) -> bool:
        return self.completed == self.total


@dataclass
class NavigationTask:
    task: Task
    index: int
    status: TaskStatus


@dataclass
class NavigationQuest:
    id: str
    title: str
    tasks: list[NavigationTask]


@dataclass
class NavigationChapter:
    """Chapter with quests and navigation metadata."""
    id: str
    title: str
    quests: list[NavigationQuest]
    completed_count: int
    total_count: int
    is_current: bool

    @property
    def is_complete(self) -> bool:
        return self.completed_count == self.total_count


def ensure_placeholder(root: Path, relative_path: str) -> bool:
    """
    Create an empty TODO file if it does not exist yet.

    Returns True if the file was created; an existing file is never touched.
    """
    path = root / relative_path
    if path.exists():
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{comment_leader(path)} TODO: implement\n", encoding="utf-8")
    except OSError as e:
        raise QuestIOError(f"Error creating {relative_path}: {e}") from e
    logger.info(f"Created placeholder {relative_path}")
    return True


def fold_annotation_status(status: CheckStatus, annotations: list[Annotation]) -> CheckStatus:
    """
    Combine a rule-based status with review annotations.

    The most severe annotation wins; annotations never turn a failing
    check into a passing one.
    """
    worst = max(
        (SEVERITY[a.kind] for a in annotations if a.kind is not None),
        default=0,
    )
    if worst >= SEVERITY[AnnotationKind.ERROR]:
        return CheckStatus.FAIL
    if worst >= SEVERITY[AnnotationKind.WARNING] and status == CheckStatus.PASS:
        return CheckStatus.WARN
    return status


class TaskNavigator:
    """
    Drive a learner through the flattened task list.

    Combines ProgressStore (persistence) with the rule engine and the
    feedback patcher. The only component that mutates QuestState.
    """

    def __init__(self, store: ProgressStore, root: Optional[Path] = None):
        """
        Initialize navigator.

        Args:
            store: ProgressStore holding plan.json / state.json
            root: Learner project root; rules and files resolve against it
                (default: current working directory)

        Raises:
            QuestNotFoundError / MalformedInputError: from loading
            ConsistencyError: plan and state disagree
        """
        self.store = store
        self.root = Path(root) if root else Path.cwd()
        self.plan, self.state = store.load()
        self._ensure_consistent()

    @property
    def total_tasks(self) -> int:
        return self.plan.number_of_tasks

    def _ensure_consistent(self):
        live_count = len(self.plan.flatten_tasks())
        if self.plan.number_of_tasks != live_count:
            raise ConsistencyError(
                f"plan.json reports {self.plan.number_of_tasks} tasks but contains {live_count}"
            )
        index = self.state.current_task_index
        if index < 0 or index > self.total_tasks:
            raise ConsistencyError(
                f"state.json task index {index} is outside 0..{self.total_tasks}"
            )

    # -------------------------------------------------------------------------
    # Position
    # -------------------------------------------------------------------------

    @property
    def machine_state(self) -> NavigatorState:
        if not self.state.quest_started:
            return NavigatorState.NOT_STARTED
        if self.state.current_task_index >= self.total_tasks:
            return NavigatorState.ALL_TASKS_COMPLETE
        return NavigatorState.ON_TASK

    @property
    def current_index(self) -> int:
        return self.state.current_task_index

    def current_task(self) -> Optional[Task]:
        """Task at the current index, or None past the last task."""
        tasks = self.plan.flatten_tasks()
        if self.state.current_task_index >= len(tasks):
            return None
        return tasks[self.state.current_task_index]

    def _require_current_task(self) -> Task:
        task = self.current_task()
        if task is None:
            raise TaskIndexError(
                f"no active task: index {self.state.current_task_index} is past the last task ({self.total_tasks})"
            )
        return task

    def existing_artifacts(self, task: Task) -> list[str]:
        return [a for a in task.artifacts if (self.root / a).exists()]

    # -------------------------------------------------------------------------
    # Advance
    # -------------------------------------------------------------------------

    @property
    def needs_confirmation(self) -> bool:
        """A previous check exists and did not pass; the caller should confirm before advancing."""
        last = self.state.last_check
        return last is not None and last.status != CheckStatus.PASS

    def advance(self) -> AdvanceResult:
        """
        Move to the next task.

        The first call after the session starts only marks the quest as
        started. Files listed by the target task are created before the new
        index is committed; a failure there leaves state untouched.
        """
        if self.machine_state == NavigatorState.ALL_TASKS_COMPLETE:
            return AdvanceResult(index=self.total_tasks, task=None, completed=True)

        if self.state.quest_started:
            target = self.state.current_task_index + 1
        else:
            target = self.state.current_task_index

        if target >= self.total_tasks:
            self._move_to(self.total_tasks)
            self.state.quest_started = True
            self.store.save_state(self.state)
            logger.info("Reached the end of the quest")
            return AdvanceResult(index=self.total_tasks, task=None, completed=True)

        task = self.plan.flatten_tasks()[target]
        created = [f for f in task.files if ensure_placeholder(self.root, f)]

        self._move_to(target)
        self.state.quest_started = True
        self.store.save_state(self.state)
        logger.info(f"Advanced to task {target + 1}/{self.total_tasks}: {task.id}")
        return AdvanceResult(index=target, task=task, created_files=created)

    def _move_to(self, index: int):
        """Commit a new index; per-task counters reset on every move."""
        self.state.current_task_index = index
        self.state.explain_count = 0
        self.state.last_check = None

    # -------------------------------------------------------------------------
    # Jump
    # -------------------------------------------------------------------------

    def jump_to(self, index: int) -> Task:
        """
        Set the current task to any 0-based index in [0, total).

        Raises:
            TaskIndexError: index out of range (state untouched)
        """
        if index < 0 or index >= self.total_tasks:
            raise TaskIndexError(f"Task index out of range (1-{self.total_tasks})")

        if index != self.state.current_task_index:
            self._move_to(index)
        self.store.save_state(self.state)
        return self.plan.flatten_tasks()[index]

    def last_completed_index(self) -> int:
        """
        Highest flattened position whose task is completed.

        Raises:
            NoCompletedTasksError: nothing completed yet
            ConsistencyError: completed ids match no task in the plan
        """
        if not self.state.completed_task_ids:
            raise NoCompletedTasksError("No completed tasks yet")

        last = -1
        for i, task in enumerate(self.plan.flatten_tasks()):
            if self.state.is_completed(task.id):
                last = i
        if last < 0:
            raise ConsistencyError("Could not find last completed task in the plan")
        return last

    def jump_to_last_completed(self) -> Task:
        return self.jump_to(self.last_completed_index())

    # -------------------------------------------------------------------------
    # Check
    # -------------------------------------------------------------------------

    def check(self) -> CheckReport:
        """
        Evaluate every rule of the current task.

        All rules passing marks the task completed. The index never changes.
        Plan is saved too, since it carries each rule's last outcome.
        """
        task = self._require_current_task()
        rule_results = evaluate_rules(task.validation.rules, self.root)
        failed = sum(1 for r in rule_results if not r.passed)

        if failed == 0:
            status, message = CheckStatus.PASS, "All checks passed"
            if self.state.mark_completed(task.id):
                logger.info(f"Task {task.id} completed")
        else:
            status, message = CheckStatus.FAIL, "Some validations failed"

        result = CheckResult(
            task_id=self.state.current_task_index,
            status=status,
            timestamp=datetime.now(),
            message=message,
        )
        self.state.last_check = result
        self.store.save(self.plan, self.state)
        return CheckReport(
            index=self.state.current_task_index,
            task=task,
            result=result,
            rule_results=rule_results,
        )

    def annotate_check(self, review: ReviewSource) -> FeedbackReport:
        """
        Ask for review comments on the current task's files and place them.

        Must run after check(); the rules' cached outcomes tell the reviewer
        what passed. Annotation severity is folded into the last check.
        """
        task = self._require_current_task()
        files = self.existing_artifacts(task)
        if not files:
            return FeedbackReport(files=[], annotations=[], placed=[])

        annotations = review(task.title, task.validation.rules, files)
        placed = apply_annotations(annotations, self.root)

        status = None
        last = self.state.last_check
        if last is not None and last.task_id == self.state.current_task_index:
            last.status = fold_annotation_status(last.status, placed)
            status = last.status
            self.store.save_state(self.state)
        return FeedbackReport(files=files, annotations=annotations, placed=placed, status=status)

    # -------------------------------------------------------------------------
    # Explain
    # -------------------------------------------------------------------------

    def explain(self, hints: HintSource) -> FeedbackReport:
        """
        Insert hints into the current task's files.

        Each call on the same task escalates the hint level. State is saved
        even when the generator has nothing to say.

        Raises:
            QuestNotFoundError: none of the task's artifacts exist yet
        """
        task = self._require_current_task()
        files = self.existing_artifacts(task)
        if not files:
            raise QuestNotFoundError(
                f"no files found to analyze. Expected: {', '.join(task.artifacts) or '(none listed)'}"
            )

        self.state.explain_count += 1
        attempt = self.state.explain_count

        annotations = hints(task.title, task.objective, files, attempt)
        placed = apply_annotations(annotations, self.root) if annotations else []
        self.store.save_state(self.state)
        return FeedbackReport(files=files, annotations=annotations, placed=placed, attempt=attempt)

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def completion_summary(self) -> CompletionSummary:
        plan_ids = {task.id for task in self.plan.flatten_tasks()}
        completed = sum(1 for task_id in self.state.completed_task_ids if task_id in plan_ids)
        return CompletionSummary(completed=completed, total=self.total_tasks)

    def complete(self, confirm: Callable[[CompletionSummary], bool]) -> CompletionSummary:
        """
        End the session, destroying all persisted plan/state data.

        Args:
            confirm: Called with the summary; nothing happens unless it returns True
        """
        summary = self.completion_summary()
        if not confirm(summary):
            return summary
        self.store.destroy()
        summary.removed = True
        return summary

    # -------------------------------------------------------------------------
    # Curriculum Tree
    # -------------------------------------------------------------------------

    def task_status(self, task: Task, index: int) -> TaskStatus:
        if self.state.is_completed(task.id):
            return TaskStatus.COMPLETED
        if index == self.state.current_task_index:
            return TaskStatus.CURRENT
        return TaskStatus.PENDING

    def get_navigation_tree(self) -> list[NavigationChapter]:
        """Chapters -> quests -> tasks, each task with its status."""
        located = self.plan.locate(self.state.current_task_index)
        current_chapter = located[0] if located else None

        tree = []
        index = 0
        for chapter_idx, chapter in enumerate(self.plan.chapters):
            nav_quests = []
            completed_count = 0
            total_count = 0
            for quest in chapter.quests:
                nav_tasks = []
                for task in quest.tasks:
                    status = self.task_status(task, index)
                    if status == TaskStatus.COMPLETED:
                        completed_count += 1
                    nav_tasks.append(NavigationTask(task=task, index=index, status=status))
                    index += 1
                total_count += len(quest.tasks)
                nav_quests.append(NavigationQuest(id=quest.id, title=quest.title, tasks=nav_tasks))

            tree.append(NavigationChapter(
                id=chapter.id,
                title=chapter.title,
                quests=nav_quests,
                completed_count=completed_count,
                total_count=total_count,
                is_current=chapter_idx == current_chapter,
            ))
        return tree

    def get_progress_summary(self) -> dict:
        """Get progress summary for display."""
        total = self.total_tasks
        completed = self.completion_summary().completed

        if total <= 3:
            tier = "Quick"
        elif total <= 10:
            tier = "Standard"
        else:
            tier = "Extended"

        current = self.current_task()
        located = self.plan.locate(self.state.current_task_index)
        chapter = self.plan.chapters[located[0]] if located else None
        quest = chapter.quests[located[1]] if located else None

        return {
            "journey": self.plan.journey.name,
            "description": self.plan.journey.description,
            "focus": list(self.plan.journey.focus),
            "tier": tier,
            "total_tasks": total,
            "completed": completed,
            "completion_percent": round(completed / total * 100, 1) if total > 0 else 0,
            "all_completed": completed == total,
            "state": self.machine_state.value,
            "current_index": self.state.current_task_index,
            "current_task_id": current.id if current else None,
            "current_chapter_id": chapter.id if chapter else None,
            "current_quest_id": quest.id if quest else None,
        }
