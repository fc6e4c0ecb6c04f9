"""
Exception hierarchy for codequest.

Every error carries the identity of the failing resource in its message.
Each class also derives from the closest builtin so callers that only know
about FileNotFoundError / ValueError / IndexError keep working.
"""


class QuestError(Exception):
    """Base class for all codequest errors."""


class QuestNotFoundError(QuestError, FileNotFoundError):
    """Progress files, templates or artifacts are missing."""


class MalformedInputError(QuestError, ValueError):
    """Invalid JSON, schema violations, bad patterns."""


class InvalidRuleTypeError(MalformedInputError):
    """A validation rule has a type outside the known set."""


class MalformedPatternError(MalformedInputError):
    """A glob or regular expression in a rule cannot be compiled."""


class TaskIndexError(QuestError, IndexError):
    """Task index outside [0, total)."""


class NoCompletedTasksError(QuestError, LookupError):
    """No task has been completed yet."""


class ConsistencyError(QuestError, RuntimeError):
    """Persisted plan/state disagree with each other."""


class GeneratorError(QuestError, RuntimeError):
    """The external feedback generator failed or returned garbage."""


class QuestIOError(QuestError, OSError):
    """Reading or writing a file failed."""


class SessionExistsError(QuestError, FileExistsError):
    """A quest session is already initialized in this directory."""
