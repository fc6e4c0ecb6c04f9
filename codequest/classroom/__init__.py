"""
codequest Classroom - Rules, progress persistence and task navigation.

This module provides:
- evaluate_rule / evaluate_rules: the validation rule engine
- ProgressStore: plan.json / state.json under .quest/
- TaskNavigator: the task state machine
- TemplateCatalog: bundled plan templates
- run_health_check: session and environment diagnostics
"""

from .rules import (
    RuleResult,
    evaluate_rule,
    evaluate_rules,
    expand_glob,
)

from .store import ProgressStore

from .navigator import (
    AdvanceResult,
    CheckReport,
    CompletionSummary,
    FeedbackReport,
    NavigationChapter,
    NavigationQuest,
    NavigationTask,
    NavigatorState,
    TaskNavigator,
    TaskStatus,
    ensure_placeholder,
    fold_annotation_status,
)

from .templates import (
    DEFAULT_TEMPLATE,
    TemplateCatalog,
    load_template,
    random_template,
    select_template_for_spec,
    surprise_spec,
)

from .health import HealthCheck, HealthReport, run_health_check

__all__ = [
    # Rules
    "RuleResult",
    "evaluate_rule",
    "evaluate_rules",
    "expand_glob",
    # Store
    "ProgressStore",
    # Navigator
    "AdvanceResult",
    "CheckReport",
    "CompletionSummary",
    "FeedbackReport",
    "NavigationChapter",
    "NavigationQuest",
    "NavigationTask",
    "NavigatorState",
    "TaskNavigator",
    "TaskStatus",
    "ensure_placeholder",
    "fold_annotation_status",
    # Templates
    "DEFAULT_TEMPLATE",
    "TemplateCatalog",
    "load_template",
    "random_template",
    "select_template_for_spec",
    "surprise_spec",
    # Health
    "HealthCheck",
    "HealthReport",
    "run_health_check",
]
