"""
codequest Schemas - Pydantic models for quest plans and progress.

This module exports all schema classes for:
- Plan: journey, chapters, quests, tasks, validation rules
- Progress: learner state and check results
- Annotation: inline feedback comments
- Project: project spec and template catalog entries
"""

# Plan schemas
from .plan import (
    RuleType,
    RuleOutcome,
    Rule,
    Validation,
    Task,
    Quest,
    Chapter,
    Journey,
    Plan,
)

# Progress schemas
from .progress import (
    CheckStatus,
    CheckResult,
    QuestState,
)

# Annotation schemas
from .annotation import (
    AnnotationKind,
    Annotation,
    SEVERITY,
    classify_comment,
)

# Project schemas
from .project import (
    Difficulty,
    Tier,
    ProjectSpec,
    TemplateInfo,
)

__all__ = [
    # Plan
    'RuleType',
    'RuleOutcome',
    'Rule',
    'Validation',
    'Task',
    'Quest',
    'Chapter',
    'Journey',
    'Plan',
    # Progress
    'CheckStatus',
    'CheckResult',
    'QuestState',
    # Annotation
    'AnnotationKind',
    'Annotation',
    'SEVERITY',
    'classify_comment',
    # Project
    'Difficulty',
    'Tier',
    'ProjectSpec',
    'TemplateInfo',
]
