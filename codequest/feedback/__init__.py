"""
codequest Feedback - Generate and place inline comments in learner files.

This module provides:
- FeedbackGenerator: prompts an external AI command for hints/reviews/plans
- parse_feedback: parse `path:line: // comment` output
- apply_annotations: insert comments into files, idempotently
"""

from .generator import (
    Executor,
    FeedbackGenerator,
    make_command_executor,
    parse_plan_json,
)

from .parser import (
    parse_feedback,
)

from .patcher import (
    ANNOTATION_TAG,
    apply_annotations,
    comment_leader,
    get_indentation,
    patch_lines,
    strip_annotations,
)

__all__ = [
    # Generator
    "Executor",
    "FeedbackGenerator",
    "make_command_executor",
    "parse_plan_json",
    # Parser
    "parse_feedback",
    # Patcher
    "ANNOTATION_TAG",
    "apply_annotations",
    "comment_leader",
    "get_indentation",
    "patch_lines",
    "strip_annotations",
]
