"""
codequest Viewer - Plain-text rendering for the command line.

This module provides:
- Task cards, check reports, feedback placement reports
- Progress summary with the curriculum tree
- Health and template listings
- Spinner shown while the feedback generator runs
"""

from .console import (
    STATUS_MARKS,
    render_advance,
    render_check_report,
    render_completion,
    render_completion_prompt,
    render_error,
    render_feedback,
    render_header,
    render_health,
    render_summary,
    render_task,
    render_templates,
)

from .spinner import Spinner

__all__ = [
    # Console
    "STATUS_MARKS",
    "render_advance",
    "render_check_report",
    "render_completion",
    "render_completion_prompt",
    "render_error",
    "render_feedback",
    "render_header",
    "render_health",
    "render_summary",
    "render_task",
    "render_templates",
    # Spinner
    "Spinner",
]
