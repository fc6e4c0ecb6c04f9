"""
Annotation schemas for codequest.

Inline feedback comments produced by the generator and placed by the
patcher. These are ephemeral: recomputed on every invocation, never saved.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

# Glyphs and keywords the generator is asked to prefix comments with.
# Checked in this order; the first hit decides the kind.
KIND_MARKERS = (
    ("success", ("✓", "GOOD")),
    ("error", ("✗", "ERROR")),
    ("warning", ("⚠", "WARNING")),
)


class AnnotationKind(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


# Higher is more severe; used when folding annotations into a check status
SEVERITY = {
    AnnotationKind.SUCCESS: 0,
    AnnotationKind.INFO: 0,
    AnnotationKind.WARNING: 1,
    AnnotationKind.ERROR: 2,
}


class Annotation(BaseModel):
    """
    One comment to insert above a 1-based line of a file.

    Hints from `explain` carry no kind; check-time annotations do.
    """
    file: str
    line: int
    comment: str
    kind: Optional[AnnotationKind] = None


def classify_comment(comment: str) -> AnnotationKind:
    """Infer severity from the markers in a comment; default is info."""
    for kind, markers in KIND_MARKERS:
        if any(marker in comment for marker in markers):
            return AnnotationKind(kind)
    return AnnotationKind.INFO
