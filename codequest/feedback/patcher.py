"""
Annotation patcher - Insert feedback comments into learner files.

Placement is purely line-number driven:
- annotations are grouped per file
- previously inserted comments (tagged with ANNOTATION_TAG) are stripped first,
  so re-applying a batch never accumulates duplicates
- entries are inserted bottom-up so earlier insertions never shift the
  targets of later ones
- each comment copies the indentation of the line it sits above
- out-of-range lines are dropped; missing or non-UTF-8 files are skipped
"""

import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from codequest.errors import MalformedInputError, QuestIOError
from codequest.schemas import Annotation

logger = logging.getLogger(__name__)

ANNOTATION_TAG = "[quest]"

# File extension -> line comment leader; anything else gets "//"
COMMENT_LEADERS = {
    ".py": "#",
    ".sh": "#",
    ".bash": "#",
    ".rb": "#",
    ".yaml": "#",
    ".yml": "#",
    ".toml": "#",
    ".r": "#",
    ".sql": "--",
    ".lua": "--",
}
DEFAULT_COMMENT_LEADER = "//"

ANNOTATION_LINE_RE = re.compile(r"^\s*(//|#|--)\s*" + re.escape(ANNOTATION_TAG))


def comment_leader(file_path: str | Path) -> str:
    return COMMENT_LEADERS.get(Path(file_path).suffix.lower(), DEFAULT_COMMENT_LEADER)


def get_indentation(line: str) -> str:
    """Leading spaces and tabs of a line."""
    return line[: len(line) - len(line.lstrip(" \t"))]


def is_annotation_line(line: str) -> bool:
    return bool(ANNOTATION_LINE_RE.match(line))


def strip_annotations(lines: list[str]) -> list[str]:
    return [line for line in lines if not is_annotation_line(line)]


def format_annotation(comment: str, indent: str, leader: str) -> str:
    text = " ".join(comment.split())
    return f"{indent}{leader} {ANNOTATION_TAG} {text}"


def patch_lines(lines: list[str], annotations: list[Annotation], leader: str) -> tuple[list[str], list[Annotation]]:
    """
    Insert annotations into an already-stripped list of lines.

    Returns the new lines and the annotations that were placed. Entries with
    equal line numbers keep their batch order, top to bottom.
    """
    result = list(lines)
    line_count = len(result)
    placed = []

    ordered = sorted(enumerate(annotations), key=lambda item: (item[1].line, item[0]), reverse=True)
    for _, annotation in ordered:
        if annotation.line < 1 or annotation.line > line_count:
            logger.debug(f"Dropping annotation for {annotation.file}:{annotation.line} (file has {line_count} lines)")
            continue
        idx = annotation.line - 1
        indent = get_indentation(result[idx])
        result.insert(idx, format_annotation(annotation.comment, indent, leader))
        placed.append(annotation)

    placed.reverse()
    return result, placed


def apply_to_file(path: Path, annotations: list[Annotation]) -> list[Annotation]:
    """Strip old annotations from one file and insert the new ones."""
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise QuestIOError(f"failed to read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"{path} is not valid UTF-8: {e}") from e

    lines = strip_annotations(content.split("\n"))
    new_lines, placed = patch_lines(lines, annotations, comment_leader(path))

    try:
        path.write_text("\n".join(new_lines), encoding="utf-8")
    except OSError as e:
        raise QuestIOError(f"failed to annotate {path}: {e}") from e
    return placed


def apply_annotations(annotations: Iterable[Annotation], root: Path) -> list[Annotation]:
    """
    Apply a batch of annotations to files under root.

    Files are best-effort: a file that does not exist, whose path escapes
    root, or that is not UTF-8 text is skipped without error.

    Returns:
        The annotations actually inserted, grouped by file in first-seen order.
    """
    by_file: dict[str, list[Annotation]] = defaultdict(list)
    for annotation in annotations:
        by_file[annotation.file].append(annotation)

    root = root.resolve()
    placed = []
    for file_name, file_annotations in by_file.items():
        full_path = (root / file_name).resolve()
        if not full_path.is_relative_to(root):
            logger.warning(f"Skipping annotations for {file_name}: outside {root}")
            continue
        if not full_path.is_file():
            logger.debug(f"Skipping annotations for missing file {file_name}")
            continue
        try:
            placed.extend(apply_to_file(full_path, file_annotations))
        except MalformedInputError as e:
            logger.warning(f"Skipping annotations for {file_name}: {e}")
            continue
        logger.info(f"Annotated {file_name}")

    return placed
