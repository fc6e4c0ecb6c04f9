"""
Parse generator output into annotations.

The generator answers with one comment per line:

    main.go:12: // ✗ ERROR: Missing http.ListenAndServe call

Anything that does not fit this shape is ignored.
"""

import re

from codequest.schemas import Annotation, classify_comment

FEEDBACK_LINE_RE = re.compile(r"^([^:]+):(\d+):\s*//\s*(.+)$")


def parse_feedback(output: str, classify: bool = False) -> list[Annotation]:
    """
    Extract (file, line, comment) triples from raw generator output.

    Args:
        output: Raw text returned by the generator
        classify: Infer a kind for each comment (check-time annotations);
            hints are left untyped

    Returns:
        Annotations in output order
    """
    annotations = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        match = FEEDBACK_LINE_RE.match(line)
        if not match:
            continue

        file_name, line_number, comment = match.groups()
        comment = comment.strip()
        annotations.append(Annotation(
            file=file_name.strip(),
            line=int(line_number),
            comment=comment,
            kind=classify_comment(comment) if classify else None,
        ))
    return annotations
