"""
Console renderer - Plain-text blocks for tasks, checks, summaries.

Every function returns a string; the caller decides where it goes.
No colors, no terminal state.
"""

from typing import Optional

from codequest.classroom.health import HealthCheck, HealthReport
from codequest.classroom.navigator import (
    AdvanceResult,
    CheckReport,
    CompletionSummary,
    FeedbackReport,
    NavigationChapter,
    TaskStatus,
)
from codequest.schemas import AnnotationKind, CheckStatus, Task, TemplateInfo

INDENT = "  "
DIVIDER = INDENT + "─" * 50

PASS_MARK = "✓"
FAIL_MARK = "✗"
WARN_MARK = "⚠"

# Status indicators for the curriculum tree
STATUS_MARKS = {
    TaskStatus.COMPLETED: "✔",
    TaskStatus.CURRENT: "→",
    TaskStatus.PENDING: "○",
}

CHECK_STATUS_MARKS = {
    CheckStatus.PASS: PASS_MARK,
    CheckStatus.WARN: WARN_MARK,
    CheckStatus.FAIL: FAIL_MARK,
}


def _lines(*parts: str) -> str:
    return "\n".join(parts)


def render_header(title: str) -> str:
    return _lines("", f"{INDENT}🧭 {title}", INDENT + "─" * (len(title) + 2), "")


def render_error(message: str, tip: Optional[str] = None) -> str:
    """Error line with an optional tip underneath."""
    text = f"{INDENT}{FAIL_MARK} {message}"
    if tip:
        text += f"\n{INDENT}💡 {tip}"
    return text


def render_check_line(ok: bool, name: str, detail: str) -> str:
    mark = PASS_MARK if ok else FAIL_MARK
    return f"{INDENT}{mark} {name} {detail}".rstrip()


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------

def render_task(task: Task, index: int, total: int) -> str:
    """Task card shown by `next` and `jump-to`."""
    out = [
        "",
        f"{INDENT}📋 Task {index + 1}/{total}: {task.title}",
        DIVIDER,
        "",
    ]
    if task.objective:
        out.append(f"{INDENT}{task.objective}")
        out.append("")
    if task.steps:
        out.append(f"{INDENT}Steps:")
        out.extend(f"{INDENT}{i}. {step}" for i, step in enumerate(task.steps, start=1))
        out.append("")
    if task.artifacts:
        out.append(f"{INDENT}Files:")
        out.extend(f"{INDENT}• {artifact}" for artifact in task.artifacts)
        out.append("")
    return _lines(*out)


def render_advance(result: AdvanceResult, total: int) -> str:
    if result.completed or result.task is None:
        return _lines(
            f"{INDENT}🎉 All {total} tasks done!",
            f"{INDENT}Run 'quest complete' to wrap up, or 'quest summary' to review.",
        )
    text = render_task(result.task, result.index, total)
    if result.created_files:
        created = "\n".join(f"{INDENT}+ {path}" for path in result.created_files)
        text += f"\n{INDENT}Created:\n{created}\n"
    return text


# -----------------------------------------------------------------------------
# Checks and feedback
# -----------------------------------------------------------------------------

def render_check_report(report: CheckReport) -> str:
    out = ["", f"{INDENT}🔍 Checking Task {report.index + 1}: {report.task.title}", ""]
    for position, rule_result in enumerate(report.rule_results):
        name = rule_result.rule.display_name(position)
        out.append(render_check_line(rule_result.passed, name, rule_result.reason or ""))

    out.append("")
    if report.result.status == CheckStatus.PASS:
        out.append(f"{INDENT}🎉 All {len(report.rule_results)} checks passed!")
    else:
        out.append(f"{INDENT}{WARN_MARK}  Results: {report.passed_count} passed, {report.failed_count} failed")
    return _lines(*out)


def render_feedback(report: FeedbackReport) -> str:
    """Where hints / review comments were placed, counted by kind."""
    if not report.files:
        return f"{INDENT}No files to annotate yet."
    if not report.placed:
        return f"{INDENT}No feedback this time."

    out = [f"{INDENT}Added {len(report.placed)} comment(s):"]
    for annotation in report.placed:
        out.append(f"{INDENT}• {annotation.file}:{annotation.line}")

    kinds = [a.kind for a in report.placed if a.kind is not None]
    if kinds:
        counts = ", ".join(
            f"{kinds.count(kind)} {kind.value}"
            for kind in AnnotationKind
            if kinds.count(kind)
        )
        out.append(f"{INDENT}({counts})")
    if report.status is not None:
        out.append(f"{INDENT}{CHECK_STATUS_MARKS[report.status]} Status: {report.status.value}")
    return _lines(*out)


# -----------------------------------------------------------------------------
# Summary
# -----------------------------------------------------------------------------

def render_summary(summary: dict, tree: list[NavigationChapter]) -> str:
    """Progress overview plus the chapter -> quest -> task tree."""
    out = [render_header(summary["journey"] or "Quest Summary")]
    if summary["description"]:
        out.append(f"{INDENT}{summary['description']}")
    if summary["focus"]:
        out.append(f"{INDENT}Focus: {', '.join(summary['focus'])}")
    out.append(
        f"{INDENT}{summary['tier']} quest · {summary['completed']}/{summary['total_tasks']} "
        f"tasks ({summary['completion_percent']}%)"
    )
    out.append("")

    for chapter in tree:
        marker = STATUS_MARKS[TaskStatus.COMPLETED] if chapter.is_complete else " "
        out.append(f"{INDENT}{marker} {chapter.title} ({chapter.completed_count}/{chapter.total_count})")
        for quest in chapter.quests:
            out.append(f"{INDENT * 2}{quest.title}")
            for nav_task in quest.tasks:
                out.append(
                    f"{INDENT * 3}{STATUS_MARKS[nav_task.status]} {nav_task.index + 1}. {nav_task.task.title}"
                )
    out.append("")
    return _lines(*out)


def render_completion(summary: CompletionSummary) -> str:
    if not summary.removed:
        return f"{INDENT}Quest kept. Nothing was removed."
    if summary.all_completed:
        return f"{INDENT}🏆 Quest complete! All {summary.total} tasks done."
    return f"{INDENT}Quest ended early: {summary.completed} of {summary.total} tasks completed."


def render_completion_prompt(summary: CompletionSummary) -> str:
    if summary.all_completed:
        return "All tasks are complete. Finish the quest and remove .quest? [y/N] "
    return (
        f"Only {summary.completed} of {summary.total} tasks are complete. "
        "End the quest anyway and remove .quest? [y/N] "
    )


# -----------------------------------------------------------------------------
# Health / templates
# -----------------------------------------------------------------------------

def _render_environment_line(check: HealthCheck) -> str:
    mark = PASS_MARK if check.ok else WARN_MARK
    return f"{INDENT}{mark} {check.detail}"


def render_health(report: HealthReport) -> str:
    out = [render_header("Quest Health Check")]
    out.extend(render_check_line(c.ok, c.name, c.detail) for c in report.checks)
    out.extend(["", DIVIDER, "", f"{INDENT}Environment Checks:"])
    out.extend(_render_environment_line(c) for c in report.environment)
    out.append("")
    if report.healthy:
        out.append(f"{INDENT}{PASS_MARK} Quest is healthy")
    else:
        out.append(f"{INDENT}{FAIL_MARK} Issues found - run 'quest begin' to start a new quest")
    return _lines(*out)


def render_templates(templates: list[TemplateInfo]) -> str:
    if not templates:
        return f"{INDENT}No templates available."
    out = [f"{INDENT}Available templates:"]
    for info in templates:
        out.append(f"{INDENT}• {info.name} - {info.title} ({info.tasks} tasks, {info.tier.value})")
        if info.description:
            out.append(f"{INDENT * 2}{info.description}")
    return _lines(*out)
