"""
Rule engine - Evaluate declarative validation rules against the file system.

Rule kinds:
- exists:             a path exists
- glob_count_min:     a shell-style glob matches at least `min` entries
- file_contains_any:  some file matched by a glob contains some regex

Globs select files; `any` entries are regular expressions. The two pattern
languages are deliberately kept apart.

Evaluation is read-only except for the rule's cached `last_state`.
"""

import glob as globlib
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from codequest.errors import MalformedInputError, MalformedPatternError
from codequest.schemas import Rule, RuleOutcome, RuleType

logger = logging.getLogger(__name__)


@dataclass
class RuleResult:
    """Outcome of one rule evaluation."""
    rule: Rule
    passed: bool
    reason: Optional[str] = None  # why it failed, or what was found
    error: Optional[MalformedInputError] = None  # set for configuration errors


# -----------------------------------------------------------------------------
# Glob helpers
# -----------------------------------------------------------------------------

def _check_glob(pattern: str) -> None:
    """
    Reject patterns with a class that is never closed, e.g. 'src/[a-z.go',
    or with a dangling trailing escape.

    Classes follow fnmatch: a leading '!' and then a leading ']' belong to
    the class, so '[!]' is unclosed while '[]]' is not.
    """
    if (len(pattern) - len(pattern.rstrip("\\"))) % 2:
        raise MalformedPatternError(f"syntax error in glob pattern '{pattern}': trailing escape")
    i = 0
    while i < len(pattern):
        if pattern[i] == "[":
            j = i + 1
            if j < len(pattern) and pattern[j] == "!":
                j += 1
            if j < len(pattern) and pattern[j] == "]":
                j += 1
            end = pattern.find("]", j)
            if end == -1:
                raise MalformedPatternError(f"syntax error in glob pattern '{pattern}'")
            i = end
        i += 1


def expand_glob(pattern: str, root: Path) -> list[str]:
    """Matches for a non-recursive glob relative to root, sorted."""
    _check_glob(pattern)
    if Path(pattern).is_absolute():
        return sorted(globlib.glob(pattern))
    return sorted(globlib.glob(pattern, root_dir=root))


# -----------------------------------------------------------------------------
# Rule kinds
# -----------------------------------------------------------------------------

def _check_exists(rule: Rule, root: Path) -> RuleResult:
    if rule.path and (root / rule.path).exists():
        return RuleResult(rule, True, f"found '{rule.path}'")
    return RuleResult(rule, False, f"file '{rule.path}' does not exist")


def _check_glob_count_min(rule: Rule, root: Path) -> RuleResult:
    count = len(expand_glob(rule.glob, root))
    if count < rule.min_count:
        return RuleResult(
            rule, False,
            f"found {count} file(s) matching '{rule.glob}', expected at least {rule.min_count}",
        )
    return RuleResult(rule, True, f"found {count} file(s) matching '{rule.glob}'")


def _compile_patterns(patterns: Iterable[str]) -> list[re.Pattern]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise MalformedPatternError(f"invalid regular expression '{pattern}': {e}") from e
    return compiled


def _check_file_contains_any(rule: Rule, root: Path) -> RuleResult:
    matches = expand_glob(rule.glob, root)
    if not matches:
        return RuleResult(rule, False, f"no files found matching pattern '{rule.glob}'")

    regexes = _compile_patterns(rule.patterns)

    for match in matches:
        file_path = root / match
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Skipping unreadable file {file_path}: {e}")
            continue

        for regex in regexes:
            if regex.search(content):
                return RuleResult(rule, True, f"{match} contains '{regex.pattern}'")

    if len(rule.patterns) == 1:
        return RuleResult(rule, False, f"{rule.glob} doesn't contain: '{rule.patterns[0]}'")
    return RuleResult(rule, False, f"{rule.glob} doesn't contain any of: {rule.patterns}")


_HANDLERS: dict[RuleType, Callable[[Rule, Path], RuleResult]] = {
    RuleType.EXISTS: _check_exists,
    RuleType.GLOB_COUNT_MIN: _check_glob_count_min,
    RuleType.FILE_CONTAINS_ANY: _check_file_contains_any,
}


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def evaluate_rule(rule: Rule, root: Optional[Path] = None) -> RuleResult:
    """
    Evaluate one rule and cache the outcome on the rule.

    Raises:
        InvalidRuleTypeError: rule.type is not a known kind
        MalformedPatternError: the glob or a regex cannot be compiled

    In both cases the rule is marked as failed before the error propagates.
    """
    root = root or Path.cwd()
    try:
        result = _HANDLERS[rule.kind](rule, root)
    except MalformedInputError:
        rule.last_state = RuleOutcome.FAIL
        raise

    rule.last_state = RuleOutcome.PASS if result.passed else RuleOutcome.FAIL
    return result


def evaluate_rules(rules: Iterable[Rule], root: Optional[Path] = None) -> list[RuleResult]:
    """
    Evaluate rules in order. Configuration errors fail only the offending
    rule; the error text becomes its reason.
    """
    results = []
    for rule in rules:
        try:
            result = evaluate_rule(rule, root)
        except MalformedInputError as e:
            logger.warning(f"Rule '{rule.name or rule.type}' is misconfigured: {e}")
            result = RuleResult(rule, False, str(e), error=e)
        results.append(result)
    return results
