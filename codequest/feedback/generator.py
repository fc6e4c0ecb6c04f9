"""
Feedback generator - Ask an external AI command for hints, reviews and plans.

The command (default: `copilot`) receives the rendered prompt on stdin and
answers on stdout. Prompt text lives in YAML templates under prompts/.
Tests inject an executor instead of spawning a process.
"""

import json
import logging
import re
import subprocess
from typing import Callable, Optional, Sequence

from pydantic import ValidationError

from codequest.config import DEFAULT_GENERATOR_CMD, DEFAULT_GENERATOR_TIMEOUT
from codequest.errors import GeneratorError
from codequest.schemas import Annotation, Plan, ProjectSpec, Rule, RuleOutcome
from codequest.utils.prompt_loader import format_prompt, load_prompt

from .parser import parse_feedback

logger = logging.getLogger(__name__)

# prompt -> raw output
Executor = Callable[[str], str]

CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n```\s*$", re.DOTALL)


def make_command_executor(
    command: Optional[Sequence[str]] = None,
    timeout: float = DEFAULT_GENERATOR_TIMEOUT,
) -> Executor:
    """Executor that pipes the prompt to an external command."""
    argv = list(command or [DEFAULT_GENERATOR_CMD])

    def run(prompt: str) -> str:
        logger.info(f"Running generator: {' '.join(argv)}")
        try:
            completed = subprocess.run(
                argv,
                input=prompt,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError:
            raise GeneratorError(f"generator command '{argv[0]}' not found") from None
        except subprocess.TimeoutExpired:
            raise GeneratorError(f"generator command '{argv[0]}' timed out after {timeout:.0f}s") from None

        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise GeneratorError(
                f"generator command '{argv[0]}' exited with status {completed.returncode}"
                + (f": {stderr}" if stderr else "")
            )
        return completed.stdout

    return run


class FeedbackGenerator:
    """Build prompts, call the executor, parse the answer."""

    def __init__(self, executor: Optional[Executor] = None):
        self.executor = executor or make_command_executor()

    def _call(self, prompt: str) -> str:
        try:
            return self.executor(prompt)
        except GeneratorError:
            raise
        except Exception as e:
            raise GeneratorError(f"generator failed: {e}") from e

    # -------------------------------------------------------------------------
    # Hints (explain)
    # -------------------------------------------------------------------------

    def build_hint_prompt(self, task: str, objective: str, files: list[str], attempt: int) -> str:
        template = load_prompt("hint")
        levels = template["levels"]
        level = levels[min(max(attempt, 1), len(levels)) - 1]
        return format_prompt(
            template["user_template"],
            task=task,
            objective=objective,
            file_list="\n- ".join(files),
            attempt=attempt,
            level=level["name"],
            guidance=level["guidance"],
            max_hints=level["max_hints"],
        )

    def generate_hints(self, task: str, objective: str, files: list[str], attempt: int) -> list[Annotation]:
        """Hints for the current task; the attempt number escalates directness."""
        output = self._call(self.build_hint_prompt(task, objective, files, attempt))
        return parse_feedback(output)

    # -------------------------------------------------------------------------
    # Check annotations (check --annotate)
    # -------------------------------------------------------------------------

    def build_check_prompt(self, task: str, rules: list[Rule], files: list[str]) -> str:
        passed = []
        failed = []
        for position, rule in enumerate(rules):
            entry = f"- {rule.display_name(position)}"
            if rule.last_state == RuleOutcome.PASS:
                passed.append(entry)
            else:
                failed.append(entry)

        return format_prompt(
            load_prompt("check_annotations")["user_template"],
            task=task,
            file_list="\n- ".join(files),
            passed_list="\n".join(passed) or "(none)",
            failed_list="\n".join(failed) or "(none)",
        )

    def generate_check_annotations(self, task: str, rules: list[Rule], files: list[str]) -> list[Annotation]:
        """Review comments for the current task, each classified by severity."""
        output = self._call(self.build_check_prompt(task, rules, files))
        return parse_feedback(output, classify=True)

    # -------------------------------------------------------------------------
    # Plans (begin --forge)
    # -------------------------------------------------------------------------

    def build_plan_prompt(self, spec: ProjectSpec) -> str:
        template = load_prompt("plan")
        task_range = template["task_ranges"][spec.difficulty.value]
        theme_context = ""
        if spec.theme:
            theme_context = (
                f"\n- Theme: {spec.theme} - incorporate this domain into the project "
                f"(e.g., build a {spec.theme} {spec.build_type})"
            )
        description_context = f"\n- Notes: {spec.description}" if spec.description else ""
        return format_prompt(
            template["user_template"],
            build_type=spec.build_type,
            difficulty=spec.difficulty.value,
            task_range=task_range,
            theme_context=theme_context,
            language=spec.language,
            description_context=description_context,
        )

    def generate_plan(self, spec: ProjectSpec) -> Plan:
        """Forge a plan; raises GeneratorError if the answer is not a usable plan."""
        output = self._call(self.build_plan_prompt(spec))
        return parse_plan_json(output)


def parse_plan_json(output: str) -> Plan:
    """Parse a plan document from generator output, tolerating code fences."""
    text = output.strip()
    fenced = CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    else:
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]

    try:
        plan = Plan.model_validate(json.loads(text))
    except json.JSONDecodeError as e:
        raise GeneratorError(f"generated plan is not valid JSON: {e}") from e
    except ValidationError as e:
        raise GeneratorError(f"generated plan does not match the plan schema: {e}") from e

    if not plan.is_acceptable() or plan.count_tasks() == 0:
        raise GeneratorError("generated plan has no journey name or no tasks")
    return plan.normalized()
