"""
quest - Command-line entry point.

Usage:
    quest begin [--template NAME | --forge ... | --surprise] [--list]
    quest next [--yes]
    quest check [--annotate]
    quest jump-to N | --last-complete
    quest explain
    quest summary
    quest health
    quest complete [--yes]

Output goes through `print_fn` and confirmations through `input_fn`, so the
whole surface can be driven from tests.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from codequest import __version__
from codequest.classroom import (
    ProgressStore,
    TaskNavigator,
    TemplateCatalog,
    random_template,
    run_health_check,
    select_template_for_spec,
    surprise_spec,
)
from codequest.config import Settings
from codequest.errors import (
    ConsistencyError,
    GeneratorError,
    MalformedInputError,
    NoCompletedTasksError,
    QuestError,
    QuestIOError,
    QuestNotFoundError,
    SessionExistsError,
    TaskIndexError,
)
from codequest.feedback import Executor, FeedbackGenerator, make_command_executor
from codequest.schemas import Difficulty, ProjectSpec
from codequest.viewer import (
    Spinner,
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

logger = logging.getLogger(__name__)

PrintFn = Callable[[str], None]
InputFn = Callable[[str], str]

# Shown under the error message, most specific class first
ERROR_TIPS = (
    (SessionExistsError, "Run 'quest complete' to end the current quest first"),
    (QuestNotFoundError, "Run 'quest begin' to start a new quest"),
    (TaskIndexError, "Run 'quest summary' to see task numbers"),
    (NoCompletedTasksError, "Run 'quest check' to complete a task first"),
    (ConsistencyError, "Run 'quest health' to inspect the .quest folder"),
    (MalformedInputError, "Check the .quest files or the rule definitions"),
    (GeneratorError, "Set QUEST_GENERATOR_CMD or run 'quest health'"),
    (QuestIOError, "Check file permissions"),
)


def tip_for(error: QuestError) -> Optional[str]:
    for error_type, tip in ERROR_TIPS:
        if isinstance(error, error_type):
            return tip
    return None


def is_yes(answer: str) -> bool:
    return answer.strip().lower() in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quest",
        description="Learn by building: guided coding tasks with file-based checks and inline hints.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start from a bundled template
  quest begin --template go-web-api

  # Let the generator forge a plan (falls back to a template on failure)
  quest begin --forge --build-type cli --difficulty normal --theme weather

  # Let chance pick what to build
  quest begin --surprise

  # Day-to-day loop
  quest next
  quest check --annotate
  quest explain
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress at INFO level (default: QUEST_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--quest-dir",
        type=Path,
        default=None,
        help="Session directory (default: QUEST_DIR or .quest)",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    begin = sub.add_parser("begin", help="Start a new quest")
    begin.add_argument("--list", action="store_true", help="List bundled templates and exit")
    begin.add_argument("--template", help="Template name (default: go-web-api)")
    begin.add_argument("--forge", action="store_true", help="Generate a custom plan with the feedback generator")
    begin.add_argument("--surprise", action="store_true", help="Forge a plan for a random build type, difficulty and theme")
    begin.add_argument("--build-type", default="service", help="What to build when forging (default: service)")
    begin.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.QUICK.value,
        help="Plan size when forging (default: quick)",
    )
    begin.add_argument("--theme", default=None, help="Domain theme when forging, e.g. 'weather'")
    begin.add_argument("--language", default="go", help="Target language when forging (default: go)")
    begin.add_argument("--description", default="", help="Free-form notes for the forged plan")

    next_cmd = sub.add_parser("next", help="Move to the next task")
    next_cmd.add_argument("-y", "--yes", action="store_true", help="Continue even if the last check failed")

    check = sub.add_parser("check", help="Validate the current task")
    check.add_argument(
        "-a", "--annotate",
        action="store_true",
        help="Add inline comments to code showing check results",
    )

    jump = sub.add_parser("jump-to", help="Jump to a task by number")
    jump.add_argument("task_number", nargs="?", type=int, help="1-based task number")
    jump.add_argument("-l", "--last-complete", action="store_true", help="Jump to the last completed task")

    sub.add_parser("explain", help="Insert hints for the current task into its files")
    sub.add_parser("summary", help="Show progress through the quest")
    sub.add_parser("health", help="Check the quest folder and environment")

    complete = sub.add_parser("complete", help="Finish the quest and remove .quest")
    complete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    return parser


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

class QuestCLI:
    """One CLI invocation: settings, IO hooks and the generator."""

    def __init__(
        self,
        settings: Settings,
        print_fn: PrintFn = print,
        input_fn: InputFn = input,
        executor: Optional[Executor] = None,
        root: Optional[Path] = None,
    ):
        self.settings = settings
        self.print = print_fn
        self.input = input_fn
        self.root = Path(root) if root else Path.cwd()
        self.store = ProgressStore(settings.quest_dir)
        self._executor = executor

    def generator(self, message: str) -> FeedbackGenerator:
        """Generator whose calls show a spinner on an interactive terminal."""
        executor = self._executor or make_command_executor(
            self.settings.generator_command,
            timeout=self.settings.generator_timeout,
        )
        if not sys.stderr.isatty():
            return FeedbackGenerator(executor)

        def spinning(prompt: str) -> str:
            with Spinner(message):
                return executor(prompt)

        return FeedbackGenerator(spinning)

    def navigator(self) -> TaskNavigator:
        return TaskNavigator(self.store, self.root)

    def begin(self, args) -> int:
        catalog = TemplateCatalog()
        if args.list:
            self.print(render_templates(catalog.list_templates()))
            return 0

        if self.store.exists():
            raise SessionExistsError(f"Quest already started: {self.store.quest_dir} exists")

        self.print(render_header("Starting a new quest"))
        if args.surprise:
            plan = self._surprise(catalog)
        elif args.forge:
            spec = ProjectSpec(
                build_type=args.build_type,
                difficulty=Difficulty(args.difficulty),
                theme=args.theme,
                description=args.description,
                language=args.language,
                template=args.template,
            )
            try:
                plan = self.generator("AI forging your custom quest").generate_plan(spec)
                self.print(f"  Quest forged! {spec.build_type} {spec.difficulty.value} with {plan.number_of_tasks} tasks")
            except GeneratorError as e:
                name = select_template_for_spec(spec, catalog.names())
                logger.warning(f"Plan generation failed: {e}")
                self.print(f"  ⚠  AI plan generation failed ({e}). Falling back to template '{name}'.")
                plan = catalog.load(name)
        else:
            name = args.template or select_template_for_spec(None)
            plan = catalog.load(name)

        self.store.init_session(plan)
        self.print(f"  {plan.journey.name}: {plan.number_of_tasks} tasks")
        self.print("  Run 'quest next' to see your first task.")
        return 0

    def _surprise(self, catalog: TemplateCatalog):
        spec = surprise_spec()
        self.print(
            f"  🎲 Surprise! Building a {spec.build_type} ({spec.difficulty.value} difficulty) with theme: {spec.theme}"
        )
        try:
            plan = self.generator("AI crafting your mystery quest").generate_plan(spec)
        except GeneratorError as e:
            logger.warning(f"Plan generation failed: {e}")
            self.print(f"  ⚠  AI generation failed ({e}). Using random template instead.")
            return catalog.load(random_template(catalog.names()))
        self.print(f"  Mystery quest revealed! {plan.number_of_tasks} tasks await you")
        return plan

    def next(self, args) -> int:
        nav = self.navigator()
        if nav.needs_confirmation and not args.yes:
            self.print("  ⚠  The previous check didn't pass.")
            if not is_yes(self.input("Are you sure you want to continue without passing the check? (y/N): ")):
                self.print("  Run 'quest check' to validate your progress first.")
                return 0
        result = nav.advance()
        self.print(render_advance(result, nav.total_tasks))
        return 0

    def check(self, args) -> int:
        nav = self.navigator()
        report = nav.check()
        self.print(render_check_report(report))
        if args.annotate:
            feedback = nav.annotate_check(self.generator("Reviewing your code").generate_check_annotations)
            self.print(render_feedback(feedback))
        return 0

    def jump_to(self, args) -> int:
        nav = self.navigator()
        if args.last_complete:
            task = nav.jump_to_last_completed()
        elif args.task_number is None:
            raise TaskIndexError("Missing task index. Usage: quest jump-to <task-number>")
        else:
            task = nav.jump_to(args.task_number - 1)
        self.print(render_task(task, nav.current_index, nav.total_tasks))
        return 0

    def explain(self, args) -> int:
        nav = self.navigator()
        feedback = nav.explain(self.generator("Thinking about hints").generate_hints)
        self.print(f"  Hint level {min(feedback.attempt, 3)}")
        self.print(render_feedback(feedback))
        return 0

    def summary(self, args) -> int:
        nav = self.navigator()
        self.print(render_summary(nav.get_progress_summary(), nav.get_navigation_tree()))
        return 0

    def health(self, args) -> int:
        report = run_health_check(self.store, self.settings, self.root)
        self.print(render_health(report))
        return 0 if report.healthy else 1

    def complete(self, args) -> int:
        nav = self.navigator()

        def confirm(summary) -> bool:
            return args.yes or is_yes(self.input(render_completion_prompt(summary)))

        self.print(render_completion(nav.complete(confirm)))
        return 0


COMMANDS = {
    "begin": QuestCLI.begin,
    "next": QuestCLI.next,
    "check": QuestCLI.check,
    "jump-to": QuestCLI.jump_to,
    "explain": QuestCLI.explain,
    "summary": QuestCLI.summary,
    "health": QuestCLI.health,
    "complete": QuestCLI.complete,
}


def main(
    argv: Optional[Sequence[str]] = None,
    print_fn: PrintFn = print,
    input_fn: InputFn = input,
    executor: Optional[Executor] = None,
) -> int:
    """Run one command; returns the process exit code."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    if args.quest_dir is not None:
        settings.quest_dir = args.quest_dir

    logging.basicConfig(
        level=logging.INFO if args.verbose else getattr(logging, settings.log_level, logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    cli = QuestCLI(settings, print_fn=print_fn, input_fn=input_fn, executor=executor)
    try:
        return COMMANDS[args.command](cli, args)
    except QuestError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print_fn(render_error(str(e), tip_for(e)))
        return 1


def main_entry():
    sys.exit(main())
