"""
Feedback tests: output parsing, prompt building, plan forging.

The generator runs against a fake executor; no external command is spawned.
"""

import json
import sys

import pytest

from codequest.errors import GeneratorError, MalformedInputError, QuestNotFoundError
from codequest.feedback import FeedbackGenerator, make_command_executor, parse_feedback, parse_plan_json
from codequest.schemas import AnnotationKind, Difficulty, ProjectSpec, Rule, RuleOutcome
from codequest.utils import format_prompt, get_available_prompts, load_prompt, missing_prompts

from conftest import PLAN_DATA


class FakeExecutor:
    """Records prompts and answers with a canned response."""

    def __init__(self, response: str = ""):
        self.response = response
        self.prompts = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


class TestParseFeedback:
    def test_grammar(self):
        output = "\n".join([
            "Here are some hints:",
            "main.go:12: // ✗ ERROR: Missing http.ListenAndServe call",
            "  handlers/health.go:3:   //   ✓ GOOD: returns JSON  ",
            "main.go:abc: // not a line number",
            "main.go: // no line",
            "main.go:4: # wrong comment style",
            "",
        ])
        annotations = parse_feedback(output)

        assert [(a.file, a.line, a.comment) for a in annotations] == [
            ("main.go", 12, "✗ ERROR: Missing http.ListenAndServe call"),
            ("handlers/health.go", 3, "✓ GOOD: returns JSON"),
        ]
        assert all(a.kind is None for a in annotations)

    def test_classify(self):
        output = "main.go:1: // ⚠ WARNING: handle errors\nmain.go:2: // tidy\n"
        kinds = [a.kind for a in parse_feedback(output, classify=True)]
        assert kinds == [AnnotationKind.WARNING, AnnotationKind.INFO]

    def test_empty(self):
        assert parse_feedback("") == []


class TestHints:
    def test_attempt_escalates_level(self):
        executor = FakeExecutor("main.go:3: // What happens on empty input?")
        generator = FeedbackGenerator(executor)

        first = generator.generate_hints("Create main", "Write main", ["main.go"], attempt=1)
        generator.generate_hints("Create main", "Write main", ["main.go"], attempt=2)
        generator.generate_hints("Create main", "Write main", ["main.go"], attempt=7)

        assert first[0].line == 3
        assert "MINIMAL" in executor.prompts[0]
        assert "MORE SPECIFIC" in executor.prompts[1]
        assert "DIRECT" in executor.prompts[2]
        assert "attempt #7" in executor.prompts[2]

    def test_prompt_lists_files(self):
        prompt = FeedbackGenerator(FakeExecutor()).build_hint_prompt("T", "O", ["a.go", "b.go"], 1)
        assert "- a.go\n- b.go" in prompt


class TestCheckAnnotations:
    def test_prompt_splits_rules(self):
        rules = [
            Rule(type="exists", name="go.mod exists", last_state=RuleOutcome.PASS),
            Rule(type="exists", last_state=RuleOutcome.FAIL),
        ]
        prompt = FeedbackGenerator(FakeExecutor()).build_check_prompt("Setup", rules, ["main.go"])
        passed, failed = prompt.split("Checks that FAILED:")
        assert "- go.mod exists" in passed
        assert "- Rule 2" in failed

    def test_annotations_are_classified(self):
        executor = FakeExecutor("main.go:5: // ✓ GOOD: Using http.HandleFunc correctly")
        annotations = FeedbackGenerator(executor).generate_check_annotations("Setup", [], ["main.go"])
        assert annotations[0].kind == AnnotationKind.SUCCESS


class TestPlanForging:
    def test_prompt(self):
        spec = ProjectSpec(build_type="cli", difficulty=Difficulty.NORMAL, theme="weather")
        prompt = FeedbackGenerator(FakeExecutor()).build_plan_prompt(spec)
        assert "Build Type: cli" in prompt
        assert "10-20 tasks" in prompt
        assert "weather cli" in prompt

    def test_generate_plan_from_fenced_json(self):
        executor = FakeExecutor("```json\n" + json.dumps(PLAN_DATA) + "\n```")
        plan = FeedbackGenerator(executor).generate_plan(ProjectSpec())
        assert plan.journey.name == "Test Journey"
        assert plan.number_of_tasks == 3

    def test_json_with_chatter(self):
        data = dict(PLAN_DATA, numberOfTasks=0)
        plan = parse_plan_json("Sure! Here is your plan:\n" + json.dumps(data) + "\nEnjoy.")
        assert plan.number_of_tasks == 3

    @pytest.mark.parametrize("output", [
        "I cannot do that.",
        "{\"journey\": {\"name\": \"\"}, \"chapters\": []}",
        "{\"journey\": {\"name\": \"X\"}, \"chapters\": [{\"id\": \"c\", \"title\": \"C\"}]}",
        "{\"chapters\": \"wrong\"}",
    ])
    def test_unusable_output(self, output):
        with pytest.raises(GeneratorError):
            parse_plan_json(output)


class TestExecutor:
    def test_executor_failure_wrapped(self):
        def broken(prompt):
            raise ConnectionError("offline")

        with pytest.raises(GeneratorError, match="offline"):
            FeedbackGenerator(broken).generate_hints("T", "O", ["a.go"], 1)

    def test_missing_command(self):
        run = make_command_executor(["codequest-no-such-generator"])
        with pytest.raises(GeneratorError, match="not found"):
            run("prompt")

    def test_command_receives_prompt_on_stdin(self):
        run = make_command_executor([sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"])
        assert run("hello").strip() == "HELLO"

    def test_nonzero_exit(self):
        run = make_command_executor([sys.executable, "-c", "import sys; sys.exit(3)"])
        with pytest.raises(GeneratorError, match="status 3"):
            run("prompt")


class TestPromptLoader:
    def test_bundled_prompts(self):
        assert get_available_prompts() == ["check_annotations", "hint", "plan"]

    def test_missing_prompt(self):
        with pytest.raises(QuestNotFoundError):
            load_prompt("nope")

    def test_prompt_without_template(self, tmp_path):
        (tmp_path / "bare.yaml").write_text("meta:\n  version: 1\n")
        with pytest.raises(MalformedInputError, match="user_template"):
            load_prompt("bare", prompts_dir=tmp_path)

    def test_custom_directory(self, tmp_path):
        (tmp_path / "greet.yaml").write_text("user_template: 'Hello {name}'\n")
        template = load_prompt("greet", prompts_dir=tmp_path)["user_template"]
        assert format_prompt(template, name="learner") == "Hello learner"
        assert get_available_prompts(tmp_path) == ["greet"]

    def test_placeholder_without_value(self):
        with pytest.raises(MalformedInputError, match="name"):
            format_prompt("Hello {name}")

    def test_missing_required_prompts(self, tmp_path):
        assert missing_prompts() == []
        (tmp_path / "hint.yaml").write_text("user_template: '{task}'\n")
        assert missing_prompts(tmp_path) == ["check_annotations", "plan"]
