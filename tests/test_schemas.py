"""
Schema validation tests for codequest.

Tests the Pydantic models for plans, progress and annotations.
"""

import json

import pytest
from pydantic import ValidationError

from codequest.errors import InvalidRuleTypeError
from codequest.schemas import (
    # Plan
    RuleType,
    RuleOutcome,
    Rule,
    Plan,
    # Progress
    CheckStatus,
    CheckResult,
    QuestState,
    # Annotation
    AnnotationKind,
    Annotation,
    classify_comment,
    # Project
    Difficulty,
    ProjectSpec,
    TemplateInfo,
)


class TestRuleSchema:
    """Test rule parsing and kind dispatch."""

    def test_wire_aliases(self):
        rule = Rule.model_validate({"type": "glob_count_min", "glob": "*.go", "min": 2, "lastState": "pass"})
        assert rule.min_count == 2
        assert rule.last_state == RuleOutcome.PASS
        assert rule.kind == RuleType.GLOB_COUNT_MIN

    def test_patterns_alias(self):
        rule = Rule.model_validate({"type": "file_contains_any", "glob": "*.go", "any": ["a", "b"]})
        assert rule.patterns == ["a", "b"]

    def test_unknown_type_loads_but_has_no_kind(self):
        rule = Rule(type="file_size_max")
        with pytest.raises(InvalidRuleTypeError, match="file_size_max"):
            rule.kind

    def test_display_name(self):
        assert Rule(type="exists", name="go.mod exists").display_name(0) == "go.mod exists"
        assert Rule(type="exists").display_name(2) == "Rule 3"

    def test_dump_uses_wire_names(self):
        rule = Rule(type="file_contains_any", glob="*.go", patterns=["x"], last_state=RuleOutcome.FAIL)
        dumped = rule.model_dump(by_alias=True)
        assert dumped["any"] == ["x"]
        assert dumped["lastState"] == "fail"
        assert "min" in dumped


class TestPlanSchema:
    """Test the curriculum tree."""

    def test_flatten_order(self, plan):
        assert [t.id for t in plan.flatten_tasks()] == ["task-1", "task-2", "task-3"]

    def test_count_matches_after_normalization(self, plan_data):
        plan_data["numberOfTasks"] = 99
        plan = Plan.model_validate(plan_data)
        assert plan.number_of_tasks == 99
        assert plan.normalized().number_of_tasks == len(plan.flatten_tasks()) == 3

    def test_duplicate_task_ids_rejected(self, plan_data):
        plan_data["chapters"][1]["quests"][0]["tasks"][0]["id"] = "task-1"
        with pytest.raises(ValidationError):
            Plan.model_validate(plan_data)

    def test_is_acceptable(self, plan):
        assert plan.is_acceptable()
        assert not Plan(chapters=plan.chapters).is_acceptable()
        assert not Plan.model_validate({"journey": {"name": "X"}, "chapters": []}).is_acceptable()

    def test_locate(self, plan):
        assert plan.locate(0) == (0, 0)
        assert plan.locate(1) == (0, 0)
        assert plan.locate(2) == (1, 0)
        assert plan.locate(3) is None

    def test_to_json_camel_case(self, plan):
        data = json.loads(plan.to_json())
        assert data["numberOfTasks"] == 3
        rule = data["chapters"][0]["quests"][0]["tasks"][1]["validation"]["rules"][0]
        assert rule["min"] == 1


class TestProgressSchema:
    """Test learner state."""

    def test_defaults(self):
        state = QuestState()
        assert state.current_task_index == 0
        assert state.completed_task_ids == []
        assert state.last_check is None
        assert state.quest_started is False
        assert state.explain_count == 0

    def test_mark_completed_is_a_set(self):
        state = QuestState()
        assert state.mark_completed("task-1")
        assert not state.mark_completed("task-1")
        assert state.completed_task_ids == ["task-1"]

    def test_round_trip_wire_names(self):
        state = QuestState(
            current_task_index=2,
            quest_started=True,
            last_check=CheckResult(task_id=2, status=CheckStatus.FAIL, message="Some validations failed"),
        )
        data = json.loads(state.to_json())
        assert data["currentTaskIndex"] == 2
        assert data["lastCheck"]["taskId"] == 2
        assert data["lastCheck"]["status"] == "fail"
        assert QuestState.model_validate(data) == state

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            CheckResult(task_id=0, status="maybe")


class TestAnnotationSchema:
    """Test comment classification."""

    @pytest.mark.parametrize("comment,kind", [
        ("✓ GOOD: Using http.HandleFunc correctly", AnnotationKind.SUCCESS),
        ("✗ ERROR: Missing http.ListenAndServe", AnnotationKind.ERROR),
        ("⚠ WARNING: Consider error handling", AnnotationKind.WARNING),
        ("Nice variable names", AnnotationKind.INFO),
    ])
    def test_classify_comment(self, comment, kind):
        assert classify_comment(comment) == kind

    def test_hint_has_no_kind(self):
        assert Annotation(file="main.go", line=3, comment="hint").kind is None


class TestProjectSchema:
    """Test project spec and catalog entries."""

    def test_spec_defaults(self):
        spec = ProjectSpec()
        assert spec.build_type == "service"
        assert spec.difficulty == Difficulty.QUICK
        assert spec.language == "go"

    def test_template_info_rejects_negative_tasks(self):
        with pytest.raises(ValidationError):
            TemplateInfo(name="x", title="X", tasks=-1)
