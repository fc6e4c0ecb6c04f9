"""Shared fixtures: a small three-task plan and a throwaway learner project."""

import copy

import pytest

from codequest.classroom import ProgressStore, TaskNavigator
from codequest.schemas import Plan


PLAN_DATA = {
    "version": 1,
    "journey": {
        "name": "Test Journey",
        "description": "A tiny Go service",
        "language": "go",
        "focus": ["net/http", "testing"],
    },
    "chapters": [
        {
            "id": "ch-1",
            "title": "Basics",
            "quests": [
                {
                    "id": "q-1",
                    "title": "Setup",
                    "tasks": [
                        {
                            "id": "task-1",
                            "title": "Create main",
                            "objective": "Write a main function",
                            "steps": ["Create main.go", "Add func main()"],
                            "files": ["main.go"],
                            "artifacts": ["main.go"],
                            "validation": {"rules": [
                                {"type": "exists", "name": "main.go exists", "path": "main.go"},
                                {"type": "file_contains_any", "name": "has main func",
                                 "glob": "*.go", "any": ["func main\\("]},
                            ]},
                        },
                        {
                            "id": "task-2",
                            "title": "Add a handler",
                            "files": ["handlers/health.go"],
                            "artifacts": ["handlers/health.go"],
                            "validation": {"rules": [
                                {"type": "glob_count_min", "glob": "handlers/*.go", "min": 1},
                            ]},
                        },
                    ],
                },
            ],
        },
        {
            "id": "ch-2",
            "title": "Testing",
            "quests": [
                {
                    "id": "q-2",
                    "title": "Tests",
                    "tasks": [
                        {
                            "id": "task-3",
                            "title": "Write tests",
                            "files": ["main_test.go"],
                            "artifacts": ["main_test.go"],
                            "validation": {"rules": [
                                {"type": "file_contains_any", "glob": "*_test.go", "any": ["func Test"]},
                            ]},
                        },
                    ],
                },
            ],
        },
    ],
    "numberOfTasks": 3,
}

MAIN_GO = "package main\n\nfunc main() {\n\tprintln(\"hi\")\n}\n"


@pytest.fixture
def plan_data():
    return copy.deepcopy(PLAN_DATA)


@pytest.fixture
def plan(plan_data):
    return Plan.model_validate(plan_data)


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Empty learner project as the working directory, with a clean environment."""
    monkeypatch.chdir(tmp_path)
    for var in ("QUEST_DIR", "QUEST_GENERATOR_CMD", "QUEST_GENERATOR_TIMEOUT", "QUEST_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def store(workspace, plan):
    store = ProgressStore(workspace / ".quest")
    store.init_session(plan)
    return store


@pytest.fixture
def navigator(store, workspace):
    return TaskNavigator(store, workspace)
