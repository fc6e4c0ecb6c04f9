"""Settings tests."""

from pathlib import Path

from codequest.config import DEFAULT_GENERATOR_TIMEOUT, Settings


class TestSettings:
    def test_defaults(self, workspace):
        settings = Settings.from_env()
        assert settings.quest_dir == Path(".quest")
        assert settings.generator_command == ["copilot"]
        assert settings.generator_timeout == DEFAULT_GENERATOR_TIMEOUT
        assert settings.log_level == "WARNING"

    def test_environment(self, workspace, monkeypatch):
        monkeypatch.setenv("QUEST_DIR", "state")
        monkeypatch.setenv("QUEST_GENERATOR_CMD", "gh copilot suggest")
        monkeypatch.setenv("QUEST_GENERATOR_TIMEOUT", "30")
        monkeypatch.setenv("QUEST_LOG_LEVEL", "debug")
        settings = Settings.from_env()
        assert settings.quest_dir == Path("state")
        assert settings.generator_command == ["gh", "copilot", "suggest"]
        assert settings.generator_timeout == 30.0
        assert settings.log_level == "DEBUG"

    def test_bad_timeout_falls_back(self, workspace, monkeypatch):
        monkeypatch.setenv("QUEST_GENERATOR_TIMEOUT", "soon")
        assert Settings.from_env().generator_timeout == DEFAULT_GENERATOR_TIMEOUT

    def test_dotenv_file(self, workspace, monkeypatch):
        # load_dotenv writes os.environ directly; register the key so it is removed afterwards
        monkeypatch.setenv("QUEST_DIR", "")
        monkeypatch.delenv("QUEST_DIR")
        (workspace / ".env").write_text("QUEST_DIR=from-dotenv\n")
        assert Settings.from_env().quest_dir == Path("from-dotenv")

    def test_environment_wins_over_dotenv(self, workspace, monkeypatch):
        (workspace / ".env").write_text("QUEST_DIR=from-dotenv\n")
        monkeypatch.setenv("QUEST_DIR", "from-env")
        assert Settings.from_env().quest_dir == Path("from-env")
