"""Tests for config file lookup and parsing."""

import json
from pathlib import Path

import pytest

from llmpal.application.config_loader import find_config_file, load_config
from llmpal.domain.errors import ConfigurationError


@pytest.fixture
def project(tmp_path: Path) -> Path:
    d = tmp_path / "project"
    d.mkdir()
    return d


@pytest.fixture
def home(tmp_path: Path) -> Path:
    d = tmp_path / "home"
    d.mkdir()
    return d


MODELS_YAML = """\
models:
  - code: kimi
    model: moonshotai/kimi-k2
    prompt_cost: 0.6
    completion_cost: 2.5
    provider: groq
rules:
  - Use 4-space indentation
"""


class TestLoadConfig:
    def test_defaults_when_no_file(self, project: Path, home: Path):
        config = load_config(project_root=project, user_home=home)
        assert config.models == []
        assert config.rules == []

    def test_project_yaml(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text(MODELS_YAML, encoding="utf-8")

        config = load_config(project_root=project, user_home=home)

        assert config.models[0].code == "kimi"
        assert config.models[0].provider == "groq"
        assert config.rules == ["Use 4-space indentation"]

    def test_project_wins_over_home_without_merge(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text("rules: [project]\n", encoding="utf-8")
        (home / ".llmpal.yml").write_text(MODELS_YAML, encoding="utf-8")

        config = load_config(project_root=project, user_home=home)

        assert config.rules == ["project"]
        assert config.models == []

    def test_falls_back_to_home(self, project: Path, home: Path):
        (home / ".llmpal.json").write_text(json.dumps({"rules": ["from home"]}), encoding="utf-8")
        assert load_config(project_root=project, user_home=home).rules == ["from home"]

    def test_empty_file_means_defaults(self, project: Path, home: Path):
        (project / ".llmpal.yaml").write_text("", encoding="utf-8")
        assert load_config(project_root=project, user_home=home).models == []

    def test_malformed_yaml(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text("models: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Malformed config file"):
            load_config(project_root=project, user_home=home)

    def test_malformed_json(self, project: Path, home: Path):
        (project / ".llmpal.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Malformed config file"):
            load_config(project_root=project, user_home=home)

    def test_root_must_be_mapping(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_config(project_root=project, user_home=home)

    def test_schema_violation(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text("models:\n  - code: x\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(project_root=project, user_home=home)

    def test_unknown_keys_are_rejected(self, project: Path, home: Path):
        (project / ".llmpal.yml").write_text("rule: [typo]\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(project_root=project, user_home=home)

    def test_home_unavailable_is_skipped(self, project: Path, monkeypatch: pytest.MonkeyPatch):
        def no_home() -> Path:
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.setattr(Path, "home", staticmethod(no_home))
        assert load_config(project_root=project).models == []


class TestFindConfigFile:
    def test_yml_preferred_over_json(self, project: Path):
        (project / ".llmpal.json").write_text("{}")
        (project / ".llmpal.yml").write_text("")
        assert find_config_file(project) == project / ".llmpal.yml"

    def test_none_when_absent(self, project: Path):
        assert find_config_file(project) is None
