"""E2E test: init -> write features -> generate -> inspect patterns."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from stepforge.cli import cli
from stepforge.config import load_config, save_config
from stepforge.models import ProjectConfig

pytestmark = pytest.mark.e2e


class TestInitAndGenerate:
    def test_init_to_generate(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, login_feature: str,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()

        # Step 1: init
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "Initialized stepforge project." in result.output
        assert "Detected output target: behave" in result.output
        assert (tmp_path / "features").is_dir()

        # Step 2: write a feature
        (tmp_path / "features" / "login.feature").write_text(login_feature)

        # Step 3: generate
        result = runner.invoke(cli, ["generate"])
        assert result.exit_code == 0, result.output
        assert "login_steps.py (3 step(s))" in result.output

        code = (tmp_path / "features" / "steps" / "login_steps.py").read_text()
        assert 'use_step_matcher("re")' in code
        assert "@given(" in code
        assert "@when(" in code
        assert "@then(" in code
        assert "NotImplementedError" not in code
        compile(code, "login_steps.py", "exec")

    def test_init_detects_pytest_bdd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "requirements.txt").write_text("pytest-bdd\nfastapi\n")
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 0
        config = load_config(tmp_path)
        assert config.output_target == "pytest-bdd"
        assert config.execution_target == "component"

    def test_reinit_preserves_features(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch, login_feature: str,
    ) -> None:
        monkeypatch.chdir(initialized_project)
        feature = initialized_project / "features" / "login.feature"
        feature.write_text(login_feature)
        result = CliRunner().invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "already initialized" in result.output
        assert feature.read_text() == login_feature

    def test_pytest_bdd_file_naming(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch, login_feature: str,
    ) -> None:
        monkeypatch.chdir(initialized_project)
        (initialized_project / "features" / "login.feature").write_text(login_feature)
        result = CliRunner().invoke(cli, ["generate", "--output-target", "pytest-bdd"])
        assert result.exit_code == 0, result.output

        code = (initialized_project / "features" / "steps" / "test_login_steps.py").read_text()
        assert 'scenarios("../login.feature")' in code
        assert "@pytest.fixture" in code
        compile(code, "test_login_steps.py", "exec")

    def test_no_features(self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(initialized_project)
        result = CliRunner().invoke(cli, ["generate"])
        assert result.exit_code == 0
        assert "No feature files found" in result.output


class TestGenerateReporting:
    def test_stdout_and_unmatched(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch, checkout_feature: str,
    ) -> None:
        monkeypatch.chdir(initialized_project)
        feature = initialized_project / "features" / "checkout.feature"
        feature.write_text(checkout_feature)

        result = CliRunner().invoke(cli, ["generate", "--stdout", str(feature)])
        assert result.exit_code == 0, result.output
        assert "import json" in result.output
        assert "I perform an unsupported ritual (no pattern)" in result.output
        assert "1 step(s) need a pattern" in result.output
        assert not (initialized_project / "features" / "steps").exists()

    def test_component_target(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch, login_feature: str,
    ) -> None:
        monkeypatch.chdir(initialized_project)
        (initialized_project / "features" / "login.feature").write_text(login_feature)
        result = CliRunner().invoke(
            cli, ["generate", "--stdout", "--execution-target", "component"],
        )
        assert result.exit_code == 0
        assert "context.page" not in result.output
        assert "playwright" not in result.output.split('"""', 2)[2]

    def test_group_by_kind_flag(
        self, initialized_project: Path, monkeypatch: pytest.MonkeyPatch, checkout_feature: str,
    ) -> None:
        monkeypatch.chdir(initialized_project)
        (initialized_project / "features" / "checkout.feature").write_text(checkout_feature)
        result = CliRunner().invoke(cli, ["generate", "--stdout", "--group-by-kind"])
        assert result.exit_code == 0
        out = result.output
        assert out.rindex("@given(") < out.index("@when(")
        assert out.rindex("@when(") < out.index("@then(")

    def test_invalid_output_target(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["generate", "--output-target", "jest"])
        assert result.exit_code == 2

    def test_invalid_config_value(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, login_feature_file: Path,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        save_config(ProjectConfig(output_target="cucumber"), tmp_path)
        result = CliRunner().invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "config.json" in result.output

    def test_broken_catalog(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, login_feature_file: Path,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "bad.yaml").write_text("steps:\n  - key: x\n")
        save_config(ProjectConfig(pattern_files=["bad.yaml"]), tmp_path)
        result = CliRunner().invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "missing required key" in result.output


class TestInspectCommands:
    def test_step(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["step", 'I click the "Save" button'])
        assert result.exit_code == 0
        assert result.output.startswith("@when(")
        assert "Save" in result.output

    def test_step_keyword_and_warning(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(
            cli, ["step", "I perform an unsupported ritual", "--keyword", "then",
                  "--output-target", "plain"],
        )
        assert result.exit_code == 0
        assert "# Then: I perform an unsupported ritual" in result.output
        assert "Warning: no step pattern matched" in result.output

    def test_extract(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, login_feature_file: Path) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["extract", str(login_feature_file)])
        assert result.exit_code == 0
        assert "Given  a user exists" in result.output
        assert "3 step(s)" in result.output

    def test_extract_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, login_feature_file: Path) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["extract", "--json", str(login_feature_file)])
        data = json.loads(result.output)
        assert [s["line"] for s in data] == [4, 5, 6]

    def test_patterns_table_and_tag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["patterns"])
        assert result.exit_code == 0
        assert result.output.startswith("click-button")
        result = runner.invoke(cli, ["patterns", "--tag", "menu", "--format", "json"])
        assert [p["key"] for p in json.loads(result.output)] == ["open-menu", "click-menu-item"]

    def test_patterns_markdown_includes_project_catalog(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, pattern_catalog: Path,
    ) -> None:
        monkeypatch.chdir(tmp_path)
        save_config(ProjectConfig(pattern_files=[pattern_catalog.name]), tmp_path)
        result = CliRunner().invoke(cli, ["patterns", "--format", "markdown", "--tag", "custom"])
        assert result.exit_code == 0
        assert result.output.startswith("# Step patterns")
        assert "open-team-dashboard" in result.output
        assert "archive-project" in result.output

    def test_search(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["search", "checkbox", "--limit", "1", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 1
        assert "checkbox" in data[0]["key"]

    def test_search_no_hits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["search", "zzzz"])
        assert "No patterns match" in result.output
