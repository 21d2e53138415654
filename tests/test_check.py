"""End-to-end tests for the ``codesync check`` command."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from codesync.check import app
from codesync.main import app as main_app

runner = CliRunner()


def _write(root: Path, rel: str, content: str) -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding="utf-8")
    return p


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestCheckCommand:
    def test_clean_tree(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(init, 2)\n")
        _write(project, "b.py", "# CODESYNC(init, 2)\n")
        result = runner.invoke(app, [str(project)])
        assert result.exit_code == 0, result.output
        assert "0 problems" in result.output

    def test_missing_partner(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(init, 2)\n")
        result = runner.invoke(app, [str(project)])
        assert result.exit_code == 1
        assert "expected 2 comments with label `init`, found 1" in result.output
        assert "a.py:1:3" in result.output

    def test_disagreement(self, project: Path) -> None:
        for name, count in (("a.py", 2), ("b.py", 2), ("c.py", 3)):
            _write(project, name, f"# CODESYNC(init, {count})\n")
        result = runner.invoke(app, [str(project)])
        assert result.exit_code == 1
        assert "must have the same count" in result.output

    def test_case_option(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(Foo_Bar, 1)\n")
        result = runner.invoke(app, [str(project), "--case", "snake"])
        assert result.exit_code == 1
        assert "foo_bar" in result.output

    def test_case_from_config(self, project: Path) -> None:
        _write(project, "codesync.toml", 'case_style = "snake"\n')
        _write(project, "a.py", "# CODESYNC(Foo_Bar, 1)\n")
        result = runner.invoke(app, [str(project), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["findings"][0]["code"] == "casing"
        assert data["findings"][0]["suggestion"] == "foo_bar"

    def test_option_overrides_config(self, project: Path) -> None:
        _write(project, "codesync.toml", 'case_style = "snake"\n')
        _write(project, "a.py", "# CODESYNC(FooBar, 1)\n")
        result = runner.invoke(app, [str(project), "--case", "pascal"])
        assert result.exit_code == 0, result.output

    def test_json_output(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC oops\n")
        result = runner.invoke(app, [str(project), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["passed"] is False
        assert data["stopped_after"] == "invalid"
        assert data["findings"][0]["locations"][0]["start"] == 2

    def test_strict_whitespace(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC( x , 1)\n")
        assert runner.invoke(app, [str(project)]).exit_code == 0
        result = runner.invoke(app, [str(project), "--strict-whitespace"])
        assert result.exit_code == 1

    def test_label_pattern(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(UPPER, 1)\n")
        result = runner.invoke(app, [str(project), "--label-pattern", "[a-z]+"])
        assert result.exit_code == 1

    def test_summary_table(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(init)\n# CODESYNC(init)\n")
        result = runner.invoke(app, [str(project), "--summary"])
        assert result.exit_code == 0
        assert "Labels" in result.output

    def test_gitignore_respected(self, project: Path) -> None:
        _write(project, ".gitignore", "build/\n")
        _write(project, "build/gen.py", "# CODESYNC(orphan)\n")
        assert runner.invoke(app, [str(project)]).exit_code == 0
        assert runner.invoke(app, [str(project), "--no-gitignore"]).exit_code == 1

    def test_bad_case_style_is_config_error(self, project: Path) -> None:
        result = runner.invoke(app, [str(project), "--case", "sponge"])
        assert result.exit_code == 2

    def test_bad_config_file(self, project: Path) -> None:
        _write(project, "codesync.toml", "mystery = 1\n")
        result = runner.invoke(app, [str(project)])
        assert result.exit_code == 2

    def test_options_before_path(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(FooBar, 1)\n")
        result = runner.invoke(app, ["--case", "snake", "--json", str(project)])
        assert result.exit_code == 1, result.output
        assert json.loads(result.output)["findings"][0]["suggestion"] == "foo_bar"

    def test_mistyped_config_value_is_config_error(self, project: Path) -> None:
        _write(project, "codesync.toml", "case_style = 3\n")
        result = runner.invoke(app, [str(project), "--json"])
        assert result.exit_code == 2
        assert "case_style must be a string" in json.loads(result.output)["error"]

    def test_missing_path(self, project: Path) -> None:
        result = runner.invoke(app, [str(project / "nope")])
        assert result.exit_code == 1


class TestMainApp:
    def test_check_subcommand(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(x)\n# CODESYNC(x)\n")
        result = runner.invoke(main_app, ["check", str(project)])
        assert result.exit_code == 0, result.output

    def test_check_subcommand_with_options(self, project: Path) -> None:
        _write(project, "a.py", "# CODESYNC(Foo_Bar, 1)\n")
        result = runner.invoke(main_app, ["check", str(project), "--case", "snake"])
        assert result.exit_code == 1, result.output
        assert "foo_bar" in result.output

    def test_version(self) -> None:
        result = runner.invoke(main_app, ["--version"])
        assert result.exit_code == 0
        assert "codesync" in result.output
