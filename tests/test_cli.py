"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from cmdfix.cli import cli

GIT_TYPO_OUTPUT = (
    "git: 'psuh' is not a git command. See 'git --help'.\n"
    "\n"
    "The most similar command is\n"
    "\tpush\n"
)

DOUBLE_RULE = '''
from cmdfix.core.rule import Rule


class DoubleRule(Rule):
    name = "double"

    def is_match(self, command):
        return command.script == "oops"

    def get_new_command(self, command):
        return ["first fix", "second fix"]
'''


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def environ(tmp_path) -> dict[str, str]:
    """An environment pointing at an empty config directory."""
    return {"CMDFIX_CONFIG_DIR": str(tmp_path)}


def invoke(runner: CliRunner, environ: dict[str, str], args: list[str], **kwargs):
    return runner.invoke(cli, args, obj={"environ": environ}, **kwargs)


class TestFix:
    """Test the fix command."""

    def test_yes_prints_best_correction(self, runner, environ) -> None:
        """--yes prints the top correction on stdout."""
        result = invoke(runner, environ, ["fix", "--yes", "-o", GIT_TYPO_OUTPUT, "git", "psuh"])

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "git push"

    def test_confirmation_disabled_in_settings(self, runner, environ) -> None:
        """require_confirmation=false behaves like --yes."""
        environ["CMDFIX_REQUIRE_CONFIRMATION"] = "false"

        result = invoke(runner, environ, ["fix", "-o", GIT_TYPO_OUTPUT, "git", "psuh"])

        assert result.exit_code == 0
        assert "git push" in result.output

    def test_no_corrections(self, runner, environ) -> None:
        """A command nothing can fix exits with 1."""
        result = invoke(runner, environ, ["fix", "--yes", "-o", "total 0", "ls"])

        assert result.exit_code == 1
        assert "No corrections found." in result.output

    def test_output_from_stdin(self, runner, environ) -> None:
        """Without --output the captured output is read from stdin."""
        result = invoke(runner, environ, ["fix", "--yes", "git", "psuh"], input=GIT_TYPO_OUTPUT)

        assert result.exit_code == 0
        assert "git push" in result.output

    def test_excluded_rule(self, runner, environ) -> None:
        """Excluded rules do not contribute."""
        environ["CMDFIX_EXCLUDE_RULES"] = "git_not_command"

        result = invoke(runner, environ, ["fix", "--yes", "-o", GIT_TYPO_OUTPUT, "git", "psuh"])

        assert result.exit_code == 1

    def test_interactive_selection(self, runner, environ, tmp_path) -> None:
        """Keys move the cursor and enter picks the highlighted fix."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "double.py").write_text(DOUBLE_RULE)

        result = invoke(runner, environ, ["fix", "-o", "error", "oops"], input="j\r")

        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "second fix"

    def test_interactive_abort(self, runner, environ, tmp_path) -> None:
        """Escape aborts without printing a script."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "double.py").write_text(DOUBLE_RULE)

        result = invoke(runner, environ, ["fix", "-o", "error", "oops"], input="q")

        assert result.exit_code == 1
        assert result.output.strip().splitlines()[-1] == "Aborted"

    def test_configuration_error(self, runner, environ, tmp_path) -> None:
        """Invalid settings exit with 2 before any rule runs."""
        (tmp_path / "settings.json").write_text("{broken")

        result = invoke(runner, environ, ["fix", "--yes", "-o", GIT_TYPO_OUTPUT, "git", "psuh"])

        assert result.exit_code == 2
        assert "Configuration error" in result.output

    def test_script_required(self, runner, environ) -> None:
        """fix needs a script."""
        result = invoke(runner, environ, ["fix"])

        assert result.exit_code == 2


class TestRules:
    """Test the rules command."""

    def test_lists_builtin_rules(self, runner, environ) -> None:
        """Every built-in rule is listed."""
        result = invoke(runner, environ, ["rules"])

        assert result.exit_code == 0
        for name in ("sudo", "cd_parent", "git_not_command", "no_command", "ssh_known_hosts"):
            assert name in result.output

    def test_lists_user_rules(self, runner, environ, tmp_path) -> None:
        """Rules from the config directory are listed too."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "double.py").write_text(DOUBLE_RULE)

        result = invoke(runner, environ, ["rules"])

        assert "double" in result.output


class TestVersion:
    """Test --version."""

    def test_version(self, runner) -> None:
        """The installed version is reported."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
