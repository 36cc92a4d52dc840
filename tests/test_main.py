from typer.testing import CliRunner
from unittest.mock import MagicMock, patch
from pathlib import Path
import pytest

from stack_restart_cli.main import app

runner = CliRunner()


class TestTyperAppConfiguration:
    """Test the Typer app configuration and setup."""

    def test_app_has_correct_help_text(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Restart or update the services of a Docker Compose stack." in result.stdout

    def test_app_completion_disabled(self):
        """Test that command completion is disabled."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--install-completion" not in result.stdout
        assert "--show-completion" not in result.stdout


class TestCommandRegistration:
    """Test that all commands are properly registered."""

    def test_all_commands_are_registered(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        commands_section = result.stdout.split("Commands")[1]
        for command in ["restart", "update", "services"]:
            assert command in commands_section

    @pytest.mark.parametrize("command, flag", [
        ("restart", "--only"),
        ("restart", "--except"),
        ("restart", "--running"),
        ("restart", "--full"),
        ("restart", "--pull"),
        ("restart", "--no-mount-check"),
        ("restart", "--dry-run"),
        ("update", "--prune"),
        ("services", "--only"),
    ])
    def test_command_flags_listed_in_help(self, command, flag):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert flag in result.stdout


class TestMainCallback:
    """Test the main callback function behavior."""

    @patch('stack_restart_cli.main.AppContext')
    def test_verbose_flag_false_by_default(self, MockAppContext, mock_app_context):
        MockAppContext.return_value = mock_app_context

        result = runner.invoke(app, ["services"])

        MockAppContext.assert_called_once_with(verbose=False, env_file=None)
        assert result.exit_code == 0

    @patch('stack_restart_cli.main.AppContext')
    def test_verbose_short_flag(self, MockAppContext, mock_app_context):
        MockAppContext.return_value = mock_app_context

        result = runner.invoke(app, ["-v", "services"])

        MockAppContext.assert_called_once_with(verbose=True, env_file=None)
        assert result.exit_code == 0

    @patch('stack_restart_cli.main.AppContext')
    def test_env_file_is_passed_through(self, MockAppContext, mock_app_context, tmp_path):
        MockAppContext.return_value = mock_app_context
        env_file = tmp_path / "stack.env"

        result = runner.invoke(app, ["--env-file", str(env_file), "services"])

        MockAppContext.assert_called_once_with(verbose=False, env_file=Path(env_file))
        assert result.exit_code == 0


class TestAppContextInitializationErrors:
    """Test error handling during AppContext initialization."""

    @patch('stack_restart_cli.main.AppContext')
    def test_app_context_initialization_with_sys_exit(self, MockAppContext):
        """AppContext exits with status 1 when it cannot initialize."""
        MockAppContext.side_effect = SystemExit(1)

        result = runner.invoke(app, ["restart"])

        assert result.exit_code == 1
        MockAppContext.assert_called_once_with(verbose=False, env_file=None)

    @patch('stack_restart_cli.main.AppContext')
    def test_unknown_command_never_builds_context(self, MockAppContext):
        MockAppContext.return_value = MagicMock()

        result = runner.invoke(app, ["reboot"])

        assert result.exit_code != 0
        MockAppContext.assert_not_called()
