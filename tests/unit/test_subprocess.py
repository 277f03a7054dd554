"""Tests for subprocess wrapper with rich error context."""

import subprocess
from unittest.mock import Mock, patch

import pytest

from mise_nix.core.subprocess_utils import combined_output, run_subprocess_with_context


def test_success_case_returns_completed_process() -> None:
    """Test that successful subprocess execution returns CompletedProcess."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "/nix/store/abc-hello\n"
        mock_result.stderr = ""
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["nix", "build", "nixpkgs#hello"],
            operation_context="build nixpkgs#hello",
        )

        assert result == mock_result
        mock_run.assert_called_once_with(
            ["nix", "build", "nixpkgs#hello"],
            cwd=None,
            env=None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )


def test_env_is_passed_as_plain_dict() -> None:
    """Test that a Mapping environment reaches subprocess.run as a dict copy."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.return_value = Mock(spec=subprocess.CompletedProcess, returncode=0)

        env = {"PATH": "/usr/bin", "NIXPKGS_ALLOW_UNFREE": "1"}
        run_subprocess_with_context(
            ["nix", "--version"], operation_context="check version", env=env
        )

        passed_env = mock_run.call_args.kwargs["env"]
        assert passed_env == env
        assert passed_env is not env


def test_failure_with_stderr_includes_stderr_in_error() -> None:
    """Test that subprocess failure with stderr includes stderr in error message."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1,
            cmd=["nix", "build", "nixpkgs#nope"],
            stderr="error: flake 'nixpkgs' does not provide attribute 'nope'",
        )

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(
                ["nix", "build", "nixpkgs#nope"],
                operation_context="build nixpkgs#nope",
            )

        error_message = str(exc_info.value)
        assert "Failed to build nixpkgs#nope" in error_message
        assert "Command: nix build nixpkgs#nope" in error_message
        assert "Exit code: 1" in error_message
        assert "stderr: error: flake 'nixpkgs' does not provide attribute 'nope'" in error_message


def test_failure_with_whitespace_stderr_omits_stderr_line() -> None:
    """Test that whitespace-only stderr is left out of the error message."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd=["nix"], stderr="   \n  "
        )

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["nix"], operation_context="run nix")

        assert "stderr:" not in str(exc_info.value)


def test_exception_chaining_preserved() -> None:
    """Test that original CalledProcessError is preserved via exception chaining."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        original_error = subprocess.CalledProcessError(returncode=1, cmd=["nix"], stderr="boom")
        mock_run.side_effect = original_error

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["nix"], operation_context="run nix")

        assert exc_info.value.__cause__ is original_error


def test_missing_binary_raises_runtime_error() -> None:
    """Test that a missing executable is reported with the operation context."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(RuntimeError, match="Command not found while trying to list profile"):
            run_subprocess_with_context(
                ["nix", "profile", "list"], operation_context="list profile"
            )


def test_check_false_behavior_no_exception() -> None:
    """Test that check=False prevents exception on non-zero exit."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 1
        mock_result.stderr = "some error"
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(["nix"], operation_context="run nix", check=False)

        assert result.returncode == 1
        assert mock_run.call_args.kwargs["check"] is False


def test_parameter_pass_through() -> None:
    """Test that extra kwargs are passed through to subprocess.run."""
    with patch("mise_nix.core.subprocess_utils.subprocess.run") as mock_run:
        mock_run.return_value = Mock(spec=subprocess.CompletedProcess, returncode=0)

        run_subprocess_with_context(["nix"], operation_context="run nix", timeout=30)

        assert mock_run.call_args.kwargs["timeout"] == 30


def test_combined_output_joins_non_empty_streams() -> None:
    result = subprocess.CompletedProcess(
        args=["nix"], returncode=1, stdout="  partial\n", stderr="error: boom\n"
    )
    assert combined_output(result) == "partial\nerror: boom"


def test_combined_output_skips_empty_streams() -> None:
    result = subprocess.CompletedProcess(args=["nix"], returncode=1, stdout="", stderr="oops")
    assert combined_output(result) == "oops"

    result = subprocess.CompletedProcess(args=["nix"], returncode=1, stdout=None, stderr=None)
    assert combined_output(result) == ""
