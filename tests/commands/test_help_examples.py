"""Parametrized --help and --examples tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from assistctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    # -- root --
    (["--help"], ["assistant", "thread", "vector-store", "file", "config", "models"]),
    # -- assistant group --
    (["assistant", "--help"], ["list", "show", "create", "update", "delete"]),
    (["assistant", "create", "--help"], ["--model", "--tool", "--reasoning-effort"]),
    (["assistant", "update", "--help"], ["ASSISTANT_ID", "--vector-store", "--metadata"]),
    (["assistant", "list", "--help"], ["--limit", "--order", "--after"]),
    (["assistant", "delete", "--help"], ["--yes"]),
    # -- thread group --
    (["thread", "--help"], ["create", "send", "run", "status", "messages", "ask"]),
    (["thread", "run", "--help"], ["--assistant", "--wait"]),
    (["thread", "ask", "--help"], ["CONTENT", "--thread"]),
    (["thread", "status", "--help"], ["THREAD_ID", "RUN_ID"]),
    # -- vector-store group --
    (["vector-store", "--help"], ["upload", "files", "add-file", "remove-file", "batch"]),
    (["vector-store", "upload", "--help"], ["--concurrency", "--retries", "--backoff"]),
    (["vector-store", "create", "--help"], ["--expires-days", "--chunk-size"]),
    # -- file group --
    (["file", "--help"], ["list", "show", "upload", "delete"]),
    (["file", "upload", "--help"], ["--purpose", "--name"]),
    # -- config group --
    (["config", "--help"], ["set-key", "clear-key", "show"]),
    (["config", "set-key", "--help"], ["--stdin"]),
    # -- standalone --
    (["models", "--help"], []),
]

EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["assistctl config set-key"]),
    (["assistant", "--examples"], ["assistctl assistant create"]),
    (["assistant", "create", "--examples"], ["--reasoning-effort high"]),
    (["thread", "--examples"], ["assistctl thread ask"]),
    (["thread", "run", "--examples"], ["--wait"]),
    (["vector-store", "--examples"], ["assistctl vector-store upload"]),
    (["vector-store", "upload", "--examples"], ["--backoff exponential"]),
    (["file", "upload", "--examples"], ["--name q3.csv"]),
    (["config", "set-key", "--examples"], ["--stdin"]),
    (["models", "--examples"], ["assistctl models"]),
]


def _args_id(item: tuple[list[str], list[str]]) -> str:
    """Generate a readable test ID from args."""
    args, _ = item
    return "_".join(a for a in args if not a.startswith("--")) or "root"


@pytest.mark.parametrize(
    "args,expected_keywords",
    HELP_COMMANDS,
    ids=[_args_id(item) for item in HELP_COMMANDS],
)
def test_command_help(cli_runner: CliRunner, args: list[str], expected_keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in help output for {args}"


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_args_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    assert "Examples for" in result.output
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesInHelp:
    @pytest.mark.parametrize(
        "args",
        [
            ["assistant", "--help"],
            ["assistant", "create", "--help"],
            ["vector-store", "upload", "--help"],
            ["models", "--help"],
        ],
    )
    def test_examples_option_listed(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert "--examples" in result.output


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "assistctl" in result.output


def test_bare_invocation_prints_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage:" in result.output
