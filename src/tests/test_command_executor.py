import time
from typing import Any

import pytest

from dynamic_mcp.errors import ExecutionTimeout
from dynamic_mcp.errors import ExecutorFailed
from dynamic_mcp.errors import SchemaValidationFailed
from dynamic_mcp.executors import CommandExecutor
from dynamic_mcp.models import ToolDefinition


def _command_tool(command: str, args: list[str] | None = None, **extra: Any) -> ToolDefinition:
    metadata: dict[str, Any] = {"command": command, "args": args or []}
    if "stdin" in extra:
        metadata["stdin"] = extra.pop("stdin")
    data: dict[str, Any] = {"name": "cmd", "kind": "COMMAND", "command_metadata": metadata}
    data.update(extra)
    return ToolDefinition.model_validate(data)


@pytest.mark.anyio
async def test_echo_returns_stdout_as_text() -> None:
    executor = CommandExecutor(_command_tool("echo", ["{ input.word }"]), timeout=10)

    output = await executor.execute({"word": "hi"})

    assert output.raw == "hi\n"
    assert output.value == "hi\n"
    assert not output.is_json


@pytest.mark.anyio
async def test_json_stdout_is_parsed() -> None:
    executor = CommandExecutor(_command_tool("printf", ['{"n": %s}', "{ input.n }"]), timeout=10)

    output = await executor.execute({"n": 3})

    assert output.is_json
    assert output.value == {"n": 3}


@pytest.mark.anyio
async def test_arguments_are_not_shell_interpreted() -> None:
    executor = CommandExecutor(_command_tool("echo", ["{ input.text }"]), timeout=10)

    output = await executor.execute({"text": "$(whoami); ls"})

    assert output.raw == "$(whoami); ls\n"


@pytest.mark.anyio
async def test_stdin_template_reaches_the_child() -> None:
    executor = CommandExecutor(_command_tool("cat", stdin="hello { input.name }"), timeout=10)

    output = await executor.execute({"name": "bob"})

    assert output.raw == "hello bob"


@pytest.mark.anyio
async def test_child_without_stdin_template_sees_end_of_input() -> None:
    executor = CommandExecutor(_command_tool("cat"), timeout=10)

    output = await executor.execute({})

    assert output.raw == ""


@pytest.mark.anyio
async def test_non_zero_exit_carries_exit_code_and_stderr() -> None:
    executor = CommandExecutor(_command_tool("sh", ["-c", "echo boom >&2; exit 3"]), timeout=10)

    with pytest.raises(ExecutorFailed) as exc_info:
        await executor.execute({})

    assert exc_info.value.exit_code == 3
    assert "boom" in (exc_info.value.stderr or "")
    assert exc_info.value.to_data()["exit_code"] == 3


@pytest.mark.anyio
async def test_slow_command_times_out() -> None:
    executor = CommandExecutor(_command_tool("sleep", ["5"], timeout=0.2), timeout=30)
    started = time.monotonic()

    with pytest.raises(ExecutionTimeout) as exc_info:
        await executor.execute({})

    assert time.monotonic() - started < 4
    assert exc_info.value.to_data() == {"kind": "Timeout", "timeout": 0.2}


@pytest.mark.anyio
async def test_missing_executable_is_executor_failure() -> None:
    executor = CommandExecutor(_command_tool("definitely-not-a-real-command-xyz"), timeout=10)

    with pytest.raises(ExecutorFailed) as exc_info:
        await executor.execute({})

    assert exc_info.value.cause is not None


@pytest.mark.anyio
async def test_output_schema_is_enforced() -> None:
    tool = _command_tool("echo", ["not json"], output_schema={"type": "object"})
    executor = CommandExecutor(tool, timeout=10)

    with pytest.raises(SchemaValidationFailed) as exc_info:
        await executor.execute({})

    assert exc_info.value.stage == "output"
    assert exc_info.value.raw == "not json\n"
    assert exc_info.value.actual == "string"
