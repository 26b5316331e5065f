from pathlib import Path

import pytest

from dynamic_mcp import cli
from dynamic_mcp.transports import sse as sse_module
from dynamic_mcp.transports import stdio as stdio_module


def test_missing_config_exits_with_status_1(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-f", str(tmp_path / "missing.yaml")])

    assert exc_info.value.code == 1


def test_invalid_config_exits_before_serving(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("tools:\n  - name: x\n    tool_type: HTTP\n", encoding="utf-8")
    calls: list[str] = []
    monkeypatch.setattr(stdio_module.StdioTransport, "run", lambda self: calls.append("stdio"))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--file_path", str(path)])

    assert exc_info.value.code == 1
    assert calls == []


def test_stdio_is_the_default_transport(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "tools:\n  - name: echo\n    tool_type: COMMAND\n    command_metadata:\n      command: echo\n",
        encoding="utf-8",
    )
    calls: list[str] = []
    monkeypatch.setattr(stdio_module.StdioTransport, "run", lambda self: calls.append("stdio"))
    monkeypatch.setattr(sse_module.SseTransport, "serve_forever", lambda self: calls.append("sse"))

    cli.main(["-f", str(path), "--log-level", "DEBUG"])

    assert calls == ["stdio"]


def test_sse_transport_is_selected_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "transport_config:\n  transport_type: SSE\n  sse_config:\n    address: 127.0.0.1:0\n",
        encoding="utf-8",
    )
    calls: list[str] = []
    monkeypatch.setattr(stdio_module.StdioTransport, "run", lambda self: calls.append("stdio"))
    monkeypatch.setattr(sse_module.SseTransport, "serve_forever", lambda self: calls.append("sse"))

    cli.main(["-f", str(path)])

    assert calls == ["sse"]
