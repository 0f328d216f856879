import json
from pathlib import Path

import pytest

import everything_mcp.cli as cli
from everything_mcp.mcp.client import SmokeReport, SmokeStep
from everything_mcp.mcp.errors import TransportError


def _write_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.command is None

    args = cli.build_parser().parse_args(["check"])
    assert args.config == Path("mcp-config.json")
    assert args.server == "everything"
    assert args.timeout == 10.0


def test_load_server_entry_from_mcp_servers(tmp_path):
    cfg_path = tmp_path / "mcp.json"
    _write_json(cfg_path, {
        "mcpServers": {
            "everything": {
                "command": "everything-mcp",
                "args": ["serve"],
                "env": {"EVERYTHING_PORT": "8080"},
            }
        }
    })
    entry = cli.load_server_entry(cfg_path, "everything")
    assert entry["command"] == "everything-mcp"
    assert entry["env"] == {"EVERYTHING_PORT": "8080"}


def test_load_server_entry_from_servers_block(tmp_path):
    cfg_path = tmp_path / "mcp.json"
    _write_json(cfg_path, {"servers": {"files": {"command": "everything-mcp"}}})
    assert cli.load_server_entry(cfg_path, "files")["command"] == "everything-mcp"


@pytest.mark.parametrize(
    "payload",
    [
        {"mcpServers": {}},
        {"mcpServers": {"everything": {"args": []}}},
        ["not", "an", "object"],
    ],
)
def test_load_server_entry_rejects_bad_configs(tmp_path, payload):
    cfg_path = tmp_path / "mcp.json"
    cfg_path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        cli.load_server_entry(cfg_path, "everything")


def test_load_server_entry_missing_file(tmp_path):
    with pytest.raises(ValueError):
        cli.load_server_entry(tmp_path / "absent.json", "everything")


def test_check_reports_missing_config(tmp_path, capsys):
    rc = cli.main(["check", str(tmp_path / "absent.json")])
    assert rc == 1
    assert "[FAIL]" in capsys.readouterr().err


def test_check_runs_smoke_test_with_configured_server(tmp_path, monkeypatch, capsys):
    cfg_path = tmp_path / "mcp.json"
    _write_json(cfg_path, {
        "mcpServers": {
            "everything": {"command": "everything-mcp", "args": ["serve"], "env": {"EVERYTHING_PORT": 8080}}
        }
    })
    spawned = {}

    class _FakeClient:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            spawned["closed"] = True

    def fake_spawn(command, args, env=None, timeout=10.0):
        spawned.update(command=command, args=args, env=env, timeout=timeout)
        return _FakeClient()

    monkeypatch.setattr(cli.StdioClient, "spawn", staticmethod(fake_spawn))
    monkeypatch.setattr(cli, "run_smoke_check", lambda client: SmokeReport([SmokeStep("initialize", True)]))

    rc = cli.main(["check", str(cfg_path), "--timeout", "3"])
    assert rc == 0
    assert spawned == {
        "command": "everything-mcp",
        "args": ["serve"],
        "env": {"EVERYTHING_PORT": "8080"},
        "timeout": 3.0,
        "closed": True,
    }
    assert "1. [OK] initialize" in capsys.readouterr().out


def test_check_fails_when_smoke_test_fails(tmp_path, monkeypatch):
    cfg_path = tmp_path / "mcp.json"
    _write_json(cfg_path, {"mcpServers": {"everything": {"command": "everything-mcp"}}})

    class _FakeClient:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            pass

    monkeypatch.setattr(cli.StdioClient, "spawn", staticmethod(lambda *a, **kw: _FakeClient()))
    monkeypatch.setattr(cli, "run_smoke_check", lambda client: SmokeReport([SmokeStep("initialize", False, "boom")]))
    assert cli.main(["check", str(cfg_path)]) == 1


def test_serve_exits_nonzero_on_transport_error(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda server_config: None)

    def broken_run(self, context=None, handle_signals=True):
        raise TransportError("stdout closed")

    monkeypatch.setattr(cli.McpServer, "run", broken_run)
    assert cli.main(["serve"]) == 1


def test_serve_exits_nonzero_on_unexpected_error(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda server_config: None)

    def broken_run(self, context=None, handle_signals=True):
        raise RuntimeError("loop crashed")

    monkeypatch.setattr(cli.McpServer, "run", broken_run)
    assert cli.main(["serve"]) == 1


def test_serve_returns_zero_on_clean_stop(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda server_config: None)
    monkeypatch.setattr(cli.McpServer, "run", lambda self, context=None, handle_signals=True: None)
    assert cli.main([]) == 0


def test_serve_rejects_invalid_base_url(monkeypatch, capsys):
    monkeypatch.setattr(cli, "configure_logging", lambda server_config: None)
    monkeypatch.setenv("EVERYTHING_BASE_URL", "http://localhost:notaport")
    assert cli.main(["serve"]) == 1
    assert "Invalid Everything base URL" in capsys.readouterr().err
