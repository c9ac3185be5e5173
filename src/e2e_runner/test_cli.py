#!/usr/bin/env python3
"""
Tests for the command-line entry point: exit codes, CLI overrides of
environment variables, and the JSON report.
"""

import json
import sys
import tempfile
from pathlib import Path

import pytest

from e2e_runner import cli
from e2e_runner.exceptions import GatewayExecutionError
from e2e_runner.models import AgentOutput, GatewayResponse


RUNNER_ENV_VARS = [
    "ANTHROPIC_API_KEY",
    "API_KEY",
    "ANTHROPIC_BASE_URL",
    "BASE_URL",
    "MODEL_NAME",
    "TESTS_DIR",
    "MAX_STEPS",
    "MCP_SERVERS",
    "USE_AWS_BEDROCK",
    "STRICT_RESPONSE",
]


class FakeGateway:
    """Stands in for ClaudeAgentGateway; fails any test whose text mentions FAIL."""

    started = []

    def __init__(self, config):
        self.config = config

    async def __aenter__(self):
        FakeGateway.started.append(self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None

    async def execute(self, prompt):
        if "FAIL" in prompt:
            raise GatewayExecutionError("element not found")
        return GatewayResponse(output=AgentOutput.from_response('{"success": true}'))


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    for name in RUNNER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setattr(cli, "ClaudeAgentGateway", FakeGateway)
    FakeGateway.started = []


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


def _make_tests(tests_dir: Path, contents: dict) -> None:
    for name, content in contents.items():
        (tests_dir / name).write_text(content, encoding="utf-8")


def test_exit_zero_when_every_test_passes(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    with tempfile.TemporaryDirectory() as tmpdir:
        _make_tests(Path(tmpdir), {"1.test": "open example.com", "2.test": "open other.com"})

        assert _run(["--tests-dir", tmpdir]) == cli.EXIT_ALL_PASSED == 0
        assert len(FakeGateway.started) == 1


def test_exit_one_when_a_test_fails(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    with tempfile.TemporaryDirectory() as tmpdir:
        _make_tests(Path(tmpdir), {"1.test": "open example.com", "2.test": "FAIL on purpose"})

        assert _run(["--tests-dir", tmpdir]) == cli.EXIT_TESTS_FAILED == 1


def test_exit_two_without_api_key():
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(["--tests-dir", tmpdir]) == cli.EXIT_FATAL == 2
        assert FakeGateway.started == []


def test_exit_two_for_non_positive_max_steps(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(["--tests-dir", tmpdir, "--max-steps", "0"]) == 2


def test_exit_two_for_malformed_mcp_servers(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    monkeypatch.setenv("MCP_SERVERS", '{"browser": {"args": []}}')
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(["--tests-dir", tmpdir]) == 2


def test_missing_tests_directory_exits_two_without_starting_agent(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(["--tests-dir", str(Path(tmpdir) / "missing")]) == 2
        assert FakeGateway.started == []


def test_interrupt_exits_130(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

    def interrupted(config):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "run_tests", interrupted)
    with tempfile.TemporaryDirectory() as tmpdir:
        assert _run(["--tests-dir", tmpdir]) == cli.EXIT_INTERRUPTED == 130


def test_cli_flags_override_environment(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        tests_dir = Path(tmpdir) / "cli-tests"
        tests_dir.mkdir()
        _make_tests(tests_dir, {"1.test": "open example.com"})
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("TESTS_DIR", str(Path(tmpdir) / "env-tests-missing"))
        monkeypatch.setenv("MODEL_NAME", "env-model")
        monkeypatch.setenv("MAX_STEPS", "5")

        assert _run(["--tests-dir", str(tests_dir), "--model", "cli-model", "--max-steps", "9"]) == 0

        config = FakeGateway.started[0]
        assert config.tests_dir == tests_dir
        assert config.model == "cli-model"
        assert config.max_steps == 9


def test_environment_used_when_no_flags(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        _make_tests(Path(tmpdir), {"1.test": "open example.com"})
        monkeypatch.setenv("API_KEY", "sk-test")
        monkeypatch.setenv("TESTS_DIR", tmpdir)
        monkeypatch.setenv("MODEL_NAME", "env-model")

        assert _run([]) == 0

        config = FakeGateway.started[0]
        assert config.tests_dir == Path(tmpdir)
        assert config.model == "env-model"


def test_json_report_is_written(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    with tempfile.TemporaryDirectory() as tmpdir:
        tests_dir = Path(tmpdir) / "tests"
        tests_dir.mkdir()
        _make_tests(tests_dir, {"1.test": "open example.com", "2.test": "FAIL on purpose"})
        report_path = Path(tmpdir) / "reports" / "results.json"

        assert _run(["--tests-dir", str(tests_dir), "--json-report", str(report_path)]) == 1

        report = json.loads(report_path.read_text(encoding="utf-8"))
        assert report["summary"]["total"] == 2
        assert report["summary"]["failed"] == 1
        assert [r["test_file"] for r in report["results"]] == ["1.test", "2.test"]
        assert report["results"][1]["error"] == "element not found"


def main():
    """Run all tests."""
    sys.exit(pytest.main([__file__, "-v"]))


if __name__ == "__main__":
    main()
