from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any

import pytest

from mcp_servers.local_scanner.config import ScannerConfig
from mcp_servers.local_scanner.launcher import BrowserLauncher
from mcp_servers.local_scanner.server.guards import LintArgs
from mcp_servers.local_scanner.server.handlers.lint import handle_lint_code
from mcp_servers.local_scanner.tools import SmartToolError, lint_file, resolve_language
from mcp_servers.local_scanner.tools import lint as lint_module


class FakeRun:
    """Records linter invocations and answers with a canned CompletedProcess."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[dict[str, Any]] = []
        self.stylelint_config: dict[str, Any] | None = None

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
        self.calls.append({"command": command, **kwargs})
        if "--config" in command:
            config_path = command[command.index("--config") + 1]
            if config_path.endswith(".json") and os.path.basename(config_path).startswith("stylelint-"):
                self.stylelint_config = json.loads(Path(config_path).read_text(encoding="utf-8"))
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def config() -> ScannerConfig:
    cfg = ScannerConfig.from_env()
    cfg.eslint_command = ["eslint"]
    cfg.stylelint_command = ["stylelint"]
    return cfg


def _eslint_report(messages: list[dict[str, Any]], errors: int, warnings: int) -> str:
    return json.dumps([{"filePath": "x", "messages": messages, "errorCount": errors, "warningCount": warnings}])


def test_resolve_language_from_extension() -> None:
    assert resolve_language("src/app.js") == "javascript"
    assert resolve_language("src/app.TS") == "typescript"
    assert resolve_language("src/App.tsx") == "typescript"
    assert resolve_language("styles/site.css") == "css"
    assert resolve_language("notes.md", "css") == "css"


def test_resolve_language_unknown_extension() -> None:
    with pytest.raises(SmartToolError, match="Cannot determine language for file extension: .md"):
        resolve_language("README.md")
    with pytest.raises(SmartToolError, match=r"\(none\)"):
        resolve_language("Makefile")


def test_lint_javascript_runs_eslint_on_stdin(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "app.js"
    source.write_text("var unused = 1;\n", encoding="utf-8")
    messages = [{"ruleId": "no-unused-vars", "severity": 2, "message": "'unused' is assigned a value but never used."}]
    fake = FakeRun(returncode=1, stdout=_eslint_report(messages, 1, 0))
    monkeypatch.setattr(lint_module.subprocess, "run", fake)

    result = lint_file(config, str(source))

    assert result == {
        "filePath": str(source),
        "language": "javascript",
        "results": messages,
        "errorCount": 1,
        "warningCount": 0,
    }
    call = fake.calls[0]
    assert call["command"][0] == "eslint"
    assert call["command"][call["command"].index("--stdin-filename") + 1] == str(source)
    assert "--config" not in call["command"]
    assert call["input"] == "var unused = 1;\n"
    assert call["cwd"] == str(tmp_path)
    assert call["env"] is None


def test_lint_typescript_uses_override_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "main.ts"
    source.write_text("let x: number = 1;\n", encoding="utf-8")
    override = tmp_path / ".eslintrc-typescript.json"
    override.write_text('{"parser": "@typescript-eslint/parser"}', encoding="utf-8")
    fake = FakeRun(stdout=_eslint_report([], 0, 0))
    monkeypatch.setattr(lint_module.subprocess, "run", fake)

    result = lint_file(config, str(source))

    assert result["language"] == "typescript"
    assert result["errorCount"] == 0
    command = fake.calls[0]["command"]
    assert command[command.index("--config") + 1] == str(override)
    assert fake.calls[0]["env"]["ESLINT_USE_FLAT_CONFIG"] == "false"


def test_lint_typescript_without_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "main.ts"
    source.write_text("export {};\n", encoding="utf-8")
    fake = FakeRun(stdout=_eslint_report([], 0, 0))
    monkeypatch.setattr(lint_module.subprocess, "run", fake)

    lint_file(config, str(source))

    assert "--config" not in fake.calls[0]["command"]


def test_lint_css_uses_fixed_rule_set(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "site.css"
    source.write_text("a { color: #ggg; }\n", encoding="utf-8")
    warning = {"line": 1, "column": 12, "rule": "color-no-invalid-hex", "severity": "error", "text": "Unexpected"}
    report = json.dumps([{"source": str(source), "errored": True, "warnings": [warning]}])
    # stylelint 16 prints its JSON report on stderr.
    fake = FakeRun(returncode=2, stdout="", stderr=report)
    monkeypatch.setattr(lint_module.subprocess, "run", fake)

    result = lint_file(config, str(source))

    assert result == {"filePath": str(source), "language": "css", "warnings": [warning], "errored": True}
    assert fake.calls[0]["command"][0] == "stylelint"
    assert fake.stylelint_config == {"rules": lint_module.STYLELINT_RULES}
    assert len(lint_module.STYLELINT_RULES) == 16
    config_path = fake.calls[0]["command"][fake.calls[0]["command"].index("--config") + 1]
    assert not os.path.exists(config_path)


def test_explicit_language_overrides_extension(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "theme.txt"
    source.write_text("body {}\n", encoding="utf-8")
    fake = FakeRun(stdout=json.dumps([{"errored": False, "warnings": []}]))
    monkeypatch.setattr(lint_module.subprocess, "run", fake)

    result = lint_file(config, str(source), language="css")

    assert result["language"] == "css"
    assert result["errored"] is False
    assert fake.calls[0]["command"][0] == "stylelint"


def test_missing_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    monkeypatch.setattr(lint_module.subprocess, "run", FakeRun())
    with pytest.raises(SmartToolError, match="File not found"):
        lint_file(config, str(tmp_path / "missing.js"))


def test_linter_not_installed(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "app.js"
    source.write_text("1;\n", encoding="utf-8")

    def missing(*args: Any, **kwargs: Any) -> Any:
        raise FileNotFoundError(2, "No such file or directory", "eslint")

    monkeypatch.setattr(lint_module.subprocess, "run", missing)
    with pytest.raises(SmartToolError, match="eslint executable not found"):
        lint_file(config, str(source))


def test_linter_crash_is_reported(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config) -> None:
    source = tmp_path / "app.js"
    source.write_text("1;\n", encoding="utf-8")
    fake = FakeRun(returncode=2, stderr="Oops! Something went wrong! ESLint couldn't find a configuration file.")
    monkeypatch.setattr(lint_module.subprocess, "run", fake)
    with pytest.raises(SmartToolError, match="eslint exited with code 2"):
        lint_file(config, str(source))


def test_handler_reports_missing_file_as_tool_error(tmp_path: Path, config) -> None:
    missing = tmp_path / "nope.css"
    result = handle_lint_code(config, BrowserLauncher(config), LintArgs(file_path=str(missing)))
    assert result.is_error is True
    assert result.content[0].text == f"Error linting code: File not found: {missing}"


def test_handler_reports_unknown_extension_as_tool_error(tmp_path: Path, config) -> None:
    path = tmp_path / "script.py"
    path.write_text("print(1)\n", encoding="utf-8")
    result = handle_lint_code(config, BrowserLauncher(config), LintArgs(file_path=str(path)))
    assert result.is_error is True
    assert "Cannot determine language for file extension: .py" in result.content[0].text
