from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mcp_servers.local_scanner import http_client
from mcp_servers.local_scanner.config import ScannerConfig
from mcp_servers.local_scanner.http_client import HttpClientError
from mcp_servers.local_scanner.launcher import BrowserLauncher
from mcp_servers.local_scanner.server.guards import ValidateHtmlArgs
from mcp_servers.local_scanner.server.handlers.html import handle_validate_html
from mcp_servers.local_scanner.tools import html_validator, validate_source


class FakeValidator:
    def __init__(
        self, messages: list[dict[str, Any]] | None = None, body: str | None = None, truncated: bool = False
    ) -> None:
        self.body = body if body is not None else json.dumps({"messages": messages or []})
        self.posts: list[dict[str, Any]] = []
        self.truncated = truncated

    def __call__(self, url: str, body: bytes, config: ScannerConfig, *, content_type: str) -> dict[str, object]:
        self.posts.append({"url": url, "body": body, "content_type": content_type})
        return {"status": 200, "headers": {}, "body": self.body, "truncated": self.truncated}


@pytest.fixture
def config() -> ScannerConfig:
    return ScannerConfig.from_env()


@pytest.fixture
def launcher(config: ScannerConfig) -> BrowserLauncher:
    return BrowserLauncher(config)


def _no_fetch(*args: Any, **kwargs: Any) -> Any:
    raise AssertionError("no fetch expected")


def test_literal_html_is_posted_as_is(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    validator = FakeValidator([{"type": "info", "message": "Trailing slash on void elements"}])
    monkeypatch.setattr(http_client, "http_post", validator)
    monkeypatch.setattr(http_client, "http_get", _no_fetch)

    result = validate_source(config, launcher, "<p>hi</p>")

    assert result == {
        "source": "<p>hi</p>",
        "isUrl": False,
        "valid": True,
        "messages": [{"type": "info", "message": "Trailing slash on void elements"}],
    }
    assert validator.posts[0]["body"] == b"<p>hi</p>"
    assert validator.posts[0]["url"] == config.validator_url
    assert validator.posts[0]["content_type"].startswith("text/html")


def test_any_error_message_makes_it_invalid(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    messages = [
        {"type": "info", "subType": "warning", "message": "Consider adding a lang attribute"},
        {"type": "error", "message": "Element title must not be empty."},
    ]
    monkeypatch.setattr(http_client, "http_post", FakeValidator(messages))

    result = validate_source(config, launcher, "<title></title>")

    assert result["valid"] is False
    assert result["messages"] == messages


def test_file_path_is_read(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config, launcher) -> None:
    page = tmp_path / "index.html"
    page.write_text("<!DOCTYPE html><title>x</title>", encoding="utf-8")
    validator = FakeValidator()
    monkeypatch.setattr(http_client, "http_post", validator)

    result = validate_source(config, launcher, str(page))

    assert result["source"] == str(page)
    assert validator.posts[0]["body"] == b"<!DOCTYPE html><title>x</title>"


def test_missing_path_is_treated_as_markup(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, config, launcher) -> None:
    validator = FakeValidator()
    monkeypatch.setattr(http_client, "http_post", validator)
    missing = str(tmp_path / "nope" / "index.html")

    validate_source(config, launcher, missing)

    assert validator.posts[0]["body"] == missing.encode()


def test_remote_url_is_fetched(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    fetched: list[str] = []

    def fake_get(url: str, cfg: ScannerConfig) -> dict[str, object]:
        fetched.append(url)
        return {"status": 200, "headers": {}, "body": "<html>remote</html>", "truncated": False}

    validator = FakeValidator()
    monkeypatch.setattr(http_client, "http_get", fake_get)
    monkeypatch.setattr(http_client, "http_post", validator)
    monkeypatch.setattr(html_validator, "render_html", _no_fetch)

    result = validate_source(config, launcher, "https://example.com/", is_url=True)

    assert fetched == ["https://example.com/"]
    assert validator.posts[0]["body"] == b"<html>remote</html>"
    assert result["isUrl"] is True


def test_localhost_url_is_rendered_in_the_browser(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    rendered: list[str] = []

    def fake_render(cfg: ScannerConfig, lch: BrowserLauncher, url: str) -> str:
        rendered.append(url)
        return "<!DOCTYPE html><html><body>app</body></html>"

    validator = FakeValidator()
    monkeypatch.setattr(html_validator, "render_html", fake_render)
    monkeypatch.setattr(http_client, "http_get", _no_fetch)
    monkeypatch.setattr(http_client, "http_post", validator)

    validate_source(config, launcher, "http://localhost:5173/", is_url=True)

    assert rendered == ["http://localhost:5173/"]
    assert validator.posts[0]["body"] == b"<!DOCTYPE html><html><body>app</body></html>"


def test_non_json_validator_response(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    monkeypatch.setattr(http_client, "http_post", FakeValidator(body="<html>Service Unavailable</html>"))
    with pytest.raises(HttpClientError, match="non-JSON"):
        validate_source(config, launcher, "<p>hi</p>")


def test_handler_wraps_fetch_failure(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    def failing_get(url: str, cfg: ScannerConfig) -> dict[str, object]:
        raise HttpClientError("Request failed with status code 404")

    monkeypatch.setattr(http_client, "http_get", failing_get)
    monkeypatch.setattr(http_client, "http_post", _no_fetch)

    result = handle_validate_html(config, launcher, ValidateHtmlArgs(source="https://example.com/x", is_url=True))

    assert result.is_error is True
    assert result.content[0].text == "Error validating HTML: Request failed with status code 404"


def test_handler_success_is_pretty_json(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    monkeypatch.setattr(http_client, "http_post", FakeValidator([]))

    result = handle_validate_html(config, launcher, ValidateHtmlArgs(source="<p>ok</p>"))

    assert result.is_error is False
    assert json.loads(result.content[0].text) == {"source": "<p>ok</p>", "isUrl": False, "valid": True, "messages": []}
    assert "\n  " in result.content[0].text


def test_truncated_page_is_not_validated(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    def huge_get(url: str, cfg: ScannerConfig) -> dict[str, object]:
        return {"status": 200, "headers": {}, "body": "<html><body>", "truncated": True}

    monkeypatch.setattr(http_client, "http_get", huge_get)
    monkeypatch.setattr(http_client, "http_post", _no_fetch)

    with pytest.raises(HttpClientError, match="exceeds MCP_HTTP_MAX_BYTES"):
        validate_source(config, launcher, "https://example.com/big", is_url=True)

    result = handle_validate_html(config, launcher, ValidateHtmlArgs(source="https://example.com/big", is_url=True))
    assert result.is_error is True
    assert "MCP_HTTP_MAX_BYTES" in result.content[0].text


def test_truncated_validator_reply_is_an_error(monkeypatch: pytest.MonkeyPatch, config, launcher) -> None:
    monkeypatch.setattr(http_client, "http_post", FakeValidator(body='{"messages": [', truncated=True))
    with pytest.raises(HttpClientError, match="exceeds MCP_HTTP_MAX_BYTES"):
        validate_source(config, launcher, "<p>hi</p>")
