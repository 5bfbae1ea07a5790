from __future__ import annotations

import ssl
import urllib.parse
from urllib.error import HTTPError, URLError
from urllib.request import HTTPRedirectHandler, HTTPSHandler, Request, build_opener

from .config import ScannerConfig

USER_AGENT = "local-scanner-mcp/0.1"


class HttpClientError(Exception):
    pass


class _SafeRedirectHandler(HTTPRedirectHandler):
    def __init__(self, config: ScannerConfig) -> None:
        super().__init__()
        self._config = config

    def redirect_request(self, req, fp, code, msg, headers, newurl):  # noqa: ANN001
        # urllib may pass relative URLs here; normalize against the previous URL.
        absolute = urllib.parse.urljoin(req.full_url, str(newurl))
        parsed = urllib.parse.urlparse(absolute)
        if parsed.scheme not in ("http", "https"):
            raise HttpClientError("Only http/https are supported (redirect)")
        if not self._config.is_host_allowed(parsed.hostname or ""):
            raise HttpClientError(f"Host {parsed.hostname} is not in allowlist (redirect)")
        return super().redirect_request(req, fp, code, msg, headers, absolute)


def _read_capped(resp, max_bytes: int) -> tuple[bytes, bool]:  # noqa: ANN001
    body = resp.read(max_bytes + 1)
    truncated = len(body) > max_bytes
    if truncated:
        body = body[:max_bytes]
    return body, truncated


def http_get(url: str, config: ScannerConfig) -> dict[str, object]:
    """Fetch a remote http(s) URL honoring the host allowlist."""
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise HttpClientError("Only http/https are supported")
    if not config.is_host_allowed(parsed.hostname or ""):
        raise HttpClientError(f"Host {parsed.hostname} is not in allowlist")
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        ctx = ssl.create_default_context()
        opener = build_opener(_SafeRedirectHandler(config), HTTPSHandler(context=ctx))
        with opener.open(req, timeout=config.http_timeout) as resp:
            body, truncated = _read_capped(resp, config.http_max_bytes)
            return {
                "status": resp.status,
                "headers": dict(resp.headers),
                "body": body.decode(errors="replace"),
                "truncated": truncated,
            }
    except HTTPError as exc:
        raise HttpClientError(f"Request failed with status code {exc.code}") from exc
    except (TimeoutError, URLError) as exc:
        raise HttpClientError(str(exc)) from exc


def http_post(url: str, body: bytes, config: ScannerConfig, *, content_type: str) -> dict[str, object]:
    """POST a payload to a configured service endpoint (not subject to the allowlist)."""
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise HttpClientError("Only http/https are supported")
    req = Request(
        url,
        data=body,
        method="POST",
        headers={"User-Agent": USER_AGENT, "Content-Type": content_type},
    )
    try:
        ctx = ssl.create_default_context()
        opener = build_opener(HTTPSHandler(context=ctx))
        with opener.open(req, timeout=config.http_timeout) as resp:
            data, truncated = _read_capped(resp, config.http_max_bytes)
            return {
                "status": resp.status,
                "headers": dict(resp.headers),
                "body": data.decode(errors="replace"),
                "truncated": truncated,
            }
    except HTTPError as exc:
        raise HttpClientError(f"Request failed with status code {exc.code}") from exc
    except (TimeoutError, URLError) as exc:
        raise HttpClientError(str(exc)) from exc
