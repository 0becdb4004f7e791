"""Docker Engine API client used to forward proxied requests."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol, runtime_checkable

import requests

from dockgate.core.errors import UpstreamError
from dockgate.proxy.config import load_proxy_config
from dockgate.proxy.response import UpstreamResponse

# Not forwarded in either direction (RFC 7230 section 6.1), plus headers that requests recomputes.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
        "content-encoding",
    }
)


def strip_hop_by_hop(headers: Mapping[str, str], *, extra: Optional[set] = None) -> Dict[str, str]:
    drop = set(HOP_BY_HOP_HEADERS)
    if extra:
        drop |= {h.lower() for h in extra}
    return {k: v for k, v in headers.items() if k.lower() not in drop}


@runtime_checkable
class DockerProvider(Protocol):
    def forward(
        self,
        method: str,
        path: str,
        *,
        query: str = "",
        headers: Optional[Mapping[str, str]] = None,
        body: bytes = b"",
    ) -> UpstreamResponse: ...


class DefaultDockerProvider:
    def __init__(self, base_url: Optional[str] = None, timeout_seconds: Optional[int] = None) -> None:
        cfg = load_proxy_config()
        self.base_url = (base_url or cfg.docker_api_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or cfg.upstream_timeout_seconds
        self._session = requests.Session()

    def forward(
        self,
        method: str,
        path: str,
        *,
        query: str = "",
        headers: Optional[Mapping[str, str]] = None,
        body: bytes = b"",
    ) -> UpstreamResponse:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if query:
            url = f"{url}?{query}"
        # Body is read in full; follow-mode streams (logs, events, attach) are not supported.
        try:
            r = self._session.request(
                method,
                url,
                headers=strip_hop_by_hop(headers or {}),
                data=body or None,
                timeout=self.timeout_seconds,
                allow_redirects=False,
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Failed to reach Docker API at {self.base_url}: {e}") from e

        return UpstreamResponse.from_parts(r.status_code, strip_hop_by_hop(r.headers), r.content)
