"""
Proxy configuration (env/ConfigMap driven).

Recommended vars:
- DOCKER_API_URL=http://docker:2375
- DOCKGATE_ACCESS_FILE=config/access.yaml
- DOCKGATE_USER_HEADER=X-Dockgate-User
- DOCKGATE_UPSTREAM_TIMEOUT_SECONDS=30
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_DOCKER_API_URL = "http://localhost:2375"
DEFAULT_ACCESS_FILE = "config/access.yaml"
DEFAULT_USER_HEADER = "X-Dockgate-User"


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _normalize_docker_url(raw: str) -> str:
    url = (raw or "").strip().rstrip("/")
    if not url:
        return DEFAULT_DOCKER_API_URL
    # DOCKER_HOST style: tcp://host:2375
    if url.startswith("tcp://"):
        url = "http://" + url[len("tcp://") :]
    return url


@dataclass(frozen=True)
class ProxyConfig:
    docker_api_url: str
    access_file: str
    user_header: str
    upstream_timeout_seconds: int


@lru_cache(maxsize=1)
def load_proxy_config() -> ProxyConfig:
    return ProxyConfig(
        docker_api_url=_normalize_docker_url(os.getenv("DOCKER_API_URL", "")),
        access_file=(os.getenv("DOCKGATE_ACCESS_FILE", "") or "").strip() or DEFAULT_ACCESS_FILE,
        user_header=(os.getenv("DOCKGATE_USER_HEADER", "") or "").strip() or DEFAULT_USER_HEADER,
        upstream_timeout_seconds=max(1, min(_env_int("DOCKGATE_UPSTREAM_TIMEOUT_SECONDS", 30), 300)),
    )
