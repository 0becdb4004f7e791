"""Route table: which restricted operation (if any) applies to a proxied request."""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Tuple

from dockgate.core.models import OperationContext
from dockgate.proxy.containers import container_inspect_operation, container_list_operation
from dockgate.proxy.response import UpstreamResponse

Operation = Callable[[UpstreamResponse, OperationContext], UpstreamResponse]

# Optional API version prefix, same character class as the engine router: /v1.41/, /v1.24.0/
_VERSION_PREFIX = r"(?:/v[0-9.]+)?"

_ROUTES: List[Tuple[str, "re.Pattern[str]", Operation]] = [
    ("GET", re.compile(rf"^{_VERSION_PREFIX}/containers/json/?$"), container_list_operation),
    ("GET", re.compile(rf"^{_VERSION_PREFIX}/containers/[^/]+/json/?$"), container_inspect_operation),
]


def resolve_operation(method: str, path: str) -> Optional[Operation]:
    m = (method or "").upper()
    p = "/" + (path or "").lstrip("/")
    for route_method, pattern, operation in _ROUTES:
        if route_method == m and pattern.match(p):
            return operation
    return None
