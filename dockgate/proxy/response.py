"""Decoding and rewriting of proxied upstream responses."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from requests.structures import CaseInsensitiveDict

from dockgate.core.errors import ResponseDecodingError

ACCESS_DENIED_STATUS = 403
ACCESS_DENIED_MESSAGE = "Access denied to resource"


@dataclass
class UpstreamResponse:
    """
    Mutable view of an upstream HTTP response.

    Operations rewrite `status_code`, `headers` and `body` in place; the HTTP layer turns the
    result into the client response.
    """

    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""

    @classmethod
    def from_parts(
        cls, status_code: int, headers: Optional[Dict[str, str]] = None, body: bytes = b""
    ) -> "UpstreamResponse":
        return cls(status_code=status_code, headers=CaseInsensitiveDict(headers or {}), body=body)

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def _get_response_body_as_json(response: UpstreamResponse) -> Any:
    try:
        return response.json()
    except (UnicodeDecodeError, ValueError) as e:
        raise ResponseDecodingError(f"Unable to decode upstream response body as JSON: {e}") from e


def get_response_as_json_object(response: UpstreamResponse) -> Dict[str, Any]:
    data = _get_response_body_as_json(response)
    if not isinstance(data, dict):
        raise ResponseDecodingError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def get_response_as_json_array(response: UpstreamResponse) -> List[Any]:
    data = _get_response_body_as_json(response)
    if not isinstance(data, list):
        raise ResponseDecodingError(f"Expected a JSON array, got {type(data).__name__}")
    return data


def rewrite_response(response: UpstreamResponse, payload: Any, status_code: int) -> UpstreamResponse:
    body = json.dumps(payload, separators=(",", ":"), sort_keys=False).encode("utf-8")
    response.status_code = status_code
    response.body = body
    response.headers["Content-Length"] = str(len(body))
    response.headers["Content-Type"] = "application/json"
    # Body is re-encoded as plain JSON.
    response.headers.pop("Content-Encoding", None)
    return response


def rewrite_access_denied_response(response: UpstreamResponse) -> UpstreamResponse:
    return rewrite_response(response, {"err": ACCESS_DENIED_MESSAGE}, ACCESS_DENIED_STATUS)
