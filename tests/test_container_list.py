from __future__ import annotations

import json
from typing import Any, List, Optional

import pytest

from dockgate.authz.access import DECORATION_KEY
from dockgate.core.errors import ContainerIdentifierNotFoundError, ResponseDecodingError
from dockgate.core.models import OperationContext, ResourceControl
from dockgate.proxy.containers import container_list_operation
from dockgate.proxy.response import UpstreamResponse

SERVICE_LABEL = "com.docker.swarm.service.id"


def _rc(resource_id: str, *, users: Optional[List[str]] = None, teams: Optional[List[str]] = None, **kw: Any):
    return ResourceControl.model_validate(
        {
            "resource_id": resource_id,
            "user_accesses": [{"user_id": u} for u in (users or [])],
            "team_accesses": [{"team_id": t} for t in (teams or [])],
            **kw,
        }
    )


def _response(payload: Any) -> UpstreamResponse:
    return UpstreamResponse.from_parts(200, {"Content-Type": "application/json"}, json.dumps(payload).encode("utf-8"))


def _ctx(user_id: str = "u1", *, admin: bool = False, teams=(), controls=()) -> OperationContext:
    return OperationContext(
        is_admin=admin, user_id=user_id, user_team_ids=frozenset(teams), resource_controls=tuple(controls)
    )


def test_non_admin_keeps_granted_and_uncontrolled_containers() -> None:
    ctx = _ctx("u1", controls=[_rc("c1", users=["u1"])])
    resp = container_list_operation(_response([{"Id": "c1"}, {"Id": "c2"}]), ctx)
    assert resp.status_code == 200
    assert resp.json() == [{"Id": "c1"}, {"Id": "c2"}]


def test_non_admin_drops_containers_granted_to_someone_else() -> None:
    ctx = _ctx("u1", controls=[_rc("c1", users=["u2"])])
    resp = container_list_operation(_response([{"Id": "c1"}, {"Id": "c2"}]), ctx)
    assert resp.status_code == 200
    assert resp.json() == [{"Id": "c2"}]


def test_non_admin_filtering_preserves_order_and_does_not_decorate() -> None:
    containers = [{"Id": f"c{i}", "Names": [f"/n{i}"]} for i in range(6)]
    controls = [
        _rc("c0", users=["u2"]),
        _rc("c2", teams=["dev"]),
        _rc("c3", users=["u2"]),
        _rc("c5", public=True),
    ]
    resp = container_list_operation(_response(containers), _ctx("u1", teams=["dev"], controls=controls))
    out = resp.json()
    assert [c["Id"] for c in out] == ["c1", "c2", "c4", "c5"]
    assert all(DECORATION_KEY not in c for c in out)


def test_non_admin_container_inherits_service_control_from_flat_labels() -> None:
    containers = [
        {"Id": "c1", "Labels": {SERVICE_LABEL: "s1"}},
        {"Id": "c2", "Labels": {SERVICE_LABEL: "s2"}},
        {"Id": "c3", "Labels": {SERVICE_LABEL: "s-unknown"}},
    ]
    controls = [_rc("s1", type="service", users=["u2"]), _rc("s2", type="service", teams=["dev"])]
    resp = container_list_operation(_response(containers), _ctx("u1", teams=["dev"], controls=controls))
    assert [c["Id"] for c in resp.json()] == ["c2", "c3"]


def test_own_control_takes_precedence_over_service_control_in_lists() -> None:
    containers = [{"Id": "c1", "Labels": {SERVICE_LABEL: "s1"}}]
    controls = [_rc("c1", users=["u1"]), _rc("s1", type="service", users=["u2"])]
    resp = container_list_operation(_response(containers), _ctx("u1", controls=controls))
    assert [c["Id"] for c in resp.json()] == ["c1"]


def test_admin_decorates_every_controlled_container_and_removes_nothing() -> None:
    containers = [
        {"Id": "c1"},
        {"Id": "c2"},
        {"Id": "c3", "Labels": {SERVICE_LABEL: "s1"}},
    ]
    controls = [_rc("c1", users=["u2"]), _rc("s1", type="service", administrators_only=True)]
    resp = container_list_operation(_response(containers), _ctx("admin", admin=True, controls=controls))
    out = resp.json()
    assert len(out) == len(containers)
    assert out[0][DECORATION_KEY]["ResourceControl"]["ResourceId"] == "c1"
    assert out[1] == {"Id": "c2"}
    assert out[2][DECORATION_KEY]["ResourceControl"]["ResourceId"] == "s1"


def test_missing_identifier_propagates() -> None:
    with pytest.raises(ContainerIdentifierNotFoundError):
        container_list_operation(_response([{"Id": "c1"}, {"Names": ["/x"]}]), _ctx())
    with pytest.raises(ContainerIdentifierNotFoundError):
        container_list_operation(_response([{"Names": ["/x"]}]), _ctx("admin", admin=True))


def test_non_array_body_is_a_decoding_error() -> None:
    with pytest.raises(ResponseDecodingError):
        container_list_operation(_response({"Id": "c1"}), _ctx())
    with pytest.raises(ResponseDecodingError):
        container_list_operation(_response(["c1"]), _ctx())


def test_empty_list() -> None:
    resp = container_list_operation(_response([]), _ctx())
    assert resp.status_code == 200
    assert resp.json() == []
    assert resp.headers["Content-Length"] == "2"
