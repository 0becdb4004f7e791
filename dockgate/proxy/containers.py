"""
Container list / inspect operations.

Both operations read an upstream Docker Engine response, apply resource controls for the
caller described by the OperationContext, and rewrite the response in place.

Containers spawned by a Swarm service inherit the service's resource control: the owning service
is discovered through the `com.docker.swarm.service.id` container label.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from dockgate.authz.access import can_user_access_resource, decorate_object, get_resource_control_by_resource_id
from dockgate.core.errors import ResponseDecodingError
from dockgate.core.models import OperationContext, ResourceControl
from dockgate.proxy.json_fields import (
    extract_container_labels_from_inspect_object,
    extract_container_labels_from_list_object,
    get_container_identifier,
    get_service_identifier_from_labels,
)
from dockgate.proxy.response import (
    UpstreamResponse,
    get_response_as_json_array,
    get_response_as_json_object,
    rewrite_access_denied_response,
    rewrite_response,
)

logger = logging.getLogger(__name__)


def container_list_operation(response: UpstreamResponse, ctx: OperationContext) -> UpstreamResponse:
    """Filter (regular users) or decorate (admins) a ContainerList response."""
    containers = get_response_as_json_array(response)

    if ctx.is_admin:
        containers = decorate_container_list(containers, ctx.resource_controls)
    else:
        containers = filter_container_list(containers, ctx)

    return rewrite_response(response, containers, 200)


def container_inspect_operation(response: UpstreamResponse, ctx: OperationContext) -> UpstreamResponse:
    """
    Guard a ContainerInspect response.

    The container's own resource control is checked first, then the one of its owning service.
    The first failing check denies the whole response.
    """
    container = get_response_as_json_object(response)
    container_id = get_container_identifier(container)

    resource_ids = [container_id]
    service_id = get_service_identifier_from_labels(extract_container_labels_from_inspect_object(container))
    if service_id:
        resource_ids.append(service_id)

    for resource_id in resource_ids:
        rc = get_resource_control_by_resource_id(resource_id, ctx.resource_controls)
        if rc is None:
            continue
        if not ctx.is_admin and not can_user_access_resource(ctx.user_id, ctx.user_team_ids, rc):
            logger.info("Access denied: user=%s container=%s resource=%s", ctx.user_id, container_id, resource_id)
            return rewrite_access_denied_response(response)
        decorate_object(container, rc)

    return rewrite_response(response, container, 200)


def _as_container_object(item: Any) -> Dict[str, Any]:
    if not isinstance(item, dict):
        raise ResponseDecodingError(f"Expected container entries to be JSON objects, got {type(item).__name__}")
    return item


def _resource_control_for_list_entry(
    container: Dict[str, Any], resource_controls: Sequence[ResourceControl]
) -> Optional[ResourceControl]:
    # Own record first, owning service as fallback.
    rc = get_resource_control_by_resource_id(get_container_identifier(container), resource_controls)
    if rc is not None:
        return rc
    service_id = get_service_identifier_from_labels(extract_container_labels_from_list_object(container))
    if service_id is None:
        return None
    return get_resource_control_by_resource_id(service_id, resource_controls)


def decorate_container_list(
    containers: List[Any], resource_controls: Sequence[ResourceControl]
) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for item in containers:
        container = _as_container_object(item)
        rc = _resource_control_for_list_entry(container, resource_controls)
        if rc is not None:
            decorate_object(container, rc)
        out.append(container)
    return out


def filter_container_list(containers: List[Any], ctx: OperationContext) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for item in containers:
        container = _as_container_object(item)
        rc = _resource_control_for_list_entry(container, ctx.resource_controls)
        if rc is None or can_user_access_resource(ctx.user_id, ctx.user_team_ids, rc):
            out.append(container)
    if len(out) != len(containers):
        logger.debug("Filtered container list for user=%s: %d -> %d", ctx.user_id, len(containers), len(out))
    return out
