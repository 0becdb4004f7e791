"""Resource control resolution, access decision and decoration.

Admin bypass is the caller's job: `can_user_access_resource` only answers for regular users.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from dockgate.core.models import ResourceControl

# Key under which access-control metadata is attached to upstream objects.
DECORATION_KEY = "Dockgate"
DECORATION_RESOURCE_CONTROL_KEY = "ResourceControl"


def get_resource_control_by_resource_id(
    resource_id: str, resource_controls: Iterable[ResourceControl]
) -> Optional[ResourceControl]:
    """Return the record bound to `resource_id` (exact match on the id or a sub-resource id)."""
    for rc in resource_controls:
        if rc.resource_id == resource_id:
            return rc
        if resource_id in rc.sub_resource_ids:
            return rc
    return None


def can_user_access_resource(user_id: str, user_team_ids: Iterable[str], resource_control: ResourceControl) -> bool:
    if resource_control.public:
        return True
    if resource_control.administrators_only:
        return False

    for access in resource_control.user_accesses:
        if access.user_id == user_id:
            return True

    teams = set(user_team_ids)
    for access in resource_control.team_accesses:
        if access.team_id in teams:
            return True
    return False


def decorate_object(obj: Dict[str, Any], resource_control: ResourceControl) -> Dict[str, Any]:
    """
    Attach `resource_control` to `obj` in place and return it.

    Existing metadata under the decoration key is kept; only the resource control slot is replaced,
    so decorating twice with the same record is a no-op.
    """
    metadata = obj.get(DECORATION_KEY)
    if not isinstance(metadata, dict):
        metadata = {}
        obj[DECORATION_KEY] = metadata
    metadata[DECORATION_RESOURCE_CONTROL_KEY] = resource_control.to_payload()
    return obj
