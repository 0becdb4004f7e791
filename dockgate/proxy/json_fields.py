"""Field lookups for Docker Engine container payloads.

Container schema references:
- list:    https://docs.docker.com/engine/api/v1.41/#operation/ContainerList    (labels under `Labels`)
- inspect: https://docs.docker.com/engine/api/v1.41/#operation/ContainerInspect (labels under `Config.Labels`)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from dockgate.core.errors import ContainerIdentifierNotFoundError

CONTAINER_IDENTIFIER = "Id"
CONTAINER_CONFIG = "Config"
CONTAINER_LABELS = "Labels"
CONTAINER_LABEL_FOR_SERVICE_IDENTIFIER = "com.docker.swarm.service.id"


def extract_json_field(obj: Any, name: str) -> Optional[Dict[str, Any]]:
    """Return the object stored under `name`, or None if missing / not an object."""
    if not isinstance(obj, dict):
        return None
    value = obj.get(name)
    if isinstance(value, dict):
        return value
    return None


def get_container_identifier(obj: Dict[str, Any]) -> str:
    value = obj.get(CONTAINER_IDENTIFIER)
    if not isinstance(value, str) or not value:
        raise ContainerIdentifierNotFoundError()
    return value


def extract_container_labels_from_list_object(obj: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return extract_json_field(obj, CONTAINER_LABELS)


def extract_container_labels_from_inspect_object(obj: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    config = extract_json_field(obj, CONTAINER_CONFIG)
    if config is None:
        return None
    return extract_json_field(config, CONTAINER_LABELS)


def get_service_identifier_from_labels(labels: Optional[Dict[str, Any]]) -> Optional[str]:
    """Swarm service owning the container, if the container was spawned by one."""
    if not labels:
        return None
    value = labels.get(CONTAINER_LABEL_FOR_SERVICE_IDENTIFIER)
    if not isinstance(value, str):
        return None
    return value or None
