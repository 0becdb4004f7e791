from __future__ import annotations

import pytest

from dockgate.core.errors import ContainerIdentifierNotFoundError
from dockgate.proxy.json_fields import (
    extract_container_labels_from_inspect_object,
    extract_container_labels_from_list_object,
    extract_json_field,
    get_container_identifier,
    get_service_identifier_from_labels,
)


def test_extract_json_field_returns_only_objects() -> None:
    obj = {"Config": {"Image": "nginx"}, "Names": ["/a"], "State": "running", "Null": None}
    assert extract_json_field(obj, "Config") == {"Image": "nginx"}
    assert extract_json_field(obj, "Names") is None
    assert extract_json_field(obj, "State") is None
    assert extract_json_field(obj, "Null") is None
    assert extract_json_field(obj, "Missing") is None
    assert extract_json_field(["not", "an", "object"], "Config") is None


def test_get_container_identifier() -> None:
    assert get_container_identifier({"Id": "c1"}) == "c1"
    with pytest.raises(ContainerIdentifierNotFoundError, match="identifier not found"):
        get_container_identifier({"Names": ["/a"]})
    with pytest.raises(ContainerIdentifierNotFoundError):
        get_container_identifier({"Id": None})
    with pytest.raises(ContainerIdentifierNotFoundError):
        get_container_identifier({"Id": ""})


def test_label_lookup_differs_between_list_and_inspect_payloads() -> None:
    labels = {"com.docker.swarm.service.id": "s1"}
    list_entry = {"Id": "c1", "Labels": labels}
    inspect_obj = {"Id": "c1", "Config": {"Labels": labels}}

    assert extract_container_labels_from_list_object(list_entry) == labels
    assert extract_container_labels_from_inspect_object(list_entry) is None

    assert extract_container_labels_from_inspect_object(inspect_obj) == labels
    assert extract_container_labels_from_list_object(inspect_obj) is None


def test_inspect_labels_absent_is_not_an_error() -> None:
    assert extract_container_labels_from_inspect_object({"Id": "c1"}) is None
    assert extract_container_labels_from_inspect_object({"Id": "c1", "Config": {}}) is None
    # Docker emits `"Labels": null` for containers created without labels.
    assert extract_container_labels_from_inspect_object({"Id": "c1", "Config": {"Labels": None}}) is None


def test_service_identifier_from_labels() -> None:
    assert get_service_identifier_from_labels({"com.docker.swarm.service.id": "s1"}) == "s1"
    assert get_service_identifier_from_labels({"com.docker.swarm.service.id": " s1 "}) == " s1 "
    assert get_service_identifier_from_labels({"com.docker.swarm.service.id": ""}) is None
    assert get_service_identifier_from_labels({"com.docker.swarm.service.id": 42}) is None
    assert get_service_identifier_from_labels({"com.docker.swarm.service.name": "web"}) is None
    assert get_service_identifier_from_labels({}) is None
    assert get_service_identifier_from_labels(None) is None
