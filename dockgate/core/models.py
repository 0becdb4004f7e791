"""Canonical domain models.

Resource controls are parsed from the access file (snake_case keys) and serialized back into
upstream payloads with Docker-style CamelCase keys when decorating objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BaseModelStrict(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class UserResourceAccess(BaseModelStrict):
    user_id: str = Field(alias="UserId")
    access_level: int = Field(default=1, alias="AccessLevel")

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # YAML turns bare numeric ids into ints.
        return str(v) if isinstance(v, int) else v


class TeamResourceAccess(BaseModelStrict):
    team_id: str = Field(alias="TeamId")
    access_level: int = Field(default=1, alias="AccessLevel")

    @field_validator("team_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class ResourceControl(BaseModelStrict):
    """Ownership / access policy bound to a single resource identifier."""

    id: str = Field(default="", alias="Id")
    resource_id: str = Field(alias="ResourceId")
    sub_resource_ids: List[str] = Field(default_factory=list, alias="SubResourceIds")
    type: Literal["container", "service", "volume"] = Field(default="container", alias="Type")
    administrators_only: bool = Field(default=False, alias="AdministratorsOnly")
    public: bool = Field(default=False, alias="Public")
    user_accesses: List[UserResourceAccess] = Field(default_factory=list, alias="UserAccesses")
    team_accesses: List[TeamResourceAccess] = Field(default_factory=list, alias="TeamAccesses")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class OperationContext:
    """
    Per-request view of the caller and the resource controls relevant to the request.

    Built once per inbound request and never shared across requests.
    """

    is_admin: bool
    user_id: str
    user_team_ids: FrozenSet[str] = field(default_factory=frozenset)
    resource_controls: Tuple[ResourceControl, ...] = ()
