"""
Read-only access file: admins, team membership and resource controls.

Example:

    admins: [alice]
    teams:
      dev: [bob, carol]
    resource_controls:
      - resource_id: 4f9c...        # container id
        user_accesses: [{user_id: bob}]
      - resource_id: x1y2...        # swarm service id
        type: service
        team_accesses: [{team_id: dev}]

The file is re-read for every request, so edits apply without a restart and each request works
on its own snapshot.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dockgate.core.errors import AccessFileError
from dockgate.core.models import OperationContext, ResourceControl

logger = logging.getLogger(__name__)


def _as_str_list(v):  # type: ignore[no-untyped-def]
    if v is None:
        return []
    if isinstance(v, (str, int)):
        return [str(v)]
    return [str(x) for x in v]


class AccessSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    admins: List[str] = Field(default_factory=list)
    teams: Dict[str, List[str]] = Field(default_factory=dict)
    resource_controls: List[ResourceControl] = Field(default_factory=list)

    @field_validator("admins", mode="before")
    @classmethod
    def _coerce_admins(cls, v):  # type: ignore[no-untyped-def]
        return _as_str_list(v)

    @field_validator("teams", mode="before")
    @classmethod
    def _coerce_teams(cls, v):  # type: ignore[no-untyped-def]
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        return {str(k): _as_str_list(members) for k, members in v.items()}

    def teams_for_user(self, user_id: str) -> frozenset:
        return frozenset(team for team, members in self.teams.items() if user_id in members)


def load_access_file(path: str) -> AccessSnapshot:
    p = Path(path)
    if not p.exists():
        logger.warning("Access file %s not found; no resource controls apply", path)
        return AccessSnapshot()

    try:
        with open(p, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise AccessFileError(f"Unable to read access file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise AccessFileError(f"Access file {path} must contain a mapping at the top level")

    try:
        return AccessSnapshot.model_validate(raw)
    except ValidationError as e:
        raise AccessFileError(f"Invalid access file {path}: {e}") from e


def build_operation_context(snapshot: AccessSnapshot, user_id: str) -> OperationContext:
    return OperationContext(
        is_admin=user_id in snapshot.admins,
        user_id=user_id,
        user_team_ids=snapshot.teams_for_user(user_id),
        resource_controls=tuple(snapshot.resource_controls),
    )
