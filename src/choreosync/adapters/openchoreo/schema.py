"""Pydantic models shared by both OpenChoreo API versions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from choreosync.domain.model import (
    AgentConnection,
    PromotionPath,
    PromotionTarget,
    WorkloadEndpoint,
)


def ref_name(value: object) -> str | None:
    """Reduce a plain name or a ``{kind, name}`` reference to the name."""

    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        name = cast(Mapping[str, object], value).get("name")
        return name if isinstance(name, str) and name else None
    return None


class OpenChoreoModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class AgentConnectionPayload(OpenChoreoModel):
    connected: bool = False
    connected_agents: int = 0
    last_heartbeat_time: str | None = None
    last_connected_time: str | None = None
    last_disconnected_time: str | None = None
    message: str | None = None

    def to_record(self) -> AgentConnection:
        return AgentConnection(
            connected=self.connected,
            connected_agents=self.connected_agents,
            last_heartbeat_time=self.last_heartbeat_time,
            last_connected_time=self.last_connected_time,
            last_disconnected_time=self.last_disconnected_time,
            message=self.message,
        )


class SchemaPayload(OpenChoreoModel):
    content: str | None = None


class EndpointPayload(OpenChoreoModel):
    type: str = "HTTP"
    port: int
    schema_: SchemaPayload | None = Field(default=None, alias="schema")


def endpoint_records(
    endpoints: Mapping[str, EndpointPayload] | None,
) -> tuple[WorkloadEndpoint, ...]:
    if not endpoints:
        return ()
    return tuple(
        WorkloadEndpoint(
            name=name,
            type=endpoint.type,
            port=endpoint.port,
            schema_content=endpoint.schema_.content if endpoint.schema_ else None,
        )
        for name, endpoint in endpoints.items()
    )


class RepositoryRevision(OpenChoreoModel):
    branch: str | None = None


class RepositoryPayload(OpenChoreoModel):
    url: str | None = None
    revision: RepositoryRevision | None = None

    @property
    def branch(self) -> str | None:
        return self.revision.branch if self.revision else None


class PromotionTargetPayload(OpenChoreoModel):
    name: str
    requires_approval: bool | None = None
    is_manual_approval_required: bool | None = None


class PromotionPathPayload(OpenChoreoModel):
    source_environment_ref: str | None = None
    target_environment_refs: list[PromotionTargetPayload] = Field(default_factory=list)

    _normalize_ref = field_validator("source_environment_ref", mode="before")(ref_name)

    @field_validator("target_environment_refs", mode="before")
    @classmethod
    def _accept_plain_names(cls, value: object) -> object:
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value

    def to_record(self) -> PromotionPath:
        return PromotionPath(
            source_environment=self.source_environment_ref,
            targets=tuple(
                PromotionTarget(
                    name=target.name,
                    requires_approval=target.requires_approval,
                    is_manual_approval_required=target.is_manual_approval_required,
                )
                for target in self.target_environment_refs
            ),
        )
