"""Generic catalog entities, references and relations."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_NAMESPACE: Final[str] = "default"


class EntityKind(StrEnum):
    DOMAIN = "Domain"
    SYSTEM = "System"
    COMPONENT = "Component"
    API = "API"
    GROUP = "Group"
    ENVIRONMENT = "Environment"
    DATAPLANE = "Dataplane"
    BUILD_PLANE = "BuildPlane"
    OBSERVABILITY_PLANE = "ObservabilityPlane"
    DEPLOYMENT_PIPELINE = "DeploymentPipeline"
    COMPONENT_TYPE = "ComponentType"
    TRAIT_TYPE = "TraitType"
    WORKFLOW = "Workflow"
    COMPONENT_WORKFLOW = "ComponentWorkflow"
    TEMPLATE = "Template"

    @property
    def ref_kind(self) -> str:
        return self.value.lower()

    @classmethod
    def _missing_(cls, value: object) -> EntityKind | None:
        if isinstance(value, str):
            folded = value.lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return None


def canonical_kind(kind: str) -> str:
    """Return the known spelling of ``kind``, matched case-insensitively."""

    try:
        return EntityKind(kind).value
    except ValueError:
        return kind


class InvalidEntityRefError(ValueError):
    """Raised when an entity reference string cannot be parsed."""


@dataclass(slots=True, frozen=True, order=True)
class EntityRef:
    """Identity of a catalog entity. Kind is stored lower-cased."""

    kind: str
    namespace: str
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", self.kind.lower())

    def __str__(self) -> str:
        return f"{self.kind}:{self.namespace}/{self.name}"


def parse_entity_ref(
    value: str,
    *,
    default_kind: str | None = None,
    default_namespace: str = DEFAULT_NAMESPACE,
) -> EntityRef:
    """Parse ``[kind:][namespace/]name`` into an :class:`EntityRef`.

    Missing parts are taken from the defaults. A missing kind without a
    ``default_kind`` is an error.
    """

    text = value.strip()
    kind: str | None = default_kind
    if ":" in text:
        kind, _, text = text.partition(":")
    namespace = default_namespace
    if "/" in text:
        namespace, _, text = text.partition("/")
    if not kind or not namespace or not text:
        raise InvalidEntityRefError(f"Invalid entity reference: {value!r}")
    return EntityRef(kind=kind, namespace=namespace, name=text)


class RelationType(StrEnum):
    PART_OF = "partOf"
    HAS_PART = "hasPart"
    OBSERVED_BY = "observedBy"
    OBSERVES = "observes"
    USES_PIPELINE = "usesPipeline"
    PIPELINE_USED_BY = "pipelineUsedBy"
    PROMOTES_TO = "promotesTo"
    PROMOTED_BY = "promotedBy"
    HOSTED_ON = "hostedOn"
    HOSTS = "hosts"
    USES_WORKFLOW = "usesWorkflow"
    WORKFLOW_USED_BY = "workflowUsedBy"
    PROVIDES_API = "providesApi"
    API_PROVIDED_BY = "apiProvidedBy"
    OWNED_BY = "ownedBy"
    OWNER_OF = "ownerOf"

    @property
    def inverse(self) -> RelationType:
        return _INVERSES[self]


_FORWARD_PAIRS: Final[tuple[tuple[RelationType, RelationType], ...]] = (
    (RelationType.PART_OF, RelationType.HAS_PART),
    (RelationType.OBSERVED_BY, RelationType.OBSERVES),
    (RelationType.USES_PIPELINE, RelationType.PIPELINE_USED_BY),
    (RelationType.PROMOTES_TO, RelationType.PROMOTED_BY),
    (RelationType.HOSTED_ON, RelationType.HOSTS),
    (RelationType.USES_WORKFLOW, RelationType.WORKFLOW_USED_BY),
    (RelationType.PROVIDES_API, RelationType.API_PROVIDED_BY),
    (RelationType.OWNED_BY, RelationType.OWNER_OF),
)

_INVERSES: Final[dict[RelationType, RelationType]] = {
    **{forward: inverse for forward, inverse in _FORWARD_PAIRS},
    **{inverse: forward for forward, inverse in _FORWARD_PAIRS},
}


@dataclass(slots=True, frozen=True, order=True)
class Relation:
    source: EntityRef
    type: RelationType
    target: EntityRef

    def inverse(self) -> Relation:
        return Relation(source=self.target, type=self.type.inverse, target=self.source)


@dataclass(slots=True)
class Entity:
    """A kind-tagged catalog record."""

    kind: str
    name: str
    namespace: str = DEFAULT_NAMESPACE
    title: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    spec: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.kind = canonical_kind(self.kind)

    @property
    def ref(self) -> EntityRef:
        return EntityRef(kind=self.kind, namespace=self.namespace, name=self.name)

    def copy(self) -> Entity:
        return Entity(
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
            title=self.title,
            description=self.description,
            tags=list(self.tags),
            annotations=dict(self.annotations),
            labels=dict(self.labels),
            spec=deepcopy(self.spec),
        )

    def to_document(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "tags": list(self.tags),
            "annotations": dict(self.annotations),
            "labels": dict(self.labels),
        }
        if self.title is not None:
            metadata["title"] = self.title
        if self.description is not None:
            metadata["description"] = self.description
        return {"kind": self.kind, "metadata": metadata, "spec": deepcopy(self.spec)}

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Entity:
        """Build an entity from ``{kind, metadata: {...}, spec}``."""

        try:
            kind = str(document["kind"])
            metadata = document["metadata"]
            name = str(metadata["name"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Entity document is missing required field: {exc}") from exc
        return cls(
            kind=kind,
            name=name,
            namespace=str(metadata.get("namespace") or DEFAULT_NAMESPACE),
            title=metadata.get("title"),
            description=metadata.get("description"),
            tags=[str(tag) for tag in metadata.get("tags") or ()],
            annotations={str(k): str(v) for k, v in (metadata.get("annotations") or {}).items()},
            labels={str(k): str(v) for k, v in (metadata.get("labels") or {}).items()},
            spec=dict(document.get("spec") or {}),
        )
