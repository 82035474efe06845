"""Relation emission rules.

Every rule is a pure function of one entity and returns forward/inverse pairs;
no rule ever emits a one-directional edge.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from choreosync.domain.model import (
    DEFAULT_NAMESPACE,
    EntityKind,
    EntityRef,
    Relation,
    RelationType,
    parse_entity_ref,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from choreosync.domain.model import Entity

type RelationRule = Callable[[Entity], list[Relation]]


def relation_pair(source: EntityRef, relation: RelationType, target: EntityRef) -> list[Relation]:
    forward = Relation(source=source, type=relation, target=target)
    return [forward, forward.inverse()]


def _names(value: object) -> list[str]:
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list | tuple):
        return [item for item in value if isinstance(item, str) and item]
    return []


def domain_membership(entity: Entity) -> list[Relation]:
    """``partOf``/``hasPart`` towards ``spec.domain``, relative to the entity's namespace."""

    domain = entity.spec.get("domain")
    if not isinstance(domain, str) or not domain:
        return []
    target = parse_entity_ref(
        domain, default_kind=EntityKind.DOMAIN.ref_kind, default_namespace=entity.namespace
    )
    return relation_pair(entity.ref, RelationType.PART_OF, target)


def observability(entity: Entity) -> list[Relation]:
    """``observedBy``/``observes`` towards ``spec.observabilityPlaneRef``.

    Unqualified references resolve into the default namespace, unlike domain refs.
    """

    plane = entity.spec.get("observabilityPlaneRef")
    if not isinstance(plane, str) or not plane:
        return []
    target = parse_entity_ref(
        plane,
        default_kind=EntityKind.OBSERVABILITY_PLANE.ref_kind,
        default_namespace=DEFAULT_NAMESPACE,
    )
    return relation_pair(entity.ref, RelationType.OBSERVED_BY, target)


def pipeline_usage(entity: Entity) -> list[Relation]:
    """``usesPipeline``/``pipelineUsedBy`` from each referencing project to the pipeline."""

    relations: list[Relation] = []
    for project in _names(entity.spec.get("projectRefs")):
        source = parse_entity_ref(
            project, default_kind=EntityKind.SYSTEM.ref_kind, default_namespace=entity.namespace
        )
        relations.extend(relation_pair(source, RelationType.USES_PIPELINE, entity.ref))
    return relations


def promotions(entity: Entity) -> list[Relation]:
    """``promotesTo``/``promotedBy`` once per distinct environment on any promotion path."""

    relations: list[Relation] = []
    emitted: set[str] = set()
    paths = entity.spec.get("promotionPaths") or []
    for path in paths:
        if not isinstance(path, dict):
            continue
        names = [path.get("sourceEnvironment")]
        names.extend(
            target.get("name")
            for target in path.get("targetEnvironments") or []
            if isinstance(target, dict)
        )
        for name in names:
            if not isinstance(name, str) or not name or name in emitted:
                continue
            emitted.add(name)
            environment = parse_entity_ref(
                name,
                default_kind=EntityKind.ENVIRONMENT.ref_kind,
                default_namespace=entity.namespace,
            )
            relations.extend(relation_pair(entity.ref, RelationType.PROMOTES_TO, environment))
    return relations


def hosting(entity: Entity) -> list[Relation]:
    """``hostedOn``/``hosts`` between an environment and its data plane."""

    data_plane = entity.spec.get("dataPlaneRef")
    if not isinstance(data_plane, str) or not data_plane:
        return []
    target = parse_entity_ref(
        data_plane,
        default_kind=EntityKind.DATAPLANE.ref_kind,
        default_namespace=entity.namespace,
    )
    return relation_pair(entity.ref, RelationType.HOSTED_ON, target)


def workflow_usage(entity: Entity) -> list[Relation]:
    relations: list[Relation] = []
    for workflow in _names(entity.spec.get("allowedWorkflows")):
        target = parse_entity_ref(
            workflow,
            default_kind=EntityKind.COMPONENT_WORKFLOW.ref_kind,
            default_namespace=entity.namespace,
        )
        relations.extend(relation_pair(entity.ref, RelationType.USES_WORKFLOW, target))
    return relations


def system_membership(entity: Entity) -> list[Relation]:
    system = entity.spec.get("system")
    if not isinstance(system, str) or not system:
        return []
    target = parse_entity_ref(
        system, default_kind=EntityKind.SYSTEM.ref_kind, default_namespace=entity.namespace
    )
    return relation_pair(entity.ref, RelationType.PART_OF, target)


def api_provision(entity: Entity) -> list[Relation]:
    relations: list[Relation] = []
    for api in _names(entity.spec.get("providesApis")):
        target = parse_entity_ref(
            api, default_kind=EntityKind.API.ref_kind, default_namespace=entity.namespace
        )
        relations.extend(relation_pair(entity.ref, RelationType.PROVIDES_API, target))
    return relations


def ownership(entity: Entity) -> list[Relation]:
    owner = entity.spec.get("owner")
    if not isinstance(owner, str) or not owner:
        return []
    target = parse_entity_ref(
        owner, default_kind=EntityKind.GROUP.ref_kind, default_namespace=DEFAULT_NAMESPACE
    )
    return relation_pair(entity.ref, RelationType.OWNED_BY, target)


RELATION_RULES: Final[dict[str, tuple[RelationRule, ...]]] = {
    EntityKind.DOMAIN: (ownership,),
    EntityKind.SYSTEM: (domain_membership, ownership),
    EntityKind.COMPONENT: (system_membership, api_provision, ownership),
    EntityKind.API: (system_membership, ownership),
    EntityKind.ENVIRONMENT: (domain_membership, hosting),
    EntityKind.DATAPLANE: (domain_membership, observability),
    EntityKind.BUILD_PLANE: (domain_membership, observability),
    EntityKind.OBSERVABILITY_PLANE: (domain_membership,),
    EntityKind.DEPLOYMENT_PIPELINE: (pipeline_usage, promotions, ownership),
    EntityKind.COMPONENT_TYPE: (domain_membership, workflow_usage),
    EntityKind.TRAIT_TYPE: (domain_membership,),
    EntityKind.WORKFLOW: (domain_membership,),
    EntityKind.COMPONENT_WORKFLOW: (domain_membership,),
    EntityKind.TEMPLATE: (ownership,),
}


def emit_relations(entity: Entity, rules: Iterable[RelationRule] | None = None) -> list[Relation]:
    """Apply the kind's rules and return de-duplicated relations in emission order."""

    active_rules = RELATION_RULES.get(entity.kind, ()) if rules is None else rules
    seen: set[Relation] = set()
    relations: list[Relation] = []
    for rule in active_rules:
        for relation in rule(entity):
            if relation not in seen:
                seen.add(relation)
                relations.append(relation)
    return relations
