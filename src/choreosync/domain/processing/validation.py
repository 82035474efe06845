"""Post-processing validation of required entity fields."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from choreosync.domain.errors import EntityValidationError
from choreosync.domain.model import EntityKind

if TYPE_CHECKING:
    from choreosync.domain.model import Entity

REQUIRED_SPEC_FIELDS: Final[dict[str, tuple[str, ...]]] = {
    EntityKind.DOMAIN: ("owner",),
    EntityKind.SYSTEM: ("owner",),
    EntityKind.COMPONENT: ("type", "lifecycle", "owner"),
    EntityKind.API: ("type", "lifecycle", "owner", "definition"),
    EntityKind.ENVIRONMENT: ("type",),
    EntityKind.DATAPLANE: ("type",),
    EntityKind.BUILD_PLANE: ("type",),
    EntityKind.OBSERVABILITY_PLANE: ("type",),
    EntityKind.DEPLOYMENT_PIPELINE: ("type", "owner"),
    EntityKind.COMPONENT_TYPE: ("type",),
    EntityKind.TRAIT_TYPE: ("type",),
    EntityKind.WORKFLOW: ("type",),
    EntityKind.COMPONENT_WORKFLOW: ("type",),
    EntityKind.TEMPLATE: ("type", "owner"),
}


def validate_entity(entity: Entity) -> None:
    """Raise :class:`EntityValidationError` when a required field is missing."""

    ref = f"{entity.kind}:{entity.namespace or '?'}/{entity.name or '?'}"
    if not entity.kind or not entity.name or not entity.namespace:
        raise EntityValidationError("entity must have kind, namespace and name", entity_ref=ref)
    for field_name in REQUIRED_SPEC_FIELDS.get(entity.kind, ()):
        value = entity.spec.get(field_name)
        if value is None or value == "":
            raise EntityValidationError(
                f"{entity.kind} entity must have spec.{field_name}", entity_ref=ref
            )
