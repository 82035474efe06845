"""Entity pre- and post-processing passes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from choreosync.domain.errors import EntityValidationError
from choreosync.domain.model import InvalidEntityRefError
from choreosync.domain.ports.catalog import DeferredEntity

from .defaults import DEFAULT_SPEC_TYPES, pre_process
from .relations import RELATION_RULES, emit_relations, relation_pair
from .validation import REQUIRED_SPEC_FIELDS, validate_entity

if TYPE_CHECKING:
    from choreosync.domain.model import Entity


def post_process(entity: Entity, *, location_key: str) -> DeferredEntity:
    """Validate ``entity`` and attach the relations it emits.

    Raises :class:`~choreosync.domain.errors.EntityValidationError` if a required
    field is still missing or a referenced entity cannot be parsed.
    """

    validate_entity(entity)
    try:
        relations = tuple(emit_relations(entity))
    except InvalidEntityRefError as exc:
        raise EntityValidationError(str(exc), entity_ref=str(entity.ref)) from exc
    return DeferredEntity(entity=entity, location_key=location_key, relations=relations)


def process_entity(entity: Entity, *, location_key: str) -> DeferredEntity:
    return post_process(pre_process(entity), location_key=location_key)


__all__ = [
    "DEFAULT_SPEC_TYPES",
    "RELATION_RULES",
    "REQUIRED_SPEC_FIELDS",
    "emit_relations",
    "post_process",
    "pre_process",
    "process_entity",
    "relation_pair",
    "validate_entity",
]
