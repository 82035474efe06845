"""Pure translators from normalized upstream resources to catalog entities."""

from __future__ import annotations

from .context import TranslationContext, managed_entity
from .dispatch import missing_translators, translate_resource
from .projects import api_entity_name, endpoint_api_type, is_service_component
from .templates import template_name, translate_component_type_template

__all__ = [
    "TranslationContext",
    "api_entity_name",
    "endpoint_api_type",
    "is_service_component",
    "managed_entity",
    "missing_translators",
    "template_name",
    "translate_component_type_template",
    "translate_resource",
]
