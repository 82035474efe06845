"""Generate scaffolder templates from component type definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from choreosync.domain.errors import TranslationError
from choreosync.domain.model import Entity, EntityKind
from choreosync.domain.model import annotations as ann

if TYPE_CHECKING:
    from choreosync.domain.model import ComponentTypeResource

    from .context import TranslationContext

TEMPLATE_TYPE: Final = "Component"
CREATE_COMPONENT_ACTION: Final = "openchoreo:component:create"
DEPLOYMENT_SOURCES: Final = ("build-from-source", "deploy-from-image", "external-ci")


def template_name(component_type: str) -> str:
    return f"template-{component_type}"


def format_title(name: str) -> str:
    """``web-service`` -> ``Web Service``."""

    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def translate_component_type_template(
    resource: ComponentTypeResource, context: TranslationContext
) -> Entity:
    """Convert a component type and its input-parameter schema into a Template entity."""

    schema = resource.input_parameters_schema
    if schema is None:
        raise TranslationError(f"Component type {resource.name} has no input parameter schema")
    if not isinstance(schema, dict):
        raise TranslationError(f"Component type {resource.name} has a malformed schema")

    title = resource.display_name or format_title(resource.name)
    annotations = {
        ann.MANAGED_BY_LOCATION: context.location_key,
        ann.MANAGED_BY_ORIGIN_LOCATION: context.location_key,
        ann.CTD_NAME: resource.name,
        ann.CTD_GENERATED: "true",
    }
    if resource.display_name:
        annotations[ann.CTD_DISPLAY_NAME] = resource.display_name

    return Entity(
        kind=EntityKind.TEMPLATE.value,
        name=template_name(resource.name),
        namespace=context.namespace,
        title=title,
        description=resource.description or f"Create a {title} component",
        tags=[],
        annotations=annotations,
        labels={},
        spec={
            "owner": context.default_owner,
            "type": TEMPLATE_TYPE,
            "parameters": _parameters(resource, schema, title, context.namespace),
            "steps": _steps(resource),
            "output": {
                "links": [
                    {
                        "title": "View Component",
                        "icon": "kind:component",
                        "entityRef": (
                            "component:${{ steps['create-component'].output.namespaceName }}"
                            "/${{ steps['create-component'].output.componentName }}"
                        ),
                    }
                ]
            },
        },
    )


def _parameters(
    resource: ComponentTypeResource,
    schema: dict[str, Any],
    title: str,
    namespace: str,
) -> list[dict[str, Any]]:
    workflow_field: dict[str, Any] = {
        "title": "Build Workflow",
        "type": "string",
        "description": "Select the build workflow to use for this component",
        "ui:field": "BuildWorkflowPicker",
        "ui:options": {"namespaceName": namespace},
    }
    if resource.allowed_workflows:
        workflow_field["enum"] = list(resource.allowed_workflows)

    build_and_deploy = {
        "title": "Build & Deploy",
        "required": ["deploymentSource"],
        "properties": {
            "deploymentSource": {
                "title": "Deployment Source",
                "type": "string",
                "description": "Choose how to deploy your component",
                "enum": list(DEPLOYMENT_SOURCES),
                "ui:field": "DeploymentSourcePicker",
            },
            "workflow_name": workflow_field,
        },
    }
    workload_details = {
        "title": f"{title} Details",
        "properties": {
            "workloadDetails": {
                "title": "Workload Details",
                "type": "object",
                "ui:field": "WorkloadDetailsField",
                "ui:options": {
                    "namespaceName": namespace,
                    "workloadType": resource.workload_type,
                    "ctdSchema": schema,
                    "ctdDisplayName": title,
                    "allowedTraits": list(resource.allowed_traits),
                },
            }
        },
    }
    metadata = {
        "title": "Component Metadata",
        "required": ["project_namespace", "component_name"],
        "properties": {
            "project_namespace": {
                "title": "Project & Namespace",
                "type": "object",
                "ui:field": "ProjectNamespaceField",
                "ui:options": {"defaultNamespace": namespace},
                "properties": {
                    "project_name": {"type": "string"},
                    "namespace_name": {"type": "string"},
                },
                "required": ["project_name", "namespace_name"],
            },
            "component_name": {
                "title": "Component Name",
                "type": "string",
                "description": "Unique name for your component",
                "ui:field": "ComponentNamePicker",
            },
            "displayName": {"title": "Display Name", "type": "string"},
            "description": {"title": "Description", "type": "string"},
        },
    }
    return [build_and_deploy, workload_details, metadata]


def _steps(resource: ComponentTypeResource) -> list[dict[str, Any]]:
    return [
        {
            "id": "create-component",
            "name": "Create OpenChoreo Component",
            "action": CREATE_COMPONENT_ACTION,
            "input": {
                "namespaceName": "${{ parameters.project_namespace.namespace_name }}",
                "projectName": "${{ parameters.project_namespace.project_name }}",
                "componentName": "${{ parameters.component_name }}",
                "displayName": "${{ parameters.displayName }}",
                "description": "${{ parameters.description }}",
                "componentType": resource.name,
                "workloadType": resource.workload_type,
                "deploymentSource": "${{ parameters.deploymentSource }}",
                "workflowName": "${{ parameters.workflow_name }}",
                "workloadDetails": "${{ parameters.workloadDetails }}",
            },
        }
    ]
