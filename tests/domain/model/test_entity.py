from __future__ import annotations

import pytest

from choreosync.domain.model import (
    Entity,
    EntityRef,
    InvalidEntityRefError,
    Relation,
    RelationType,
    parse_entity_ref,
)


def test_entity_ref_lowercases_kind_and_formats() -> None:
    ref = EntityRef(kind="Component", namespace="acme", name="cart")

    assert ref.kind == "component"
    assert str(ref) == "component:acme/cart"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("component:acme/cart", EntityRef("component", "acme", "cart")),
        ("acme/cart", EntityRef("system", "acme", "cart")),
        ("cart", EntityRef("system", "default", "cart")),
        ("Group:openchoreo-users", EntityRef("group", "default", "openchoreo-users")),
    ],
)
def test_parse_entity_ref_fills_defaults(value: str, expected: EntityRef) -> None:
    assert parse_entity_ref(value, default_kind="system") == expected


def test_parse_entity_ref_requires_a_kind() -> None:
    with pytest.raises(InvalidEntityRefError):
        parse_entity_ref("acme/cart")


def test_every_relation_type_has_a_distinct_inverse() -> None:
    for relation_type in RelationType:
        assert relation_type.inverse is not relation_type
        assert relation_type.inverse.inverse is relation_type


def test_relation_inverse_swaps_endpoints() -> None:
    relation = Relation(
        source=EntityRef("environment", "acme", "dev"),
        type=RelationType.HOSTED_ON,
        target=EntityRef("dataplane", "acme", "dp"),
    )

    inverse = relation.inverse()

    assert inverse.source == relation.target
    assert inverse.target == relation.source
    assert inverse.type is RelationType.HOSTS


def test_entity_document_keeps_metadata_and_spec() -> None:
    entity = Entity(
        kind="System",
        name="shop",
        namespace="acme",
        title="Shop",
        tags=["openchoreo"],
        annotations={"openchoreo.io/project": "shop"},
        spec={"owner": "group:default/team"},
    )

    restored = Entity.from_document(entity.to_document())

    assert restored == entity
    assert restored.ref == EntityRef("system", "acme", "shop")


def test_entity_from_document_rejects_missing_name() -> None:
    with pytest.raises(ValueError, match="missing required field"):
        Entity.from_document({"kind": "System", "metadata": {}})


def test_entity_copy_is_deep_for_spec() -> None:
    entity = Entity(kind="DeploymentPipeline", name="pipe", spec={"projectRefs": ["a"]})

    copied = entity.copy()
    copied.spec["projectRefs"].append("b")

    assert entity.spec["projectRefs"] == ["a"]


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("component", "Component"), ("DEPLOYMENTPIPELINE", "DeploymentPipeline"), ("api", "API")],
)
def test_entity_kind_is_matched_case_insensitively(kind: str, expected: str) -> None:
    document = {"kind": kind, "metadata": {"name": "web", "namespace": "acme"}}

    assert Entity.from_document(document).kind == expected
    assert Entity(kind=kind, name="web").kind == expected


def test_unknown_entity_kind_is_kept_verbatim() -> None:
    assert Entity(kind="Resource", name="bucket").kind == "Resource"
