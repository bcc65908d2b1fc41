from __future__ import annotations

import pytest

from mpatch.errors import NoMatchError, ResourceError, SelectorError
from mpatch.resource import Resource, ResourceCollection, Selector, matches_selector, parse_selector
from mpatch.resource.ids import Gvk, ResId
from mpatch.resource.resource import (
    INDEX_ANNOTATION,
    PATH_ANNOTATION,
    PREVIOUS_KINDS_ANNOTATION,
    PREVIOUS_NAMES_ANNOTATION,
)

DEPLOYMENT = Gvk(group="apps", version="v1", kind="Deployment")


def _names(resources) -> list[str]:
    return [f"{item.kind}/{item.name}" for item in resources]


def test_collection_stamps_provenance(collection: ResourceCollection) -> None:
    web = collection.get_by_id(ResId(gvk=DEPLOYMENT, name="web"))

    assert web.internal_annotations()[PATH_ANNOTATION] == "manifests.yaml"
    assert web.internal_annotations()[INDEX_ANNOTATION] == "0"
    assert "owner" not in web.internal_annotations()


def test_empty_namespace_matches_default(collection: ResourceCollection) -> None:
    web = collection.get_by_id(ResId(gvk=DEPLOYMENT, name="web", namespace="default"))
    assert web.name == "web"

    with pytest.raises(NoMatchError):
        collection.get_by_id(ResId(gvk=DEPLOYMENT, name="worker"))


def test_duplicate_ids_are_rejected(collection: ResourceCollection) -> None:
    with pytest.raises(ResourceError, match="already registered"):
        collection.append(Resource({"apiVersion": "v1", "kind": "Service", "metadata": {"name": "web"}}))


def test_previous_ids_keep_renamed_resource_addressable(collection: ResourceCollection) -> None:
    web = collection.get_by_id(ResId(gvk=DEPLOYMENT, name="web"))
    web.store_previous_id()
    web.set_name("web-v2")

    assert web.get_annotations()[PREVIOUS_NAMES_ANNOTATION] == "web"
    assert web.get_annotations()[PREVIOUS_KINDS_ANNOTATION] == "Deployment"
    assert web.org_id().name == "web"
    assert collection.get_by_id(ResId(gvk=DEPLOYMENT, name="web")) is web
    assert collection.get_by_id(ResId(gvk=DEPLOYMENT, name="web-v2")) is web
    assert _names(collection.select(Selector(name="web"))) == ["Deployment/web-v2", "Service/web"]


def test_store_previous_id_appends() -> None:
    resource = Resource({"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "a"}})
    resource.store_previous_id()
    resource.set_name("b")
    resource.store_previous_id()

    assert [item.name for item in resource.previous_ids()] == ["a", "b"]
    assert resource.get_annotations()[PREVIOUS_NAMES_ANNOTATION] == "a,b"


def test_select_by_kind_name_and_namespace(collection: ResourceCollection) -> None:
    assert _names(collection.select(Selector(kind="Deployment"))) == ["Deployment/web", "Deployment/worker"]
    assert _names(collection.select(Selector(name="w.*", group="apps"))) == [
        "Deployment/web",
        "Deployment/worker",
    ]
    assert _names(collection.select(Selector(namespace="jobs"))) == ["Deployment/worker"]
    assert _names(collection.select(Selector(namespace="default", kind="Service"))) == ["Service/web"]
    assert _names(collection.select(Selector(name="we"))) == []


def test_select_by_label_and_annotation(collection: ResourceCollection) -> None:
    assert _names(collection.select(Selector(label_selector="app=web,tier in (frontend)"))) == ["Deployment/web"]
    assert _names(collection.select(Selector(label_selector="tier!=frontend"))) == [
        "Deployment/worker",
        "Service/web",
    ]
    assert _names(collection.select(Selector(label_selector="!tier"))) == ["Service/web"]
    assert _names(collection.select(Selector(annotation_selector="owner=team-a"))) == ["Deployment/web"]


def test_selector_accepts_aliases() -> None:
    selector = Selector.model_validate({"kind": "Deployment", "labelSelector": "app", "annotationSelector": "x"})
    assert selector.label_selector == "app"
    assert selector.describe() == "kind=Deployment, labelSelector=app, annotationSelector=x"


@pytest.mark.parametrize("expression", ["app in (a", "=value", "app,,tier", "app in ()"])
def test_malformed_label_selectors_raise(expression: str) -> None:
    with pytest.raises(SelectorError):
        parse_selector(expression)


def test_set_based_requirements() -> None:
    labels = {"env": "prod", "tier": "db"}
    assert matches_selector("env in (prod, staging), tier notin (web)", labels)
    assert matches_selector("env==prod,tier", labels)
    assert not matches_selector("env=staging", labels)
    assert not matches_selector("team", labels)
    assert matches_selector("", labels)


def test_invalid_name_pattern_raises(collection: ResourceCollection) -> None:
    with pytest.raises(SelectorError):
        collection.select(Selector(name="web("))


@pytest.mark.parametrize(
    "selector",
    [Selector(label_selector="app in (web"), Selector(annotation_selector="owner,,team")],
)
def test_malformed_selector_raises_even_without_candidates(selector: Selector) -> None:
    with pytest.raises(SelectorError):
        ResourceCollection().select(selector)
