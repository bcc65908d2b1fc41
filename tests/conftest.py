from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mpatch.loader import FileLoader  # noqa: E402
from mpatch.patch import PluginHelpers  # noqa: E402
from mpatch.resource import ResourceCollection, ResourceFactory, stamp_provenance  # noqa: E402

MANIFESTS = textwrap.dedent(
    """
    apiVersion: apps/v1
    kind: Deployment
    metadata:
      name: web
      labels:
        app: web
        tier: frontend
      annotations:
        owner: team-a
    spec:
      replicas: 3
      template:
        spec:
          containers:
            - name: web
              image: nginx:1.25
              ports:
                - containerPort: 80
            - name: sidecar
              image: envoy:1.29
    ---
    apiVersion: apps/v1
    kind: Deployment
    metadata:
      name: worker
      namespace: jobs
      labels:
        app: worker
        tier: backend
    spec:
      replicas: 1
    ---
    apiVersion: v1
    kind: Service
    metadata:
      name: web
      labels:
        app: web
    spec:
      ports:
        - port: 80
          targetPort: 8080
    """
).lstrip()


class DictLoader:
    """In-memory loader keyed by path."""

    def __init__(self, files: Dict[str, str] | None = None) -> None:
        self.files = dict(files or {})

    def load(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path].encode("utf-8")


@dataclass(slots=True)
class Workspace:
    """Collection, helpers, and loader shared by transformer tests."""

    collection: ResourceCollection
    helpers: PluginHelpers
    loader: DictLoader

    def resource(self, kind: str, name: str):
        for resource in self.collection:
            if resource.kind == kind and resource.name == name:
                return resource
        raise AssertionError(f"{kind}/{name} not in collection")


@pytest.fixture()
def factory() -> ResourceFactory:
    return ResourceFactory()


@pytest.fixture()
def collection(factory: ResourceFactory) -> ResourceCollection:
    resources = factory.slice_from_bytes(MANIFESTS)
    stamp_provenance(resources, "manifests.yaml")
    return ResourceCollection(resources)


@pytest.fixture()
def workspace(collection: ResourceCollection, factory: ResourceFactory) -> Workspace:
    loader = DictLoader()
    return Workspace(collection=collection, helpers=PluginHelpers(loader=loader, factory=factory), loader=loader)


@pytest.fixture()
def file_helpers(tmp_path: Path, factory: ResourceFactory) -> PluginHelpers:
    return PluginHelpers(loader=FileLoader(tmp_path), factory=factory)
