from __future__ import annotations

from pathlib import Path

import pytest

from mpatch.errors import ConfigurationError, LoadError
from mpatch.loader import FileLoader, LoadRestrictionError
from mpatch.patch.config import PatchSpec, load_patch_spec
from mpatch.patch.source import resolve_patch_source

from conftest import DictLoader


@pytest.mark.parametrize(
    "raw_config",
    [
        "target:\n  kind: Deployment\n",
        "patch: '   '\n",
        "patch: '[]'\npath: patch.yaml\n",
    ],
)
def test_patch_and_path_are_mutually_exclusive(raw_config: str) -> None:
    spec = load_patch_spec(raw_config)
    with pytest.raises(ConfigurationError) as excinfo:
        resolve_patch_source(spec, DictLoader({"patch.yaml": "[]"}), raw_config)
    assert raw_config in str(excinfo.value)


def test_inline_patch_is_trimmed_and_labelled() -> None:
    spec = load_patch_spec("patch: |\n  [{\"op\": \"remove\", \"path\": \"/spec\"}]\n\n")

    source = resolve_patch_source(spec, DictLoader())

    assert source.text == '[{"op": "remove", "path": "/spec"}]'
    assert source.label == '[patch: "[{\\"op\\": \\"remove\\", \\"path\\": \\"/spec\\"}]"]'


def test_path_is_loaded_through_loader() -> None:
    spec = PatchSpec(path="patches/replicas.yaml")
    loader = DictLoader({"patches/replicas.yaml": "- op: remove\n  path: /spec\n"})

    source = resolve_patch_source(spec, loader)

    assert source.text.startswith("- op: remove")
    assert source.label == '[path: "patches/replicas.yaml"]'


def test_load_failure_wraps_cause() -> None:
    spec = PatchSpec(path="missing.yaml")

    with pytest.raises(LoadError) as excinfo:
        resolve_patch_source(spec, DictLoader())

    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    assert "missing.yaml" in str(excinfo.value)
    assert excinfo.value.details["path"] == "missing.yaml"


def test_file_loader_refuses_paths_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    (tmp_path / "secret.yaml").write_text("kind: Secret\n", encoding="utf-8")
    (root / "patch.yaml").write_text("kind: ConfigMap\n", encoding="utf-8")
    loader = FileLoader(root)

    assert loader.load("patch.yaml") == b"kind: ConfigMap\n"
    with pytest.raises(LoadRestrictionError):
        loader.load("../secret.yaml")

    with pytest.raises(LoadError) as excinfo:
        resolve_patch_source(PatchSpec(path="../secret.yaml"), loader)
    assert isinstance(excinfo.value.__cause__, LoadRestrictionError)


def test_config_ignores_host_metadata_and_reads_options() -> None:
    spec = load_patch_spec(
        """
        apiVersion: builtin
        kind: PatchTransformer
        metadata:
          name: rename
        patch: "kind: Deployment"
        target:
          kind: Deployment
          labelSelector: app=web
        options:
          allowNameChange: true
        """.replace("\n        ", "\n")
    )

    assert spec.allow_name_change is True
    assert spec.allow_kind_change is False
    assert spec.target is not None
    assert spec.target.label_selector == "app=web"


@pytest.mark.parametrize(
    "raw_config",
    [
        "- not\n- a mapping\n",
        "patch: [unterminated\n",
        "patch: x\ntarget:\n  unknownField: 1\n",
        "patch: x\noptions:\n  allowNameChange: maybe\n",
    ],
)
def test_invalid_configuration_is_rejected(raw_config: str) -> None:
    with pytest.raises(ConfigurationError):
        load_patch_spec(raw_config)


def test_labels_keep_non_ascii_text() -> None:
    spec = PatchSpec(patch="metadata: {name: café}")

    source = resolve_patch_source(spec, DictLoader())
    path_source = resolve_patch_source(PatchSpec(path="überpatch.yaml"), DictLoader({"überpatch.yaml": "[]"}))

    assert source.label == '[patch: "metadata: {name: café}"]'
    assert path_source.label == '[path: "überpatch.yaml"]'
