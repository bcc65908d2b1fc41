from __future__ import annotations

from pathlib import Path

import yaml
from typer.testing import CliRunner

from mpatch.cli import app

from conftest import MANIFESTS


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_apply_prints_patched_manifests_without_internal_annotations(tmp_path: Path) -> None:
    manifests = _write(tmp_path, "manifests.yaml", MANIFESTS)
    _write(tmp_path, "replicas.yaml", "- op: replace\n  path: /spec/replicas\n  value: 5\n")
    config = _write(tmp_path, "patch.yaml", "path: replicas.yaml\ntarget:\n  kind: Deployment\n  name: web\n")

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(config), str(manifests)], catch_exceptions=False)

    assert result.exit_code == 0, result.output
    documents = list(yaml.safe_load_all(result.stdout))
    assert [doc["metadata"]["name"] for doc in documents] == ["web", "worker", "web"]
    assert documents[0]["spec"]["replicas"] == 5
    assert documents[0]["metadata"]["annotations"] == {"owner": "team-a"}
    assert "annotations" not in documents[1]["metadata"]


def test_apply_can_keep_internal_annotations(tmp_path: Path) -> None:
    manifests = _write(tmp_path, "manifests.yaml", MANIFESTS)
    config = _write(
        tmp_path,
        "patch.yaml",
        "target:\n  kind: Service\npatch: |-\n  kind: Service\n  metadata:\n    name: web\n    labels:\n      exposed: 'yes'\n",
    )

    runner = CliRunner()
    result = runner.invoke(app, ["apply", "--keep-internal", str(config), str(manifests)], catch_exceptions=False)

    assert result.exit_code == 0, result.output
    service = list(yaml.safe_load_all(result.stdout))[2]
    assert service["metadata"]["labels"]["exposed"] == "yes"
    assert service["metadata"]["annotations"]["internal.config.kubernetes.io/index"] == "2"


def test_apply_reports_errors(tmp_path: Path) -> None:
    manifests = _write(tmp_path, "manifests.yaml", MANIFESTS)
    config = _write(tmp_path, "patch.yaml", "patch: '[{\"op\": \"remove\", \"path\": \"/spec\"}]'\n")

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(config), str(manifests)])

    assert result.exit_code == 1
    assert "must specify a target for JSON patch" in result.output


def test_classify_reports_format(tmp_path: Path) -> None:
    config = _write(
        tmp_path,
        "patch.yaml",
        "patch: |-\n  apiVersion: apps/v1\n  kind: Deployment\n  metadata:\n    name: web\n",
    )

    runner = CliRunner()
    result = runner.invoke(app, ["classify", str(config)], catch_exceptions=False)

    assert result.exit_code == 0, result.output
    assert "strategic-merge: 1 patch(es)" in result.output
    assert "- Deployment.v1.apps/web.default" in result.output


def test_apply_reports_config_that_is_not_utf8(tmp_path: Path) -> None:
    manifests = _write(tmp_path, "manifests.yaml", MANIFESTS)
    config = tmp_path / "patch.yaml"
    config.write_bytes(b"patch: '\xff\xfe'\n")

    runner = CliRunner()
    result = runner.invoke(app, ["apply", str(config), str(manifests)])

    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output
