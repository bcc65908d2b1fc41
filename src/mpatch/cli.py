"""CLI for running a single patch configuration against manifest files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import typer

from .errors import PatchTransformError
from .loader import FileLoader
from .patch import JsonOperationList, PatchTransformer, PluginHelpers, StrategicMergeSet
from .resource import ResourceCollection, ResourceFactory, dump_resources, stamp_provenance

APP_HELP = "Apply strategic-merge or JSON patches to Kubernetes-style manifests."

app = typer.Typer(help=APP_HELP)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_config(config_path: Path) -> bytes:
    if not config_path.exists():
        raise typer.BadParameter(f"Config file not found: {config_path}")
    return config_path.read_bytes()


def _configured_transformer(config_path: Path, factory: ResourceFactory) -> PatchTransformer:
    raw_config = _read_config(config_path)
    helpers = PluginHelpers(loader=FileLoader(config_path.resolve().parent), factory=factory)
    transformer = PatchTransformer()
    transformer.configure(helpers, raw_config)
    return transformer


def load_collection(paths: List[Path], factory: ResourceFactory) -> ResourceCollection:
    """Read every manifest file into one collection, stamping provenance."""
    collection = ResourceCollection()
    for path in paths:
        if not path.exists():
            raise typer.BadParameter(f"Manifest file not found: {path}")
        resources = factory.slice_from_bytes(path.read_bytes())
        stamp_provenance(resources, path.as_posix())
        for resource in resources:
            collection.append(resource)
    return collection


@app.command()
def apply(
    config: Path = typer.Argument(..., help="Patch configuration (path, patch, target, options)."),
    manifests: List[Path] = typer.Argument(..., help="Manifest files to patch."),
    keep_internal: bool = typer.Option(False, "--keep-internal", help="Keep internal provenance annotations."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Apply the configured patch and print the resulting manifests."""
    _configure_logging(verbose)
    factory = ResourceFactory()
    try:
        transformer = _configured_transformer(config, factory)
        collection = load_collection(manifests, factory)
        transformer.transform(collection)
    except PatchTransformError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error
    typer.echo(dump_resources(collection, strip_internal=not keep_internal), nl=False)


@app.command()
def classify(
    config: Path = typer.Argument(..., help="Patch configuration (path, patch, target, options)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Report whether the configured patch is a strategic-merge or JSON patch."""
    _configure_logging(verbose)
    try:
        transformer = _configured_transformer(config, ResourceFactory())
    except PatchTransformError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error
    resolved = transformer.resolved
    label = transformer.source.label if transformer.source else ""
    if isinstance(resolved, JsonOperationList):
        typer.echo(f"json6902: {len(resolved)} operation(s) from {label}")
        return
    if not isinstance(resolved, StrategicMergeSet):
        typer.echo("Error: patch was not classified", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"strategic-merge: {len(resolved)} patch(es) from {label}")
    for patch in resolved.patches:
        typer.echo(f"- {patch.org_id()}")


if __name__ == "__main__":
    app()
