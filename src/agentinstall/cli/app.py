# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml

from agentinstall.assets.store import DirectoryFileFetcher, write_files
from agentinstall.config.defaults import InstallConfigDefaults
from agentinstall.config.loader import InstallConfigError, load_install_config
from agentinstall.config.settings import Settings
from agentinstall.logging.log import init_logging
from agentinstall.manifests.agent_cluster_install import (
    AGENT_CLUSTER_INSTALL_FILENAME,
    AgentClusterInstallAsset,
)
from agentinstall.manifests.errors import ManifestError
from agentinstall.observers.dispatcher import EventBus
from agentinstall.observers.logger import LoggerObserver


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Agent cluster install manifest CLI")


def _bus(settings: Settings, verbose: bool) -> EventBus:
    logger, _, _ = init_logging(base_dir=settings.log_dir, verbose=verbose)
    return EventBus(observers=[LoggerObserver(logger)])


def _fail(exc: Exception) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def generate(
    install_config: Path = typer.Option(..., "--install-config", "-c", help="Path to install-config.yaml"),
    asset_dir: Path = typer.Option(Path("."), "--dir", help="Asset directory to write manifests into"),
    release_version: Optional[str] = typer.Option(None, "--release-version", help="OpenShift release for the image set reference"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Derive cluster-manifests/agent-cluster-install.yaml from an install config.
    """
    settings = Settings.from_env()
    bus = _bus(settings, verbose)

    try:
        cfg = load_install_config(install_config, defaults=InstallConfigDefaults())
        asset = AgentClusterInstallAsset(
            release_version=release_version or settings.release_version,
            bus=bus,
        )
        asset.generate(cfg)
    except (InstallConfigError, ManifestError, ValueError) as exc:
        _fail(exc)

    for path in write_files(asset_dir, asset.files()):
        typer.echo(f"wrote {path}")


@app.command()
def validate(
    asset_dir: Path = typer.Option(Path("."), "--dir", help="Asset directory holding cluster-manifests/"),
    lenient: bool = typer.Option(False, "--lenient", help="Ignore unknown fields instead of rejecting them"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """
    Load and validate an existing agent-cluster-install.yaml.
    """
    settings = Settings.from_env()
    bus = _bus(settings, verbose)

    asset = AgentClusterInstallAsset(release_version=settings.release_version, bus=bus)
    try:
        found = asset.load(DirectoryFileFetcher(asset_dir), strict=settings.strict_load and not lenient)
    except ManifestError as exc:
        _fail(exc)

    if not found:
        typer.echo(f"{AGENT_CLUSTER_INSTALL_FILENAME} not found in {asset_dir}")
        return
    typer.echo(f"{AGENT_CLUSTER_INSTALL_FILENAME} is valid (networkType={asset.config.spec.networking.network_type})")


@app.command()
def show(
    asset_dir: Path = typer.Option(Path("."), "--dir", help="Asset directory holding cluster-manifests/"),
):
    """
    Print the loaded manifest, with the network type resolved.
    """
    settings = Settings.from_env()
    bus = _bus(settings, verbose=False)

    asset = AgentClusterInstallAsset(release_version=settings.release_version, bus=bus)
    try:
        found = asset.load(DirectoryFileFetcher(asset_dir), strict=settings.strict_load)
    except ManifestError as exc:
        _fail(exc)

    if not found:
        _fail(FileNotFoundError(f"{AGENT_CLUSTER_INSTALL_FILENAME} not found in {asset_dir}"))
    typer.echo(yaml.safe_dump(asset.config.to_dict(), sort_keys=False), nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
