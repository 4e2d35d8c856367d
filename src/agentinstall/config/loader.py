# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/config/loader.py

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .defaults import DefaultsProvider
from .models import InstallConfig

log = logging.getLogger("agentinstall")


class InstallConfigError(RuntimeError):
    """Raised when install-config.yaml cannot be read or does not validate."""


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    data = yaml.safe_load(expanded) or {}
    if not isinstance(data, dict):
        raise InstallConfigError(f"{path}: expected a mapping at the top level")
    return data


def load_install_config(path: str | Path, *, defaults: Optional[DefaultsProvider] = None) -> InstallConfig:
    """
    Load and validate an install-config.yaml.

    When ``defaults`` is given it fills the unset values (replicas,
    networking) of the freshly loaded model before it is returned.

    ``${ENV_VAR}`` placeholders anywhere in the file (typically ``sshKey``
    and ``pullSecret``) are resolved from the environment before parsing.
    Unknown top-level sections are ignored; the agent manifests only read
    metadata, machine pools, networking, platform VIPs and the SSH key.
    """
    path = Path(path)
    try:
        data = _load_yaml(path)
    except (OSError, yaml.YAMLError) as exc:
        raise InstallConfigError(f"failed to read {path}: {exc}") from exc

    try:
        cfg = InstallConfig.model_validate(data)
    except ValidationError as exc:
        raise InstallConfigError(f"invalid install config {path}: {exc}") from exc

    if defaults is not None:
        defaults.apply(cfg)

    log.debug("Loaded install config %s (platform=%s)", path, cfg.platform.platform_name() or "unset")
    return cfg
