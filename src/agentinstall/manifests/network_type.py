# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/manifests/network_type.py

from __future__ import annotations

import logging
from typing import Optional

from agentinstall.config.defaults import DefaultsProvider, InstallConfigDefaults
from agentinstall.config.models import InstallConfig
from agentinstall.observers.dispatcher import EventBus
from agentinstall.observers.events import NetworkTypeDefaulted, new_ctx

from .models import AgentClusterInstall

log = logging.getLogger("agentinstall")


def resolve_network_type(
    aci: AgentClusterInstall,
    install_config: Optional[InstallConfig],
    warning_message: str,
    *,
    defaults: Optional[DefaultsProvider] = None,
    bus: Optional[EventBus] = None,
) -> str:
    """
    Make sure ``aci`` carries a network type and return it.

    Order, evaluated on every call:
      1. keep the manifest's own value when set
      2. copy the install config's networkType when set
      3. apply the defaults policy to a blank install config and adopt its
         networkType, logging ``warning_message``

    The caller's install config is never modified.
    """
    networking = aci.spec.networking
    if networking.network_type:
        return networking.network_type

    if install_config is not None and install_config.network_type:
        networking.network_type = install_config.network_type
        return networking.network_type

    blank = InstallConfig()
    (defaults or InstallConfigDefaults()).apply(blank)
    log.warning("%s Defaulting NetworkType to %s.", warning_message, blank.network_type)
    networking.network_type = blank.network_type

    if bus:
        bus.emit(
            NetworkTypeDefaulted(
                value=blank.network_type,
                reason=warning_message,
                **new_ctx(env="manifests", context=None),
            )
        )
    return networking.network_type
