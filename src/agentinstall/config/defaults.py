# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/config/defaults.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .models import (
    ClusterNetworkEntry,
    InstallConfig,
    MachineNetworkEntry,
    MachinePool,
    Networking,
)

NETWORK_TYPE_OPENSHIFT_SDN = "OpenShiftSDN"
NETWORK_TYPE_OVN_KUBERNETES = "OVNKubernetes"

DEFAULT_NETWORK_TYPE = NETWORK_TYPE_OVN_KUBERNETES
DEFAULT_CLUSTER_NETWORK_CIDR = "10.128.0.0/14"
DEFAULT_HOST_PREFIX = 23
DEFAULT_SERVICE_NETWORK_CIDR = "172.30.0.0/16"
DEFAULT_MACHINE_NETWORK_CIDR = "10.0.0.0/16"
DEFAULT_REPLICAS = 3


class DefaultsProvider(Protocol):
    def apply(self, install_config: InstallConfig) -> None: ...


@dataclass
class InstallConfigDefaults:
    """
    Fills unset install-config values in place. Values already present are
    left alone.
    """
    network_type: str = DEFAULT_NETWORK_TYPE
    cluster_network_cidr: str = DEFAULT_CLUSTER_NETWORK_CIDR
    host_prefix: int = DEFAULT_HOST_PREFIX
    service_network_cidr: str = DEFAULT_SERVICE_NETWORK_CIDR
    machine_network_cidr: str = DEFAULT_MACHINE_NETWORK_CIDR
    replicas: int = DEFAULT_REPLICAS

    def apply(self, install_config: InstallConfig) -> None:
        if install_config.networking is None:
            install_config.networking = Networking()
        net = install_config.networking

        if not net.network_type:
            net.network_type = self.network_type
        if not net.cluster_network:
            net.cluster_network = [
                ClusterNetworkEntry(cidr=self.cluster_network_cidr, host_prefix=self.host_prefix)
            ]
        if not net.service_network:
            net.service_network = [self.service_network_cidr]
        if not net.machine_network:
            net.machine_network = [MachineNetworkEntry(cidr=self.machine_network_cidr)]

        if install_config.control_plane is None:
            install_config.control_plane = MachinePool(name="master")
        if install_config.control_plane.replicas is None:
            install_config.control_plane.replicas = self.replicas

        if not install_config.compute:
            install_config.compute = [MachinePool(name="worker")]
        for pool in install_config.compute:
            if pool.replicas is None:
                pool.replicas = self.replicas
