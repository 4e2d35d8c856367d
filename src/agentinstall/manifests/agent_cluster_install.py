# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/manifests/agent_cluster_install.py

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import List, Optional

import yaml
from pydantic import ValidationError

from agentinstall.assets.store import File, FileFetcher
from agentinstall.config.defaults import DefaultsProvider
from agentinstall.config.models import InstallConfig, MachinePool
from agentinstall.network.cidr import CIDRError, normalize_cidr, parse_cidr, validate_subnet_cidr
from agentinstall.observers.dispatcher import EventBus
from agentinstall.observers.events import ManifestGenerated, ManifestInvalid, ManifestLoaded, new_ctx
from agentinstall.validation.field import to_aggregate

from .errors import ManifestError, ManifestGenerationError, ManifestLoadError, ManifestValidationError
from .models import (
    AgentClusterInstall,
    AgentClusterInstallSpec,
    ClusterNetworkEntry,
    LocalObjectReference,
    Networking,
    ObjectMeta,
    ProvisionRequirements,
)
from .network_type import resolve_network_type
from .validation import validate_ip_address_and_network_type

log = logging.getLogger("agentinstall")

CLUSTER_MANIFEST_DIR = "cluster-manifests"
AGENT_CLUSTER_INSTALL_FILENAME = str(PurePosixPath(CLUSTER_MANIFEST_DIR) / "agent-cluster-install.yaml")
DEFAULT_NAMESPACE = "cluster0"
DEFAULT_RELEASE_VERSION = "4.11"

# the upstream sshKey format can leave block-scalar pipes, newlines and tabs around the key
SSH_KEY_TRIM_CHARS = "|\n\t"


def agent_cluster_install_name(install_config: InstallConfig) -> str:
    return install_config.metadata.name


def cluster_deployment_name(install_config: InstallConfig) -> str:
    return install_config.metadata.name


def object_meta_namespace(install_config: InstallConfig) -> str:
    return install_config.metadata.namespace or DEFAULT_NAMESPACE


def cluster_image_set_reference_name(release_version: str) -> str:
    return f"openshift-{release_version}"


def _replicas(pool: Optional[MachinePool], label: str) -> int:
    if pool is None or pool.replicas is None:
        raise ValueError(f"{label} replicas must be set before generating agent manifests")
    return int(pool.replicas)


def _cluster_networks(install_config: InstallConfig) -> List[ClusterNetworkEntry]:
    entries: List[ClusterNetworkEntry] = []
    for cn in install_config.networking.cluster_network:
        try:
            ip, network = parse_cidr(cn.cidr)
        except CIDRError as exc:
            raise ManifestGenerationError(f"failed to parse ClusterNetwork CIDR: {exc}") from exc
        try:
            validate_subnet_cidr(ip, network)
        except CIDRError as exc:
            raise ManifestGenerationError(f"failed to validate ClusterNetwork CIDR: {exc}") from exc
        entries.append(ClusterNetworkEntry(cidr=str(network), host_prefix=cn.host_prefix))
    return entries


def _service_networks(install_config: InstallConfig) -> List[str]:
    cidrs: List[str] = []
    for sn in install_config.networking.service_network:
        try:
            cidrs.append(normalize_cidr(sn))
        except CIDRError as exc:
            raise ManifestGenerationError(f"failed to parse ServiceNetwork CIDR: {exc}") from exc
    return cidrs


def build_agent_cluster_install(
    install_config: InstallConfig,
    *,
    release_version: str = DEFAULT_RELEASE_VERSION,
    defaults: Optional[DefaultsProvider] = None,
    bus: Optional[EventBus] = None,
) -> AgentClusterInstall:
    """
    Derive the AgentClusterInstall manifest from an install config.

    The first malformed cluster or service network CIDR aborts the build
    with ManifestGenerationError. The install config is only read.

    API and Ingress VIPs are copied only for multi-node control planes and
    only when the platform supplies both. A single-node cluster never gets
    VIPs, and a half-specified pair is dropped without an error.
    """
    control_plane_agents = _replicas(install_config.control_plane, "controlPlane")
    worker_agents = 0
    for pool in install_config.compute:
        worker_agents += _replicas(pool, f"compute pool {pool.name!r}")

    if install_config.networking is not None:
        cluster_network = _cluster_networks(install_config)
        service_network = _service_networks(install_config)
    else:
        cluster_network, service_network = [], []

    aci = AgentClusterInstall(
        metadata=ObjectMeta(
            name=agent_cluster_install_name(install_config),
            namespace=object_meta_namespace(install_config),
        ),
        spec=AgentClusterInstallSpec(
            image_set_ref=LocalObjectReference(name=cluster_image_set_reference_name(release_version)),
            cluster_deployment_ref=LocalObjectReference(name=cluster_deployment_name(install_config)),
            networking=Networking(
                cluster_network=cluster_network,
                service_network=service_network,
            ),
            ssh_public_key=install_config.ssh_key.strip(SSH_KEY_TRIM_CHARS) or None,
            provision_requirements=ProvisionRequirements(
                control_plane_agents=control_plane_agents,
                worker_agents=worker_agents,
            ),
        ),
    )

    resolve_network_type(
        aci,
        install_config,
        "NetworkType is not specified in InstallConfig.",
        defaults=defaults,
        bus=bus,
    )

    # TODO: choose per address family once dual-stack VIP pairs are accepted
    api_vip, ingress_vip = install_config.platform.vips()
    if control_plane_agents > 1 and api_vip and ingress_vip:
        aci.spec.api_vip = api_vip
        aci.spec.ingress_vip = ingress_vip
    elif control_plane_agents > 1 and (api_vip or ingress_vip):
        log.debug("Ignoring incomplete VIP pair (apiVIP=%r, ingressVIP=%r)", api_vip, ingress_vip)

    return aci


class AgentClusterInstallAsset:
    """
    The agent-cluster-install.yaml manifest.

    Built from an install config by generate(), or read back from disk by
    load(). Both paths end in _finish(), which applies the same validation.
    """

    def __init__(
        self,
        *,
        release_version: str = DEFAULT_RELEASE_VERSION,
        defaults: Optional[DefaultsProvider] = None,
        bus: Optional[EventBus] = None,
    ):
        self.release_version = release_version
        self.defaults = defaults
        self.bus = bus
        self.file: Optional[File] = None
        self.config: Optional[AgentClusterInstall] = None

    def name(self) -> str:
        return "AgentClusterInstall Config"

    def generate(self, install_config: Optional[InstallConfig]) -> None:
        """
        Build the manifest from ``install_config`` and validate it.

        The new file and descriptor are adopted only once validation
        passes. Without an install config the current descriptor is
        re-validated; having none is an error.
        """
        if install_config is None:
            self._finish(self.config)
            return

        aci = build_agent_cluster_install(
            install_config,
            release_version=self.release_version,
            defaults=self.defaults,
            bus=self.bus,
        )

        try:
            data = aci.to_yaml()
        except yaml.YAMLError as exc:
            raise ManifestGenerationError("failed to marshal agent installer AgentClusterInstall") from exc

        self._finish(aci)
        self.file = File(filename=AGENT_CLUSTER_INSTALL_FILENAME, data=data)
        self.config = aci

        self._emit(
            ManifestGenerated,
            filename=AGENT_CLUSTER_INSTALL_FILENAME,
            network_type=aci.spec.networking.network_type,
        )

    def files(self) -> List[File]:
        if self.file is not None:
            return [self.file]
        return []

    def load(self, fetcher: FileFetcher, *, strict: bool = True) -> bool:
        """
        Read the manifest back from ``fetcher``.

        Returns False when no manifest exists. Raises ManifestLoadError when
        it exists but cannot be read or parsed (unknown fields count as a
        parse failure when ``strict``), and ManifestValidationError when it
        parses but does not validate. Nothing is adopted on failure.
        """
        try:
            f = fetcher.fetch_by_name(AGENT_CLUSTER_INSTALL_FILENAME)
        except FileNotFoundError:
            self._emit(ManifestLoaded, filename=AGENT_CLUSTER_INSTALL_FILENAME, found=False)
            return False
        except OSError as exc:
            raise ManifestLoadError(
                f"failed to load {AGENT_CLUSTER_INSTALL_FILENAME} file: {exc}",
                filename=AGENT_CLUSTER_INSTALL_FILENAME,
            ) from exc

        try:
            aci = AgentClusterInstall.from_yaml(f.data, strict=strict)
        except (yaml.YAMLError, ValidationError) as exc:
            raise ManifestLoadError(
                f"failed to unmarshal {AGENT_CLUSTER_INSTALL_FILENAME}: {exc}",
                filename=AGENT_CLUSTER_INSTALL_FILENAME,
            ) from exc

        resolve_network_type(
            aci,
            InstallConfig(),
            "NetworkType is not specified in AgentClusterInstall.",
            defaults=self.defaults,
            bus=self.bus,
        )

        self._finish(aci)
        self.file, self.config = f, aci

        self._emit(ManifestLoaded, filename=AGENT_CLUSTER_INSTALL_FILENAME, found=True)
        return True

    def _finish(self, config: Optional[AgentClusterInstall]) -> None:
        if config is None:
            raise ManifestError("missing configuration or manifest file")

        errs = validate_ip_address_and_network_type(config)
        agg = to_aggregate(errs)
        if agg is not None:
            self._emit(
                ManifestInvalid,
                filename=AGENT_CLUSTER_INSTALL_FILENAME,
                errors=[str(e) for e in errs],
            )
            raise ManifestValidationError(f"invalid NetworkType configured: {agg}", errs) from agg

    def _emit(self, event_cls, **fields) -> None:
        if self.bus:
            self.bus.emit(event_cls(**fields, **new_ctx(env="manifests", context=None)))
