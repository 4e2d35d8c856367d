# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/config/models.py

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from agentinstall.network.cidr import parse_cidr


class _InstallConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ObjectMeta(_InstallConfigModel):
    name: str = ""
    namespace: str = ""


class MachinePool(_InstallConfigModel):
    name: str = ""
    replicas: Optional[int] = Field(default=None, ge=0)
    hyperthreading: Optional[str] = None


class ClusterNetworkEntry(_InstallConfigModel):
    cidr: str
    host_prefix: int = Field(default=0, ge=0)

    @field_validator("cidr")
    @classmethod
    def _parseable(cls, v: str) -> str:
        # host bits are tolerated here, the agent manifest builder rejects them
        parse_cidr(v)
        return v


class MachineNetworkEntry(_InstallConfigModel):
    cidr: str

    @field_validator("cidr")
    @classmethod
    def _parseable(cls, v: str) -> str:
        parse_cidr(v)
        return v


class Networking(_InstallConfigModel):
    network_type: str = ""
    cluster_network: List[ClusterNetworkEntry] = Field(default_factory=list)
    service_network: List[str] = Field(default_factory=list)
    machine_network: List[MachineNetworkEntry] = Field(default_factory=list)

    @field_validator("service_network")
    @classmethod
    def _parseable(cls, v: List[str]) -> List[str]:
        for cidr in v:
            parse_cidr(cidr)
        return v


class BareMetalPlatform(_InstallConfigModel):
    api_vip: str = Field(default="", alias="apiVIP")
    ingress_vip: str = Field(default="", alias="ingressVIP")
    provisioning_network: Optional[str] = None


class VSpherePlatform(_InstallConfigModel):
    api_vip: str = Field(default="", alias="apiVIP")
    ingress_vip: str = Field(default="", alias="ingressVIP")
    v_center: Optional[str] = Field(default=None, alias="vCenter")
    datacenter: Optional[str] = None
    default_datastore: Optional[str] = None


class AlibabaCloudMachinePool(_InstallConfigModel):
    instance_type: Optional[str] = None
    system_disk_size: Optional[int] = None
    zones: List[str] = Field(default_factory=list)


class AlibabaCloudPlatform(_InstallConfigModel):
    """
    Alibaba Cloud platform section.

    ``resourceGroupID`` must name an empty, already existing group when set;
    leave it blank to have the installer create one (and delete it on
    destroy).
    """
    region: str = ""
    resource_group_id: str = Field(default="", alias="resourceGroupID")
    tags: Dict[str, str] = Field(default_factory=dict)
    default_machine_platform: Optional[AlibabaCloudMachinePool] = None


class NonePlatform(_InstallConfigModel):
    pass


class Platform(_InstallConfigModel):
    baremetal: Optional[BareMetalPlatform] = None
    vsphere: Optional[VSpherePlatform] = None
    alibabacloud: Optional[AlibabaCloudPlatform] = None
    none: Optional[NonePlatform] = None

    def platform_name(self) -> str:
        for key in ("baremetal", "vsphere", "alibabacloud", "none"):
            if getattr(self, key) is not None:
                return key
        return ""

    def vips(self) -> Tuple[str, str]:
        """(apiVIP, ingressVIP) for platforms that carry them, else empty strings."""
        if self.baremetal is not None:
            return self.baremetal.api_vip, self.baremetal.ingress_vip
        if self.vsphere is not None:
            return self.vsphere.api_vip, self.vsphere.ingress_vip
        return "", ""


class InstallConfig(_InstallConfigModel):
    """
    The user-authored install-config.yaml.

    Every field has a default so a blank InstallConfig() can be handed to
    the defaults policy.
    """
    api_version: str = "v1"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    base_domain: str = ""
    control_plane: Optional[MachinePool] = None
    compute: List[MachinePool] = Field(default_factory=list)
    networking: Optional[Networking] = None
    platform: Platform = Field(default_factory=Platform)
    ssh_key: str = ""
    pull_secret: str = ""

    @property
    def network_type(self) -> str:
        return self.networking.network_type if self.networking else ""
