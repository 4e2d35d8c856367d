# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/manifests/models.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

API_VERSION = "extensions.hive.openshift.io/v1beta1"
KIND = "AgentClusterInstall"


class _ManifestModel(BaseModel):
    """
    Base for manifest schema objects.

    Unknown keys are rejected unless validation runs with
    ``context={"strict": False}``, in which case they are dropped at every
    nesting level before validation.
    Integer and boolean fields never accept quoted strings in either mode.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_unknown_when_lenient(cls, data: Any, info: ValidationInfo) -> Any:
        ctx = info.context or {}
        if ctx.get("strict", True) or not isinstance(data, dict):
            return data
        known = set()
        for name, f in cls.model_fields.items():
            known.add(name)
            if f.alias:
                known.add(f.alias)
        return {k: v for k, v in data.items() if k in known}


class ObjectMeta(_ManifestModel):
    name: str = ""
    namespace: str = ""
    labels: Optional[Dict[str, str]] = None
    annotations: Optional[Dict[str, str]] = None
    creation_timestamp: Optional[str] = None


class LocalObjectReference(_ManifestModel):
    name: str = ""


class ClusterNetworkEntry(_ManifestModel):
    cidr: str = ""
    host_prefix: int = Field(default=0, strict=True)


class MachineNetworkEntry(_ManifestModel):
    cidr: str = ""


class Networking(_ManifestModel):
    network_type: str = ""
    cluster_network: List[ClusterNetworkEntry] = Field(default_factory=list)
    service_network: List[str] = Field(default_factory=list)
    machine_network: Optional[List[MachineNetworkEntry]] = None
    user_managed_networking: Optional[bool] = Field(default=None, strict=True)


class ProvisionRequirements(_ManifestModel):
    control_plane_agents: int = Field(default=0, strict=True)
    worker_agents: int = Field(default=0, strict=True)


class AgentClusterInstallSpec(_ManifestModel):
    image_set_ref: Optional[LocalObjectReference] = None
    cluster_deployment_ref: LocalObjectReference = Field(default_factory=LocalObjectReference)
    networking: Networking = Field(default_factory=Networking)
    ssh_public_key: Optional[str] = None
    provision_requirements: ProvisionRequirements = Field(default_factory=ProvisionRequirements)
    api_vip: Optional[str] = Field(default=None, alias="apiVIP")
    ingress_vip: Optional[str] = Field(default=None, alias="ingressVIP")
    platform_type: Optional[str] = None
    hold_installation: Optional[bool] = Field(default=None, strict=True)
    manifests_config_map_ref: Optional[LocalObjectReference] = None


class AgentClusterInstall(_ManifestModel):
    api_version: str = API_VERSION
    kind: str = KIND
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: AgentClusterInstallSpec = Field(default_factory=AgentClusterInstallSpec)
    status: Optional[Dict[str, Any]] = None

    @classmethod
    def from_yaml(cls, data: bytes | str, *, strict: bool = True) -> "AgentClusterInstall":
        """
        Parse a serialized manifest. Raises yaml.YAMLError on malformed text
        and pydantic.ValidationError on schema violations (including unknown
        fields when ``strict``).
        """
        doc = yaml.safe_load(data)
        if doc is None:
            doc = {}
        return cls.model_validate(doc, context={"strict": strict})

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_yaml(self) -> bytes:
        return yaml.safe_dump(self.to_dict(), sort_keys=False).encode("utf-8")
