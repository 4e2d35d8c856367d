# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/manifests/validation.py

from __future__ import annotations

from typing import Iterable, Tuple

from agentinstall.config.defaults import NETWORK_TYPE_OPENSHIFT_SDN
from agentinstall.network.cidr import CIDRError, IPFamily, classify_ip_family, parse_cidr
from agentinstall.validation.field import ErrorList, FieldPath, required

from .models import AgentClusterInstall

NETWORKING_PATH = FieldPath("spec", "networking")
NETWORK_TYPE_PATH = NETWORKING_PATH.child("networkType")
CLUSTER_NETWORK_PATH = NETWORKING_PATH.child("clusterNetwork")
SERVICE_NETWORK_PATH = NETWORKING_PATH.child("serviceNetwork")

# network plugins that cannot carry IPv6 ranges
IPV4_ONLY_NETWORK_TYPES = frozenset({NETWORK_TYPE_OPENSHIFT_SDN})


def _check_cidrs(cidrs: Iterable[str], path: FieldPath, label: str) -> Tuple[ErrorList, bool]:
    errs: ErrorList = []
    has_ipv6 = False
    for cidr in cidrs:
        try:
            parse_cidr(cidr)
        except CIDRError:
            errs.append(required(path, f"error parsing the {label} CIDR"))
            continue
        if classify_ip_family(cidr) is IPFamily.IPV6:
            has_ipv6 = True
    return errs, has_ipv6


def validate_ip_address_and_network_type(aci: AgentClusterInstall) -> ErrorList:
    """
    Check the configured ranges against the network plugin.

    Only plugins listed in IPV4_ONLY_NETWORK_TYPES are restricted; any other
    networkType yields no errors. Every problem is collected, nothing stops
    at the first one.
    """
    all_errs: ErrorList = []
    networking = aci.spec.networking
    network_type = networking.network_type

    if network_type not in IPV4_ONLY_NETWORK_TYPES:
        return all_errs

    errs, has_ipv6 = _check_cidrs(
        (cn.cidr for cn in networking.cluster_network), CLUSTER_NETWORK_PATH, "clusterNetwork"
    )
    all_errs.extend(errs)
    if has_ipv6:
        all_errs.append(
            required(
                NETWORK_TYPE_PATH,
                f"clusterNetwork CIDR is IPv6 and is not compatible with networkType {network_type}",
            )
        )

    errs, has_ipv6 = _check_cidrs(networking.service_network, SERVICE_NETWORK_PATH, "serviceNetwork")
    all_errs.extend(errs)
    if has_ipv6:
        all_errs.append(
            required(
                NETWORK_TYPE_PATH,
                f"serviceNetwork CIDR is IPv6 and is not compatible with networkType {network_type}",
            )
        )

    return all_errs
