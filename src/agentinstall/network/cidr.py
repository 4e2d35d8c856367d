# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/agentinstall/network/cidr.py

from __future__ import annotations

import ipaddress
from enum import Enum
from typing import Tuple, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class CIDRError(ValueError):
    """Raised when a CIDR string cannot be parsed or is not a valid subnet."""


class IPFamily(str, Enum):
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    INVALID = "invalid"


def parse_cidr(value: str) -> Tuple[IPAddress, IPNetwork]:
    """
    Parse ``value`` as ``<address>/<prefix>``.

    Returns the address exactly as written plus the network it belongs to,
    so ``10.0.0.5/24`` gives ``(10.0.0.5, 10.0.0.0/24)``. Host bits are
    allowed here; use :func:`validate_subnet_cidr` to reject them.

    Only the literal prefix-length form is accepted. Netmask or hostmask
    suffixes, zone ids and surrounding whitespace are rejected.
    """
    text = value or ""
    addr, sep, prefix = text.partition("/")
    if not sep or "%" in addr or not _is_prefix_length(prefix):
        raise CIDRError(f"invalid CIDR address: {value!r}")
    try:
        ip = ipaddress.ip_address(addr)
        network = ipaddress.ip_network(f"{addr}/{int(prefix)}", strict=False)
    except ValueError as exc:
        raise CIDRError(f"invalid CIDR address: {value!r}") from exc
    return ip, network


def _is_prefix_length(text: str) -> bool:
    # str.isdigit() also accepts non-ASCII digits
    return 0 < len(text) <= 3 and text.isascii() and text.isdigit()


def validate_subnet_cidr(ip: IPAddress, network: IPNetwork) -> None:
    """Reject a CIDR whose address is not the network address of its mask."""
    if ip != network.network_address:
        raise CIDRError(
            f"invalid network address. got {ip}/{network.prefixlen}, expecting {network}"
        )


def parse_subnet_cidr(value: str) -> IPNetwork:
    ip, network = parse_cidr(value)
    validate_subnet_cidr(ip, network)
    return network


def normalize_cidr(value: str) -> str:
    """Canonical text form of a CIDR, keeping the address as written."""
    ip, network = parse_cidr(value)
    return f"{ip}/{network.prefixlen}"


def classify_ip_family(value: str) -> IPFamily:
    """
    Classify a bare address or a CIDR string as IPv4, IPv6 or invalid.
    Never raises.
    """
    text = value or ""
    try:
        if "/" in text:
            ip, _ = parse_cidr(text)
        elif "%" in text:
            return IPFamily.INVALID
        else:
            ip = ipaddress.ip_address(text)
    except (CIDRError, ValueError):
        return IPFamily.INVALID
    return IPFamily.IPV6 if ip.version == 6 else IPFamily.IPV4
