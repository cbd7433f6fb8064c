"""IP address parsing and public/private classification.

Pure infra — no domain imports.
"""

from __future__ import annotations

import ipaddress

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

# Non-routable ranges that never identify a real client.
PRIVATE_NETWORKS: tuple[ipaddress.IPv4Network | ipaddress.IPv6Network, ...] = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",  # loopback
        "169.254.0.0/16",  # link-local
        "::1/128",  # loopback
        "fc00::/7",  # unique local
        "fe80::/10",  # link-local
    )
)


def parse_ip(value: str | None) -> IPAddress | None:
    """Parse *value* as an IPv4/IPv6 address, or return ``None``."""
    if not value:
        return None
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


def is_valid_ip(value: str | None) -> bool:
    return parse_ip(value) is not None


def _is_private(ip: IPAddress) -> bool:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return any(ip in net for net in PRIVATE_NETWORKS)


def is_private_ip(value: str | None) -> bool:
    """True when *value* parses and falls in one of ``PRIVATE_NETWORKS``.

    Unparseable input is *not* private; combine with ``is_valid_ip``.
    IPv4-mapped IPv6 addresses are classified by their IPv4 form.
    """
    ip = parse_ip(value)
    return ip is not None and _is_private(ip)


def is_valid_public_ip(value: str | None) -> bool:
    ip = parse_ip(value)
    return ip is not None and not _is_private(ip)
