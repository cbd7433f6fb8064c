"""Real client IP extraction for reverse-proxy deployments.

Deployment chain is typically: Client -> CDN -> ingress -> FastAPI, so
``request.client.host`` is usually an ingress or pod IP.  The real IP is
taken from proxy headers using a fixed trust order, first match wins:

1. ``CF-Connecting-IP`` — overwritten by Cloudflare at the edge
2. ``True-Client-IP`` — Akamai / Cloudflare Enterprise
3. ``X-Real-IP`` — nginx-style single value
4. ``X-Forwarded-For`` — leftmost public entry, else the leftmost entry
   if it is at least a valid IP
5. ``X-Client-IP``, ``X-Cluster-Client-IP``, ``X-Original-Forwarded-For``,
   ``X-Forwarded``
6. ``Forwarded`` (RFC 7239) — first public ``for=`` value
7. the transport peer address, unchanged

Every header step except the ``X-Forwarded-For`` fallback only accepts
public addresses.  Unparseable values are treated as absent; nothing in
here raises.

``CF-IPCountry`` is logged when present without an accepted
``CF-Connecting-IP`` but never changes the order: whether a client can
forge CDN headers depends on the ingress stripping them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import Request

from geolookup.core.geoip.metrics import CLIENT_IP_SOURCE_TOTAL

from .ip_utils import is_private_ip, is_valid_ip, is_valid_public_ip

logger = logging.getLogger(__name__)

HeaderSource = Mapping[str, Any] | Iterable[tuple[str, Any]]

PEER_SOURCE = "peer"
_CF_COUNTRY_HEADER = "cf-ipcountry"
_CF_CONNECTING_IP_HEADER = "cf-connecting-ip"


class HeaderPolicy(str, Enum):
    """How a trusted header's value is turned into a candidate IP."""

    SINGLE = "single"
    FORWARDED_FOR = "forwarded_for"
    RFC7239 = "rfc7239"


@dataclass(frozen=True)
class TrustedHeader:
    name: str
    policy: HeaderPolicy


TRUSTED_HEADERS: tuple[TrustedHeader, ...] = (
    TrustedHeader(_CF_CONNECTING_IP_HEADER, HeaderPolicy.SINGLE),
    TrustedHeader("true-client-ip", HeaderPolicy.SINGLE),
    TrustedHeader("x-real-ip", HeaderPolicy.SINGLE),
    TrustedHeader("x-forwarded-for", HeaderPolicy.FORWARDED_FOR),
    TrustedHeader("x-client-ip", HeaderPolicy.SINGLE),
    TrustedHeader("x-cluster-client-ip", HeaderPolicy.SINGLE),
    TrustedHeader("x-original-forwarded-for", HeaderPolicy.SINGLE),
    TrustedHeader("x-forwarded", HeaderPolicy.SINGLE),
    TrustedHeader("forwarded", HeaderPolicy.RFC7239),
)


# ---------------------------------------------------------------------------
# Extractors — one per policy, each returns an IP string or None
# ---------------------------------------------------------------------------


def _extract_single(value: str) -> str | None:
    candidate = value.strip()
    return candidate if is_valid_public_ip(candidate) else None


def _extract_forwarded_for(value: str) -> str | None:
    entries = [entry.strip() for entry in value.split(",")]
    for entry in entries:
        if is_valid_public_ip(entry):
            return entry
    # Still more telling than an ingress pod address.
    if entries and is_valid_ip(entries[0]):
        logger.debug("No public IP in X-Forwarded-For, using first entry %s", entries[0])
        return entries[0]
    return None


def _strip_forwarded_node(node: str) -> str:
    """Reduce an RFC 7239 node (``"[2001:db8::1]:4711"``) to a bare address."""
    node = node.strip().strip('"')
    if node.startswith("["):
        end = node.find("]")
        return node[1:end] if end != -1 else node[1:]
    if node.count(":") == 1:
        # IPv4 with port
        return node.split(":", 1)[0]
    return node


def _extract_rfc7239(value: str) -> str | None:
    for element in value.split(","):
        for pair in element.split(";"):
            key, sep, node = pair.strip().partition("=")
            if not sep or key.strip().lower() != "for":
                continue
            candidate = _strip_forwarded_node(node)
            if is_valid_public_ip(candidate):
                return candidate
    return None


_EXTRACTORS: Mapping[HeaderPolicy, Callable[[str], str | None]] = {
    HeaderPolicy.SINGLE: _extract_single,
    HeaderPolicy.FORWARDED_FOR: _extract_forwarded_for,
    HeaderPolicy.RFC7239: _extract_rfc7239,
}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


def _normalize_headers(headers: HeaderSource) -> dict[str, list[str]]:
    """Lower-case names and collect every value of repeated headers.

    Accepts a plain mapping, a mapping of value lists, Starlette
    ``Headers`` (whose ``items()`` keeps duplicates) or raw pairs.
    """
    items = headers.items() if hasattr(headers, "items") else headers
    merged: dict[str, list[str]] = {}
    for name, value in items:
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        merged.setdefault(name.lower(), []).extend(str(v) for v in values)
    return merged


def _header_value(values: list[str], policy: HeaderPolicy) -> str:
    # List headers are comma-joined across lines; single-value
    # headers keep only their first line.
    if policy is HeaderPolicy.SINGLE:
        return values[0]
    return ", ".join(values)


def resolve_client_ip_with_source(
    headers: HeaderSource,
    peer_address: str,
) -> tuple[str, str]:
    """Resolve the client IP and report which header (or ``"peer"``) won."""
    normalized = _normalize_headers(headers)

    for rule in TRUSTED_HEADERS:
        values = normalized.get(rule.name)
        value = _header_value(values, rule.policy) if values else None
        if value:
            candidate = _EXTRACTORS[rule.policy](value)
            if candidate is not None:
                logger.debug("Client IP %s taken from %s", candidate, rule.name)
                return candidate, rule.name

        if rule.name == _CF_CONNECTING_IP_HEADER and normalized.get(_CF_COUNTRY_HEADER):
            logger.info(
                "Behind Cloudflare (CF-IPCountry: %s) but CF-Connecting-IP "
                "missing or not public: %r",
                normalized[_CF_COUNTRY_HEADER][0],
                value,
            )

    if not is_valid_ip(peer_address):
        logger.warning(
            "No usable proxy header and peer address %r is not an IP", peer_address
        )
    elif is_private_ip(peer_address):
        logger.warning(
            "Returning private peer address %s - no valid proxy headers "
            "found. Check proxy configuration.",
            peer_address,
        )
    return peer_address, PEER_SOURCE


def resolve_client_ip(
    headers: HeaderSource,
    peer_address: str,
) -> str:
    """Best-effort origin IP of a request.  Never raises.

    Falls back to *peer_address* unchanged when no header qualifies.
    """
    return resolve_client_ip_with_source(headers, peer_address)[0]


def get_client_ip(request: Request) -> str:
    """Resolve the real client IP for a FastAPI request.

    Usable as a FastAPI dependency::

        client_ip: str = Depends(get_client_ip)
    """
    peer = request.client.host if request.client else ""
    client_ip, source = resolve_client_ip_with_source(request.headers, peer)
    CLIENT_IP_SOURCE_TOTAL.labels(source=source).inc()
    return client_ip
