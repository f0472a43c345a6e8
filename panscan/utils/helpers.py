"""Utility functions for panscan.

Helpers for domain/IP validation, DNS name normalisation, and ``host:port``
server strings.
"""

from __future__ import annotations

import hashlib
import ipaddress
import re
from typing import Iterable, List, Tuple, TypeVar

T = TypeVar("T")

DNS_PORT = 53

# RFC-compliant domain name regex
_DOMAIN_RE = re.compile(
    r"^(?:[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)"
    r"+[a-zA-Z]{2,}$"
)


def deduplicate(items: Iterable[T]) -> List[T]:
    """Return a list with duplicates removed while preserving insertion order.

    Args:
        items: Any iterable of hashable items.

    Returns:
        Ordered unique list.
    """
    seen: set = set()
    result: List[T] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def is_valid_domain(domain: str) -> bool:
    """Return ``True`` if *domain* is a syntactically valid domain name.

    Args:
        domain: String to validate.

    Returns:
        Boolean validation result.
    """
    if not domain or len(domain) > 253:
        return False
    return bool(_DOMAIN_RE.match(domain))


def is_valid_ip(address: str) -> bool:
    """Return ``True`` if *address* is a valid IPv4 or IPv6 address.

    Args:
        address: String to validate.

    Returns:
        Boolean validation result.
    """
    try:
        ipaddress.ip_address(address)
        return True
    except ValueError:
        return False


def trim_root_dot(name: str) -> str:
    """Strip a single trailing root-label dot from *name*.

    ``"ns1.example.com."`` becomes ``"ns1.example.com"``; names without the
    dot are returned unchanged.
    """
    if name.endswith("."):
        return name[:-1]
    return name


def normalise_domain(domain: str) -> str:
    """Return *domain* lowercased with whitespace and trailing dot stripped.

    Args:
        domain: Raw domain string.

    Returns:
        Normalised domain string.
    """
    return trim_root_dot(domain.strip().lower())


def probe_label(domain: str) -> str:
    """Return the MD5 hex digest of *domain*, used as a probe subdomain label."""
    return hashlib.md5(domain.encode()).hexdigest()


def join_host_port(host: str, port: int = DNS_PORT) -> str:
    """Return a ``host:port`` server string."""
    return f"{host}:{port}"


def split_host_port(server: str) -> Tuple[str, int]:
    """Split a ``host:port`` server string.

    A string without a port gets the standard DNS port.

    Args:
        server: Server string such as ``"ns1.example.com:53"``.

    Returns:
        Tuple of ``(host, port)``.

    Raises:
        ValueError: When the port part is not an integer.
    """
    host, sep, port = server.rpartition(":")
    if not sep:
        return server, DNS_PORT
    return host.strip("[]"), int(port)
