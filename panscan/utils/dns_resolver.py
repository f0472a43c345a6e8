"""Async bootstrap DNS resolver for panscan.

Provides :class:`AsyncDNSResolver` — an aiodns-based resolver with caching,
retries and bulk concurrent resolution.  It answers the "helper" lookups the
wildcard probe needs (NS records for authority discovery and A records for
nameserver addresses); the probe queries themselves go straight to each
authoritative server.
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Any, Dict, List, Optional, Set, Tuple

import aiodns

from panscan.utils.logger import get_logger

logger = get_logger(__name__)

# Record types this resolver formats
_SUPPORTED_RECORD_TYPES: Set[str] = {"A", "NS"}


def _cache_key(domain: str, record_type: str) -> str:
    """Return an MD5 cache key for a DNS query."""
    return hashlib.md5(f"{domain}:{record_type}".encode()).hexdigest()


class DNSCacheEntry:
    """A cached DNS record with TTL tracking."""

    def __init__(self, records: List[str], ttl: int = 300) -> None:
        self.records = records
        self.expires_at = time.monotonic() + ttl

    @property
    def expired(self) -> bool:
        return time.monotonic() > self.expires_at


class AsyncDNSResolver:
    """Async DNS resolver with caching, retries, and bulk support.

    Example::

        async with AsyncDNSResolver(nameservers=["8.8.8.8", "1.1.1.1"]) as dns:
            records = await dns.resolve("example.com", "NS")
            print(records)
    """

    def __init__(
        self,
        nameservers: Optional[List[str]] = None,
        timeout: int = 5,
        retries: int = 1,
        cache_ttl: int = 300,
        concurrency: int = 100,
    ) -> None:
        """Initialise the resolver.

        Args:
            nameservers: Custom DNS server IPs (defaults to public resolvers).
            timeout: Query timeout in seconds.
            retries: Number of attempts per query.
            cache_ttl: Default cache TTL in seconds.
            concurrency: Max simultaneous DNS queries.
        """
        self._nameservers = nameservers or ["8.8.8.8", "8.8.4.4", "1.1.1.1"]
        self._timeout = timeout
        self._retries = max(1, retries)
        self._cache_ttl = cache_ttl
        self._concurrency = concurrency
        self._resolver: Optional[aiodns.DNSResolver] = None
        self._cache: Dict[str, DNSCacheEntry] = {}
        self._sem: Optional[asyncio.Semaphore] = None

    async def __aenter__(self) -> "AsyncDNSResolver":
        await self._init()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self._resolver = None
        self._sem = None

    async def _init(self) -> None:
        """Initialise the underlying aiodns resolver and semaphore."""
        self._sem = asyncio.Semaphore(self._concurrency)
        loop = asyncio.get_event_loop()
        self._resolver = aiodns.DNSResolver(
            loop=loop,
            nameservers=self._nameservers,
            timeout=self._timeout,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(
        self, domain: str, record_type: str = "A", use_cache: bool = True
    ) -> List[str]:
        """Resolve *domain* for the given DNS *record_type*.

        Lookup failures are logged and reported as an empty list.

        Args:
            domain: The domain name to query.
            record_type: DNS record type string (e.g. ``"A"``, ``"NS"``).
            use_cache: Serve and store answers in the lookup cache.

        Returns:
            List of string representations of the DNS records.
        """
        if self._resolver is None:
            await self._init()

        record_type = record_type.upper()
        key = _cache_key(domain, record_type)

        if use_cache:
            entry = self._cache.get(key)
            if entry and not entry.expired:
                return entry.records

        for attempt in range(self._retries):
            try:
                records = await self._do_resolve(domain, record_type)
                if use_cache:
                    self._cache[key] = DNSCacheEntry(records, self._cache_ttl)
                return records
            except Exception as exc:  # noqa: BLE001
                if attempt == self._retries - 1:
                    logger.debug(
                        "DNS %s query for %s failed: %s", record_type, domain, exc
                    )
                    return []
                await asyncio.sleep(0.2 * (attempt + 1))
        return []

    async def bulk_resolve(
        self, domains: List[str], record_type: str = "A"
    ) -> Dict[str, List[str]]:
        """Resolve many *domains* concurrently for the same *record_type*.

        Args:
            domains: List of domain names.
            record_type: DNS record type.

        Returns:
            Dict mapping each domain to its records.
        """
        if self._sem is None:
            await self._init()

        async def _one(domain: str) -> Tuple[str, List[str]]:
            async with self._sem:  # type: ignore[union-attr]
                records = await self.resolve(domain, record_type)
                return domain, records

        pairs = await asyncio.gather(*[_one(d) for d in domains])
        return dict(pairs)

    # ------------------------------------------------------------------
    # Internal resolution logic
    # ------------------------------------------------------------------

    async def _do_resolve(self, domain: str, record_type: str) -> List[str]:
        """Use aiodns to resolve *domain*."""
        if record_type not in _SUPPORTED_RECORD_TYPES:
            raise ValueError(f"Unsupported record type: {record_type}")
        assert self._resolver is not None
        result = await self._resolver.query(domain, record_type)
        return self._format_records(result)

    @staticmethod
    def _format_records(result: Any) -> List[str]:
        """Convert aiodns A or NS result objects to plain strings.

        Args:
            result: Raw aiodns result (list or single object).

        Returns:
            List of string representations.
        """
        items = result if isinstance(result, list) else [result]
        return [item.host for item in items]
