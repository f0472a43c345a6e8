"""Per-scan wildcard detection state.

A :class:`WildcardSession` owns everything one scan of one root domain needs:
the authoritative server pool, the wildcard blacklist and the record stream.
Sessions share nothing, so several scans can run side by side.
"""

from __future__ import annotations

from typing import Any, Optional

from panscan.core.config import Config
from panscan.modules.wildcard.authority import AuthorityResolver
from panscan.modules.wildcard.classifier import is_wildcard
from panscan.modules.wildcard.models import ServerPool, WildcardBlacklist
from panscan.modules.wildcard.prober import RecordStream, WildcardProber
from panscan.utils.dns_resolver import AsyncDNSResolver
from panscan.utils.helpers import normalise_domain
from panscan.utils.logger import get_logger

logger = get_logger(__name__)


class WildcardSession:
    """Wildcard detection for a single root domain.

    Example::

        async with WildcardSession("example.com") as session:
            await session.start()
            if not session.is_wildcard("93.184.216.34", 300):
                print("genuine")
    """

    def __init__(
        self,
        root_domain: str,
        config: Optional[Config] = None,
        resolver: Optional[AsyncDNSResolver] = None,
    ) -> None:
        """Initialise the session.

        Args:
            root_domain: Domain under test.
            config: Scan configuration (defaults apply when omitted).
            resolver: Bootstrap resolver; one is built from *config* if omitted.
        """
        self.root_domain = normalise_domain(root_domain)
        self.config = config or Config()
        self._owns_resolver = resolver is None
        self._resolver = resolver or AsyncDNSResolver(
            nameservers=self.config.dns.resolvers,
            timeout=self.config.dns.timeout,
        )
        self.servers: ServerPool = ()
        self.blacklist = WildcardBlacklist()
        self.records: Optional[RecordStream] = None

    async def __aenter__(self) -> "WildcardSession":
        if self._owns_resolver:
            await self._resolver.__aenter__()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owns_resolver:
            await self._resolver.__aexit__(*exc)

    @property
    def probe_domain(self) -> str:
        return WildcardProber.probe_domain(self.root_domain)

    async def discover_servers(self) -> ServerPool:
        """Discover and freeze the authoritative server pool."""
        authority = AuthorityResolver(
            self._resolver,
            attempts=self.config.dns.ns_lookup_attempts,
            fallback=self.config.dns.fallback_resolvers,
            port=self.config.dns.port,
        )
        self.servers = await authority.discover(self.root_domain)
        return self.servers

    async def probe(self) -> WildcardBlacklist:
        """Run a wildcard probe, replacing the blacklist and record stream."""
        if not self.servers:
            await self.discover_servers()
        prober = WildcardProber(
            self._resolver,
            queries_per_server=self.config.wildcard.queries_per_server,
            timeout=self.config.dns.timeout,
        )
        self.blacklist, self.records = await prober.probe(self.root_domain, self.servers)
        return self.blacklist

    async def start(self) -> WildcardBlacklist:
        """Discover the server pool, then probe it."""
        await self.discover_servers()
        return await self.probe()

    def is_wildcard(self, record: str, ttl: int) -> bool:
        """Return ``True`` if *record* with *ttl* matches the wildcard signature."""
        return is_wildcard(
            self.blacklist, record, ttl, ttl_round=self.config.wildcard.ttl_round
        )
