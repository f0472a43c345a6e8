"""Authoritative nameserver discovery for wildcard probing.

Looks up the NS records of the root domain and turns them into the server
pool every probe query is sent to.  When the lookup keeps failing, a fixed
list of public resolvers is used instead, so the pool is never empty.
"""

from __future__ import annotations

from typing import List, Optional

from panscan.core.config import FALLBACK_RESOLVERS
from panscan.modules.wildcard.models import ServerPool
from panscan.utils.dns_resolver import AsyncDNSResolver
from panscan.utils.helpers import DNS_PORT, join_host_port, trim_root_dot
from panscan.utils.logger import get_logger

logger = get_logger(__name__)


class AuthorityResolver:
    """Discover the authoritative DNS servers of a domain.

    Example::

        async with AsyncDNSResolver() as resolver:
            servers = await AuthorityResolver(resolver).discover("example.com")
    """

    def __init__(
        self,
        resolver: AsyncDNSResolver,
        attempts: int = 3,
        fallback: Optional[List[str]] = None,
        port: int = DNS_PORT,
    ) -> None:
        """Initialise the authority resolver.

        Args:
            resolver: Bootstrap resolver used for the NS lookups.
            attempts: NS lookups to try before giving up.
            fallback: ``host:port`` servers used when every lookup fails.
            port: Port paired with each discovered nameserver.
        """
        self._resolver = resolver
        self._attempts = max(1, attempts)
        self._fallback = list(fallback) if fallback else list(FALLBACK_RESOLVERS)
        self._port = port

    async def discover(self, root_domain: str) -> ServerPool:
        """Return the server pool for *root_domain*.

        Never raises: failed lookups fall through to the fallback resolvers.

        Args:
            root_domain: Domain whose NS records are looked up.

        Returns:
            Tuple of ``host:port`` strings.
        """
        for attempt in range(1, self._attempts + 1):
            hosts = await self._resolver.resolve(root_domain, "NS", use_cache=False)
            if hosts:
                servers = tuple(
                    join_host_port(trim_root_dot(host), self._port) for host in hosts
                )
                logger.info(
                    "Found %d authoritative server(s) for %s: %s",
                    len(servers),
                    root_domain,
                    ", ".join(servers),
                )
                return servers
            logger.debug(
                "NS lookup %d/%d for %s returned nothing",
                attempt,
                self._attempts,
                root_domain,
            )

        logger.warning(
            "%s: no NS record, falling back to public resolvers", root_domain
        )
        return tuple(self._fallback)
