"""Wildcard DNS prober.

Asks every authoritative server, several times over, for a subdomain that
cannot exist.  Whatever they answer is the wildcard signature: the CNAME
targets and IP addresses end up in a :class:`WildcardBlacklist` keyed to
their TTL, and a :class:`RecordStream` reports the distinct values.

Each query runs in its own task and only hands its result to a queue; the
aggregator is the single writer of the blacklist.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

import dns.asyncquery
import dns.message
import dns.rdatatype

from panscan.modules.wildcard.models import (
    PanRecord,
    ProbeQuery,
    ProbeResult,
    WildcardBlacklist,
)
from panscan.utils.dns_resolver import AsyncDNSResolver
from panscan.utils.helpers import (
    deduplicate,
    is_valid_ip,
    probe_label,
    split_host_port,
    trim_root_dot,
)
from panscan.utils.logger import get_logger

logger = get_logger(__name__)

Endpoint = Tuple[str, int]

_DONE = object()


class RecordStream:
    """Finite, single-pass async stream of :class:`PanRecord` entries.

    Example::

        blacklist, stream = await prober.probe("example.com", servers)
        async for record in stream:
            print(record.type, record.target or record.ips)
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._exhausted = False

    def feed(self, records: Iterable[PanRecord]) -> None:
        """Emit *records* in the background, then close the stream."""
        self._task = asyncio.create_task(self._emit(list(records)))

    async def _emit(self, records: List[PanRecord]) -> None:
        for record in records:
            await self._queue.put(record)
        await self._queue.put(_DONE)

    def __aiter__(self) -> "RecordStream":
        return self

    async def __anext__(self) -> PanRecord:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _DONE:
            self._exhausted = True
            raise StopAsyncIteration
        return item

    async def collect(self) -> List[PanRecord]:
        """Drain the stream into a list."""
        return [record async for record in self]


class WildcardProber:
    """Probe authoritative servers for a wildcard DNS configuration.

    Example::

        async with AsyncDNSResolver() as resolver:
            prober = WildcardProber(resolver)
            blacklist, stream = await prober.probe("example.com", servers)
    """

    def __init__(
        self,
        resolver: AsyncDNSResolver,
        queries_per_server: int = 5,
        timeout: float = 5,
    ) -> None:
        """Initialise the prober.

        Args:
            resolver: Bootstrap resolver for nameserver address lookups.
            queries_per_server: Redundant queries sent to each server.
            timeout: Per-query timeout in seconds.
        """
        self._resolver = resolver
        self._queries_per_server = queries_per_server
        self._timeout = timeout

    @staticmethod
    def probe_domain(root_domain: str) -> str:
        """Return the probe domain for *root_domain*: ``md5(root).root``."""
        return f"{probe_label(root_domain)}.{root_domain}"

    async def probe(
        self, root_domain: str, servers: Iterable[str]
    ) -> Tuple[WildcardBlacklist, RecordStream]:
        """Probe *servers* for wildcard answers under *root_domain*.

        Args:
            root_domain: Domain to test.
            servers: ``host:port`` pool, frozen for the duration of the probe.

        Returns:
            Tuple of the populated blacklist and the record stream.
        """
        domain = self.probe_domain(root_domain)
        pool = tuple(servers)
        expected = len(pool) * self._queries_per_server
        endpoints = await self._resolve_endpoints(pool)

        handoff: asyncio.Queue = asyncio.Queue()

        async def _dispatch(query: ProbeQuery) -> None:
            # Every task must report, or the aggregator below never finishes
            try:
                result = await self.query(query, endpoints.get(query.server))
            except Exception as exc:  # noqa: BLE001
                logger.debug("Query for %s @%s crashed: %s", query.domain, query.server, exc)
                result = ProbeResult()
            await handoff.put(result)

        tasks = [
            asyncio.create_task(_dispatch(ProbeQuery(domain, server)))
            for server in pool
            for _ in range(self._queries_per_server)
        ]

        blacklist = WildcardBlacklist()
        cnames: Dict[str, None] = {}
        ips: Dict[str, None] = {}
        for _ in range(expected):
            result: ProbeResult = await handoff.get()
            if result.type == "CNAME":
                # Only the target is blacklisted, not the addresses behind it
                cnames[result.target] = None
                blacklist.add(result.target, result.ttl)
            elif result.type == "A":
                for ip in result.ips:
                    ips[ip] = None
                    blacklist.add(ip, result.ttl)
        await asyncio.gather(*tasks)

        records = [PanRecord(domain, "CNAME", target=cname) for cname in cnames]
        if ips:
            records.append(PanRecord(domain, "A", ips=tuple(ips)))
        stream = RecordStream()
        stream.feed(records)

        logger.debug("pan analytic record: %s", blacklist.as_dict())
        if blacklist:
            logger.warning(
                "Wildcard DNS detected for %s (%d value(s) blacklisted)",
                root_domain,
                len(blacklist),
            )
        else:
            logger.info("No wildcard DNS detected for %s", root_domain)
        return blacklist, stream

    async def query(
        self, query: ProbeQuery, endpoint: Optional[Endpoint]
    ) -> ProbeResult:
        """Send one A question for ``query.domain`` to *endpoint*.

        Errors are swallowed: the redundant queries to the same server make
        up for a lost packet, so a failure is just an empty result.

        Args:
            query: Probe question and the server it is meant for.
            endpoint: Resolved ``(address, port)`` of the server, or ``None``
                      when its address is unknown.

        Returns:
            :class:`ProbeResult`, with an empty type on failure.
        """
        if endpoint is None:
            return ProbeResult()
        address, port = endpoint
        try:
            message = dns.message.make_query(query.domain, dns.rdatatype.A)
            response, _ = await dns.asyncquery.udp_with_fallback(
                message,
                address,
                timeout=self._timeout,
                port=port,
                one_rr_per_rrset=True,
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Probe %s @%s failed: %s", query.domain, query.server, exc)
            return ProbeResult()
        return self._parse_response(query.domain, response)

    @staticmethod
    def _parse_response(domain: str, response: dns.message.Message) -> ProbeResult:
        """Turn a DNS response into a :class:`ProbeResult`.

        The first answer record decides the type and TTL; for A answers every
        A RRset contributes its addresses.  Responses should be parsed with
        one record per RRset so that ``answer[0]`` is the first record on the
        wire rather than a merged set carrying the smallest TTL.
        """
        if not response.answer:
            return ProbeResult()
        first = response.answer[0]
        result = ProbeResult(domain=domain, ttl=first.ttl)
        if first.rdtype == dns.rdatatype.CNAME:
            result.type = "CNAME"
            result.target = trim_root_dot(first[0].target.to_text())
        elif first.rdtype == dns.rdatatype.A:
            result.type = "A"
            result.ips = [
                rdata.address
                for rrset in response.answer
                if rrset.rdtype == dns.rdatatype.A
                for rdata in rrset
            ]
        return result

    async def _resolve_endpoints(self, pool: Tuple[str, ...]) -> Dict[str, Endpoint]:
        """Map each pool entry to an ``(address, port)`` pair.

        Nameserver hostnames are resolved once here rather than per query.
        Entries that cannot be parsed or resolved are left out, and their
        queries report empty results.
        """
        parsed: Dict[str, Endpoint] = {}
        for server in deduplicate(pool):
            try:
                parsed[server] = split_host_port(server)
            except ValueError:
                logger.debug("Ignoring malformed server %r", server)

        names = deduplicate(
            host for host, _ in parsed.values() if not is_valid_ip(host)
        )
        addresses = await self._resolver.bulk_resolve(names, "A") if names else {}

        endpoints: Dict[str, Endpoint] = {}
        for server, (host, port) in parsed.items():
            if is_valid_ip(host):
                endpoints[server] = (host, port)
            elif addresses.get(host):
                endpoints[server] = (addresses[host][0], port)
            else:
                logger.debug("Could not resolve nameserver %s", host)
        return endpoints
