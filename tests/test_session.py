"""Tests for panscan.modules.wildcard.session."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from panscan.core.config import Config
from panscan.modules.wildcard.authority import FALLBACK_RESOLVERS
from panscan.modules.wildcard.models import ProbeResult
from panscan.modules.wildcard.prober import WildcardProber
from panscan.modules.wildcard.session import WildcardSession


def _cname(target: str, ttl: int) -> AsyncMock:
    return AsyncMock(return_value=ProbeResult(type="CNAME", target=target, ttl=ttl))


@pytest.fixture()
def resolver(mock_dns_resolver):
    mock_dns_resolver.resolve = AsyncMock(return_value=["ns1.example.com."])
    mock_dns_resolver.bulk_resolve = AsyncMock(
        return_value={"ns1.example.com": ["192.0.2.53"]}
    )
    return mock_dns_resolver


def test_root_domain_is_normalised(resolver):
    session = WildcardSession("Example.COM.", resolver=resolver)
    assert session.root_domain == "example.com"
    assert session.probe_domain.endswith(".example.com")


def test_new_session_has_no_wildcard(resolver):
    session = WildcardSession("example.com", resolver=resolver)
    assert session.servers == ()
    assert len(session.blacklist) == 0
    assert session.records is None
    assert session.is_wildcard("1.2.3.4", 300) is False


@pytest.mark.asyncio
async def test_start_discovers_and_probes(resolver):
    with patch.object(WildcardProber, "query", new=_cname("wild.example.net", 600)) as query:
        async with WildcardSession("example.com", resolver=resolver) as session:
            await session.start()

    assert session.servers == ("ns1.example.com:53",)
    assert query.await_count == 5
    assert session.is_wildcard("wild.example.net", 600) is True
    assert session.is_wildcard("wild.example.net.", 600) is True
    assert session.is_wildcard("other.example.net", 600) is False
    records = await session.records.collect()
    assert [record.target for record in records] == ["wild.example.net"]


@pytest.mark.asyncio
async def test_injected_resolver_is_not_entered(resolver):
    async with WildcardSession("example.com", resolver=resolver):
        pass
    resolver.__aenter__.assert_not_awaited()
    resolver.__aexit__.assert_not_awaited()


@pytest.mark.asyncio
async def test_probe_discovers_first_when_needed(resolver):
    session = WildcardSession("example.com", resolver=resolver)
    with patch.object(WildcardProber, "query", new=_cname("wild.example.net", 600)):
        await session.probe()
    assert session.servers == ("ns1.example.com:53",)
    resolver.resolve.assert_awaited_once()


@pytest.mark.asyncio
async def test_reprobe_rebuilds_blacklist(resolver):
    session = WildcardSession("example.com", resolver=resolver)
    with patch.object(WildcardProber, "query", new=_cname("old.example.net", 600)):
        first = await session.start()
    with patch.object(WildcardProber, "query", new=_cname("new.example.net", 300)):
        second = await session.probe()

    assert first is not second
    assert set(second) == {"new.example.net"}
    assert session.is_wildcard("old.example.net", 600) is False
    resolver.resolve.assert_awaited_once()


@pytest.mark.asyncio
async def test_fallback_pool_when_ns_lookup_fails(mock_dns_resolver):
    session = WildcardSession("example.com", resolver=mock_dns_resolver)
    servers = await session.discover_servers()
    assert list(servers) == FALLBACK_RESOLVERS
    assert mock_dns_resolver.resolve.await_count == 3


@pytest.mark.asyncio
async def test_config_controls_fan_out_and_attempts(mock_dns_resolver):
    cfg = Config()
    cfg.dns.ns_lookup_attempts = 2
    cfg.dns.fallback_resolvers = ["10.0.0.1:53"]
    cfg.wildcard.queries_per_server = 3
    session = WildcardSession("example.com", config=cfg, resolver=mock_dns_resolver)
    with patch.object(WildcardProber, "query", new=AsyncMock(return_value=ProbeResult())) as query:
        await session.start()

    assert session.servers == ("10.0.0.1:53",)
    assert mock_dns_resolver.resolve.await_count == 2
    assert query.await_count == 3


@pytest.mark.asyncio
async def test_sessions_are_independent(resolver):
    one = WildcardSession("example.com", resolver=resolver)
    two = WildcardSession("example.org", resolver=resolver)
    with patch.object(WildcardProber, "query", new=_cname("wild.example.net", 600)):
        await one.start()

    assert one.is_wildcard("wild.example.net", 600) is True
    assert two.is_wildcard("wild.example.net", 600) is False
    assert two.servers == ()
