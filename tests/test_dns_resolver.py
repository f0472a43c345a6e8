"""Tests for panscan.utils.dns_resolver."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from panscan.utils.dns_resolver import AsyncDNSResolver, DNSCacheEntry, _cache_key


def _aiodns(query: AsyncMock) -> MagicMock:
    backend = MagicMock()
    backend.query = query
    return backend


def test_cache_key_is_stable():
    assert _cache_key("example.com", "NS") == _cache_key("example.com", "NS")
    assert _cache_key("example.com", "NS") != _cache_key("example.com", "A")


def test_cache_entry_expiry():
    assert DNSCacheEntry(["x"], ttl=300).expired is False
    assert DNSCacheEntry(["x"], ttl=-1).expired is True


def test_format_records():
    ns = [SimpleNamespace(host="ns1.example.com"), SimpleNamespace(host="ns2.example.com")]
    assert AsyncDNSResolver._format_records(ns) == ["ns1.example.com", "ns2.example.com"]
    assert AsyncDNSResolver._format_records(SimpleNamespace(host="192.0.2.1")) == ["192.0.2.1"]


@pytest.mark.asyncio
async def test_resolve_uses_cache():
    query = AsyncMock(return_value=[SimpleNamespace(host="192.0.2.1")])
    with patch("panscan.utils.dns_resolver.aiodns.DNSResolver", return_value=_aiodns(query)):
        async with AsyncDNSResolver() as resolver:
            first = await resolver.resolve("ns1.example.com", "a")
            second = await resolver.resolve("ns1.example.com", "A")

    assert first == second == ["192.0.2.1"]
    query.assert_awaited_once_with("ns1.example.com", "A")


@pytest.mark.asyncio
async def test_resolve_bypasses_cache():
    query = AsyncMock(return_value=[SimpleNamespace(host="ns1.example.com")])
    with patch("panscan.utils.dns_resolver.aiodns.DNSResolver", return_value=_aiodns(query)):
        async with AsyncDNSResolver() as resolver:
            await resolver.resolve("example.com", "NS", use_cache=False)
            await resolver.resolve("example.com", "NS", use_cache=False)

    assert query.await_count == 2


@pytest.mark.asyncio
async def test_resolve_failure_returns_empty():
    query = AsyncMock(side_effect=Exception("NXDOMAIN"))
    with patch("panscan.utils.dns_resolver.aiodns.DNSResolver", return_value=_aiodns(query)):
        async with AsyncDNSResolver(retries=1) as resolver:
            assert await resolver.resolve("example.com", "NS") == []


@pytest.mark.asyncio
async def test_unsupported_record_type_returns_empty():
    query = AsyncMock()
    with patch("panscan.utils.dns_resolver.aiodns.DNSResolver", return_value=_aiodns(query)):
        async with AsyncDNSResolver() as resolver:
            for record_type in ("MX", "AAAA", "CNAME"):
                assert await resolver.resolve("example.com", record_type) == []
    query.assert_not_awaited()


@pytest.mark.asyncio
async def test_bulk_resolve():
    async def _answer(domain, record_type):
        return [SimpleNamespace(host=f"ip-of-{domain}")]

    with patch(
        "panscan.utils.dns_resolver.aiodns.DNSResolver",
        return_value=_aiodns(AsyncMock(side_effect=_answer)),
    ):
        async with AsyncDNSResolver() as resolver:
            result = await resolver.bulk_resolve(["ns1.example.com", "ns2.example.com"])

    assert result == {
        "ns1.example.com": ["ip-of-ns1.example.com"],
        "ns2.example.com": ["ip-of-ns2.example.com"],
    }
