"""Shared pytest fixtures for the panscan test suite."""

from __future__ import annotations

from typing import List, Tuple
from unittest.mock import AsyncMock, MagicMock

import dns.message
import dns.rdatatype
import dns.rrset
import pytest

from panscan.core.config import Config


@pytest.fixture
def sample_config() -> Config:
    """Return a default Config instance with no external dependencies."""
    return Config()


@pytest.fixture
def mock_dns_resolver() -> MagicMock:
    """Return a MagicMock simulating the async bootstrap DNS resolver."""
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=[])
    resolver.bulk_resolve = AsyncMock(return_value={})
    resolver.__aenter__ = AsyncMock(return_value=resolver)
    resolver.__aexit__ = AsyncMock(return_value=False)
    return resolver


def make_response(domain: str, *rrsets: Tuple[str, int, str, List[str]]) -> dns.message.Message:
    """Build a DNS response to an A question for *domain*.

    Each rrset is ``(name, ttl, rdtype, [rdata, ...])``.
    """
    query = dns.message.make_query(domain, dns.rdatatype.A)
    response = dns.message.make_response(query)
    for name, ttl, rdtype, values in rrsets:
        response.answer.append(dns.rrset.from_text_list(name, ttl, "IN", rdtype, values))
    return response


@pytest.fixture
def response_factory():
    """Return :func:`make_response` for building fake probe answers."""
    return make_response
