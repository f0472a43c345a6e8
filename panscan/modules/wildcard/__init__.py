"""Wildcard DNS detection: authority discovery, probing and classification."""

from panscan.modules.wildcard.authority import FALLBACK_RESOLVERS, AuthorityResolver
from panscan.modules.wildcard.classifier import is_wildcard
from panscan.modules.wildcard.models import (
    PanRecord,
    ProbeQuery,
    ProbeResult,
    ServerPool,
    WildcardBlacklist,
)
from panscan.modules.wildcard.prober import RecordStream, WildcardProber
from panscan.modules.wildcard.scanner import WildcardModule, WildcardReport
from panscan.modules.wildcard.session import WildcardSession

__all__ = [
    "FALLBACK_RESOLVERS",
    "AuthorityResolver",
    "PanRecord",
    "ProbeQuery",
    "ProbeResult",
    "RecordStream",
    "ServerPool",
    "WildcardBlacklist",
    "WildcardModule",
    "WildcardProber",
    "WildcardReport",
    "WildcardSession",
    "is_wildcard",
]
