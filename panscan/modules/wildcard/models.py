"""Data model for wildcard DNS probing."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

# Ordered "host:port" strings, frozen once discovery finishes
ServerPool = Tuple[str, ...]


@dataclass(frozen=True)
class ProbeQuery:
    """A single outbound probe question.

    Attributes:
        domain: Probe domain to ask for.
        server: ``host:port`` of the authoritative server to ask.
    """

    domain: str
    server: str


@dataclass
class ProbeResult:
    """Outcome of one probe query.

    An empty :attr:`type` means the server gave no usable answer or the
    query failed.

    Attributes:
        domain: Probe domain that was queried.
        type: ``"A"``, ``"CNAME"`` or ``""``.
        target: CNAME target with the root dot stripped.
        ips: Every A address in the response.
        ttl: TTL of the first answer record.
    """

    domain: str = ""
    type: str = ""
    target: str = ""
    ips: List[str] = field(default_factory=list)
    ttl: int = 0


@dataclass(frozen=True)
class PanRecord:
    """One entry of the wildcard record stream."""

    domain: str
    type: str
    target: str = ""
    ips: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Return the record as a JSON-serialisable dict, with ``ips`` as a list."""
        data = asdict(self)
        data["ips"] = list(self.ips)
        return data


class WildcardBlacklist:
    """Mapping of wildcard values (CNAME targets or IPs) to their observed TTL.

    Only the probe aggregator adds entries; nothing is ever removed.  A fresh
    probe builds a new blacklist instead of mutating an old one.
    """

    def __init__(self, entries: Optional[Dict[str, int]] = None) -> None:
        self._entries: Dict[str, int] = dict(entries or {})

    def add(self, value: str, ttl: int) -> None:
        """Record *value* with *ttl*, overwriting any earlier TTL."""
        self._entries[value] = ttl

    def get(self, value: str) -> Optional[int]:
        """Return the TTL recorded for *value*, or ``None`` if it is not blacklisted."""
        return self._entries.get(value)

    def as_dict(self) -> Dict[str, int]:
        """Return a copy of the value → TTL mapping."""
        return dict(self._entries)

    def __contains__(self, value: object) -> bool:
        return value in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"<WildcardBlacklist {self._entries!r}>"
