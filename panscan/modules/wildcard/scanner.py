"""Wildcard DNS scan module.

Runs a :class:`WildcardSession` end to end and packs what it learned into a
:class:`WildcardReport`, so a driver can read the blacklist and the records
without holding the session open.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from panscan.core.config import Config
from panscan.modules.wildcard.models import PanRecord
from panscan.modules.wildcard.session import WildcardSession
from panscan.utils.logger import get_logger


@dataclass
class WildcardReport:
    """Outcome of one wildcard scan.

    Attributes:
        target: Normalised root domain.
        probe_domain: Name that was asked of every server.
        servers: Authoritative pool the queries went to.
        blacklist: Wildcard value → TTL.
        records: Distinct wildcard records, CNAMEs first.
        duration: Wall time of the scan in seconds.
        error: Error message if the scan failed.
    """

    target: str
    probe_domain: str = ""
    servers: List[str] = field(default_factory=list)
    blacklist: Dict[str, int] = field(default_factory=dict)
    records: List[PanRecord] = field(default_factory=list)
    duration: float = 0.0
    error: Optional[str] = None

    @property
    def wildcard(self) -> bool:
        return bool(self.blacklist)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable view of the report."""
        return {
            "target": self.target,
            "probe_domain": self.probe_domain,
            "servers": list(self.servers),
            "blacklist": dict(self.blacklist),
            "records": [record.to_dict() for record in self.records],
            "wildcard": self.wildcard,
            "duration": self.duration,
            "error": self.error,
        }


class WildcardModule:
    """Detect wildcard DNS for a root domain."""

    name = "wildcard"

    def __init__(self) -> None:
        self.logger = get_logger(f"module.{self.name}")

    async def run(self, target: str, config: Config) -> WildcardReport:
        """Scan *target*, converting failures into :attr:`WildcardReport.error`.

        Args:
            target: Root domain to scan.
            config: Global scan configuration.

        Returns:
            :class:`WildcardReport` with the blacklist and records.
        """
        start = time.time()
        try:
            report = await self._execute(target, config)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Wildcard scan of %s failed: %s", target, exc)
            report = WildcardReport(target=target, error=str(exc))
        report.duration = time.time() - start
        return report

    async def _execute(self, target: str, config: Config) -> WildcardReport:
        async with WildcardSession(target, config) as session:
            await session.start()
            records = await session.records.collect() if session.records else []

        return WildcardReport(
            target=session.root_domain,
            probe_domain=session.probe_domain,
            servers=list(session.servers),
            blacklist=session.blacklist.as_dict(),
            records=records,
        )
