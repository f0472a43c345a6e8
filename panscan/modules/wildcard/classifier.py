"""Wildcard classification of brute-forced DNS answers."""

from __future__ import annotations

from panscan.modules.wildcard.models import WildcardBlacklist
from panscan.utils.helpers import trim_root_dot

# Some authoritative setups rotate wildcard TTLs in whole minutes to dodge
# detection; two different round-minute TTLs for one value are not a match.
DEFAULT_TTL_ROUND = 60


def is_wildcard(
    blacklist: WildcardBlacklist,
    record: str,
    ttl: int,
    ttl_round: int = DEFAULT_TTL_ROUND,
) -> bool:
    """Return ``True`` if *record* with *ttl* is wildcard noise.

    Args:
        blacklist: Values collected by the wildcard probe.
        record: CNAME target or IP address of a candidate answer.
        ttl: TTL observed for the candidate answer.
        ttl_round: TTL unit of the round-minute rotation rule.

    Returns:
        ``False`` when the value is not blacklisted, or when both TTLs are
        different multiples of *ttl_round*; ``True`` otherwise.
    """
    known_ttl = blacklist.get(trim_root_dot(record))
    if known_ttl is None:
        return False
    if known_ttl != ttl and known_ttl % ttl_round == 0 and ttl % ttl_round == 0:
        return False
    return True
