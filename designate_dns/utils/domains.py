"""
Domain name helpers for Designate-DNS.

Zone and host names are compared in canonical form: lower-case with a
trailing dot, the form Designate uses on the wire.
"""

import logging
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger("designate-dns.domains")


def canonicalize_domain_name(name: str) -> str:
    """Convert a domain name to a lower-case FQDN."""
    if not name.endswith("."):
        name += "."
    return name.lower()


def canonicalize_domain_names(names: Iterable[str]) -> List[str]:
    return [canonicalize_domain_name(name) for name in names]


def match_zone(hostname: str, zones: Dict[str, str]) -> str:
    """
    Finds the zone owning a hostname.

    The longest zone name that the hostname equals or ends with on a label
    boundary wins, so ``first-test.example.com.`` belongs to ``example.com.``
    even when ``test.example.com.`` is managed too.

    Args:
        hostname: Canonical hostname
        zones: Mapping of zone ID to canonical zone name

    Returns:
        str: Zone ID, or an empty string when no managed zone matches
    """
    result_id = ""
    longest = 0
    for zone_id, zone_name in zones.items():
        if hostname != zone_name and not hostname.endswith("." + zone_name):
            continue
        if len(zone_name) > longest:
            result_id = zone_id
            longest = len(zone_name)
    return result_id


class DomainFilter:
    """
    Restricts the zones Designate-DNS is allowed to see.

    Entries match the domain itself and all of its subdomains. An entry
    starting with ``*.`` or ``.`` matches subdomains only. Exclusions always
    win over inclusions, and an empty include list accepts every domain.
    """

    def __init__(
        self,
        include: Optional[Iterable[str]] = None,
        exclude: Optional[Iterable[str]] = None,
    ):
        self.include = self._normalize(include or [])
        self.exclude = self._normalize(exclude or [])

    def match(self, domain: str) -> bool:
        """
        Check if a domain is accepted by the filter.

        Args:
            domain: Domain name, with or without trailing dot

        Returns:
            bool: True if the domain may be managed
        """
        name = domain.rstrip(".").lower()
        if self._matches_any(name, self.exclude):
            logger.debug(f"Domain '{domain}' is excluded by the domain filter")
            return False
        if not self.include:
            return True
        return self._matches_any(name, self.include)

    def is_configured(self) -> bool:
        return bool(self.include or self.exclude)

    def to_dict(self) -> Dict[str, List[str]]:
        """Domain filter as negotiated with external-dns."""
        data: Dict[str, List[str]] = {}
        if self.include:
            data["include"] = list(self.include)
        if self.exclude:
            data["exclude"] = list(self.exclude)
        return data

    @staticmethod
    def _normalize(entries: Iterable[str]) -> List[str]:
        result = []
        for entry in entries:
            entry = entry.strip().lower()
            if entry.startswith("*."):
                entry = entry[1:]
            if entry.endswith("."):
                entry = entry[:-1]
            if entry and entry != ".":
                result.append(entry)
        return result

    @staticmethod
    def _matches_any(name: str, entries: List[str]) -> bool:
        for entry in entries:
            if entry.startswith("."):
                if name.endswith(entry):
                    return True
            elif name == entry or name.endswith("." + entry):
                return True
        return False

    def __repr__(self) -> str:
        return f"DomainFilter(include={self.include!r}, exclude={self.exclude!r})"
