"""
Designate-DNS exception hierarchy.

Every failure talking to Designate surfaces as a :class:`TransportError`
subclass named after the phase it happened in, so callers can tell a
listing failure (fatal for the whole call) from a mutation failure
(recorded, remaining record sets still processed).
"""


# ── Base ──────────────────────────────────────────────────────────────
class DesignateDNSError(Exception):
    """Root exception for all Designate-DNS errors."""


class ConfigError(DesignateDNSError):
    """Configuration could not be loaded or is invalid."""


# ── Transport ─────────────────────────────────────────────────────────
class TransportError(DesignateDNSError):
    """A call to the Designate API failed."""


class ZoneListingError(TransportError):
    """Zones could not be enumerated."""


class RecordListingError(TransportError):
    """Record sets of a zone could not be enumerated."""


class RecordMutationError(TransportError):
    """A record set could not be created, updated or deleted."""
