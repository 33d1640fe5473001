"""
Data models for Designate-DNS.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

RECORD_TYPE_A = "A"
RECORD_TYPE_TXT = "TXT"
RECORD_TYPE_CNAME = "CNAME"

SUPPORTED_RECORD_TYPES = (RECORD_TYPE_A, RECORD_TYPE_TXT, RECORD_TYPE_CNAME)

# ID of the record set the endpoint was read from
LABEL_RECORD_SET_ID = "designate-recordset-id"
# ID of the zone owning the record set
LABEL_ZONE_ID = "designate-record-id"
# Records of the record set as last read, joined by ORIGINAL_RECORDS_SEPARATOR.
# Keeps targets that are not part of a change when a name has several targets.
LABEL_ORIGINAL_RECORDS = "designate-original-records"

ORIGINAL_RECORDS_SEPARATOR = "\0"


@dataclass
class Endpoint:
    """
    Represents a DNS endpoint (one name/type pair and its targets) exchanged
    with external-dns.
    """

    dnsname: str
    targets: List[str]
    record_type: str
    record_ttl: Optional[int] = None
    labels: Dict[str, str] = field(default_factory=dict)
    set_identifier: str = ""
    provider_specific: List[Dict[str, str]] = field(default_factory=list)

    @property
    def id(self) -> str:
        """
        Generate a unique identifier for this endpoint.

        Returns:
            str: Unique identifier
        """
        return f"{self.dnsname}:{self.record_type}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to the external-dns webhook JSON representation.

        Returns:
            Dict[str, Any]: JSON-compatible mapping
        """
        data: Dict[str, Any] = {
            "dnsName": self.dnsname,
            "targets": list(self.targets),
            "recordType": self.record_type,
        }
        if self.set_identifier:
            data["setIdentifier"] = self.set_identifier
        if self.record_ttl:
            data["recordTTL"] = self.record_ttl
        if self.labels:
            data["labels"] = dict(self.labels)
        if self.provider_specific:
            data["providerSpecific"] = [dict(p) for p in self.provider_specific]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Endpoint":
        """
        Build an endpoint from the external-dns webhook JSON representation.

        Args:
            data: Decoded JSON object

        Returns:
            Endpoint: The endpoint

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"endpoint must be an object, got {type(data).__name__}")
        if not data.get("dnsName") or not data.get("recordType"):
            raise ValueError("endpoint requires dnsName and recordType")
        if not isinstance(data["dnsName"], str) or not isinstance(data["recordType"], str):
            raise ValueError("dnsName and recordType must be strings")

        targets = data.get("targets") or []
        if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
            raise ValueError("targets must be a list of strings")
        labels = data.get("labels") or {}
        if not isinstance(labels, dict) or not all(
            isinstance(v, str) for v in labels.values()
        ):
            raise ValueError("labels must be an object of strings")
        provider_specific = data.get("providerSpecific") or []
        if not isinstance(provider_specific, list) or not all(
            isinstance(p, dict) for p in provider_specific
        ):
            raise ValueError("providerSpecific must be a list of objects")

        # external-dns sends 0 for "not configured"
        ttl = data.get("recordTTL") or None
        if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int)):
            raise ValueError("recordTTL must be an integer")
        return cls(
            dnsname=data["dnsName"],
            targets=list(targets),
            record_type=data["recordType"],
            record_ttl=ttl,
            labels=dict(labels),
            set_identifier=data.get("setIdentifier") or "",
            provider_specific=list(provider_specific),
        )


def new_endpoint_with_ttl(
    dnsname: str, record_type: str, ttl: Optional[int], *targets: str
) -> Endpoint:
    """
    Build an endpoint the way external-dns does: trailing dots are trimmed
    from the name and from every target.
    """
    return Endpoint(
        dnsname=dnsname.rstrip("."),
        targets=[target.rstrip(".") for target in targets],
        record_type=record_type,
        record_ttl=ttl or None,
    )


@dataclass
class Changes:
    """
    Represents changes to be applied to DNS records.
    """

    create: List[Endpoint] = field(default_factory=list)
    update_old: List[Endpoint] = field(default_factory=list)
    update_new: List[Endpoint] = field(default_factory=list)
    delete: List[Endpoint] = field(default_factory=list)

    def has_changes(self) -> bool:
        """
        Check if there are any changes to be applied.

        Returns:
            bool: True if there are changes, False otherwise
        """
        return bool(self.create or self.update_old or self.update_new or self.delete)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Changes":
        """
        Build a change batch from the webhook JSON body.

        Args:
            data: Decoded JSON object with Create/UpdateOld/UpdateNew/Delete lists

        Returns:
            Changes: The change batch
        """
        if not isinstance(data, dict):
            raise ValueError("changes must be an object")

        def endpoints(key: str) -> List[Endpoint]:
            items = data.get(key) or []
            if not isinstance(items, list):
                raise ValueError(f"{key} must be a list of endpoints")
            return [Endpoint.from_dict(item) for item in items]

        return cls(
            create=endpoints("Create"),
            update_old=endpoints("UpdateOld"),
            update_new=endpoints("UpdateNew"),
            delete=endpoints("Delete"),
        )


@dataclass
class Zone:
    """A Designate zone as returned by the API."""

    id: str
    name: str
    type: str = ""
    status: str = ""


@dataclass
class RecordSet:
    """A Designate record set as returned by the API."""

    id: str
    zone_id: str
    name: str
    type: str
    records: List[str] = field(default_factory=list)
    ttl: Optional[int] = None
