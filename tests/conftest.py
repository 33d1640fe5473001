"""Shared fixtures: an in-memory Designate API."""

import itertools
from typing import Dict, List, Optional, Set, Tuple

import pytest

from designate_dns.client.designate import DesignateClientInterface
from designate_dns.exceptions import (
    RecordListingError,
    RecordMutationError,
    ZoneListingError,
)
from designate_dns.models.models import RecordSet, Zone
from designate_dns.provider.designate import DesignateProvider


class FakeDesignateClient(DesignateClientInterface):
    """Designate double keeping zones and record sets in memory."""

    def __init__(self):
        self.managed_zones: Dict[str, Zone] = {}
        self.zone_record_sets: Dict[str, Dict[str, RecordSet]] = {}
        self.calls: List[Tuple[str, ...]] = []
        self.fail_zones = False
        self.fail_record_sets: Set[str] = set()
        self.fail_mutations_for: Set[str] = set()
        self._ids = itertools.count(1)

    def add_zone(self, name: str, zone_id: str = "", type: str = "PRIMARY", status: str = "ACTIVE") -> str:
        zone_id = zone_id or name
        self.managed_zones[zone_id] = Zone(id=zone_id, name=name, type=type, status=status)
        self.zone_record_sets[zone_id] = {}
        return zone_id

    def add_record_set(
        self, zone_id: str, name: str, record_type: str, records: List[str], ttl: Optional[int] = None
    ) -> str:
        record_set_id = f"id-{next(self._ids)}"
        self.zone_record_sets[zone_id][record_set_id] = RecordSet(
            id=record_set_id,
            zone_id=zone_id,
            name=name,
            type=record_type,
            records=list(records),
            ttl=ttl,
        )
        return record_set_id

    def all_record_sets(self) -> List[RecordSet]:
        return [rs for sets in self.zone_record_sets.values() for rs in sets.values()]

    def find(self, name: str, record_type: str) -> Optional[RecordSet]:
        for rs in self.all_record_sets():
            if rs.name == name and rs.type == record_type:
                return rs
        return None

    @property
    def mutations(self) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[0] in ("create", "update", "delete")]

    def zones(self) -> List[Zone]:
        self.calls.append(("zones",))
        if self.fail_zones:
            raise ZoneListingError("list_zones failed: boom")
        return list(self.managed_zones.values())

    def record_sets(self, zone_id: str) -> List[RecordSet]:
        self.calls.append(("record_sets", zone_id))
        if zone_id in self.fail_record_sets or zone_id not in self.zone_record_sets:
            raise RecordListingError(f"list_recordsets failed for {zone_id}")
        return [
            RecordSet(
                id=rs.id,
                zone_id=rs.zone_id,
                name=rs.name,
                type=rs.type,
                records=list(rs.records),
                ttl=rs.ttl,
            )
            for rs in self.zone_record_sets[zone_id].values()
        ]

    def create_record_set(self, zone_id, name, record_type, records, ttl=None) -> str:
        self.calls.append(("create", zone_id, name, record_type))
        if name in self.fail_mutations_for or zone_id not in self.zone_record_sets:
            raise RecordMutationError(f"create_recordset failed for {name}")
        return self.add_record_set(zone_id, name, record_type, records, ttl)

    def update_record_set(self, zone_id, record_set_id, records, ttl=None) -> None:
        self.calls.append(("update", zone_id, record_set_id))
        record_set = self.zone_record_sets.get(zone_id, {}).get(record_set_id)
        if record_set is None or record_set.name in self.fail_mutations_for:
            raise RecordMutationError(f"update_recordset failed for {record_set_id}")
        record_set.records = list(records)
        if ttl:
            record_set.ttl = ttl

    def delete_record_set(self, zone_id, record_set_id) -> None:
        self.calls.append(("delete", zone_id, record_set_id))
        record_sets = self.zone_record_sets.get(zone_id, {})
        record_set = record_sets.get(record_set_id)
        if record_set is None or record_set.name in self.fail_mutations_for:
            raise RecordMutationError(f"delete_recordset failed for {record_set_id}")
        del record_sets[record_set_id]


@pytest.fixture
def client():
    return FakeDesignateClient()


@pytest.fixture
def provider(client):
    return DesignateProvider(client)
