"""
Plan module for Designate-DNS.

This module is responsible for folding a batch of endpoint changes into one
desired state per Designate record set.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from designate_dns.models.models import (
    LABEL_ORIGINAL_RECORDS,
    LABEL_RECORD_SET_ID,
    LABEL_ZONE_ID,
    ORIGINAL_RECORDS_SEPARATOR,
    RECORD_TYPE_CNAME,
    Changes,
    Endpoint,
)
from designate_dns.utils.domains import (
    canonicalize_domain_name,
    canonicalize_domain_names,
)

RecordSetKey = Tuple[str, str]


@dataclass
class RecordSetAggregate:
    """
    Desired state of one record set, accumulated over a change batch.

    ``names`` maps each target to whether it should exist after the batch.
    """

    dnsname: str
    record_type: str
    zone_id: str = ""
    record_set_id: str = ""
    ttl: Optional[int] = None
    names: Dict[str, bool] = field(default_factory=dict)

    @property
    def records(self) -> List[str]:
        """Wanted targets in a stable order."""
        return sorted(name for name, wanted in self.names.items() if wanted)


class Plan:
    """
    Plan merges endpoint changes with the current Designate state into record
    set aggregates.

    Phases are applied in a fixed order: creates, update-olds (removals),
    update-news (additions), deletes (removals). The change planner must pair
    every update-old with its update-new; an unpaired one is resolved by this
    order alone.
    """

    def __init__(self, current: List[Endpoint]):
        """
        Initialize a Plan.

        Args:
            current: Endpoints as just read from Designate
        """
        self.current = current
        self.logger = logging.getLogger("designate-dns.plan")

    def calculate_record_sets(
        self, changes: Changes
    ) -> Dict[RecordSetKey, RecordSetAggregate]:
        """
        Fold a change batch into record set aggregates.

        Args:
            changes: Changes to fold

        Returns:
            Dict[RecordSetKey, RecordSetAggregate]: Aggregates keyed by
            (canonical name, record type)
        """
        record_sets: Dict[RecordSetKey, RecordSetAggregate] = {}
        phases = (
            (changes.create, True),
            (changes.update_old, False),
            (changes.update_new, True),
            (changes.delete, False),
        )
        for endpoints, wanted in phases:
            for endpoint in endpoints:
                self._add_endpoint(record_sets, endpoint, wanted)

        self.logger.debug(
            f"Folded {len(changes.create)} creates, {len(changes.update_old)} updates "
            f"and {len(changes.delete)} deletes into {len(record_sets)} record sets"
        )
        return record_sets

    def _add_endpoint(
        self,
        record_sets: Dict[RecordSetKey, RecordSetAggregate],
        endpoint: Endpoint,
        wanted: bool,
    ) -> None:
        dnsname = canonicalize_domain_name(endpoint.dnsname)
        key = (dnsname, endpoint.record_type)
        record_set = record_sets.get(key)
        if record_set is None:
            record_set = RecordSetAggregate(
                dnsname=dnsname,
                record_type=endpoint.record_type,
                ttl=endpoint.record_ttl,
            )
            record_sets[key] = record_set
        elif wanted and endpoint.record_ttl:
            record_set.ttl = endpoint.record_ttl

        labels = self.identity_labels(endpoint)
        if not record_set.zone_id:
            record_set.zone_id = labels.get(LABEL_ZONE_ID, "")
        if not record_set.record_set_id:
            record_set.record_set_id = labels.get(LABEL_RECORD_SET_ID, "")

        original = endpoint.labels.get(LABEL_ORIGINAL_RECORDS, "")
        for record in original.split(ORIGINAL_RECORDS_SEPARATOR):
            if record and record not in record_set.names:
                record_set.names[record] = True

        targets = endpoint.targets
        if endpoint.record_type == RECORD_TYPE_CNAME:
            targets = canonicalize_domain_names(targets)
        for target in targets:
            record_set.names[target] = wanted

    def identity_labels(self, endpoint: Endpoint) -> Dict[str, str]:
        """
        Zone and record set ID labels of an endpoint, with missing ones taken
        from the current endpoint with the same name and record type.

        The TXT registry of external-dns regenerates endpoints without these
        labels; without them the record set would be created a second time.
        The endpoint itself is left untouched.

        Args:
            endpoint: Endpoint from the change batch

        Returns:
            Dict[str, str]: Labels with the IDs filled in where known
        """
        labels = dict(endpoint.labels)
        if LABEL_ZONE_ID in labels and LABEL_RECORD_SET_ID in labels:
            return labels
        for current in self.current:
            if (
                current.record_type == endpoint.record_type
                and current.dnsname == endpoint.dnsname
            ):
                for label in (LABEL_ZONE_ID, LABEL_RECORD_SET_ID):
                    if label not in labels:
                        labels[label] = current.labels.get(label, "")
                break
        return labels
