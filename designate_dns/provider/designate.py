"""
Designate provider module for Designate-DNS.

This module is responsible for reading endpoints out of OpenStack Designate and
applying external-dns change batches to its record sets.
"""

import logging
from typing import Dict, List, Optional

from designate_dns.client.designate import DesignateClientInterface
from designate_dns.exceptions import RecordMutationError
from designate_dns.models.models import (
    LABEL_ORIGINAL_RECORDS,
    LABEL_RECORD_SET_ID,
    LABEL_ZONE_ID,
    ORIGINAL_RECORDS_SEPARATOR,
    SUPPORTED_RECORD_TYPES,
    Changes,
    Endpoint,
    new_endpoint_with_ttl,
)
from designate_dns.plan.plan import Plan, RecordSetAggregate
from designate_dns.utils.domains import (
    DomainFilter,
    canonicalize_domain_name,
    match_zone,
)


class DesignateProvider:
    """
    Provider that interfaces with the Designate API.
    """

    def __init__(
        self,
        client: DesignateClientInterface,
        domain_filter: Optional[DomainFilter] = None,
        dry_run: bool = False,
    ):
        """
        Initialize a DesignateProvider.

        Args:
            client: Designate API client
            domain_filter: Filter restricting the managed zones
            dry_run: Whether to run in dry-run mode
        """
        self.client = client
        self.domain_filter = domain_filter or DomainFilter()
        self.dry_run = dry_run
        self.logger = logging.getLogger("designate-dns.provider.designate")

    async def zones(self) -> Dict[str, str]:
        """
        Returns the managed zones: active primary zones accepted by the
        domain filter.

        Returns:
            Dict[str, str]: Zone ID -> canonical zone name

        Raises:
            ZoneListingError: If the zones cannot be listed
        """
        result: Dict[str, str] = {}
        for zone in self.client.zones():
            if zone.type and zone.type.upper() != "PRIMARY":
                self.logger.debug(f"Zone '{zone.name}' is of type {zone.type}, skipping.")
                continue
            if zone.status != "ACTIVE":
                self.logger.debug(f"Zone '{zone.name}' is {zone.status}, skipping.")
                continue
            zone_name = canonicalize_domain_name(zone.name)
            if not self.domain_filter.match(zone_name):
                self.logger.debug(f"Zone '{zone_name}' is not in domain filter, skipping.")
                continue
            result[zone.id] = zone_name

        self.logger.debug(f"Found {len(result)} managed zones.")
        return result

    async def records(self) -> List[Endpoint]:
        """
        Returns a list of all supported DNS records in managed zones.

        Returns:
            List[Endpoint]: List of endpoints

        Raises:
            ZoneListingError: If the zones cannot be listed
            RecordListingError: If the record sets of any zone cannot be listed
        """
        return await self._records(await self.zones())

    async def _records(self, managed_zones: Dict[str, str]) -> List[Endpoint]:
        endpoints = []
        for zone_id in managed_zones:
            for record_set in self.client.record_sets(zone_id):
                if record_set.type not in SUPPORTED_RECORD_TYPES:
                    continue

                endpoint = new_endpoint_with_ttl(
                    record_set.name,
                    record_set.type,
                    record_set.ttl,
                    *record_set.records,
                )
                endpoint.labels[LABEL_RECORD_SET_ID] = record_set.id
                endpoint.labels[LABEL_ZONE_ID] = record_set.zone_id
                endpoint.labels[LABEL_ORIGINAL_RECORDS] = ORIGINAL_RECORDS_SEPARATOR.join(
                    record_set.records
                )
                endpoints.append(endpoint)

        return endpoints

    async def adjust_endpoints(self, endpoints: List[Endpoint]) -> List[Endpoint]:
        """
        Returns the endpoints unchanged; Designate needs no provider-specific
        normalization.
        """
        return endpoints

    async def apply_changes(self, changes: Changes) -> None:
        """
        Applies the specified changes to DNS records.

        Every record set is attempted even if an earlier one fails; the first
        failure is raised once all of them have been processed.

        Args:
            changes: Changes to apply

        Raises:
            ZoneListingError: If the zones cannot be listed
            RecordListingError: If the current records cannot be listed
            RecordMutationError: If a record set could not be changed
        """
        managed_zones = await self.zones()
        current = await self._records(managed_zones)

        record_sets = Plan(current).calculate_record_sets(changes)

        first_error: Optional[RecordMutationError] = None
        for record_set in record_sets.values():
            try:
                await self._upsert_record_set(record_set, managed_zones)
            except RecordMutationError as e:
                self.logger.error(
                    f"Failed to apply changes for {record_set.dnsname}/{record_set.record_type}: {e}"
                )
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise first_error

    async def _upsert_record_set(
        self, record_set: RecordSetAggregate, managed_zones: Dict[str, str]
    ) -> None:
        """
        Creates, updates or deletes one record set depending on whether it
        already exists and whether any targets are still wanted.

        Args:
            record_set: Aggregated record set
            managed_zones: Zone ID -> canonical zone name
        """
        if not record_set.zone_id:
            record_set.zone_id = match_zone(record_set.dnsname, managed_zones)
            if not record_set.zone_id:
                self.logger.debug(
                    f"Skipping record {record_set.dnsname} because no hosted zone matching record DNS Name was detected"
                )
                return

        records = record_set.records
        if not record_set.record_set_id and not records:
            return

        if not record_set.record_set_id:
            self.logger.info(
                f"Creating records: {record_set.dnsname}/{record_set.record_type}: {','.join(records)}"
            )
            if self.dry_run:
                return
            record_set.record_set_id = self.client.create_record_set(
                record_set.zone_id,
                record_set.dnsname,
                record_set.record_type,
                records,
                ttl=record_set.ttl,
            )
        elif not records:
            self.logger.info(
                f"Deleting records for {record_set.dnsname}/{record_set.record_type}"
            )
            if self.dry_run:
                return
            self.client.delete_record_set(record_set.zone_id, record_set.record_set_id)
        else:
            self.logger.info(
                f"Updating records: {record_set.dnsname}/{record_set.record_type}: {','.join(records)}"
            )
            if self.dry_run:
                return
            self.client.update_record_set(
                record_set.zone_id,
                record_set.record_set_id,
                records,
                ttl=record_set.ttl,
            )
