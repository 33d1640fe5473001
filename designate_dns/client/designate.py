"""
Designate client module for Designate-DNS.

This module is responsible for talking to the OpenStack Designate API.
"""

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, TypeVar

import openstack
from openstack.dns.v2.recordset import Recordset
from keystoneauth1.exceptions import ClientException
from openstack.exceptions import SDKException

from designate_dns.exceptions import (
    RecordListingError,
    RecordMutationError,
    TransportError,
    ZoneListingError,
)
from designate_dns.models.models import RecordSet, Zone
from designate_dns.utils.metrics import ApiMetrics

T = TypeVar("T")

# openstacksdk does not wrap keystoneauth failures such as ConnectFailure
API_ERRORS = (SDKException, ClientException)

# Names used by the *-openrc files of older dashboards, mapped to the names
# openstacksdk expects
LEGACY_ENV_MAPPING = {
    "OS_TENANT_NAME": "OS_PROJECT_NAME",
    "OS_TENANT_ID": "OS_PROJECT_ID",
    "OS_DOMAIN_NAME": "OS_USER_DOMAIN_NAME",
    "OS_DOMAIN_ID": "OS_USER_DOMAIN_ID",
}


class DesignateClientInterface(ABC):
    """
    Interface between the provider and the Designate API.
    """

    @abstractmethod
    def zones(self) -> List[Zone]:
        """Returns every zone visible to the credentials."""

    @abstractmethod
    def record_sets(self, zone_id: str) -> List[RecordSet]:
        """Returns every record set in the given zone."""

    @abstractmethod
    def create_record_set(
        self,
        zone_id: str,
        name: str,
        record_type: str,
        records: List[str],
        ttl: Optional[int] = None,
    ) -> str:
        """Creates a record set in the given zone and returns its ID."""

    @abstractmethod
    def update_record_set(
        self,
        zone_id: str,
        record_set_id: str,
        records: List[str],
        ttl: Optional[int] = None,
    ) -> None:
        """Replaces the records (and TTL, if given) of a record set."""

    @abstractmethod
    def delete_record_set(self, zone_id: str, record_set_id: str) -> None:
        """Deletes a record set from the given zone."""


def remap_env(mapping: Dict[str, str]) -> None:
    """
    Copies environment variables to new names without overwriting existing values.

    Args:
        mapping: Target name -> source name
    """
    for target, source in mapping.items():
        if not os.environ.get(target) and os.environ.get(source):
            os.environ[target] = os.environ[source]


class DesignateClient(DesignateClientInterface):
    """
    Designate client backed by openstacksdk.
    """

    def __init__(self, connection, metrics: Optional[ApiMetrics] = None):
        """
        Initialize a DesignateClient.

        Args:
            connection: openstacksdk connection
            metrics: Recorder for API call metrics
        """
        self.connection = connection
        self.metrics = metrics or ApiMetrics()
        self.logger = logging.getLogger("designate-dns.client.designate")

    @classmethod
    def from_environment(
        cls,
        cloud: Optional[str] = None,
        region_name: Optional[str] = None,
        metrics: Optional[ApiMetrics] = None,
    ) -> "DesignateClient":
        """
        Authenticates against Keystone using clouds.yaml or OS_* environment
        variables and locates the Designate endpoint.

        Args:
            cloud: Named cloud from clouds.yaml (OS_CLOUD is used when omitted)
            region_name: Region (OS_REGION_NAME is used when omitted)
            metrics: Recorder for API call metrics

        Returns:
            DesignateClient: Connected client

        Raises:
            TransportError: If authentication or endpoint discovery fails
        """
        remap_env(LEGACY_ENV_MAPPING)
        try:
            connection = openstack.connect(
                cloud=cloud,
                region_name=region_name or os.environ.get("OS_REGION_NAME"),
            )
            connection.authorize()
            endpoint = connection.dns.get_endpoint()
        except API_ERRORS as e:
            raise TransportError(f"Failed to connect to OpenStack: {e}") from e
        logger = logging.getLogger("designate-dns.client.designate")
        logger.info(f"Found OpenStack Designate service at {endpoint}")
        return cls(connection, metrics=metrics)

    def zones(self) -> List[Zone]:
        return self._call(
            "list_zones",
            lambda: [
                Zone(
                    id=zone.id,
                    name=zone.name or "",
                    type=zone.type or "",
                    status=zone.status or "",
                )
                for zone in self.connection.dns.zones()
            ],
            ZoneListingError,
        )

    def record_sets(self, zone_id: str) -> List[RecordSet]:
        return self._call(
            "list_recordsets",
            lambda: [
                RecordSet(
                    id=record_set.id,
                    zone_id=record_set.zone_id or zone_id,
                    name=record_set.name or "",
                    type=record_set.type or "",
                    records=list(record_set.records or []),
                    ttl=record_set.ttl,
                )
                for record_set in self.connection.dns.recordsets(zone_id)
            ],
            RecordListingError,
        )

    def create_record_set(
        self,
        zone_id: str,
        name: str,
        record_type: str,
        records: List[str],
        ttl: Optional[int] = None,
    ) -> str:
        attrs = {"name": name, "type": record_type, "records": records}
        if ttl:
            attrs["ttl"] = ttl
        created = self._call(
            "create_recordset",
            lambda: self.connection.dns.create_recordset(zone_id, **attrs),
            RecordMutationError,
        )
        return created.id

    def update_record_set(
        self,
        zone_id: str,
        record_set_id: str,
        records: List[str],
        ttl: Optional[int] = None,
    ) -> None:
        attrs = {"records": records}
        if ttl:
            attrs["ttl"] = ttl
        record_set = Recordset.existing(id=record_set_id, zone_id=zone_id)
        self._call(
            "update_recordset",
            lambda: self.connection.dns.update_recordset(record_set, **attrs),
            RecordMutationError,
        )

    def delete_record_set(self, zone_id: str, record_set_id: str) -> None:
        record_set = Recordset.existing(id=record_set_id, zone_id=zone_id)
        self._call(
            "delete_recordset",
            lambda: self.connection.dns.delete_recordset(
                record_set, ignore_missing=False
            ),
            RecordMutationError,
        )

    def _call(
        self,
        method: str,
        func: Callable[[], T],
        error_class: type,
    ) -> T:
        """
        Runs one API call, recording metrics and converting SDK failures.

        Args:
            method: Metric label for the call
            func: The call
            error_class: TransportError subclass raised on failure

        Returns:
            The call's result
        """
        self.metrics.record_call()
        start = time.monotonic()
        try:
            return func()
        except API_ERRORS as e:
            self.metrics.record_failure()
            self.logger.debug(f"Designate call {method} failed: {e}")
            raise error_class(f"{method} failed: {e}") from e
        finally:
            self.metrics.observe_latency(method, time.monotonic() - start)
