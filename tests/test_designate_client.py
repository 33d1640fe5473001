"""Tests for the openstacksdk-backed Designate client."""

import os
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from keystoneauth1.exceptions import ConnectFailure, DiscoveryFailure
from openstack.exceptions import SDKException

from designate_dns.client.designate import (
    LEGACY_ENV_MAPPING,
    DesignateClient,
    remap_env,
)
from designate_dns.exceptions import (
    RecordListingError,
    RecordMutationError,
    TransportError,
    ZoneListingError,
)
from designate_dns.models.models import RecordSet, Zone
from designate_dns.utils.metrics import ApiMetrics


@pytest.fixture
def svc():
    connection = MagicMock()
    metrics = ApiMetrics()
    yield DesignateClient(connection, metrics=metrics), connection.dns, metrics


class TestZones:
    def test_success(self, svc):
        client, dns, metrics = svc
        dns.zones.return_value = iter(
            [SimpleNamespace(id="z1", name="example.com.", type="PRIMARY", status="ACTIVE")]
        )
        assert client.zones() == [Zone(id="z1", name="example.com.", type="PRIMARY", status="ACTIVE")]
        assert metrics.total_calls == 1
        assert metrics.latency_count == {"list_zones": 1}

    def test_none_attributes_become_empty(self, svc):
        client, dns, _ = svc
        dns.zones.return_value = [SimpleNamespace(id="z1", name="a.com.", type=None, status=None)]
        assert client.zones()[0].type == ""

    def test_failure(self, svc):
        client, dns, metrics = svc
        dns.zones.side_effect = SDKException("boom")
        with pytest.raises(ZoneListingError):
            client.zones()
        assert metrics.failed_calls == 1

    def test_connect_failure(self, svc):
        client, dns, metrics = svc
        dns.zones.side_effect = DiscoveryFailure("no dns endpoint")
        with pytest.raises(ZoneListingError):
            client.zones()
        assert metrics.failed_calls == 1
        assert metrics.latency_count == {"list_zones": 1}


class TestRecordSets:
    def test_success(self, svc):
        client, dns, _ = svc
        dns.recordsets.return_value = [
            SimpleNamespace(
                id="rs1",
                zone_id="z1",
                name="www.example.com.",
                type="A",
                records=["10.0.0.1", "10.0.0.2"],
                ttl=300,
            )
        ]
        assert client.record_sets("z1") == [
            RecordSet(
                id="rs1",
                zone_id="z1",
                name="www.example.com.",
                type="A",
                records=["10.0.0.1", "10.0.0.2"],
                ttl=300,
            )
        ]
        dns.recordsets.assert_called_once_with("z1")

    def test_failure_during_iteration(self, svc):
        client, dns, _ = svc

        def pages():
            yield SimpleNamespace(id="rs1", zone_id="z1", name="a.", type="A", records=[], ttl=None)
            raise SDKException("page 2 failed")

        dns.recordsets.return_value = pages()
        with pytest.raises(RecordListingError):
            client.record_sets("z1")


class TestMutations:
    def test_create(self, svc):
        client, dns, _ = svc
        dns.create_recordset.return_value = SimpleNamespace(id="rs9")
        assert client.create_record_set("z1", "www.example.com.", "A", ["10.0.0.1"], ttl=60) == "rs9"
        dns.create_recordset.assert_called_once_with(
            "z1", name="www.example.com.", type="A", records=["10.0.0.1"], ttl=60
        )

    def test_create_without_ttl(self, svc):
        client, dns, _ = svc
        dns.create_recordset.return_value = SimpleNamespace(id="rs9")
        client.create_record_set("z1", "www.example.com.", "A", ["10.0.0.1"])
        assert "ttl" not in dns.create_recordset.call_args.kwargs

    def test_update(self, svc):
        client, dns, _ = svc
        client.update_record_set("z1", "rs1", ["10.0.0.2"], ttl=120)
        record_set = dns.update_recordset.call_args.args[0]
        assert (record_set.id, record_set.zone_id) == ("rs1", "z1")
        assert dns.update_recordset.call_args.kwargs == {"records": ["10.0.0.2"], "ttl": 120}

    def test_delete(self, svc):
        client, dns, _ = svc
        client.delete_record_set("z1", "rs1")
        record_set = dns.delete_recordset.call_args.args[0]
        assert (record_set.id, record_set.zone_id) == ("rs1", "z1")
        assert dns.delete_recordset.call_args.kwargs == {"ignore_missing": False}

    @pytest.mark.parametrize(
        "method, args",
        [
            ("create_record_set", ("z1", "a.", "A", ["10.0.0.1"])),
            ("update_record_set", ("z1", "rs1", ["10.0.0.1"])),
            ("delete_record_set", ("z1", "rs1")),
        ],
    )
    def test_failures_are_mutation_errors(self, svc, method, args):
        client, dns, metrics = svc
        dns.create_recordset.side_effect = SDKException("boom")
        dns.update_recordset.side_effect = SDKException("boom")
        dns.delete_recordset.side_effect = SDKException("boom")
        with pytest.raises(RecordMutationError):
            getattr(client, method)(*args)
        assert metrics.failed_calls == 1

    def test_network_failure_is_a_mutation_error(self, svc):
        client, dns, metrics = svc
        dns.create_recordset.side_effect = ConnectFailure("connection refused")
        with pytest.raises(RecordMutationError, match="connection refused"):
            client.create_record_set("z1", "a.", "A", ["10.0.0.1"])
        assert metrics.failed_calls == 1


class TestFromEnvironment:
    def test_connects(self):
        with patch("designate_dns.client.designate.openstack.connect") as connect:
            connect.return_value.dns.get_endpoint.return_value = "https://dns.example/v2"
            client = DesignateClient.from_environment(cloud="unittest", region_name="RegionOne")
        connect.assert_called_once_with(cloud="unittest", region_name="RegionOne")
        connect.return_value.authorize.assert_called_once()
        assert client.connection is connect.return_value

    def test_auth_failure(self):
        with patch("designate_dns.client.designate.openstack.connect") as connect:
            connect.return_value.authorize.side_effect = SDKException("bad credentials")
            with pytest.raises(TransportError):
                DesignateClient.from_environment()

    def test_endpoint_discovery_failure(self):
        with patch("designate_dns.client.designate.openstack.connect") as connect:
            connect.return_value.dns.get_endpoint.side_effect = DiscoveryFailure("no dns service")
            with pytest.raises(TransportError, match="no dns service"):
                DesignateClient.from_environment()


class TestRemapEnv:
    def test_copies_without_overwriting(self, monkeypatch):
        # Empty values count as unset and are restored by monkeypatch afterwards
        for name in LEGACY_ENV_MAPPING:
            monkeypatch.setenv(name, "")
        for name in LEGACY_ENV_MAPPING.values():
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("OS_PROJECT_NAME", "demo")
        monkeypatch.setenv("OS_PROJECT_ID", "new-id")
        monkeypatch.setenv("OS_TENANT_ID", "old-id")

        remap_env(LEGACY_ENV_MAPPING)

        assert os.environ["OS_TENANT_NAME"] == "demo"
        assert os.environ["OS_TENANT_ID"] == "old-id"
        assert os.environ["OS_DOMAIN_NAME"] == ""
