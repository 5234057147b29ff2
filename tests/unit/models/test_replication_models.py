"""Unit tests for replication intent and status models."""
from datetime import datetime, timezone

import pytest

from unified_replication.models.replication import (
    Extensions,
    ReplicationHealth,
    ReplicationIntent,
    ReplicationStatus,
)
from unified_replication.translation.types import Backend

MANIFEST = {
    "apiVersion": "replication.unified.io/v1alpha1",
    "kind": "UnifiedVolumeReplication",
    "metadata": {"name": "db-replication", "namespace": "databases", "generation": 4},
    "spec": {
        "sourceEndpoint": {"cluster": "east", "region": "us-east-1", "storageClass": "ceph-rbd"},
        "destinationEndpoint": {"cluster": "west", "region": "us-west-2", "storageClass": "ceph-rbd"},
        "volumeMapping": {
            "source": {"pvcName": "db-data", "namespace": "databases"},
            "destination": {"volumeHandle": "db-data-replica", "namespace": "databases"},
        },
        "replicationState": "source",
        "replicationMode": "asynchronous",
        "schedule": {"mode": "interval", "rpo": "15m", "rto": "5m"},
        "extensions": {"ceph": {"mirroringMode": "snapshot"}},
    },
}


class TestReplicationIntent:
    def test_from_manifest(self):
        intent = ReplicationIntent.from_dict(MANIFEST)

        assert intent.name == "db-replication"
        assert intent.namespace == "databases"
        assert intent.generation == 4
        assert intent.source_endpoint.storage_class == "ceph-rbd"
        assert intent.volume_mapping.source.pvc_name == "db-data"
        assert intent.volume_mapping.destination.volume_handle == "db-data-replica"
        assert intent.replication_state == "source"
        assert intent.schedule.rpo == "15m"
        assert intent.extensions.ceph.mirroring_mode == "snapshot"
        assert intent.backend_hints() == [Backend.CEPH]

    def test_defaults(self):
        intent = ReplicationIntent.from_dict({"metadata": {"name": "bare"}})

        assert intent.namespace == "default"
        assert intent.extensions is None
        assert intent.backend_hints() == []
        assert intent.schedule.mode == "continuous"

    def test_name_is_required(self):
        with pytest.raises(ValueError):
            ReplicationIntent.from_dict({"metadata": {}, "spec": {}})

    def test_empty_extension_block_counts_as_hint(self):
        intent = ReplicationIntent.from_dict({
            "metadata": {"name": "x"},
            "spec": {"extensions": {"powerstore": None, "trident": {}}},
        })
        assert intent.backend_hints() == [Backend.TRIDENT]

    @pytest.mark.parametrize("block", ["ceph", "trident", "powerstore"])
    def test_null_extension_block_is_not_a_hint(self, block):
        intent = ReplicationIntent.from_dict({
            "metadata": {"name": "x"},
            "spec": {"extensions": {block: None}},
        })
        assert intent.backend_hints() == []

    def test_unknown_values_are_kept_raw(self):
        intent = ReplicationIntent.from_dict({
            "metadata": {"name": "x"},
            "spec": {"replicationState": "mirroring", "replicationMode": "eventual"},
        })
        assert intent.replication_state == "mirroring"
        assert intent.replication_mode == "eventual"


class TestExtensions:
    def test_none(self):
        assert Extensions.from_dict(None) is None

    def test_populated_order(self):
        extensions = Extensions.from_dict({"powerstore": {}, "ceph": {}})
        assert extensions.populated() == [Backend.CEPH, Backend.POWERSTORE]


class TestReplicationStatus:
    def test_status_dict(self):
        status = ReplicationStatus(
            state="source",
            mode="asynchronous",
            message="in sync",
            health=ReplicationHealth.HEALTHY,
            last_sync_time=datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc),
            backend_specific={"events": ["created"]},
            observed_generation=4,
        )

        assert status.to_status_dict() == {
            "state": "source",
            "mode": "asynchronous",
            "health": "Healthy",
            "observedGeneration": 4,
            "message": "in sync",
            "lastSyncTime": "2024-05-01T10:00:00+00:00",
            "backendSpecific": {"events": ["created"]},
        }

    def test_minimal_status_dict(self):
        assert ReplicationStatus(state="replica", mode="synchronous").to_status_dict() == {
            "state": "replica",
            "mode": "synchronous",
            "health": "Unknown",
            "observedGeneration": 0,
        }
