"""CRDs and capabilities that identify each backend."""

from typing import Dict, FrozenSet, List, Optional

from .types import BackendCapability as Cap, CRDDefinition
from ..translation.types import Backend

CEPH_CRDS = [
    CRDDefinition(
        name="volumereplicationclasses.replication.storage.openshift.io",
        group="replication.storage.openshift.io",
        version="v1alpha1",
        kind="VolumeReplicationClass",
    ),
    CRDDefinition(
        name="volumereplications.replication.storage.openshift.io",
        group="replication.storage.openshift.io",
        version="v1alpha1",
        kind="VolumeReplication",
    ),
]

TRIDENT_CRDS = [
    CRDDefinition(
        name="tridentmirrorrelationships.trident.netapp.io",
        group="trident.netapp.io",
        version="v1",
        kind="TridentMirrorRelationship",
    ),
    # Only used for imperative mirror updates
    CRDDefinition(
        name="tridentactionmirrorupdates.trident.netapp.io",
        group="trident.netapp.io",
        version="v1",
        kind="TridentActionMirrorUpdate",
        required=False,
    ),
    CRDDefinition(
        name="tridentvolumes.trident.netapp.io",
        group="trident.netapp.io",
        version="v1",
        kind="TridentVolume",
    ),
]

POWERSTORE_CRDS = [
    CRDDefinition(
        name="dellcsireplicationgroups.replication.storage.dell.com",
        group="replication.storage.dell.com",
        version="v1",
        kind="DellCSIReplicationGroup",
    ),
]

BACKEND_CRDS: Dict[Backend, List[CRDDefinition]] = {
    Backend.CEPH: CEPH_CRDS,
    Backend.TRIDENT: TRIDENT_CRDS,
    Backend.POWERSTORE: POWERSTORE_CRDS,
}

BACKEND_CAPABILITIES: Dict[Backend, FrozenSet[Cap]] = {
    Backend.CEPH: frozenset({
        Cap.ASYNC_REPLICATION, Cap.SYNC_REPLICATION, Cap.SOURCE_PROMOTION,
        Cap.REPLICA_DEMOTION, Cap.RESYNC, Cap.JOURNAL_BASED, Cap.SNAPSHOT_BASED,
        Cap.AUTO_RESYNC, Cap.SCHEDULED_SYNC, Cap.HIGH_THROUGHPUT, Cap.MULTI_REGION,
    }),
    Backend.TRIDENT: frozenset({
        Cap.ASYNC_REPLICATION, Cap.SYNC_REPLICATION, Cap.SOURCE_PROMOTION,
        Cap.FAILOVER, Cap.FAILBACK, Cap.SNAPSHOT_BASED, Cap.SCHEDULED_SYNC,
        Cap.CONSISTENCY_GROUPS, Cap.LOW_LATENCY, Cap.MULTI_CLOUD,
    }),
    Backend.POWERSTORE: frozenset({
        Cap.ASYNC_REPLICATION, Cap.SYNC_REPLICATION, Cap.METRO_REPLICATION,
        Cap.SOURCE_PROMOTION, Cap.REPLICA_DEMOTION, Cap.FAILOVER,
        Cap.VOLUME_GROUPS, Cap.CONSISTENCY_GROUPS, Cap.HIGH_THROUGHPUT,
        Cap.LOW_LATENCY, Cap.MULTI_REGION,
    }),
}


def get_crds(backend: Backend) -> List[CRDDefinition]:
    return list(BACKEND_CRDS.get(backend, []))


def get_required_crds(backend: Backend) -> List[CRDDefinition]:
    return [crd for crd in BACKEND_CRDS.get(backend, []) if crd.required]


def get_optional_crds(backend: Backend) -> List[CRDDefinition]:
    return [crd for crd in BACKEND_CRDS.get(backend, []) if not crd.required]


def get_backend_for_crd(crd_name: str) -> Optional[Backend]:
    for backend, crds in BACKEND_CRDS.items():
        if any(crd.name == crd_name for crd in crds):
            return backend
    return None
