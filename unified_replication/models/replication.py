"""Replication intent and status models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..translation.types import Backend


class ReplicationState(Enum):
    SOURCE = "source"
    REPLICA = "replica"
    PROMOTING = "promoting"
    DEMOTING = "demoting"
    SYNCING = "syncing"
    FAILED = "failed"


class ReplicationMode(Enum):
    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"
    EVENTUAL = "eventual"


class ScheduleMode(Enum):
    CONTINUOUS = "continuous"
    INTERVAL = "interval"
    MANUAL = "manual"


class ReplicationHealth(Enum):
    HEALTHY = "Healthy"
    DEGRADED = "Degraded"
    UNHEALTHY = "Unhealthy"
    UNKNOWN = "Unknown"


@dataclass
class Endpoint:
    cluster: str = ""
    region: str = ""
    storage_class: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Endpoint":
        data = data or {}
        return cls(
            cluster=data.get("cluster", ""),
            region=data.get("region", ""),
            storage_class=data.get("storageClass", ""),
        )


@dataclass
class VolumeSource:
    pvc_name: str = ""
    namespace: str = ""


@dataclass
class VolumeDestination:
    volume_handle: str = ""
    namespace: str = ""


@dataclass
class VolumeMapping:
    source: VolumeSource = field(default_factory=VolumeSource)
    destination: VolumeDestination = field(default_factory=VolumeDestination)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "VolumeMapping":
        data = data or {}
        source = data.get("source") or {}
        destination = data.get("destination") or {}
        return cls(
            source=VolumeSource(
                pvc_name=source.get("pvcName", ""),
                namespace=source.get("namespace", ""),
            ),
            destination=VolumeDestination(
                volume_handle=destination.get("volumeHandle", ""),
                namespace=destination.get("namespace", ""),
            ),
        )


@dataclass
class Schedule:
    mode: str = ScheduleMode.CONTINUOUS.value
    rpo: str = ""
    rto: str = ""


@dataclass
class CephExtensions:
    mirroring_mode: Optional[str] = None  # journal or snapshot


@dataclass
class Extensions:
    """Vendor extension blocks. A block counts as populated when present and not null."""

    ceph: Optional[CephExtensions] = None
    trident: Optional[Dict[str, Any]] = None
    powerstore: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Extensions"]:
        if data is None:
            return None
        ceph = data.get("ceph")
        return cls(
            ceph=CephExtensions(mirroring_mode=ceph.get("mirroringMode")) if ceph is not None else None,
            trident=dict(data["trident"]) if data.get("trident") is not None else None,
            powerstore=dict(data["powerstore"]) if data.get("powerstore") is not None else None,
        )

    def populated(self) -> List[Backend]:
        blocks = {
            Backend.CEPH: self.ceph,
            Backend.TRIDENT: self.trident,
            Backend.POWERSTORE: self.powerstore,
        }
        return [backend for backend in Backend if blocks[backend] is not None]


@dataclass
class ReplicationIntent:
    """Desired replication relationship for one volume.

    State and mode stay raw strings; values outside the unified vocabulary
    are rejected during translation, not here.
    """

    name: str
    namespace: str = "default"
    source_endpoint: Endpoint = field(default_factory=Endpoint)
    destination_endpoint: Endpoint = field(default_factory=Endpoint)
    volume_mapping: VolumeMapping = field(default_factory=VolumeMapping)
    replication_state: str = ReplicationState.REPLICA.value
    replication_mode: str = ReplicationMode.ASYNCHRONOUS.value
    schedule: Schedule = field(default_factory=Schedule)
    extensions: Optional[Extensions] = None
    generation: int = 0

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> "ReplicationIntent":
        """Parse a UnifiedVolumeReplication custom object.

        Args:
            obj: Object with ``metadata`` and ``spec`` keys, as returned by the
                Kubernetes API or loaded from a manifest

        Returns:
            ReplicationIntent
        """
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        if not metadata.get("name"):
            raise ValueError("replication object is missing metadata.name")
        schedule = spec.get("schedule") or {}
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace") or "default",
            source_endpoint=Endpoint.from_dict(spec.get("sourceEndpoint")),
            destination_endpoint=Endpoint.from_dict(spec.get("destinationEndpoint")),
            volume_mapping=VolumeMapping.from_dict(spec.get("volumeMapping")),
            replication_state=spec.get("replicationState", ""),
            replication_mode=spec.get("replicationMode", ""),
            schedule=Schedule(
                mode=schedule.get("mode", ScheduleMode.CONTINUOUS.value),
                rpo=schedule.get("rpo", ""),
                rto=schedule.get("rto", ""),
            ),
            extensions=Extensions.from_dict(spec.get("extensions")),
            generation=int(metadata.get("generation", 0) or 0),
        )

    def backend_hints(self) -> List[Backend]:
        """Backends with a populated extension block, in declaration order."""
        if self.extensions is None:
            return []
        return self.extensions.populated()


@dataclass
class ReplicationStatus:
    """Replication status as reported by an adapter."""

    state: str
    mode: str
    message: str = ""
    health: ReplicationHealth = ReplicationHealth.UNKNOWN
    last_sync_time: Optional[datetime] = None
    backend_specific: Dict[str, Any] = field(default_factory=dict)
    observed_generation: int = 0

    def to_status_dict(self) -> Dict[str, Any]:
        """Status fragment for the custom object's status subresource."""
        status = {
            "state": self.state,
            "mode": self.mode,
            "health": self.health.value,
            "observedGeneration": self.observed_generation,
        }
        if self.message:
            status["message"] = self.message
        if self.last_sync_time is not None:
            status["lastSyncTime"] = self.last_sync_time.isoformat()
        if self.backend_specific:
            status["backendSpecific"] = dict(self.backend_specific)
        return status
