"""Discovery result types and errors."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from ..translation.types import Backend


class BackendStatus(str, Enum):
    AVAILABLE = "Available"
    READY = "Ready"
    PARTIAL = "Partial"
    UNAVAILABLE = "Unavailable"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def is_ready(self) -> bool:
        return self in (BackendStatus.AVAILABLE, BackendStatus.READY)


class BackendCapability(str, Enum):
    # Replication modes
    ASYNC_REPLICATION = "async_replication"
    SYNC_REPLICATION = "sync_replication"
    METRO_REPLICATION = "metro_replication"

    # State management
    SOURCE_PROMOTION = "source_promotion"
    REPLICA_DEMOTION = "replica_demotion"
    FAILOVER = "failover"
    FAILBACK = "failback"
    RESYNC = "resync"

    # Features
    SNAPSHOT_BASED = "snapshot_based"
    JOURNAL_BASED = "journal_based"
    AUTO_RESYNC = "auto_resync"
    SCHEDULED_SYNC = "scheduled_sync"
    VOLUME_GROUPS = "volume_groups"
    CONSISTENCY_GROUPS = "consistency_groups"

    # Performance and topology
    HIGH_THROUGHPUT = "high_throughput"
    LOW_LATENCY = "low_latency"
    MULTI_REGION = "multi_region"
    MULTI_CLOUD = "multi_cloud"

    def __str__(self) -> str:
        return self.value


class DiscoveryErrorType(str, Enum):
    CRD_NOT_FOUND = "crd_not_found"
    CONTROLLER_NOT_FOUND = "controller_not_found"
    TIMEOUT = "timeout"
    PERMISSION_DENIED = "permission_denied"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


class DiscoveryError(Exception):
    """Discovery failure for a backend, optionally tied to one CRD."""

    def __init__(self, kind: DiscoveryErrorType, backend: Optional[Backend] = None,
                 crd: str = "", message: str = "", cause: Optional[BaseException] = None):
        self.kind = kind
        self.backend = backend
        self.crd = crd
        self.message = message
        self.cause = cause
        text = f"discovery error ({kind}) for backend {backend} CRD {crd}: {message}"
        if cause is not None:
            text += f" (caused by: {cause})"
        super().__init__(text)
        if cause is not None:
            self.__cause__ = cause

    def unwrap(self) -> Optional[BaseException]:
        return self.cause


@dataclass(frozen=True)
class CRDDefinition:
    name: str
    group: str
    version: str
    kind: str
    required: bool = True


@dataclass
class CRDInfo:
    name: str
    group: str
    version: str
    kind: str
    available: bool = False

    @classmethod
    def from_definition(cls, definition: CRDDefinition, available: bool) -> "CRDInfo":
        return cls(definition.name, definition.group, definition.version,
                   definition.kind, available)


@dataclass
class BackendDiscoveryResult:
    backend: Backend
    status: BackendStatus = BackendStatus.UNKNOWN
    capabilities: FrozenSet[BackendCapability] = frozenset()
    crds: List[CRDInfo] = field(default_factory=list)
    message: str = ""
    last_updated: float = field(default_factory=time.time)

    @property
    def is_ready(self) -> bool:
        return self.status.is_ready

    def supports(self, capability: BackendCapability) -> bool:
        return capability in self.capabilities


@dataclass
class DiscoveryResult:
    """Outcome of one discovery pass over every known backend."""

    backends: Dict[Backend, BackendDiscoveryResult] = field(default_factory=dict)
    available_backends: List[Backend] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)
    error: str = ""

    def get(self, backend: Backend) -> Optional[BackendDiscoveryResult]:
        return self.backends.get(backend)
