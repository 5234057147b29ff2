"""
Translation tables between the unified vocabulary and each backend.

Only the unified->backend direction is written down; the reverse direction is
derived when each TranslationMap is built.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .types import Backend, BackendTables, ErrorType, TranslationError, TranslationMap

# Ceph volume-replication-operator knows primary/secondary/resync; the
# promote/demote transitions use extended resync values so each unified state
# keeps a distinct backend value.
CEPH_STATE_MAP = TranslationMap.from_forward({
    "source": "primary",
    "replica": "secondary",
    "syncing": "resync",
    "promoting": "resync-promote",
    "demoting": "resync-demote",
    "failed": "error",
})

# TridentMirrorRelationship states are established/promoted/reestablished,
# extended for the roles Trident does not name.
TRIDENT_STATE_MAP = TranslationMap.from_forward({
    "source": "established",
    "replica": "established-replica",
    "syncing": "established-syncing",
    "promoting": "promoted",
    "demoting": "reestablished",
    "failed": "established-failed",
})

# DellCSIReplicationGroup
POWERSTORE_STATE_MAP = TranslationMap.from_forward({
    "source": "source",
    "replica": "destination",
    "syncing": "syncing",
    "promoting": "promoting",
    "demoting": "demoting",
    "failed": "failed",
})

CEPH_MODE_MAP = TranslationMap.from_forward({
    "synchronous": "sync",
    "asynchronous": "async",
})

TRIDENT_MODE_MAP = TranslationMap.from_forward({
    "synchronous": "Sync",
    "asynchronous": "Async",
})

POWERSTORE_MODE_MAP = TranslationMap.from_forward({
    "synchronous": "SYNC",
    "asynchronous": "ASYNC",
})


class TranslationTables:
    """Immutable set of per-backend state and mode maps."""

    def __init__(self, tables: Mapping[Backend, BackendTables]):
        self._tables = MappingProxyType(dict(tables))

    @classmethod
    def from_forward_maps(cls, state_maps: Mapping[Backend, Mapping[str, str]],
                          mode_maps: Mapping[Backend, Mapping[str, str]]) -> "TranslationTables":
        """Build tables from plain unified->backend dictionaries."""
        missing = set(state_maps) ^ set(mode_maps)
        if missing:
            names = ", ".join(sorted(str(b) for b in missing))
            raise ValueError(f"state and mode maps must cover the same backends: {names}")
        return cls({
            backend: BackendTables(
                state=TranslationMap.from_forward(state_maps[backend]),
                mode=TranslationMap.from_forward(mode_maps[backend]),
            )
            for backend in state_maps
        })

    def backends(self) -> List[Backend]:
        return list(self._tables.keys())

    def get(self, backend: Backend) -> Optional[BackendTables]:
        return self._tables.get(backend)

    def state_map(self, backend: Backend) -> TranslationMap:
        return self._require(backend, "state").state

    def mode_map(self, backend: Backend) -> TranslationMap:
        return self._require(backend, "mode").mode

    def _require(self, backend: Backend, axis: str) -> BackendTables:
        tables = self._tables.get(backend)
        if tables is None:
            raise TranslationError(
                ErrorType.UNSUPPORTED_MAPPING, backend, "backend", str(backend),
                f"backend not supported for {axis} translation")
        return tables

    def __contains__(self, backend) -> bool:
        return backend in self._tables

    def __len__(self) -> int:
        return len(self._tables)


DEFAULT_TABLES = TranslationTables({
    Backend.CEPH: BackendTables(state=CEPH_STATE_MAP, mode=CEPH_MODE_MAP),
    Backend.TRIDENT: BackendTables(state=TRIDENT_STATE_MAP, mode=TRIDENT_MODE_MAP),
    Backend.POWERSTORE: BackendTables(state=POWERSTORE_STATE_MAP, mode=POWERSTORE_MODE_MAP),
})


def forward_maps_for(tables: TranslationTables) -> Dict[Backend, Dict[str, Dict[str, str]]]:
    """Plain-dict view of the forward maps, keyed by backend then axis."""
    return {
        backend: {
            "state": dict(tables.state_map(backend).unified_to_backend),
            "mode": dict(tables.mode_map(backend).unified_to_backend),
        }
        for backend in tables.backends()
    }
