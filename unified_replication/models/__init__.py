from .replication import (
    CephExtensions,
    Endpoint,
    Extensions,
    ReplicationHealth,
    ReplicationIntent,
    ReplicationMode,
    ReplicationState,
    ReplicationStatus,
    Schedule,
    ScheduleMode,
    VolumeDestination,
    VolumeMapping,
    VolumeSource,
)

__all__ = [
    'CephExtensions',
    'Endpoint',
    'Extensions',
    'ReplicationHealth',
    'ReplicationIntent',
    'ReplicationMode',
    'ReplicationState',
    'ReplicationStatus',
    'Schedule',
    'ScheduleMode',
    'VolumeDestination',
    'VolumeMapping',
    'VolumeSource',
]
