from typing import Any, Dict

from .base import AdapterFactoryInfo
from .custom_object import CustomObjectAdapter, CustomObjectAdapterFactory
from ..models.replication import ReplicationIntent
from ..translation.types import Backend


class PowerStoreAdapter(CustomObjectAdapter):
    """Drives a Dell CSM DellCSIReplicationGroup."""

    group = "replication.storage.dell.com"
    version = "v1"
    plural = "dellcsireplicationgroups"
    kind = "DellCSIReplicationGroup"

    def build_spec(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, Any]:
        spec = {
            "state": state,
            "replicationPolicy": mode,
            "sourceVolumes": [{
                "pvcName": intent.volume_mapping.source.pvc_name,
                "volumeHandle": "",
            }],
            "remoteVolumes": [{
                "volumeHandle": intent.volume_mapping.destination.volume_handle,
            }],
            "syncSchedule": intent.schedule.rpo,
        }
        extensions = intent.extensions
        if extensions is not None and extensions.powerstore:
            rpo_settings = extensions.powerstore.get("rpoSettings")
            if rpo_settings:
                spec["rpoSettings"] = rpo_settings
        return spec


class PowerStoreAdapterFactory(CustomObjectAdapterFactory):
    def __init__(self, api=None):
        super().__init__(
            AdapterFactoryInfo(
                name="Dell PowerStore Replication Adapter",
                backend=Backend.POWERSTORE,
                version="1.0.0",
                description="Metro and async replication through DellCSIReplicationGroup",
            ),
            PowerStoreAdapter,
            api,
        )
