from typing import Any, Dict

from .base import AdapterFactoryInfo
from .custom_object import CustomObjectAdapter, CustomObjectAdapterFactory
from ..models.replication import ReplicationIntent
from ..translation.types import Backend


class TridentAdapter(CustomObjectAdapter):
    """Drives a NetApp TridentMirrorRelationship."""

    group = "trident.netapp.io"
    version = "v1"
    plural = "tridentmirrorrelationships"
    kind = "TridentMirrorRelationship"
    last_sync_field = "lastTransferTime"

    def build_spec(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, Any]:
        return {
            "state": state,
            "replicationPolicy": mode,
            "volumeGroupName": f"{intent.name}-vg",
            "replicationSchedule": intent.schedule.rpo,
            "volumeMappings": [{
                "localPVCName": intent.volume_mapping.source.pvc_name,
                "remoteVolumeHandle": intent.volume_mapping.destination.volume_handle,
            }],
        }


class TridentAdapterFactory(CustomObjectAdapterFactory):
    def __init__(self, api=None):
        super().__init__(
            AdapterFactoryInfo(
                name="NetApp Trident Replication Adapter",
                backend=Backend.TRIDENT,
                version="1.0.0",
                description="SnapMirror through TridentMirrorRelationship",
            ),
            TridentAdapter,
            api,
        )
