from typing import Any, Dict

from .base import AdapterFactoryInfo
from .custom_object import CustomObjectAdapter, CustomObjectAdapterFactory
from ..models.replication import ReplicationIntent
from ..translation.types import Backend

DEFAULT_VOLUME_REPLICATION_CLASS = "rbd-volumereplicationclass"
MODE_ANNOTATION = "unified-replication.io/replication-mode"
MIRRORING_MODE_ANNOTATION = "unified-replication.io/mirroring-mode"


class CephAdapter(CustomObjectAdapter):
    """Drives a csi-addons VolumeReplication for Ceph RBD mirroring.

    VolumeReplication has no mode field, so the backend mode is kept in an
    annotation and read back from there.
    """

    group = "replication.storage.openshift.io"
    version = "v1alpha1"
    plural = "volumereplications"
    kind = "VolumeReplication"

    def resource_name(self, intent: ReplicationIntent) -> str:
        return f"{intent.name}-vr"

    def build_spec(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, Any]:
        return {
            "volumeReplicationClass": self.config.custom_settings.get(
                "volumeReplicationClass", DEFAULT_VOLUME_REPLICATION_CLASS),
            "pvcName": intent.volume_mapping.source.pvc_name,
            "replicationState": state,
        }

    def build_annotations(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, str]:
        annotations = {MODE_ANNOTATION: mode}
        extensions = intent.extensions
        if extensions is not None and extensions.ceph is not None and extensions.ceph.mirroring_mode:
            annotations[MIRRORING_MODE_ANNOTATION] = extensions.ceph.mirroring_mode
        return annotations

    def extract_state(self, obj: Dict[str, Any]) -> str:
        # status.state reports Primary/Secondary/Unknown; the desired state is
        # what maps onto the unified vocabulary
        return (obj.get("spec") or {}).get("replicationState", "")

    def extract_mode(self, obj: Dict[str, Any]) -> str:
        annotations = (obj.get("metadata") or {}).get("annotations") or {}
        return annotations.get(MODE_ANNOTATION, "")


class CephAdapterFactory(CustomObjectAdapterFactory):
    def __init__(self, api=None):
        super().__init__(
            AdapterFactoryInfo(
                name="Ceph-CSI Replication Adapter",
                backend=Backend.CEPH,
                version="1.0.0",
                description="RBD mirroring through csi-addons VolumeReplication",
            ),
            CephAdapter,
            api,
        )
