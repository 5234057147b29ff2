"""
Adapters backed by a namespaced Kubernetes custom object.

Each backend is driven by creating, patching and deleting one custom object
per intent through the CustomObjectsApi. Subclasses describe the object's
group/version/kind and how the spec is laid out.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Type

from kubernetes import client

from .base import (
    AdapterConfig,
    AdapterError,
    AdapterErrorType,
    AdapterFactory,
    AdapterFactoryInfo,
    ReplicationAdapter,
)
from ..kube import api_status, load_kubernetes_config, run_sync
from ..models.replication import ReplicationHealth, ReplicationIntent, ReplicationStatus
from ..translation.engine import TranslationEngine

logger = logging.getLogger(__name__)

NAME_LABEL = "unified-replication.io/name"
MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp {value!r}")
        return None


def health_from_conditions(conditions: List[Dict[str, Any]]) -> ReplicationHealth:
    """Summarise standard status conditions into a health value."""
    if not conditions:
        return ReplicationHealth.UNKNOWN
    health = ReplicationHealth.HEALTHY
    for condition in conditions:
        kind = condition.get("type")
        status = condition.get("status")
        if kind in ("Error", "Failed") and status == "True":
            return ReplicationHealth.UNHEALTHY
        if kind == "Degraded" and status == "True":
            health = ReplicationHealth.DEGRADED
        elif kind in ("Healthy", "Ready") and status != "True":
            health = ReplicationHealth.DEGRADED
    return health


class CustomObjectAdapter(ReplicationAdapter):
    group = ""
    version = ""
    plural = ""
    kind = ""
    # Status field holding the last completed transfer
    last_sync_field = "lastSyncTime"

    def __init__(self, backend, translator: TranslationEngine, config: AdapterConfig,
                 api: Optional[client.CustomObjectsApi] = None):
        super().__init__(backend, translator, config)
        self.api = api

    async def initialize(self) -> None:
        if self.api is None:
            load_kubernetes_config()
            self.api = client.CustomObjectsApi()
        await super().initialize()

    def resource_name(self, intent: ReplicationIntent) -> str:
        return intent.name

    def build_spec(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, Any]:
        raise NotImplementedError

    def build_annotations(self, intent: ReplicationIntent, state: str, mode: str) -> Dict[str, str]:
        return {}

    def extract_state(self, obj: Dict[str, Any]) -> str:
        status = obj.get("status") or {}
        return status.get("state") or (obj.get("spec") or {}).get("state", "")

    def extract_mode(self, obj: Dict[str, Any]) -> str:
        return (obj.get("spec") or {}).get("replicationPolicy", "")

    def build_body(self, intent: ReplicationIntent) -> Dict[str, Any]:
        state, mode = self.backend_values(intent)
        metadata = {
            "name": self.resource_name(intent),
            "namespace": intent.namespace,
            "labels": {
                MANAGED_BY_LABEL: self.config.managed_by,
                NAME_LABEL: intent.name,
            },
        }
        annotations = self.build_annotations(intent, state, mode)
        if annotations:
            metadata["annotations"] = annotations
        return {
            "apiVersion": f"{self.group}/{self.version}",
            "kind": self.kind,
            "metadata": metadata,
            "spec": self.build_spec(intent, state, mode),
        }

    async def create_replication(self, intent: ReplicationIntent) -> None:
        body = self.build_body(intent)
        name = body["metadata"]["name"]
        try:
            await run_sync(self.api.create_namespaced_custom_object,
                           self.group, self.version, intent.namespace, self.plural, body)
            logger.info(f"Created {self.kind} {intent.namespace}/{name}")
        except Exception as e:
            if api_status(e) != 409:
                raise self._wrap("create", name, e) from e
            logger.info(f"{self.kind} {intent.namespace}/{name} already exists, patching")
            await self._patch(intent.namespace, name, body, "create")

    async def update_replication(self, intent: ReplicationIntent) -> None:
        body = self.build_body(intent)
        name = body["metadata"]["name"]
        try:
            await self._patch(intent.namespace, name, body, "update")
        except AdapterError as e:
            if api_status(e.cause) != 404:
                raise
            logger.info(f"{self.kind} {intent.namespace}/{name} not found, creating")
            await self.create_replication(intent)

    async def delete_replication(self, intent: ReplicationIntent) -> None:
        name = self.resource_name(intent)
        try:
            await run_sync(self.api.delete_namespaced_custom_object,
                           self.group, self.version, intent.namespace, self.plural, name)
            logger.info(f"Deleted {self.kind} {intent.namespace}/{name}")
        except Exception as e:
            if api_status(e) == 404:
                logger.debug(f"{self.kind} {intent.namespace}/{name} already gone")
                return
            raise self._wrap("delete", name, e) from e

    async def get_replication_status(self, intent: ReplicationIntent) -> ReplicationStatus:
        name = self.resource_name(intent)
        try:
            obj = await run_sync(self.api.get_namespaced_custom_object,
                                 self.group, self.version, intent.namespace, self.plural, name)
        except Exception as e:
            raise self._wrap("status", name, e) from e

        status = obj.get("status") or {}
        return ReplicationStatus(
            state=self.extract_state(obj),
            mode=self.extract_mode(obj),
            message=status.get("message", ""),
            health=health_from_conditions(status.get("conditions") or []),
            last_sync_time=parse_timestamp(status.get(self.last_sync_field)),
            backend_specific=dict(status),
            observed_generation=intent.generation,
        )

    async def _patch(self, namespace: str, name: str, body: Dict[str, Any], operation: str):
        try:
            await run_sync(self.api.patch_namespaced_custom_object,
                           self.group, self.version, namespace, self.plural, name, body)
            logger.info(f"Patched {self.kind} {namespace}/{name}")
        except Exception as e:
            raise self._wrap(operation, name, e) from e

    def _wrap(self, operation: str, name: str, error: BaseException) -> AdapterError:
        status = api_status(error)
        if status == 404:
            kind = AdapterErrorType.RESOURCE
            message = f"{self.kind} not found"
        elif status == 409:
            kind = AdapterErrorType.RESOURCE
            message = f"{self.kind} conflict"
        elif status in (401, 403):
            kind = AdapterErrorType.PERMISSION
            message = f"not allowed to {operation} {self.kind}"
        elif status is not None and status >= 500:
            kind = AdapterErrorType.CONNECTION
            message = f"API server error during {operation}"
        elif status is not None:
            kind = AdapterErrorType.OPERATION
            message = f"failed to {operation} {self.kind}"
        else:
            kind = AdapterErrorType.UNKNOWN
            message = f"unexpected error during {operation}"
        return AdapterError(kind, self.backend, operation, name, message, error)


class CustomObjectAdapterFactory(AdapterFactory):
    def __init__(self, info: AdapterFactoryInfo, adapter_class: Type[CustomObjectAdapter],
                 api: Optional[client.CustomObjectsApi] = None):
        super().__init__(info)
        self.adapter_class = adapter_class
        self.api = api

    def create_adapter(self, translator: TranslationEngine,
                       config: AdapterConfig) -> ReplicationAdapter:
        return self.adapter_class(self.backend, translator, config, self.api)
