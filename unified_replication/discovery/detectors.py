"""Backend detectors.

A backend is detected by reading its CRDs from the apiextensions API. A CRD
counts only when it exists and its Established condition is True.
"""

import logging
import time
from typing import Dict, FrozenSet, Iterable, List, Optional

from kubernetes import client

from .crds import BACKEND_CAPABILITIES, BACKEND_CRDS
from .types import (
    BackendCapability,
    BackendDiscoveryResult,
    BackendStatus,
    CRDDefinition,
    CRDInfo,
    DiscoveryError,
    DiscoveryErrorType,
)
from ..kube import api_status, load_kubernetes_config, run_sync
from ..translation.types import Backend

logger = logging.getLogger(__name__)


class BackendDetector:
    """Base class for detectors; subclasses implement detect()."""

    backend: Backend

    async def detect(self) -> BackendDiscoveryResult:
        raise NotImplementedError

    def required_crds(self) -> List[CRDDefinition]:
        return []


class CRDDetector(BackendDetector):
    def __init__(self, backend: Backend, crds: Iterable[CRDDefinition],
                 capabilities: FrozenSet[BackendCapability] = frozenset(),
                 api: Optional[client.ApiextensionsV1Api] = None):
        self.backend = backend
        self.crds = list(crds)
        self.capabilities = frozenset(capabilities)
        self._api = api

    @property
    def api(self) -> client.ApiextensionsV1Api:
        if self._api is None:
            load_kubernetes_config()
            self._api = client.ApiextensionsV1Api()
        return self._api

    def required_crds(self) -> List[CRDDefinition]:
        return [crd for crd in self.crds if crd.required]

    async def detect(self) -> BackendDiscoveryResult:
        logger.debug(f"Starting detection for backend {self.backend}")
        crd_infos = []
        available = 0
        required = 0
        missing_required = 0

        for definition in self.crds:
            ready = await self.check_crd_ready(definition.name)
            crd_infos.append(CRDInfo.from_definition(definition, ready))
            if ready:
                available += 1
            if definition.required:
                required += 1
                if not ready:
                    missing_required += 1

        if missing_required == 0:
            status = BackendStatus.AVAILABLE
            message = "All required CRDs are available"
        elif missing_required < required:
            status = BackendStatus.PARTIAL
            message = "Some required CRDs are missing"
        else:
            status = BackendStatus.UNAVAILABLE
            message = "Required CRDs are not available"

        logger.info(f"Detection for {self.backend} completed: status={status} "
                    f"available_crds={available}/{len(self.crds)} "
                    f"missing_required={missing_required}")

        return BackendDiscoveryResult(
            backend=self.backend,
            status=status,
            capabilities=self.capabilities if status.is_ready else frozenset(),
            crds=crd_infos,
            message=message,
            last_updated=time.time(),
        )

    async def check_crd_ready(self, crd_name: str) -> bool:
        """Return True when the CRD exists and is Established.

        Raises:
            DiscoveryError: permission_denied on 403, unknown on other API errors
        """
        try:
            crd = await run_sync(self.api.read_custom_resource_definition, crd_name)
        except Exception as e:
            status = api_status(e)
            if status == 404:
                logger.debug(f"CRD {crd_name} not found")
                return False
            if status == 403:
                raise DiscoveryError(DiscoveryErrorType.PERMISSION_DENIED, self.backend,
                                     crd_name, "insufficient permissions to read CRD", e) from e
            raise DiscoveryError(DiscoveryErrorType.UNKNOWN, self.backend, crd_name,
                                 "failed to read CRD", e) from e

        conditions = getattr(getattr(crd, "status", None), "conditions", None) or []
        for condition in conditions:
            if condition.type == "Established":
                return condition.status == "True"
        return False


class StaticDetector(BackendDetector):
    """Reports a fixed status. Used with the in-memory adapters."""

    def __init__(self, backend: Backend, status: BackendStatus = BackendStatus.AVAILABLE,
                 capabilities: Optional[FrozenSet[BackendCapability]] = None):
        self.backend = backend
        self.status = status
        self.capabilities = (capabilities if capabilities is not None
                             else BACKEND_CAPABILITIES.get(backend, frozenset()))

    async def detect(self) -> BackendDiscoveryResult:
        return BackendDiscoveryResult(
            backend=self.backend,
            status=self.status,
            capabilities=self.capabilities if self.status.is_ready else frozenset(),
            message=f"static detector reports {self.status}",
        )


def build_crd_detectors(api: Optional[client.ApiextensionsV1Api] = None) -> Dict[Backend, BackendDetector]:
    """One CRDDetector per known backend, sharing a single API client."""
    return {
        backend: CRDDetector(backend, crds, BACKEND_CAPABILITIES.get(backend, frozenset()), api)
        for backend, crds in BACKEND_CRDS.items()
    }


def build_static_detectors(status: BackendStatus = BackendStatus.AVAILABLE) -> Dict[Backend, BackendDetector]:
    return {backend: StaticDetector(backend, status) for backend in Backend}
