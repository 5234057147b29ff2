"""Unit tests for CRD based backend detection."""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException

from unified_replication.discovery.crds import (
    BACKEND_CAPABILITIES,
    CEPH_CRDS,
    TRIDENT_CRDS,
    get_backend_for_crd,
    get_optional_crds,
    get_required_crds,
)
from unified_replication.discovery.detectors import (
    CRDDetector,
    StaticDetector,
    build_crd_detectors,
    build_static_detectors,
)
from unified_replication.discovery.types import (
    BackendCapability,
    BackendStatus,
    DiscoveryError,
    DiscoveryErrorType,
)
from unified_replication.translation.types import Backend


def crd(established="True"):
    condition = SimpleNamespace(type="Established", status=established)
    return SimpleNamespace(status=SimpleNamespace(conditions=[condition]))


def api_reading(responses):
    """ApiextensionsV1Api double answering per CRD name."""
    api = MagicMock()

    def read(name):
        response = responses.get(name, ApiException(status=404, reason="Not Found"))
        if isinstance(response, Exception):
            raise response
        return response

    api.read_custom_resource_definition.side_effect = read
    return api


class TestCRDDetector:
    @pytest.mark.asyncio
    async def test_all_crds_established(self):
        api = api_reading({c.name: crd() for c in CEPH_CRDS})
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, BACKEND_CAPABILITIES[Backend.CEPH], api)

        result = await detector.detect()

        assert result.status == BackendStatus.AVAILABLE
        assert result.is_ready
        assert result.message == "All required CRDs are available"
        assert all(info.available for info in result.crds)
        assert result.supports(BackendCapability.SYNC_REPLICATION)

    @pytest.mark.asyncio
    async def test_no_crds_is_unavailable(self):
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, BACKEND_CAPABILITIES[Backend.CEPH],
                               api_reading({}))

        result = await detector.detect()

        assert result.status == BackendStatus.UNAVAILABLE
        assert not result.is_ready
        assert result.capabilities == frozenset()
        assert len(result.crds) == 2

    @pytest.mark.asyncio
    async def test_some_required_crds_missing_is_partial(self):
        api = api_reading({CEPH_CRDS[0].name: crd()})
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, BACKEND_CAPABILITIES[Backend.CEPH], api)

        result = await detector.detect()

        assert result.status == BackendStatus.PARTIAL
        assert result.capabilities == frozenset()

    @pytest.mark.asyncio
    async def test_optional_crd_does_not_affect_status(self):
        required = {c.name: crd() for c in TRIDENT_CRDS if c.required}
        detector = CRDDetector(Backend.TRIDENT, TRIDENT_CRDS, api=api_reading(required))

        result = await detector.detect()

        assert result.status == BackendStatus.AVAILABLE
        assert sum(1 for info in result.crds if info.available) == len(required)

    @pytest.mark.asyncio
    async def test_crd_that_is_not_established(self):
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, api=api_reading({c.name: crd("False") for c in CEPH_CRDS}))

        assert await detector.check_crd_ready(CEPH_CRDS[0].name) is False

    @pytest.mark.asyncio
    async def test_crd_without_conditions(self):
        api = api_reading({CEPH_CRDS[0].name: SimpleNamespace(status=None)})
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, api=api)

        assert await detector.check_crd_ready(CEPH_CRDS[0].name) is False

    @pytest.mark.asyncio
    async def test_forbidden_is_permission_denied(self):
        api = api_reading({CEPH_CRDS[0].name: ApiException(status=403, reason="Forbidden")})
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, api=api)

        with pytest.raises(DiscoveryError) as exc_info:
            await detector.detect()
        error = exc_info.value
        assert error.kind == DiscoveryErrorType.PERMISSION_DENIED
        assert error.crd == CEPH_CRDS[0].name
        assert isinstance(error.unwrap(), ApiException)

    @pytest.mark.asyncio
    async def test_server_error_is_unknown(self):
        api = api_reading({CEPH_CRDS[0].name: ApiException(status=500, reason="Internal")})
        detector = CRDDetector(Backend.CEPH, CEPH_CRDS, api=api)

        with pytest.raises(DiscoveryError) as exc_info:
            await detector.check_crd_ready(CEPH_CRDS[0].name)
        assert exc_info.value.kind == DiscoveryErrorType.UNKNOWN

    def test_required_crds(self):
        detector = CRDDetector(Backend.TRIDENT, TRIDENT_CRDS, api=MagicMock())
        assert [c.name for c in detector.required_crds()] == [c.name for c in get_required_crds(Backend.TRIDENT)]

    def test_build_crd_detectors_shares_api(self):
        api = MagicMock()
        detectors = build_crd_detectors(api)
        assert set(detectors) == set(Backend)
        assert all(d.api is api for d in detectors.values())


class TestStaticDetector:
    @pytest.mark.asyncio
    async def test_available_reports_capabilities(self):
        result = await StaticDetector(Backend.POWERSTORE).detect()
        assert result.is_ready
        assert result.supports(BackendCapability.METRO_REPLICATION)

    @pytest.mark.asyncio
    async def test_unavailable_has_no_capabilities(self):
        detectors = build_static_detectors(BackendStatus.UNAVAILABLE)
        result = await detectors[Backend.CEPH].detect()
        assert result.status == BackendStatus.UNAVAILABLE
        assert result.capabilities == frozenset()


class TestCRDCatalogue:
    def test_optional_trident_crd(self):
        optional = get_optional_crds(Backend.TRIDENT)
        assert [c.kind for c in optional] == ["TridentActionMirrorUpdate"]
        assert get_optional_crds(Backend.CEPH) == []

    def test_backend_for_crd(self):
        assert get_backend_for_crd("dellcsireplicationgroups.replication.storage.dell.com") == Backend.POWERSTORE
        assert get_backend_for_crd("volumereplications.replication.storage.openshift.io") == Backend.CEPH
        assert get_backend_for_crd("widgets.example.com") is None

    @pytest.mark.parametrize("backend", list(Backend))
    def test_every_backend_supports_both_modes(self, backend):
        capabilities = BACKEND_CAPABILITIES[backend]
        assert BackendCapability.SYNC_REPLICATION in capabilities
        assert BackendCapability.ASYNC_REPLICATION in capabilities
