"""Global test configuration and fixtures."""
import logging
import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Test environment configuration
os.environ.setdefault('OPERATOR_NAMESPACE', 'default')
os.environ.setdefault('USE_MOCK_ADAPTERS', 'true')

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

from unified_replication.adapters.registry import build_mock_registry
from unified_replication.config.settings import DiscoveryConfig
from unified_replication.discovery.detectors import build_static_detectors
from unified_replication.discovery.engine import DiscoveryEngine
from unified_replication.models.replication import (
    Endpoint,
    ReplicationIntent,
    VolumeDestination,
    VolumeMapping,
    VolumeSource,
)
from unified_replication.translation.engine import TranslationEngine


def make_intent(name="app-data", namespace="default", state="replica",
                mode="asynchronous", storage_class="", extensions=None):
    """Build a replication intent with a single volume mapping."""
    return ReplicationIntent(
        name=name,
        namespace=namespace,
        source_endpoint=Endpoint(cluster="east", region="us-east-1", storage_class=storage_class),
        destination_endpoint=Endpoint(cluster="west", region="us-west-2", storage_class=storage_class),
        volume_mapping=VolumeMapping(
            source=VolumeSource(pvc_name=f"{name}-pvc", namespace=namespace),
            destination=VolumeDestination(volume_handle=f"{name}-remote", namespace=namespace),
        ),
        replication_state=state,
        replication_mode=mode,
        extensions=extensions,
    )


@pytest.fixture
def translator():
    return TranslationEngine()


@pytest.fixture
def mock_registry():
    return build_mock_registry()


@pytest.fixture
def static_discovery():
    """Discovery engine that reports every backend as available."""
    config = DiscoveryConfig(max_retries=0, retry_delay_seconds=0, timeout_per_backend_seconds=1)
    return DiscoveryEngine(build_static_detectors(), config)


@pytest.fixture
def intent_factory():
    return make_intent


@pytest.fixture
def intent():
    return make_intent()
