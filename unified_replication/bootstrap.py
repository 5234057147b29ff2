"""Startup wiring for the replication pipeline."""

import logging
from dataclasses import dataclass
from typing import Optional

from .adapters.registry import AdapterRegistry, build_default_registry, build_mock_registry
from .config.settings import OperatorConfig, load_operator_config
from .controller.engine import ControllerEngine
from .controller.selection import BackendSelector
from .discovery.detectors import build_crd_detectors, build_static_detectors
from .discovery.engine import DiscoveryEngine
from .monitoring.health import HealthChecker, ReadinessChecker
from .translation.engine import TranslationEngine
from .translation.maps import TranslationTables

logger = logging.getLogger(__name__)


@dataclass
class Operator:
    config: OperatorConfig
    translator: TranslationEngine
    discovery: DiscoveryEngine
    registry: AdapterRegistry
    engine: ControllerEngine
    health: HealthChecker
    readiness: ReadinessChecker


def build_translation_engine(tables: Optional[TranslationTables] = None) -> TranslationEngine:
    """Build the translator and verify its tables.

    Raises:
        TranslationError: if any backend's maps are not bidirectionally consistent
    """
    translator = TranslationEngine(tables)
    translator.validate_all_translations()
    logger.info(f"Translation tables validated for "
                f"{', '.join(str(b) for b in translator.supported_backends())}")
    return translator


def build_controller_engine(config: Optional[OperatorConfig] = None,
                            translator: Optional[TranslationEngine] = None,
                            discovery: Optional[DiscoveryEngine] = None,
                            registry: Optional[AdapterRegistry] = None,
                            selector: Optional[BackendSelector] = None) -> Operator:
    """Assemble the pipeline; any component can be supplied pre-built."""
    config = config or load_operator_config()
    if translator is None:
        translator = build_translation_engine()
    else:
        translator.validate_all_translations()

    if discovery is None:
        detectors = build_static_detectors() if config.use_mock_adapters else build_crd_detectors()
        discovery = DiscoveryEngine(detectors, config.discovery)

    if registry is None:
        if config.use_mock_adapters:
            logger.info("Using in-memory mock adapters")
            registry = build_mock_registry(config.namespace)
        else:
            registry = build_default_registry(config.namespace)

    engine = ControllerEngine(discovery, translator, registry, config.controller, selector)
    health = HealthChecker(engine)
    readiness = ReadinessChecker(engine)
    readiness.set_ready(True)
    return Operator(config, translator, discovery, registry, engine, health, readiness)
