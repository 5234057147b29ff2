import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == 'true'


@dataclass
class ControllerEngineConfig:
    """Controller pipeline behaviour"""
    enable_caching: bool = True
    cache_expiry_seconds: float = 300.0
    # Fail validation when the selected backend is discovered but not ready
    require_ready_backend: bool = False
    # Reject modes the selected backend does not report a capability for
    enforce_capabilities: bool = False


@dataclass
class DiscoveryConfig:
    """Discovery engine timing and retry settings"""
    cache_ttl_seconds: float = 300.0
    refresh_interval_seconds: float = 30.0
    timeout_per_backend_seconds: float = 10.0
    enable_auto_refresh: bool = False
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class ServerConfig:
    host: str = '0.0.0.0'
    port: int = 8081


@dataclass
class OperatorConfig:
    namespace: str = 'default'
    log_level: str = 'INFO'
    use_mock_adapters: bool = False
    controller: ControllerEngineConfig = field(default_factory=ControllerEngineConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_controller_config() -> ControllerEngineConfig:
    return ControllerEngineConfig(
        enable_caching=_env_bool('DISCOVERY_CACHE_ENABLED', True),
        cache_expiry_seconds=float(os.getenv('DISCOVERY_CACHE_EXPIRY_SECONDS', 300)),
        require_ready_backend=_env_bool('REQUIRE_READY_BACKEND', False),
        enforce_capabilities=_env_bool('ENFORCE_CAPABILITIES', False),
    )


def load_discovery_config() -> DiscoveryConfig:
    return DiscoveryConfig(
        cache_ttl_seconds=float(os.getenv('DISCOVERY_CACHE_TTL_SECONDS', 300)),
        refresh_interval_seconds=float(os.getenv('DISCOVERY_REFRESH_INTERVAL_SECONDS', 30)),
        timeout_per_backend_seconds=float(os.getenv('DISCOVERY_TIMEOUT_PER_BACKEND_SECONDS', 10)),
        enable_auto_refresh=_env_bool('DISCOVERY_AUTO_REFRESH', False),
        max_retries=max(0, int(os.getenv('DISCOVERY_MAX_RETRIES', 3))),
        retry_delay_seconds=float(os.getenv('DISCOVERY_RETRY_DELAY_SECONDS', 1)),
    )


def load_server_config() -> ServerConfig:
    return ServerConfig(
        host=os.getenv('HEALTH_HOST', '0.0.0.0'),
        port=int(os.getenv('HEALTH_PORT', 8081)),
    )


def load_operator_config() -> OperatorConfig:
    """Build the operator configuration from the environment"""
    return OperatorConfig(
        namespace=os.getenv('OPERATOR_NAMESPACE', 'default'),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        use_mock_adapters=_env_bool('USE_MOCK_ADAPTERS', False),
        controller=load_controller_config(),
        discovery=load_discovery_config(),
        server=load_server_config(),
    )
