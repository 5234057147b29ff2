from .settings import (
    ControllerEngineConfig,
    DiscoveryConfig,
    OperatorConfig,
    ServerConfig,
    load_controller_config,
    load_discovery_config,
    load_operator_config,
    load_server_config,
)

__all__ = [
    'ControllerEngineConfig',
    'DiscoveryConfig',
    'OperatorConfig',
    'ServerConfig',
    'load_controller_config',
    'load_discovery_config',
    'load_operator_config',
    'load_server_config',
]
