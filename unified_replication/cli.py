"""
Command line tools for the unified replication operator.
Validates translation tables, inspects discovery and applies replication manifests.
"""

import argparse
import asyncio
import json
import logging
from typing import List, Optional

import yaml
from tabulate import tabulate

from .bootstrap import Operator, build_controller_engine, build_translation_engine
from .config.settings import load_operator_config
from .controller.engine import Operation
from .models.replication import ReplicationIntent
from .monitoring.server import HealthServer
from .translation.types import Backend, TranslationError

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Configure logging with consistent format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description='Unified Replication Operator Tools')
    parser.add_argument('--log-level', default=None,
                        help='Logging level (defaults to LOG_LEVEL or INFO)')
    parser.add_argument('--mock', action='store_true',
                        help='Use in-memory adapters and report every backend as available')
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    validate_parser = subparsers.add_parser('validate',
                                            help='Validate translation tables and print vocabularies')
    validate_parser.add_argument('--backend', type=Backend.parse, choices=list(Backend), default=None,
                                 help='Only print the tables of this backend')

    discover_parser = subparsers.add_parser('discover', help='Run one backend discovery pass')
    discover_parser.add_argument('--format', choices=['table', 'json'], default='table',
                                 help='Output format')

    apply_parser = subparsers.add_parser('apply', help='Apply a replication manifest')
    apply_parser.add_argument('-f', '--filename', required=True,
                              help='UnifiedVolumeReplication manifest (YAML)')
    apply_parser.add_argument('--operation', choices=[op.value for op in Operation],
                              default=Operation.CREATE.value,
                              help='Operation to perform')

    status_parser = subparsers.add_parser('status', help='Show replication status')
    status_parser.add_argument('-f', '--filename', required=True,
                               help='UnifiedVolumeReplication manifest (YAML)')

    serve_parser = subparsers.add_parser('serve', help='Run the health and metrics server')
    serve_parser.add_argument('--host', default=None, help='Bind address')
    serve_parser.add_argument('--port', type=int, default=None, help='Bind port')

    return parser.parse_args(argv)


def load_intent(path: str) -> ReplicationIntent:
    with open(path) as f:
        manifest = yaml.safe_load(f)
    if not isinstance(manifest, dict):
        raise ValueError(f"{path} does not contain a replication object")
    return ReplicationIntent.from_dict(manifest)


def print_vocabularies(translator, backends: Optional[List[Backend]] = None):
    for backend in backends or translator.supported_backends():
        info = translator.get_backend_info(backend)
        state_rows = [(u, translator.translate_state_to_backend(backend, u))
                      for u in info.supported_states]
        mode_rows = [(u, translator.translate_mode_to_backend(backend, u))
                     for u in info.supported_modes]
        print(f"\n{backend}")
        print(tabulate(state_rows + mode_rows, headers=['unified', str(backend)], tablefmt='grid'))


async def discover(operator: Operator, output_format: str):
    result = await operator.discovery.discover_backends()
    rows = [{
        'backend': str(backend),
        'status': str(item.status),
        'crds': f"{sum(1 for c in item.crds if c.available)}/{len(item.crds)}",
        'capabilities': len(item.capabilities),
        'message': item.message,
    } for backend, item in result.backends.items()]
    if output_format == 'json':
        print(json.dumps(rows, indent=2))
    else:
        print(tabulate([r.values() for r in rows], headers=rows[0].keys() if rows else [],
                       tablefmt='grid'))
    print(f"Available: {', '.join(str(b) for b in result.available_backends) or 'none'}")


async def apply(operator: Operator, path: str, operation: str):
    intent = load_intent(path)
    backend = await operator.engine.process_replication(intent, operation)
    print(f"{operation} {intent.namespace}/{intent.name} applied on {backend}")


async def status(operator: Operator, path: str):
    intent = load_intent(path)
    result = await operator.engine.get_replication_status(intent)
    print(json.dumps(result.to_status_dict(), indent=2, default=str))


async def serve(operator: Operator, host: str, port: int):
    server = HealthServer(operator.health, operator.readiness, host, port)
    await server.start()
    operator.discovery.start_auto_refresh()
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await operator.discovery.stop_auto_refresh()
        await server.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for operator tools."""
    args = parse_args(argv)
    config = load_operator_config()
    setup_logging(args.log_level or config.log_level)
    if args.mock:
        config.use_mock_adapters = True

    try:
        if args.command == 'validate':
            print_vocabularies(build_translation_engine(),
                               [args.backend] if args.backend else None)
            print("\nAll translation tables are consistent")
        elif args.command in ('discover', 'apply', 'status', 'serve'):
            operator = build_controller_engine(config)
            if args.command == 'discover':
                asyncio.run(discover(operator, args.format))
            elif args.command == 'apply':
                asyncio.run(apply(operator, args.filename, args.operation))
            elif args.command == 'status':
                asyncio.run(status(operator, args.filename))
            else:
                asyncio.run(serve(operator, args.host or config.server.host,
                                  args.port or config.server.port))
        else:
            logger.error("No command specified. Use --help for usage information.")
            return 1
    except KeyboardInterrupt:
        logger.info("Operation stopped by user")
    except TranslationError as e:
        logger.error(f"Translation tables are inconsistent: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1
    return 0
