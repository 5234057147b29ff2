"""Unit tests for startup wiring and the command line tools."""
import json

import pytest
import yaml

from unified_replication.bootstrap import build_controller_engine, build_translation_engine
from unified_replication.cli import main, parse_args
from unified_replication.config.settings import OperatorConfig
from unified_replication.models.replication import ReplicationIntent
from unified_replication.translation.engine import TranslationEngine
from unified_replication.translation.maps import TranslationTables
from unified_replication.translation.types import (
    Backend,
    BackendTables,
    TranslationError,
    TranslationMap,
)

MANIFEST = {
    "apiVersion": "replication.unified.io/v1alpha1",
    "kind": "UnifiedVolumeReplication",
    "metadata": {"name": "web-data", "namespace": "default"},
    "spec": {
        "sourceEndpoint": {"cluster": "east", "storageClass": "dell-powerstore"},
        "destinationEndpoint": {"cluster": "west", "storageClass": "dell-powerstore"},
        "volumeMapping": {
            "source": {"pvcName": "web-data"},
            "destination": {"volumeHandle": "web-data-dr"},
        },
        "replicationState": "source",
        "replicationMode": "synchronous",
    },
}


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "replication.yaml"
    path.write_text(yaml.safe_dump(MANIFEST))
    return str(path)


class TestBootstrap:
    def test_mock_wiring(self):
        operator = build_controller_engine(OperatorConfig(use_mock_adapters=True))

        assert operator.registry.supported_backends() == list(Backend)
        assert operator.readiness.check()
        assert operator.health.check().healthy

    def test_inconsistent_tables_abort_startup(self):
        tables = TranslationTables({
            Backend.CEPH: BackendTables(
                state=TranslationMap({"source": "primary"}, {"primary": "replica"}),
                mode=TranslationMap.from_forward({"synchronous": "sync"}),
            ),
        })
        with pytest.raises(TranslationError):
            build_translation_engine(tables)
        with pytest.raises(TranslationError):
            build_controller_engine(OperatorConfig(use_mock_adapters=True),
                                    translator=TranslationEngine(tables))

    @pytest.mark.asyncio
    async def test_mock_pipeline_end_to_end(self):
        operator = build_controller_engine(OperatorConfig(use_mock_adapters=True))
        intent = ReplicationIntent.from_dict(MANIFEST)

        backend = await operator.engine.process_replication(intent, "create")
        status = await operator.engine.get_replication_status(intent)

        assert backend == Backend.POWERSTORE
        assert status.state == "source"
        assert status.mode == "synchronous"


class TestCli:
    def test_parse_args(self):
        args = parse_args(['--mock', 'apply', '-f', 'x.yaml', '--operation', 'update'])
        assert args.mock
        assert args.command == 'apply'
        assert args.filename == 'x.yaml'
        assert args.operation == 'update'

    def test_validate(self, capsys):
        assert main(['validate']) == 0
        out = capsys.readouterr().out
        assert "All translation tables are consistent" in out
        assert "resync-promote" in out

    def test_validate_single_backend(self, capsys):
        assert main(['validate', '--backend', ' PowerStore ']) == 0
        out = capsys.readouterr().out
        assert "destination" in out
        assert "resync-promote" not in out

    def test_validate_unknown_backend(self):
        with pytest.raises(SystemExit):
            parse_args(['validate', '--backend', 'longhorn'])

    def test_discover_json(self, capsys):
        assert main(['--mock', 'discover', '--format', 'json']) == 0
        out = capsys.readouterr().out
        rows = json.loads(out[:out.rindex("]") + 1])
        assert [row["backend"] for row in rows] == ["ceph", "trident", "powerstore"]
        assert "Available: ceph, trident, powerstore" in out

    def test_apply(self, capsys, manifest):
        assert main(['--mock', 'apply', '-f', manifest]) == 0
        assert "create default/web-data applied on powerstore" in capsys.readouterr().out

    def test_status_of_missing_replication_fails(self, manifest):
        # each invocation builds a fresh in-memory store
        assert main(['--mock', 'status', '-f', manifest]) == 1

    def test_no_command(self):
        assert main([]) == 1
