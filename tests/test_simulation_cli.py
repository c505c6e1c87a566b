import importlib.util
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from Teskilat.simulation import ImportSummary, ReferenceIntegrityError, WipeResult

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "simulation.py"


@pytest.fixture
def cli_module(monkeypatch):
    spec = importlib.util.spec_from_file_location("simulation_cli", _SCRIPT)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)

    async def _noop():
        return None

    # Keep the CLI's own event loop away from the per-test engine
    monkeypatch.setattr(mod, "dispose_engine", _noop)
    monkeypatch.setattr(mod, "setup_logging", lambda settings: None)
    return mod


def test_import_prints_summary(cli_module, monkeypatch, tmp_path):
    seen = {}

    async def _fake_import(body):
        seen["body"] = body
        return ImportSummary(people=1)

    monkeypatch.setattr(cli_module, "import_document", _fake_import)
    doc = tmp_path / "case.json"
    doc.write_text(json.dumps({"people": [{"_ref": "p1"}]}), encoding="utf-8")

    result = CliRunner().invoke(cli_module.cli, ["import", str(doc)])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["data"]["people"] == 1
    assert seen["body"] == {"people": [{"_ref": "p1"}]}


def test_import_reports_integrity_errors(cli_module, monkeypatch, tmp_path):
    async def _fake_import(body):
        raise ReferenceIntegrityError(["p1"], [])

    monkeypatch.setattr(cli_module, "import_document", _fake_import)
    doc = tmp_path / "case.json"
    doc.write_text("{}", encoding="utf-8")

    result = CliRunner().invoke(cli_module.cli, ["import", str(doc)])

    assert result.exit_code == 1
    assert "Duplicate _ref keys found" in result.output


def test_import_rejects_bad_json(cli_module, tmp_path):
    doc = tmp_path / "case.json"
    doc.write_text("{oops", encoding="utf-8")
    result = CliRunner().invoke(cli_module.cli, ["import", str(doc)])
    assert result.exit_code == 2
    assert "Invalid JSON body" in result.output


def test_wipe_requires_confirmation(cli_module, monkeypatch):
    called = []

    class _Coordinator:
        def __init__(self, blobs, *, bucket):
            called.append(bucket)

        async def wipe(self):
            return WipeResult(files_removed=0)

    monkeypatch.setattr(cli_module, "WipeCoordinator", _Coordinator)
    monkeypatch.setattr(cli_module, "get_blob_store", lambda: object())

    result = CliRunner().invoke(cli_module.cli, ["wipe"], input="n\n")
    assert result.exit_code != 0
    assert called == []

    result = CliRunner().invoke(cli_module.cli, ["wipe", "--yes"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["data"] == {"message": "All data wiped", "filesRemoved": 0}
    assert len(called) == 1


def test_serve_uses_configured_port(cli_module, monkeypatch):
    seen = {}

    def _fake_run(app, **kwargs):
        seen["app"] = app
        seen.update(kwargs)

    monkeypatch.setattr(cli_module.uvicorn, "run", _fake_run)

    result = CliRunner().invoke(cli_module.cli, ["serve"])

    assert result.exit_code == 0, result.output
    assert seen == {
        "app": "Teskilat.app:app",
        "host": "127.0.0.1",
        "port": cli_module.load_settings().app_port,
    }


def test_serve_port_override(cli_module, monkeypatch):
    seen = {}
    monkeypatch.setattr(cli_module.uvicorn, "run", lambda app, **kw: seen.update(kw))

    result = CliRunner().invoke(cli_module.cli, ["serve", "--host", "0.0.0.0", "--port", "9001"])

    assert result.exit_code == 0, result.output
    assert seen == {"host": "0.0.0.0", "port": 9001}
