import json
import logging
import subprocess
from types import SimpleNamespace

import pytest

from pve_agent.collectors import pvesh
from pve_agent.collectors.pvesh import PveshResourceSource
from pve_agent.core.errors import CollectionError

LOGGER = logging.getLogger("test-pvesh")

INVENTORY = [
    {"id": "qemu/100", "name": "vm-100", "vmid": 100, "type": "qemu", "status": "running",
     "cpu": 0.12, "maxcpu": 2, "mem": 1073741824, "maxmem": 2147483648,
     "disk": 0, "maxdisk": 34359738368, "node": "pve"},
    {"id": "node/pve", "type": "node", "status": "online", "node": "pve",
     "cpu": 0.05, "maxcpu": 8, "mem": 4000000000, "maxmem": 16000000000},
    {"id": "storage/pve/local", "type": "storage", "storage": "local", "status": "available"},
]


def fake_run(returncode=0, stdout="", stderr="", exc=None):
    calls = []

    def run(command, **kwargs):
        calls.append((command, kwargs))
        if exc is not None:
            raise exc
        return SimpleNamespace(returncode=returncode, stdout=stdout, stderr=stderr)

    run.calls = calls
    return run


def test_parse_output_keeps_order_and_defaults_missing_fields():
    records = PveshResourceSource.parse_output(json.dumps(INVENTORY))
    assert [r.type for r in records] == ["qemu", "node", "storage"]
    assert records[0].vmid == 100
    assert records[0].maxmem == 2147483648.0
    assert records[2].name == ""
    assert records[2].vmid == 0


@pytest.mark.parametrize("output", [
    "not json",
    "",
    '{"type": "qemu"}',
    '[1, 2, 3]',
    '[{"vmid": "100", "type": "qemu"}]',
    '[{"vmid": 100, "type": "qemu", "mem": "big"}]',
])
def test_parse_output_rejects_malformed_output(output):
    with pytest.raises(CollectionError) as excinfo:
        PveshResourceSource.parse_output(output)
    assert excinfo.value.args[0] == "parse failure"
    assert excinfo.value.cause is not None


def test_list_resources_runs_configured_command(monkeypatch):
    run = fake_run(stdout=json.dumps(INVENTORY))
    monkeypatch.setattr(pvesh.subprocess, "run", run)

    source = PveshResourceSource(LOGGER, command="pvesh get /cluster/resources --output-format json",
                                 timeout=12)
    records = source.list_resources()

    assert len(records) == 3
    command, kwargs = run.calls[0]
    assert command == ["pvesh", "get", "/cluster/resources", "--output-format", "json"]
    assert kwargs["timeout"] == 12
    assert kwargs["capture_output"] is True


def test_non_zero_exit_is_command_failure(monkeypatch):
    monkeypatch.setattr(pvesh.subprocess, "run", fake_run(returncode=2, stderr="ipcc_send_rec failed"))

    with pytest.raises(CollectionError) as excinfo:
        PveshResourceSource(LOGGER).list_resources()

    assert excinfo.value.args[0] == "command execution failed"
    assert isinstance(excinfo.value.cause, subprocess.CalledProcessError)
    assert excinfo.value.cause.returncode == 2


@pytest.mark.parametrize("exc", [
    FileNotFoundError(2, "No such file or directory: 'pvesh'"),
    subprocess.TimeoutExpired(cmd="pvesh", timeout=30),
])
def test_missing_or_hanging_command_is_command_failure(monkeypatch, exc):
    monkeypatch.setattr(pvesh.subprocess, "run", fake_run(exc=exc))

    with pytest.raises(CollectionError) as excinfo:
        PveshResourceSource(LOGGER).list_resources()

    assert excinfo.value.args[0] == "command execution failed"
    assert excinfo.value.cause is exc
    assert "command execution failed" in str(excinfo.value)
