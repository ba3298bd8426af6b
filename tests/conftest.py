import logging

import pytest
import requests

from pve_agent.collectors.base import ResourceSource
from pve_agent.core.config import AgentConfig
from pve_agent.core.logger import AgentLogger, LOGGER_NAME
from pve_agent.core.models import RawResourceRecord

SERVER_URL = "http://collector.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self):
        if self._payload is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class RecordingPost:
    """Remplace requests.post : enregistre les appels et renvoie des réponses préparées"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, url=None, json=None, headers=None, timeout=None, verify=None, **kwargs):
        self.calls.append({'url': url, 'json': json, 'headers': headers,
                           'timeout': timeout, 'verify': verify})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


class FakeSource(ResourceSource):
    """Source d'inventaire programmable : une liste ou une exception par appel"""

    def __init__(self, logger, *results):
        super().__init__(logger)
        self.results = list(results)
        self.calls = 0

    def list_resources(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return list(result)


def make_raw(name="vm", vmid=100, type="qemu", status="running", cpu=0.25, maxcpu=2,
             mem=2 * 1024 * 1024, maxmem=4 * 1024 * 1024,
             disk=1024 ** 3, maxdisk=2 * 1024 ** 3):
    return RawResourceRecord(name=name, vmid=vmid, type=type, status=status, cpu=cpu,
                             maxcpu=maxcpu, mem=mem, maxmem=maxmem, disk=disk, maxdisk=maxdisk)


@pytest.fixture(autouse=True)
def reset_agent_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("SERVER_URL", raising=False)
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.ini"
    path.write_text(
        "[server]\n"
        f"url = {SERVER_URL}/\n"
        "timeout = 3\n"
        "\n"
        "[agent]\n"
        "check_interval = 0.01\n"
        "log_level = DEBUG\n"
        "\n"
        "[logging]\n"
        f"log_file = {tmp_path / 'logs' / 'agent.log'}\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(config_file):
    return AgentConfig(str(config_file))


@pytest.fixture
def agent_logger(config):
    return AgentLogger(config)


@pytest.fixture
def fake_post(monkeypatch):
    def install(*responses):
        recorder = RecordingPost(*responses)
        monkeypatch.setattr(requests, "post", recorder)
        return recorder
    return install
