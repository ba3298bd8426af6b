import pytest
import requests

from pve_agent.collectors.mapper import normalize
from pve_agent.core.errors import DispatchError
from pve_agent.core.models import ReportBatch
from pve_agent.core.sender import ReportSender

from tests.conftest import FakeResponse, SERVER_URL, make_raw


@pytest.fixture
def sender(config, agent_logger):
    return ReportSender(config, agent_logger)


@pytest.fixture
def batch():
    records = [normalize(make_raw(name="a", vmid=101), "u-1"),
               normalize(make_raw(name="b", vmid=102, type="lxc"), "u-1")]
    return ReportBatch(user_id="u-1", records=records)


def test_send_posts_json_batch(sender, batch, fake_post):
    post = fake_post(FakeResponse(200))

    sender.send(batch)

    call = post.calls[0]
    assert call["url"] == f"{SERVER_URL}/api/vm/list"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["json"]["userId"] == "u-1"
    assert [vm["name"] for vm in call["json"]["vms"]] == ["a", "b"]
    assert sender.get_stats()["total_failures"] == 0
    assert sender.get_stats()["last_successful_send"] is not None


@pytest.mark.parametrize("status", [201, 400, 500, 503])
def test_non_200_raises_dispatch_error_with_status(sender, batch, fake_post, status):
    fake_post(FakeResponse(status, text="boom"))

    with pytest.raises(DispatchError) as excinfo:
        sender.send(batch)

    assert excinfo.value.status_code == status
    assert sender.get_stats()["total_failures"] == 1


@pytest.mark.parametrize("exc", [
    requests.exceptions.Timeout("read timed out"),
    requests.exceptions.ConnectionError("no route to host"),
])
def test_transport_error_raises_dispatch_error_with_cause(sender, batch, fake_post, exc):
    fake_post(exc)

    with pytest.raises(DispatchError) as excinfo:
        sender.send(batch)

    assert excinfo.value.cause is exc
    assert excinfo.value.status_code is None


def test_empty_batch_is_still_sent(sender, fake_post):
    post = fake_post(FakeResponse(200))

    sender.send(ReportBatch(user_id="u-1"))

    assert post.calls[0]["json"] == {"userId": "u-1", "vms": []}


def test_verify_ssl_setting_is_forwarded(config, agent_logger, batch, fake_post):
    post = fake_post(FakeResponse(200))
    ReportSender(config, agent_logger).send(batch)
    assert post.calls[0]["verify"] is True

    config.set("server", "verify_ssl", "false")
    ReportSender(config, agent_logger).send(batch)
    assert post.calls[1]["verify"] is False
