import pytest

from pve_agent.collectors.mapper import normalize, normalize_all, round2
from pve_agent.core.models import ReportBatch

from tests.conftest import make_raw


def test_memory_divided_by_1024_squared():
    record = normalize(make_raw(mem=2097152, maxmem=8 * 1024 * 1024), "user-1")
    assert record.mem == 2.0
    assert record.maxmem == 8.0


def test_disk_divided_by_1024_cubed():
    record = normalize(make_raw(disk=3 * 1024 ** 3, maxdisk=10 * 1024 ** 3), "user-1")
    assert record.disk == 3.0
    assert record.maxdisk == 10.0


def test_values_rounded_to_two_decimals():
    # 1.5 GiB + un reste qui ne doit pas survivre à l'arrondi
    record = normalize(make_raw(mem=1.5 * 1024 * 1024 + 5000), "user-1")
    assert record.mem == 1.5


def test_identity_fields_copied_and_tagged():
    raw = make_raw(name="web-01", vmid=104, type="lxc", status="stopped", cpu=0.031, maxcpu=4)
    record = normalize(raw, "user-42")
    assert record.user_id == "user-42"
    assert (record.name, record.vmid, record.type, record.status) == ("web-01", 104, "lxc", "stopped")
    assert record.cpu == 0.031
    assert record.maxcpu == 4


@pytest.mark.parametrize("value, expected", [
    (2.675, 2.67),   # 2.675 s'écrit 2.67499999... en binaire
    (0.125, 0.12),
    (1.0, 1.0),
    (1 / 3, 0.33),
    (0.0, 0.0),
])
def test_round2_uses_textual_rounding(value, expected):
    assert round2(value) == expected


@pytest.mark.parametrize("value", [0.1, 2.67, 123.45, 1 / 7, 1e-9])
def test_round2_is_stable_under_reformatting(value):
    once = round2(value)
    assert float(f"{once:.2f}") == once
    assert round2(once) == once


def test_other_types_are_excluded():
    raws = [
        make_raw(name="node1", type="node"),
        make_raw(name="local-lvm", type="storage"),
        make_raw(name="sdn", type="sdn"),
    ]
    assert normalize_all(raws, "u") == []


def test_reported_types_keep_order_one_to_one():
    raws = [
        make_raw(name="a", vmid=101, type="qemu"),
        make_raw(name="node1", type="node"),
        make_raw(name="b", vmid=200, type="lxc"),
        make_raw(name="local", type="storage"),
        make_raw(name="c", vmid=102, type="qemu"),
    ]
    records = normalize_all(raws, "u")
    assert [r.name for r in records] == ["a", "b", "c"]
    assert [r.vmid for r in records] == [101, 200, 102]


def test_batch_serialization_uses_collector_field_names():
    record = normalize(make_raw(name="db", vmid=110), "user-7")
    payload = ReportBatch(user_id="user-7", records=[record]).to_dict()
    assert payload["userId"] == "user-7"
    assert list(payload["vms"][0]) == [
        "userId", "name", "vmid", "type", "status", "cpu",
        "maxcpu", "mem", "maxmem", "disk", "maxdisk",
    ]
    assert payload["vms"][0]["vmid"] == 110
