from pathlib import Path

import pytest

from ossim_cli.models import ProcessRecord
from ossim_cli.workload_io import load_requests, load_workload, parse_request, processes_from_services


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":10,"arrival_time":0,"service_time":3},'
                 '{"service_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], ProcessRecord)
    assert procs[0].pid == 10
    # Missing fields fall back to the entry position.
    assert (procs[1].pid, procs[1].arrival_time) == (2, 1)
    assert procs[1].start_time is None


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,service_time\n1,0,3\n2,,2\n")
    procs = load_workload(p)
    assert procs[0].service_time == 3
    assert procs[1].arrival_time == 1
    assert procs[1].remaining_time == 2


def test_load_rejects_bad_entry(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time\n1,0\n")
    with pytest.raises(ValueError, match="Invalid process entry"):
        load_workload(p)


def test_load_rejects_unknown_format(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("5 3 1")
    with pytest.raises(ValueError, match="Unsupported workload format"):
        load_workload(p)


def test_load_requests(tmp_path: Path):
    j = tmp_path / "r.json"
    j.write_text('[{"owner_id": 1, "size": 30}, {"owner_id": 2, "size": 80}]')
    c = tmp_path / "r.csv"
    c.write_text("owner_id,size\n1,30\n2,80\n")
    assert load_requests(j) == [(1, 30), (2, 80)]
    assert load_requests(c) == [(1, 30), (2, 80)]


def test_processes_from_services():
    procs = processes_from_services([5, 3, 1])
    assert [(p.pid, p.arrival_time, p.service_time) for p in procs] == [(1, 0, 5), (2, 1, 3), (3, 2, 1)]


def test_parse_request():
    assert parse_request("4:120") == (4, 120)
    for bad in ("4", "a:1", "1:"):
        with pytest.raises(ValueError):
            parse_request(bad)
