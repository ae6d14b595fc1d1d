from pathlib import Path

import pytest

from ossim_cli.cli import build_parser, main


def test_run_with_services(capsys):
    assert main(["run", "-a", "spn", "-s", "5", "3", "1"]) == 0
    out = capsys.readouterr().out
    assert "SPN" in out
    assert "Per-process metrics" in out
    assert "Throughput" in out


def test_run_rr_from_workload(tmp_path: Path, capsys):
    p = tmp_path / "w.json"
    p.write_text('[{"service_time":5},{"service_time":3},{"service_time":1}]')
    assert main(["run", "-a", "rr", "-q", "2", "-w", str(p)]) == 0
    out = capsys.readouterr().out
    assert "Round Robin" in out
    assert "Quantum:" in out


def test_run_rr_without_quantum_fails(capsys):
    assert main(["run", "-a", "rr", "-s", "2", "2"]) == 2
    assert "positive quantum" in capsys.readouterr().out


def test_run_unknown_algorithm_fails(capsys):
    assert main(["run", "-a", "lottery", "-s", "2"]) == 2
    assert "Unknown algorithm" in capsys.readouterr().out


def test_compare(capsys):
    assert main(["compare", "-s", "5", "3", "1", "-q", "2"]) == 0
    out = capsys.readouterr().out
    assert "Algorithm comparison" in out
    assert "FCFS" in out


def test_memory_requests(capsys):
    assert main(["memory", "-c", "100", "-R", "1:30", "-R", "2:80"]) == 0
    out = capsys.readouterr().out
    assert "Placed 1/2 requests" in out
    assert "failed" in out


def test_memory_invalid_capacity(capsys):
    assert main(["memory", "-c", "0", "-R", "1:30"]) == 2
    assert "capacity" in capsys.readouterr().out


def test_parser_requires_process_source():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "-a", "fcfs"])


def test_menu_runs_fcfs_then_quits(monkeypatch, capsys):
    answers = iter(["1", "3", "5", "3", "1", "q"])
    monkeypatch.setattr("builtins.input", lambda *args: next(answers))
    assert main(["menu"]) == 0
    assert "FCFS" in capsys.readouterr().out
