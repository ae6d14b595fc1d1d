from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List, Tuple

from .models import ProcessRecord

Request = Tuple[int, int]


def load_workload(path: str | Path) -> List[ProcessRecord]:
    """
    Load a workload from a JSON or CSV file into a list of ProcessRecord
    objects.

    Only ``service_time`` is required. A missing ``arrival_time`` defaults to
    the entry's 0-based position and a missing ``pid`` to position + 1.
    """
    rows = _load_rows(path, "workload")
    return [_process_from_mapping(index, row) for index, row in enumerate(rows)]


def load_requests(path: str | Path) -> List[Request]:
    """
    Load ``(owner_id, size)`` allocation requests from a JSON or CSV file.
    """
    rows = _load_rows(path, "request")
    return [_request_from_mapping(row) for row in rows]


def processes_from_services(services: Iterable[int]) -> List[ProcessRecord]:
    """
    Build processes the way the interactive menu does: arrival time is the
    input position and pids count up from 1.
    """
    return [ProcessRecord(pid=i + 1, arrival_time=i, service_time=int(s)) for i, s in enumerate(services)]


def parse_request(text: str) -> Request:
    """
    Parse an ``owner:size`` command-line request.
    """
    owner, sep, size = text.partition(":")
    try:
        if not sep:
            raise ValueError(text)
        return int(owner), int(size)
    except ValueError as exc:
        raise ValueError(f"Invalid request {text!r} (expected owner:size)") from exc


def _load_rows(path: str | Path, kind: str) -> list:
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path, kind)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported {kind} format: {suffix} (use .json or .csv)")


def _load_json(path: Path, kind: str) -> list:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"JSON {kind} file must be a list of objects")
    return raw


def _load_csv(path: Path) -> list:
    with path.open("r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def _optional_int(mapping, key: str, default: int) -> int:
    value = mapping.get(key)
    if value in (None, ""):
        return default
    return int(value)


def _process_from_mapping(index: int, mapping) -> ProcessRecord:
    try:
        service_time = int(mapping["service_time"])
        arrival_time = _optional_int(mapping, "arrival_time", index)
        pid = _optional_int(mapping, "pid", index + 1)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return ProcessRecord(pid=pid, arrival_time=arrival_time, service_time=service_time)


def _request_from_mapping(mapping) -> Request:
    try:
        return int(mapping["owner_id"]), int(mapping["size"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid request entry: {mapping!r}") from exc
