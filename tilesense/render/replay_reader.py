"""Read replay logs and yield TickPayloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from tilesense.sim.contracts import TickPayload


def read_tick_payloads(path: Path) -> Iterator[TickPayload]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if not record:
                continue
            if record.get("type") != "tick":
                continue
            payload = record.get("payload")
            if payload is None:
                continue
            try:
                yield TickPayload.model_validate(payload)
            except ValidationError:
                continue


def read_header(path: Path) -> dict | None:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if record and record.get("type") == "header":
                return record.get("metadata", {})
    return None


def _parse_record(line: str) -> dict | None:
    try:
        record = json.loads(line)
    except json.JSONDecodeError:
        return None
    return record if isinstance(record, dict) else None
