"""Break list storage boundary.

Writes always go through :func:`serialize_breaks` (typed, ISO timestamps).
Reads go through :func:`parse_breaks`, which still accepts the loose shapes
older rows may hold: a JSON string, a single object, a list, or nothing.
Repeated ids are renamed on read and unparseable timestamps are carried
through as text, so a bad row never blocks the next write.
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Optional

from ..common.datetime_utils import parse_iso_datetime, to_iso
from ..common.validators import require_non_empty
from ..core.constants import BREAK_ID_PREFIX
from ..core.exceptions import MissingFieldError, ValidationError
from .model import BreakInterval

logger = logging.getLogger(__name__)


def new_break_id() -> str:
    return f"{BREAK_ID_PREFIX}{uuid.uuid4().hex}"


def coerce_break_list(raw: Any) -> list[dict]:
    if raw is None or raw == "":
        return []

    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("breaks column is not valid JSON, treating as empty")
            return []

    if isinstance(raw, dict):
        raw = [raw]

    if not isinstance(raw, list):
        logger.warning("breaks column has unexpected type %s, treating as empty", type(raw).__name__)
        return []

    items: list[dict] = []
    for item in raw:
        if isinstance(item, dict):
            items.append(item)
        else:
            logger.warning("skipping non-object break entry: %r", item)
    return items


def _unparsed(value: Any, parsed: Optional[datetime]) -> Optional[str]:
    if parsed is not None or value in (None, ""):
        return None
    return str(value)


def _break_from_dict(item: dict, index: int) -> BreakInterval:
    break_id = item.get("id") or item.get("_id")
    raw_start = item.get("startTime", item.get("start_time"))
    raw_end = item.get("endTime", item.get("end_time"))
    start_time = parse_iso_datetime(raw_start)
    end_time = parse_iso_datetime(raw_end)
    return BreakInterval(
        id=str(break_id) if break_id not in (None, "") else _legacy_id(index),
        break_type=str(item.get("breakType") or item.get("break_type") or ""),
        reason=str(item.get("reason") or ""),
        start_time=start_time,
        end_time=end_time,
        created_at=parse_iso_datetime(item.get("createdAt", item.get("created_at"))),
        raw_start=_unparsed(raw_start, start_time),
        raw_end=_unparsed(raw_end, end_time),
    )


def _legacy_id(index: int) -> str:
    return f"{BREAK_ID_PREFIX}legacy-{index}"


def parse_breaks(raw: Any) -> tuple[BreakInterval, ...]:
    breaks: list[BreakInterval] = []
    seen: set[str] = set()
    for i, item in enumerate(coerce_break_list(raw)):
        b = _break_from_dict(item, i)
        if b.id in seen:
            new_id = _legacy_id(i)
            suffix = 0
            while new_id in seen:
                suffix += 1
                new_id = f"{_legacy_id(i)}-{suffix}"
            logger.warning("duplicate stored break id %s at position %d, renamed to %s", b.id, i, new_id)
            b = replace(b, id=new_id)
        seen.add(b.id)
        breaks.append(b)
    return tuple(breaks)


def serialize_breaks(breaks: Iterable[BreakInterval]) -> list[dict]:
    out: list[dict] = []
    seen: set[str] = set()
    for b in breaks:
        if b.id in seen:
            raise ValidationError(f"Duplicate break id {b.id}")
        seen.add(b.id)
        out.append(
            {
                "id": b.id,
                "breakType": b.break_type,
                "reason": b.reason,
                "startTime": to_iso(b.start_time) or b.raw_start,
                "endTime": to_iso(b.end_time) or b.raw_end,
                "createdAt": to_iso(b.created_at),
            }
        )
    return out


def _parse_client_time(value: Any, field_name: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")
    return parsed


def build_break(
    *,
    break_type: Any,
    reason: Any,
    start_time: Any = None,
    end_time: Any = None,
    now: datetime,
) -> BreakInterval:
    """Validate client input into a new break interval."""

    missing = [name for name, value in (("breakType", break_type), ("reason", reason)) if not str(value or "").strip()]
    if missing:
        raise MissingFieldError(*missing)

    start = _parse_client_time(start_time, "startTime") or now
    end = _parse_client_time(end_time, "endTime")
    if end is not None and end < start:
        raise ValidationError("endTime cannot be before startTime")

    return BreakInterval(
        id=new_break_id(),
        break_type=require_non_empty(break_type, "breakType"),
        reason=require_non_empty(reason, "reason"),
        start_time=start,
        end_time=end,
        created_at=now,
    )
