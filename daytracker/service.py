"""
Day record service: defaults, timestamps and listing summaries over a DayStore.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from daytracker.schemas import DaySummary
from daytracker.storage import DayStore

logger = logging.getLogger(__name__)

MINUTES_PER_BLOCK = 5


def default_record() -> dict:
    return {"timeBlocks": [], "dayPlan": [], "customCategories": []}


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO 8601 UTC with millisecond precision, e.g. 2024-01-03T09:15:00.123Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def replace_non_finite(value):
    """
    Swap NaN and infinite floats for ``None`` so records stay valid JSON.

    Numbers like ``1e400`` parse to ``inf`` and cannot be rendered back.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: replace_non_finite(item) for key, item in value.items()}
    if isinstance(value, list):
        return [replace_non_finite(item) for item in value]
    return value


def summarize_record(date: str, record: dict) -> DaySummary:
    """
    Count blocks and tracked minutes. Each block covers the inclusive slot
    range ``startBlock..endBlock``; values are not validated.
    """
    blocks = record.get("timeBlocks") or []
    total_minutes = sum(
        (block["endBlock"] - block["startBlock"] + 1) * MINUTES_PER_BLOCK
        for block in blocks
    )
    return DaySummary(
        date=date,
        block_count=len(blocks),
        total_minutes=total_minutes,
        last_modified=record.get("lastModified"),
    )


class DayRecordService:
    """Owns the read/write path for day records."""

    def __init__(self, store: DayStore):
        self.store = store

    def get(self, date: str) -> dict:
        try:
            record = self.store.load(date)
        except Exception:
            logger.exception("Error getting day data for %s", date)
            return default_record()
        if record is None:
            return default_record()
        return replace_non_finite(record)

    def save(self, date: str, record: dict) -> dict:
        stamped = replace_non_finite({**record, "lastModified": utc_timestamp()})
        self.store.save(date, stamped)
        return stamped

    def list_summaries(self) -> list[DaySummary]:
        try:
            days = self.store.list_days()
        except Exception:
            logger.exception("Error listing days")
            return []

        summaries = []
        for date, raw in days:
            try:
                summaries.append(summarize_record(date, json.loads(raw)))
            except Exception as exc:
                logger.warning("Could not summarize %s: %s", date, exc)
                summaries.append(DaySummary(date=date, block_count=0, total_minutes=0))
        return summaries

    def delete(self, date: str) -> None:
        self.store.delete(date)
