from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ...common.datetime_utils import minutes_between
from ...core.constants import HOURS_DECIMAL_PLACES
from ..model import BreakInterval
from .base import WorkingHoursCalculator

logger = logging.getLogger(__name__)

_QUANTUM = Decimal(1).scaleb(-HOURS_DECIMAL_PLACES)


class StandardWorkingHoursCalculator(WorkingHoursCalculator):
    """Standard rule: (out - in) - sum of closed breaks, in hours, 2 decimals.

    Open or inverted breaks count as zero. With ``clamp_negative`` a span
    shorter than its breaks yields 0.00 instead of a negative figure.
    """

    def __init__(self, *, clamp_negative: bool = True):
        self._clamp_negative = clamp_negative

    def effective_hours(self, *, punch_in_at: datetime, punch_out_at: datetime, breaks: Sequence[BreakInterval]) -> Decimal:
        total_minutes = minutes_between(punch_in_at, punch_out_at)
        break_minutes = sum(b.duration_minutes() for b in breaks)
        effective_minutes = total_minutes - break_minutes

        hours = (Decimal(str(effective_minutes)) / Decimal(60)).quantize(_QUANTUM, rounding=ROUND_HALF_UP)
        if hours < 0 and self._clamp_negative:
            logger.warning(
                "negative effective hours %s (span %.2f min, breaks %.2f min), clamped to 0",
                hours,
                total_minutes,
                break_minutes,
            )
            return Decimal(0).quantize(_QUANTUM)
        return hours
