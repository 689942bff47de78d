from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from ..model import BreakInterval


class WorkingHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for effective working hours)."""

    @abstractmethod
    def effective_hours(self, *, punch_in_at: datetime, punch_out_at: datetime, breaks: Sequence[BreakInterval]) -> Decimal:
        raise NotImplementedError
