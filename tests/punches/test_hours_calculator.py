from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from academy_backoffice.punches.calculator.standard_calculator import StandardWorkingHoursCalculator
from academy_backoffice.punches.model import BreakInterval

IN = datetime(2026, 3, 2, 9, 0)


def _break(start: tuple[int, int], end: tuple[int, int] | None) -> BreakInterval:
    return BreakInterval(
        id=f"break-{start[0]}{start[1]}",
        break_type="tea",
        reason="Tea",
        start_time=IN.replace(hour=start[0], minute=start[1]),
        end_time=IN.replace(hour=end[0], minute=end[1]) if end else None,
    )


def test_span_without_breaks():
    calc = StandardWorkingHoursCalculator()

    assert calc.effective_hours(punch_in_at=IN, punch_out_at=IN.replace(hour=17), breaks=[]) == Decimal("8.00")


def test_closed_breaks_are_subtracted_and_rounded():
    calc = StandardWorkingHoursCalculator()
    breaks = [_break((10, 0), (10, 15)), _break((13, 0), (13, 20))]

    hours = calc.effective_hours(punch_in_at=IN, punch_out_at=IN.replace(hour=17, minute=1), breaks=breaks)

    # 481 - 35 = 446 minutes
    assert hours == Decimal("7.43")


def test_open_and_inverted_breaks_count_as_zero():
    calc = StandardWorkingHoursCalculator()
    breaks = [_break((13, 0), None), _break((15, 0), (14, 0))]

    assert calc.effective_hours(punch_in_at=IN, punch_out_at=IN.replace(hour=17), breaks=breaks) == Decimal("8.00")


def test_negative_result_is_clamped_by_default():
    calc = StandardWorkingHoursCalculator()
    breaks = [_break((8, 0), (10, 0))]

    assert calc.effective_hours(punch_in_at=IN, punch_out_at=IN.replace(hour=10), breaks=breaks) == Decimal("0.00")


def test_negative_result_kept_when_clamping_disabled():
    calc = StandardWorkingHoursCalculator(clamp_negative=False)
    breaks = [_break((8, 0), (10, 0))]

    assert calc.effective_hours(punch_in_at=IN, punch_out_at=IN.replace(hour=10), breaks=breaks) == Decimal("-1.00")
