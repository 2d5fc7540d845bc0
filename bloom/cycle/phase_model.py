"""Cycle day, phase and synthetic hormone curve.

ILLUSTRATIVE ONLY.  The phase boundaries and the hormone curve below are a
presentational approximation used to draw the dashboard ring and tracker
chart.  They are not a physiological model and must never be shown to a
user as clinical guidance, a fertility prediction or contraception advice.

Phase rules (first match wins)::

    cycle_day <= period_length      menstrual
    12 <= cycle_day <= 16           ovulation
    cycle_day > 16                  luteal
    otherwise                       follicular

Hormone curve, for each day 1..cycle_length::

    level = 20
    period_length < day < ovulation_day        level += (day - period_length) * 5
    day == ovulation_day                       level = 60
    ovulation_day < day < cycle_length - 2     level = 50 + 10 * sin(day)
    clamp to [10, 100]

where ``ovulation_day = cycle_length - 14``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from bloom.models.tracking import CycleSettings

logger = logging.getLogger("bloom.cycle.phase_model")

BASELINE_LEVEL = 20.0
OVULATION_LEVEL = 60.0
LUTEAL_PLATEAU = 50.0
LUTEAL_AMPLITUDE = 10.0
FOLLICULAR_SLOPE = 5.0
MIN_LEVEL = 10.0
MAX_LEVEL = 100.0

# Luteal phase length used to place ovulation
LUTEAL_DAYS = 14
OVULATION_WINDOW = (12, 16)


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


@dataclass(frozen=True)
class HormonePoint:
    """One day of the synthetic curve."""

    day: int
    level: float
    is_period: bool
    is_ovulation: bool


@dataclass(frozen=True)
class CycleSnapshot:
    """Where ``today`` sits in the user's cycle.

    Attributes:
        cycle_day:         1-indexed position in the current cycle.
        phase:             Coarse phase for ``cycle_day``.
        days_remaining:    Days left before the next cycle starts (>= 0).
        next_period_start: ``today + days_remaining``.
    """

    cycle_day: int
    phase: CyclePhase
    days_remaining: int
    next_period_start: date


def cycle_day(start: date, length: int, today: date) -> int:
    """Position within the current cycle, folded over any number of past cycles.

    Uses the absolute elapsed day count, so a start date in the future still
    maps into the cycle.  A result of 0 (whole number of cycles elapsed, or
    same day) reads as day 1.
    """
    if length < 1:
        raise ValueError(f"cycle length must be positive, got {length}")
    elapsed = abs((today - start).days)
    return max(1, elapsed % length)


def phase_for_day(day: int, period_length: int) -> CyclePhase:
    if day <= period_length:
        return CyclePhase.menstrual
    low, high = OVULATION_WINDOW
    if low <= day <= high:
        return CyclePhase.ovulation
    if day > high:
        return CyclePhase.luteal
    return CyclePhase.follicular


def ovulation_day(length: int) -> int:
    return length - LUTEAL_DAYS


def _clamp(level: float) -> float:
    return min(MAX_LEVEL, max(MIN_LEVEL, level))


def hormone_level(day: int, length: int, period_length: int) -> float:
    ov_day = ovulation_day(length)
    level = BASELINE_LEVEL
    if period_length < day < ov_day:
        level += (day - period_length) * FOLLICULAR_SLOPE
    if day == ov_day:
        level = OVULATION_LEVEL
    if ov_day < day < length - 2:
        level = LUTEAL_PLATEAU + math.sin(day) * LUTEAL_AMPLITUDE
    return _clamp(level)


def hormone_curve(length: int, period_length: int) -> list[HormonePoint]:
    """One point per day in ``1..length``; every level lies in [10, 100]."""
    ov_day = ovulation_day(length)
    return [
        HormonePoint(
            day=day,
            level=hormone_level(day, length, period_length),
            is_period=day <= period_length,
            is_ovulation=day == ov_day,
        )
        for day in range(1, length + 1)
    ]


def snapshot(settings: CycleSettings, today: date | None = None) -> CycleSnapshot:
    today = today or date.today()
    day = cycle_day(settings.start_date, settings.cycle_length, today)
    remaining = max(0, settings.cycle_length - day)
    return CycleSnapshot(
        cycle_day=day,
        phase=phase_for_day(day, settings.period_length),
        days_remaining=remaining,
        next_period_start=today + timedelta(days=remaining),
    )
