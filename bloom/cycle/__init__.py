from bloom.cycle.phase_model import (
    CyclePhase,
    CycleSnapshot,
    HormonePoint,
    cycle_day,
    hormone_curve,
    hormone_level,
    ovulation_day,
    phase_for_day,
    snapshot,
)

__all__ = [
    "CyclePhase",
    "CycleSnapshot",
    "HormonePoint",
    "cycle_day",
    "hormone_curve",
    "hormone_level",
    "ovulation_day",
    "phase_for_day",
    "snapshot",
]
