from .base import ShiftCalculator, ShiftDuration
from .standard_calculator import StandardShiftCalculator

__all__ = ["ShiftCalculator", "ShiftDuration", "StandardShiftCalculator"]
