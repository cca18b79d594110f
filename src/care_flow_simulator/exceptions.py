"""
Error taxonomy for the care flow simulator.

Parameter problems are detected before a run starts and raised as
``InvalidParameter``. Internal invariant violations during a weekly update
are fatal for that single-disease run and raised as ``SimulationError``
subclasses. A missing baseline for an ICER is only a warning.
"""

from typing import Optional


class InvalidParameter(ValueError):
    """A resolved rate is out of range or competing exits exceed 1."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class SimulationError(RuntimeError):
    """Base class for invariant violations raised inside the weekly loop."""

    def __init__(self, message: str, compartment: str, week: int):
        super().__init__(message)
        self.compartment = compartment
        self.week = week


class NegativeStock(SimulationError):
    """A compartment would fall below zero before clamping."""

    def __init__(self, compartment: str, week: int, value: float):
        super().__init__(
            f"Compartment {compartment} went negative ({value:.6g}) "
            f"at week {week}",
            compartment,
            week,
        )
        self.value = value


class NumericInstability(SimulationError):
    """A compartment value became NaN or infinite."""

    def __init__(self, compartment: str, week: int, value: float):
        super().__init__(
            f"Compartment {compartment} is not finite ({value}) "
            f"at week {week}",
            compartment,
            week,
        )
        self.value = value


class MissingBaseline(UserWarning):
    """An ICER was requested without a baseline result."""
