"""Core simulation modules."""

from .data_structures import CompartmentState, PatientDays, QueueState

__all__ = ["CompartmentState", "PatientDays", "QueueState"]
