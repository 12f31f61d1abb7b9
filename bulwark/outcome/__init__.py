"""Result discipline for Bulwark: Outcome values and the Fault taxonomy."""

from .fault import Fault, FaultKind
from .result import Outcome, PropagatedFault, attempt, propagating

__all__ = ["Fault", "FaultKind", "Outcome", "PropagatedFault", "attempt", "propagating"]
