"""Layout simulation: force computation and the frame-driven engine."""

from recognition_field.simulation.engine import LayoutEngine
from recognition_field.simulation.forces import ForceBuffer, compute_forces

__all__ = ["ForceBuffer", "LayoutEngine", "compute_forces"]
