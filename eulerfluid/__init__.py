"""
eulerfluid/ — 2D Smoke Solver Core
===================================
Exports the grid, the five pipeline stages and the reference driver.

Per-step order: apply_gravity → correct_divergence →
fill_boundary_velocities → advect_velocity → advect_smoke
"""

from .grid import FluidGrid, InvalidConfiguration, FLUID, SOLID
from .sampling import sample_field, avg_u, avg_v, U_FIELD, V_FIELD, S_FIELD
from .forces import apply_gravity
from .solver import correct_divergence, divergence_residual
from .boundaries import fill_boundary_velocities
from .advect import advect_velocity, advect_smoke
from .simulation import FluidSimulation

__all__ = [
    "FluidGrid", "InvalidConfiguration", "FLUID", "SOLID",
    "sample_field", "avg_u", "avg_v", "U_FIELD", "V_FIELD", "S_FIELD",
    "apply_gravity", "correct_divergence", "divergence_residual",
    "fill_boundary_velocities", "advect_velocity", "advect_smoke",
    "FluidSimulation",
]
