"""
forces.py — Gravity
====================
Adds gravity * dt to the vertical velocity of every bottom face that
separates two fluid cells:

  v[i, j] += g * dt   if s[i, j] != 0 and s[i, j-1] != 0

A face with solid below it gets nothing: the solid surface supports the
fluid resting on it. Calling this twice adds the force twice.
"""

from .grid import FluidGrid, SOLID


def apply_gravity(grid: FluidGrid, dt: float, gravity: float):
    """
    Integrate gravity into grid.v over one timestep.

    Covers faces i in [1, width), j in [1, height-1).

    Args:
        grid    : The FluidGrid to modify in-place
        dt      : Timestep
        gravity : Signed acceleration along y (negative pulls down)

    Modifies: grid.v (in-place)
    """
    s = grid.s2d
    # Cell (i, j) and the cell below it, j - 1
    both_fluid = (s[1:, 1:-1] != SOLID) & (s[1:, :-2] != SOLID)
    grid.v2d[1:, 1:-1][both_fluid] += gravity * dt
