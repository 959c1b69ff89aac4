"""
boundaries.py — Guard Ring Velocity Fill
=========================================
Free-slip (zero-gradient) condition for the tangential velocity at the
outer ring of cells:

  - u on the bottom row (j = 0) copies row 1,
    u on the top row (j = H-1) copies row H-2
  - v on the left column (i = 0) copies column 1,
    v on the right column (i = W-1) copies column W-2

Pure copies, no interpolation. Run it after the divergence correction and
before advection, because backtraced samples near the walls read these
values.
"""

from .grid import FluidGrid


def fill_boundary_velocities(grid: FluidGrid):
    """
    Copy tangential velocities from the first interior row/column into
    the guard ring.

    Modifies: grid.u, grid.v (in-place)
    """
    u, v = grid.u2d, grid.v2d

    # ── Horizontal velocity: bottom and top rows ──────────────────────────
    u[:, 0] = u[:, 1]
    u[:, -1] = u[:, -2]

    # ── Vertical velocity: left and right columns ─────────────────────────
    v[0, :] = v[1, :]
    v[-1, :] = v[-2, :]
