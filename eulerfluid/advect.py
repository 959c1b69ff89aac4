"""
advect.py — Semi-Lagrangian Advection
======================================
Moves velocity and smoke along the flow.

The algorithm (per sample point):
  1. Take the world position where the value is stored
     (a face center for u / v, the cell center for smoke).
  2. Estimate the full velocity vector there. Only one component is
     stored on each face; the other comes from avg_u / avg_v.
  3. Trace BACKWARD by one timestep: pos - dt * velocity.
  4. Bilinearly sample the old field at the traced-back position.

Results go into the scratch buffers (new_u, new_v, new_m), which start as
copies of the live fields, so points that are skipped keep their value and
no sample ever sees a value written earlier in the same sweep. The scratch
buffers are copied back at the end.

All points of one sweep are independent, so each sweep is done with numpy
index arrays instead of a Python loop.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

import numpy as np

from .grid import FluidGrid, SOLID
from .sampling import sample_field, avg_u, avg_v, U_FIELD, V_FIELD, S_FIELD


def _face_indices(i_range: range, j_range: range):
    i, j = np.meshgrid(np.array(i_range), np.array(j_range), indexing='ij')
    return i.ravel(), j.ravel()


def advect_velocity(grid: FluidGrid, dt: float):
    """
    Advect the velocity field through itself.

    u-face (i, j) is updated when the cell and its left neighbour are
    fluid and j is not the top row; v-face (i, j) when the cell and the
    cell below are fluid and i is not the last column.

    Modifies: grid.u, grid.v (in-place, via new_u / new_v)
    """
    np.copyto(grid.new_u, grid.u)
    np.copyto(grid.new_v, grid.v)

    s = grid.s2d
    h = grid.h
    half_h = 0.5 * h

    # ── u component (left faces) ──────────────────────────────────────────
    i, j = _face_indices(range(1, grid.width), range(1, grid.height - 1))
    valid = (s[i, j] != SOLID) & (s[i - 1, j] != SOLID)
    i, j = i[valid], j[valid]
    if i.size:
        x = i * h - dt * grid.u2d[i, j]
        y = j * h + half_h - dt * avg_v(grid, i, j)
        grid.new_u2d[i, j] = sample_field(grid, x, y, U_FIELD)

    # ── v component (bottom faces) ────────────────────────────────────────
    i, j = _face_indices(range(1, grid.width - 1), range(1, grid.height))
    valid = (s[i, j] != SOLID) & (s[i, j - 1] != SOLID)
    i, j = i[valid], j[valid]
    if i.size:
        x = i * h + half_h - dt * avg_u(grid, i, j)
        y = j * h - dt * grid.v2d[i, j]
        grid.new_v2d[i, j] = sample_field(grid, x, y, V_FIELD)

    np.copyto(grid.u, grid.new_u)
    np.copyto(grid.v, grid.new_v)


def advect_smoke(grid: FluidGrid, dt: float):
    """
    Advect the smoke density through the velocity field.

    Each interior fluid cell center is traced back using the average of
    its two u faces and its two v faces. Solid cells keep their value.

    Modifies: grid.m (in-place, via new_m)
    """
    np.copyto(grid.new_m, grid.m)

    u, v = grid.u2d, grid.v2d
    h = grid.h
    half_h = 0.5 * h

    i, j = _face_indices(range(1, grid.width - 1), range(1, grid.height - 1))
    fluid = grid.s2d[i, j] != SOLID
    i, j = i[fluid], j[fluid]
    if i.size:
        uc = (u[i, j] + u[i + 1, j]) * 0.5
        vc = (v[i, j] + v[i, j + 1]) * 0.5
        x = i * h + half_h - dt * uc
        y = j * h + half_h - dt * vc
        grid.new_m2d[i, j] = sample_field(grid, x, y, S_FIELD)

    np.copyto(grid.m, grid.new_m)
