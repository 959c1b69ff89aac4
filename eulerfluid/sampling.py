"""
sampling.py — Bilinear Field Sampling on the Staggered Grid
============================================================
Advection traces points backward through the flow and needs the value of
a field *between* grid points. Each field is stored at a different spot
inside its cell, so each one has a fixed sub-cell offset:

  field      stored at            offset (dx, dy)
  ─────      ─────────            ───────────────
  u          left face center     (0,   h/2)
  v          bottom face center   (h/2, 0  )
  smoke      cell center          (h/2, h/2)

Subtract the offset, divide by h, and the integer part is the lower-left
sample, the fractional part is the bilinear weight.

Positions are clamped into [h, width*h] x [h, height*h] first and indices
are clamped into the buffer, so a backtrace that overshoots the domain
still reads valid memory.
"""

import numpy as np

from .grid import FluidGrid


U_FIELD = "U_FIELD"
V_FIELD = "V_FIELD"
S_FIELD = "S_FIELD"


def _field_and_offset(grid: FluidGrid, field: str):
    half_h = 0.5 * grid.h
    if field == U_FIELD:
        return grid.u2d, 0.0, half_h
    if field == V_FIELD:
        return grid.v2d, half_h, 0.0
    if field == S_FIELD:
        return grid.m2d, half_h, half_h
    raise ValueError(f"Unknown field: {field}. Use U_FIELD, V_FIELD or S_FIELD.")


def _base_and_weight(pos, offset: float, h: float, n: int):
    """Lower sample index, upper sample index and weight along one axis."""
    p = pos - offset
    i0 = np.clip(np.floor(p / h).astype(np.int64), 0, n - 1)
    t = np.clip((p - i0 * h) / h, 0.0, 1.0)
    i1 = np.minimum(i0 + 1, n - 1)
    return i0, i1, t


def sample_field(grid: FluidGrid, x, y, field: str):
    """
    Bilinear interpolation of `field` at world position (x, y).

    Args:
        grid  : The FluidGrid to read from
        x, y  : World coordinates. Scalars or same-shape numpy arrays.
        field : U_FIELD, V_FIELD or S_FIELD

    Returns:
        A float for scalar input, otherwise an array shaped like x.
    """
    f, dx, dy = _field_and_offset(grid, field)
    h = grid.h

    x = np.clip(np.asarray(x, dtype=np.float64), h, grid.width * h)
    y = np.clip(np.asarray(y, dtype=np.float64), h, grid.height * h)

    x0, x1, tx = _base_and_weight(x, dx, h, grid.width)
    y0, y1, ty = _base_and_weight(y, dy, h, grid.height)

    sx = 1.0 - tx
    sy = 1.0 - ty

    val = (sx * sy * f[x0, y0] +
           tx * sy * f[x1, y0] +
           tx * ty * f[x1, y1] +
           sx * ty * f[x0, y1])

    if np.ndim(val) == 0:
        return float(val)
    return val


def avg_u(grid: FluidGrid, i, j):
    """Mean of the four u samples around the v-face at (i, j)."""
    u = grid.u2d
    return (u[i, j - 1] + u[i, j] + u[i + 1, j - 1] + u[i + 1, j]) * 0.25


def avg_v(grid: FluidGrid, i, j):
    """Mean of the four v samples around the u-face at (i, j)."""
    v = grid.v2d
    return (v[i - 1, j] + v[i, j] + v[i - 1, j + 1] + v[i, j + 1]) * 0.25
