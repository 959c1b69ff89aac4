"""
solver.py — Divergence Correction (Pressure Projection)
========================================================
Drives the velocity field toward incompressibility:
  div(v) = 0 in every fluid cell

Instead of assembling a Poisson matrix, each fluid cell directly pushes
its own net outflow back onto its open faces (Gauss-Seidel relaxation):

  s   = s_right + s_left + s_top + s_bottom    (number of fluid neighbours)
  div = u[i+1,j] - u[i,j] + v[i,j+1] - v[i,j]
  p   = -div / s * over_relaxation

  u[i+1,j] += s_right  * p
  u[i,j]   -= s_left   * p
  v[i,j+1] += s_top    * p
  v[i,j]   -= s_bottom * p

Each cell sees the corrections already made by earlier cells of the same
sweep, so this cannot be vectorized without changing the result. The
sweep runs a fixed number of iterations; the answer is approximate and
improves with more iterations. over_relaxation in [1, 2) speeds it up;
larger values can blow up and are not checked here.
"""

import time

import numpy as np

from .grid import FluidGrid


def correct_divergence(grid: FluidGrid, iterations: int = 40,
                       over_relaxation: float = 1.9, dt: float = None) -> dict:
    """
    Gauss-Seidel divergence correction over the interior cells.

    Args:
        grid            : The FluidGrid to modify in-place
        iterations      : Number of full sweeps
        over_relaxation : Multiplier on each correction
        dt              : Accepted for call-site compatibility, unused

    Returns:
        dict with timing and divergence metrics (for benchmarking)
    """
    t_start = time.perf_counter()
    div_before = np.abs(grid.compute_divergence()).max()

    width, height = grid.width, grid.height

    # Python lists: the sweep is inherently sequential and list indexing
    # is far cheaper than numpy scalar access.
    s = grid.s2d.tolist()
    u = grid.u2d.tolist()
    v = grid.v2d.tolist()

    for _ in range(iterations):
        for i in range(1, width - 1):
            s_i, s_left_col, s_right_col = s[i], s[i - 1], s[i + 1]
            u_i, u_right_col, v_i = u[i], u[i + 1], v[i]
            for j in range(1, height - 1):
                if s_i[j] == 0.0:
                    continue

                s_right = s_right_col[j]
                s_left = s_left_col[j]
                s_top = s_i[j + 1]
                s_bottom = s_i[j - 1]
                n_fluid = s_right + s_left + s_top + s_bottom
                if n_fluid == 0.0:
                    continue

                div = u_right_col[j] - u_i[j] + v_i[j + 1] - v_i[j]
                p = -(div / n_fluid) * over_relaxation

                u_right_col[j] += s_right * p
                u_i[j] -= s_left * p
                v_i[j + 1] += s_top * p
                v_i[j] -= s_bottom * p

    grid.u2d[:] = u
    grid.v2d[:] = v

    t_end = time.perf_counter()
    div_after = np.abs(grid.compute_divergence())

    return {
        "time_ms"               : (t_end - t_start) * 1000,
        "iterations"            : iterations,
        "divergence_before_max" : float(div_before),
        "divergence_after_max"  : float(div_after.max()),
        "divergence_after_mean" : float(div_after.mean()),
    }


def divergence_residual(grid: FluidGrid) -> float:
    """Sum of squared divergence over the interior fluid cells."""
    div = grid.compute_divergence()
    return float(np.sum(div * div))
