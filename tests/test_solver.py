import numpy as np
import pytest

from eulerfluid import FluidGrid, correct_divergence, divergence_residual


def _single_cell_grid():
    """One interior cell (1, 1); the guard ring around it is fluid."""
    g = FluidGrid(1, 1, 1.0)
    g.u2d[1, 1] = 1.0
    g.u2d[2, 1] = 3.0
    g.v2d[1, 1] = -1.0
    g.v2d[1, 2] = 2.0
    return g


def test_single_sweep_closed_form():
    g = _single_cell_grid()
    correct_divergence(g, iterations=1, over_relaxation=1.0)

    # div = 3 - 1 + 2 - (-1) = 5, four open faces, p = -5/4
    p = -5.0 / 4.0
    assert g.u2d[2, 1] == pytest.approx(3.0 + p)
    assert g.u2d[1, 1] == pytest.approx(1.0 - p)
    assert g.v2d[1, 2] == pytest.approx(2.0 + p)
    assert g.v2d[1, 1] == pytest.approx(-1.0 - p)
    assert g.compute_divergence()[1, 1] == pytest.approx(0.0, abs=1e-6)


def test_single_sweep_with_solid_neighbour():
    g = _single_cell_grid()
    g.s2d[2, 1] = 0.0
    correct_divergence(g, iterations=1, over_relaxation=1.0)

    p = -5.0 / 3.0
    assert g.u2d[2, 1] == pytest.approx(3.0)
    assert g.u2d[1, 1] == pytest.approx(1.0 - p)
    assert g.v2d[1, 2] == pytest.approx(2.0 + p)
    assert g.v2d[1, 1] == pytest.approx(-1.0 - p)


def test_over_relaxation_scales_correction():
    g = _single_cell_grid()
    correct_divergence(g, iterations=1, over_relaxation=1.5)
    p = -5.0 / 4.0 * 1.5
    assert g.u2d[2, 1] == pytest.approx(3.0 + p)
    assert g.v2d[1, 1] == pytest.approx(-1.0 - p)


def test_timestep_argument_is_ignored():
    a = _single_cell_grid()
    b = _single_cell_grid()
    correct_divergence(a, 3, 1.9)
    correct_divergence(b, 3, 1.9, dt=0.25)
    np.testing.assert_array_equal(a.u, b.u)
    np.testing.assert_array_equal(a.v, b.v)


def test_enclosed_cell_is_skipped():
    g = _single_cell_grid()
    g.set_boundary_walls(left=True, right=True, bottom=True, top=True)
    before_u, before_v = g.u.copy(), g.v.copy()
    correct_divergence(g, iterations=5, over_relaxation=1.9)
    np.testing.assert_array_equal(g.u, before_u)
    np.testing.assert_array_equal(g.v, before_v)


def test_solid_cell_is_skipped():
    g = _single_cell_grid()
    g.s2d[1, 1] = 0.0
    before_u = g.u.copy()
    correct_divergence(g, iterations=5, over_relaxation=1.0)
    np.testing.assert_array_equal(g.u, before_u)


def test_zero_iterations_is_noop():
    g = _single_cell_grid()
    before_u = g.u.copy()
    metrics = correct_divergence(g, iterations=0)
    np.testing.assert_array_equal(g.u, before_u)
    assert metrics["iterations"] == 0


def test_sweep_sees_earlier_updates():
    # Two cells side by side sharing face u[2, 1]. The second cell must
    # use the value the first cell just wrote.
    g = FluidGrid(2, 1, 1.0)
    g.u2d[1, 1] = -4.0
    correct_divergence(g, iterations=1, over_relaxation=1.0)

    # Cell (1, 1): div = 0 - (-4) = 4, p = -1 → u[2,1] = -1, u[1,1] = -3,
    # v[1,2] = -1, v[1,1] = 1
    # Cell (2, 1): div = 0 - (-1) = 1, p = -0.25 → u[2,1] = -0.75
    assert g.u2d[1, 1] == pytest.approx(-3.0)
    assert g.u2d[2, 1] == pytest.approx(-0.75)
    assert g.u2d[3, 1] == pytest.approx(-0.25)
    assert g.v2d[1, 1] == pytest.approx(1.0)
    assert g.v2d[2, 1] == pytest.approx(0.25)


def test_residual_decreases_with_more_iterations():
    rng = np.random.default_rng(0)
    u0 = rng.uniform(-1.0, 1.0, size=(10, 10)).astype(np.float32)
    v0 = rng.uniform(-1.0, 1.0, size=(10, 10)).astype(np.float32)

    residuals = []
    for iterations in [0, 5, 20, 100]:
        g = FluidGrid(8, 8, 0.1)
        g.u2d[:] = u0
        g.v2d[:] = v0
        correct_divergence(g, iterations=iterations, over_relaxation=1.0)
        residuals.append(divergence_residual(g))

    assert residuals[0] > 0.0
    assert all(b < a for a, b in zip(residuals, residuals[1:]))
    assert residuals[-1] < 1e-3 * residuals[0]


def test_metrics_report_improvement():
    g = _single_cell_grid()
    metrics = correct_divergence(g, iterations=2, over_relaxation=1.0)
    assert metrics["divergence_before_max"] == pytest.approx(5.0)
    assert metrics["divergence_after_max"] < 1e-5
    assert metrics["time_ms"] >= 0.0
