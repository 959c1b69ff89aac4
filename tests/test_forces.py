import numpy as np

from eulerfluid import FluidGrid, apply_gravity


def test_gravity_on_open_3x3_domain():
    g = FluidGrid(3, 3, 1.0)
    apply_gravity(g, dt=0.1, gravity=-9.8)

    np.testing.assert_allclose(g.v2d[1:, 1:-1], -0.98, rtol=1e-6)
    assert not g.v2d[0, :].any()
    assert not g.v2d[:, 0].any()
    assert not g.v2d[:, -1].any()
    assert not g.u.any()


def test_no_force_above_solid_support():
    g = FluidGrid(3, 3, 1.0)
    g.set_solid(2, 1)
    apply_gravity(g, dt=0.1, gravity=-9.8)

    # (2, 1) is solid itself, (2, 2) rests on it
    assert g.v2d[2, 1] == 0.0
    assert g.v2d[2, 2] == 0.0
    np.testing.assert_allclose(g.v2d[2, 3], -0.98, rtol=1e-6)
    np.testing.assert_allclose(g.v2d[1, 2], -0.98, rtol=1e-6)


def test_gravity_accumulates():
    g = FluidGrid(2, 2, 1.0)
    apply_gravity(g, 0.5, -2.0)
    apply_gravity(g, 0.5, -2.0)
    np.testing.assert_allclose(g.v2d[1:, 1:-1], -2.0)


def test_walled_tank_bottom_row_gets_nothing():
    g = FluidGrid(4, 4, 1.0)
    g.set_boundary_walls()
    apply_gravity(g, 1.0, -1.0)
    # j = 1 faces sit on the solid floor, i = 0 and i = W-1 are walls
    assert not g.v2d[:, 1].any()
    assert not g.v2d[0, :].any()
    assert not g.v2d[-1, :].any()
    np.testing.assert_allclose(g.v2d[1:-1, 2:-1], -1.0)
