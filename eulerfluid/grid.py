"""
grid.py — 2D Staggered Grid State
==================================
The single source of truth shared by every step of the solver.

Layout (width = num_x + 2, height = num_y + 2, one guard cell per side):
  - `u` (horizontal velocity) lives on the LEFT face of cell (i, j)
  - `v` (vertical velocity)   lives on the BOTTOM face of cell (i, j)
  - `m` (smoke / dye density) lives at the CELL CENTER
  - `s` (cell type)           1.0 = fluid, 0.0 = solid

Every buffer is a flat float32 array of length width * height, addressed
with index(i, j) = i * height + j. `i` walks x (outer), `j` walks y (inner).
The `*2d` attributes are (width, height) views onto the same memory, so
`grid.u2d[i, j]` and `grid.u[grid.index(i, j)]` are the same number.

Buffers are allocated once. Advection writes into `new_u`, `new_v`, `new_m`
and copies them back, so references to `u`, `v`, `m` never go stale.
"""

import math

import numpy as np


FLUID = 1.0
SOLID = 0.0


class InvalidConfiguration(ValueError):
    """Raised when a grid is requested with an unusable size or cell size."""


class FluidGrid:
    """
    Owns every buffer of the simulation plus the index mapping.
    No physics lives here; the step functions in the sibling modules
    mutate the buffers in place.
    """

    def __init__(self, num_x: int, num_y: int, h: float):
        """
        Args:
            num_x : Interior cells along x (guard ring is added on top)
            num_y : Interior cells along y
            h     : Physical size of one (square) cell
        """
        if not all(isinstance(n, (int, np.integer)) for n in (num_x, num_y)):
            raise InvalidConfiguration(
                f"Grid size must be whole cells, got {num_x!r}x{num_y!r}"
            )
        if num_x < 1 or num_y < 1:
            raise InvalidConfiguration(
                f"Grid needs at least one interior cell per axis, got {num_x}x{num_y}"
            )
        if not math.isfinite(h) or h <= 0.0:
            raise InvalidConfiguration(f"Cell size must be positive, got h={h}")

        self.width = int(num_x) + 2
        self.height = int(num_y) + 2
        self.num_cells = self.width * self.height
        self.h = float(h)

        # ── Velocity (face-centered, staggered) ───────────────────────────
        self.u = np.zeros(self.num_cells, dtype=np.float32)
        self.v = np.zeros(self.num_cells, dtype=np.float32)

        # Advection targets, copied back into u / v after each sweep
        self.new_u = np.zeros(self.num_cells, dtype=np.float32)
        self.new_v = np.zeros(self.num_cells, dtype=np.float32)

        # ── Cell type: everything starts as fluid, driver places walls ────
        self.s = np.full(self.num_cells, FLUID, dtype=np.float32)

        # ── Smoke density (cell-centered) ─────────────────────────────────
        self.m = np.zeros(self.num_cells, dtype=np.float32)
        self.new_m = np.zeros(self.num_cells, dtype=np.float32)

        shape = (self.width, self.height)
        self.u2d = self.u.reshape(shape)
        self.v2d = self.v.reshape(shape)
        self.s2d = self.s.reshape(shape)
        self.m2d = self.m.reshape(shape)
        self.new_u2d = self.new_u.reshape(shape)
        self.new_v2d = self.new_v.reshape(shape)
        self.new_m2d = self.new_m.reshape(shape)

    @property
    def shape(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def density(self) -> np.ndarray:
        """(width, height) view of the smoke field."""
        return self.m2d

    @property
    def cell_type(self) -> np.ndarray:
        """(width, height) view of the cell types, FLUID or SOLID."""
        return self.s2d

    def index(self, i: int, j: int) -> int:
        """Flat buffer index of cell (i, j)."""
        return i * self.height + j

    # ── Driver-facing mutation points ─────────────────────────────────────

    def set_solid(self, i: int, j: int, solid: bool = True):
        """
        Mark cell (i, j) solid (or fluid again).
        A cell turned solid gets its four faces zeroed so no velocity is
        left pointing into the obstacle.
        """
        self.s2d[i, j] = SOLID if solid else FLUID
        if solid:
            self.u2d[i, j] = 0.0
            self.v2d[i, j] = 0.0
            if i + 1 < self.width:
                self.u2d[i + 1, j] = 0.0
            if j + 1 < self.height:
                self.v2d[i, j + 1] = 0.0

    def set_boundary_walls(self, left: bool = True, right: bool = True,
                           bottom: bool = True, top: bool = False):
        """
        Turn sides of the guard ring into solid walls.
        The default (open top) is the classic tank.
        """
        if left:
            self.s2d[0, :] = SOLID
        if right:
            self.s2d[-1, :] = SOLID
        if bottom:
            self.s2d[:, 0] = SOLID
        if top:
            self.s2d[:, -1] = SOLID

    def add_circle_obstacle(self, x: float, y: float, radius: float) -> int:
        """
        Make every interior cell whose center lies inside the circle solid.

        Args:
            x, y   : Circle center in world units
            radius : Circle radius in world units

        Returns:
            Number of cells turned solid.
        """
        h = self.h
        ci, cj = np.meshgrid(
            np.arange(self.width), np.arange(self.height), indexing='ij'
        )
        dist_sq = ((ci + 0.5) * h - x) ** 2 + ((cj + 0.5) * h - y) ** 2
        inside = dist_sq < radius * radius
        # The guard ring is left to set_boundary_walls
        inside[0, :] = inside[-1, :] = False
        inside[:, 0] = inside[:, -1] = False

        for i, j in zip(*np.nonzero(inside)):
            self.set_solid(int(i), int(j))
        return int(inside.sum())

    def add_density(self, i: int, j: int, amount: float, radius: int = 0):
        """
        Inject smoke into the square patch of cells around (i, j).
        The patch is clipped to the grid.
        """
        i0, i1 = max(0, i - radius), min(self.width, i + radius + 1)
        j0, j1 = max(0, j - radius), min(self.height, j + radius + 1)
        self.m2d[i0:i1, j0:j1] += amount

    def set_density(self, i: int, j: int, value: float):
        self.m2d[i, j] = value

    # ── Introspection ─────────────────────────────────────────────────────

    def compute_divergence(self) -> np.ndarray:
        """
        Net outflow of every interior fluid cell:
          div[i, j] = u[i+1, j] - u[i, j] + v[i, j+1] - v[i, j]

        Solid cells and the guard ring report 0. This is the quantity
        correct_divergence() drives toward zero.

        Returns: (width, height) float64 array.
        """
        u, v = self.u2d.astype(np.float64), self.v2d.astype(np.float64)
        div = np.zeros(self.shape, dtype=np.float64)
        div[1:-1, 1:-1] = (
            u[2:, 1:-1] - u[1:-1, 1:-1] +
            v[1:-1, 2:] - v[1:-1, 1:-1]
        )
        div[self.s2d == SOLID] = 0.0
        return div

    def get_velocity_at_center(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Average the staggered face velocities to cell centers.
        The last column/row has no right/top face and reports its own face.

        Returns (uc, vc) each of shape (width, height).
        """
        uc = self.u2d.copy()
        vc = self.v2d.copy()
        uc[:-1, :] = 0.5 * (self.u2d[:-1, :] + self.u2d[1:, :])
        vc[:, :-1] = 0.5 * (self.v2d[:, :-1] + self.v2d[:, 1:])
        return uc, vc

    def save_state(self) -> dict:
        """Snapshot the live buffers as (width, height) arrays."""
        return {
            "velocity_u": self.u2d.copy(),
            "velocity_v": self.v2d.copy(),
            "cell_type":  self.s2d.copy(),
            "density":    self.m2d.copy(),
        }

    def reset(self):
        """Zero velocities and smoke. Cell types (walls, obstacles) are kept."""
        for arr in [self.u, self.v, self.new_u, self.new_v, self.m, self.new_m]:
            arr[:] = 0.0

    def __repr__(self):
        max_div = np.abs(self.compute_divergence()).max()
        max_vel = max(np.abs(self.u).max(), np.abs(self.v).max())
        return (
            f"FluidGrid({self.width - 2}x{self.height - 2}, h={self.h})\n"
            f"  density  : max={self.m.max():.4f}, sum={self.m.sum():.2f}\n"
            f"  velocity : max_component={max_vel:.4f}\n"
            f"  divergence: max={max_div:.6f} (target: ~0)"
        )
