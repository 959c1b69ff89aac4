"""
simulation.py — Reference Step Driver
======================================
Ties the solver stages together in the order they must run.
One call to `step()` advances the fluid by dt seconds.

Pipeline per frame:
  1. Gravity                 (forces.apply_gravity)
  2. Divergence correction   (solver.correct_divergence)
  3. Guard ring fill         (boundaries.fill_boundary_velocities)
  4. Advect velocity         (advect.advect_velocity)
  5. Advect smoke            (advect.advect_smoke)

Choosing dt, gravity, iteration count, obstacles and dye sources is the
driver's job; this class holds sensible defaults for the demos in main.py
and visualizer.py.
"""

import time

import numpy as np

from .grid import FluidGrid
from .forces import apply_gravity
from .solver import correct_divergence
from .boundaries import fill_boundary_velocities
from .advect import advect_velocity, advect_smoke


# ── Defaults ──────────────────────────────────────────────────────────────────
DEFAULT_DT              = 1.0 / 60.0
DEFAULT_GRAVITY         = -9.81
DEFAULT_ITERATIONS      = 40
DEFAULT_OVER_RELAXATION = 1.9


class FluidSimulation:
    """
    The complete 2D smoke simulation.

    Usage:
        sim = FluidSimulation(num_x=100, num_y=50, h=0.02)
        sim.setup_wind_tunnel()
        for frame in range(100):
            sim.step()
            density = sim.grid.density     # Hand to visualizer
    """

    def __init__(self, num_x: int = 100, num_y: int = 50, h: float = 0.02,
                 dt: float = DEFAULT_DT,
                 gravity: float = DEFAULT_GRAVITY,
                 iterations: int = DEFAULT_ITERATIONS,
                 over_relaxation: float = DEFAULT_OVER_RELAXATION,
                 verbose: bool = False):
        """
        Args:
            num_x, num_y    : Interior resolution (guard ring is added)
            h               : Cell size in world units
            dt              : Default timestep per step()
            gravity         : Default vertical acceleration (negative = down)
            iterations      : Gauss-Seidel sweeps per step
            over_relaxation : Correction multiplier, typically in [1, 2)
            verbose         : Print status lines from scene setup
        """
        self.grid = FluidGrid(num_x, num_y, h)
        self.dt = dt
        self.gravity = gravity
        self.iterations = iterations
        self.over_relaxation = over_relaxation
        self.verbose = verbose
        self.frame = 0
        self.perf_log = []   # stores timing data per frame

    def _log(self, msg: str):
        if self.verbose:
            print(f"[Simulation] {msg}")

    # ── Scenes ────────────────────────────────────────────────────────────────

    def setup_tank(self, gravity: float = DEFAULT_GRAVITY):
        """Closed box with an open top, falling under gravity."""
        self.grid.set_boundary_walls(left=True, right=True, bottom=True, top=False)
        self.gravity = gravity
        self._log(f"Tank scene: {self.grid.width}x{self.grid.height} cells, g={gravity}")

    def setup_wind_tunnel(self, inflow: float = 2.0, obstacle_radius: float = 0.15,
                          pipe_fraction: float = 0.1):
        """
        Left-to-right flow past a circular obstacle.

        Column 1 carries a constant inflow (its left neighbour is solid, so
        neither the solver nor advection ever rewrites it). A horizontal
        band of dye enters through the left guard column.

        Args:
            inflow          : Horizontal inflow velocity
            obstacle_radius : Radius of the obstacle in world units
            pipe_fraction   : Height of the dye band relative to the domain
        """
        g = self.grid
        self.gravity = 0.0
        g.set_boundary_walls(left=True, right=False, bottom=True, top=True)
        g.u2d[1, :] = inflow

        mid = g.height // 2
        half_pipe = max(1, int(0.5 * pipe_fraction * g.height))
        g.m2d[0, mid - half_pipe:mid + half_pipe] = 1.0

        domain_height = g.height * g.h
        n_solid = g.add_circle_obstacle(0.4 * domain_height, 0.5 * domain_height,
                                        obstacle_radius)
        self._log(f"Wind tunnel scene: inflow={inflow}, obstacle cells={n_solid}")

    def add_smoke_source(self, i: int, j: int, amount: float = 1.0,
                         radius: int = 1, velocity: tuple = (0.0, 0.0)):
        """
        Inject smoke (and optionally a velocity kick) around cell (i, j).
        Call this before stepping to feed a continuous emitter.
        """
        g = self.grid
        g.add_density(i, j, amount, radius)
        du, dv = velocity
        if du:
            g.u2d[i, j] += du
            g.u2d[min(i + 1, g.width - 1), j] += du
        if dv:
            g.v2d[i, j] += dv
            g.v2d[i, min(j + 1, g.height - 1)] += dv

    # ── Stepping ──────────────────────────────────────────────────────────────

    def step(self, dt: float = None, gravity: float = None,
             iterations: int = None) -> dict:
        """
        Advance simulation by one timestep.

        Returns performance metrics dict for benchmarking.

        Args:
            dt         : Override the default timestep for this step
            gravity    : Override the default gravity for this step
            iterations : Override the Gauss-Seidel sweep count
        """
        dt = self.dt if dt is None else dt
        gravity = self.gravity if gravity is None else gravity
        iterations = self.iterations if iterations is None else iterations

        t_total_start = time.perf_counter()
        g = self.grid

        # ── Step 1: Gravity ────────────────────────────────────────────────
        t0 = time.perf_counter()
        apply_gravity(g, dt, gravity)
        t_forces = (time.perf_counter() - t0) * 1000

        # ── Step 2: Divergence correction ──────────────────────────────────
        proj_metrics = correct_divergence(g, iterations, self.over_relaxation, dt)

        # ── Step 3: Guard ring ─────────────────────────────────────────────
        t0 = time.perf_counter()
        fill_boundary_velocities(g)
        t_boundary = (time.perf_counter() - t0) * 1000

        # ── Step 4: Advect velocity ────────────────────────────────────────
        t0 = time.perf_counter()
        advect_velocity(g, dt)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        # ── Step 5: Advect smoke ───────────────────────────────────────────
        t0 = time.perf_counter()
        advect_smoke(g, dt)
        t_advect_smoke = (time.perf_counter() - t0) * 1000

        # ── Frame bookkeeping ──────────────────────────────────────────────
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"           : self.frame,
            "total_ms"        : t_total,
            "fps"             : 1000.0 / t_total if t_total > 0 else 0,
            "forces_ms"       : t_forces,
            "project_ms"      : proj_metrics["time_ms"],
            "boundary_ms"     : t_boundary,
            "advect_vel_ms"   : t_advect_vel,
            "advect_smoke_ms" : t_advect_smoke,
            "divergence_max"  : proj_metrics["divergence_after_max"],
            "divergence_mean" : proj_metrics["divergence_after_mean"],
            "density_total"   : float(g.m.sum()),
        }
        self.perf_log.append(metrics)
        return metrics

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        div = g.compute_divergence()
        uc, vc = g.get_velocity_at_center()
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Grid: {g.width}x{g.height}  |  h={g.h}")
        print(f"  Density   : max={g.m.max():.4f}, total={g.m.sum():.2f}")
        print(f"  Velocity  : max_u={np.abs(uc).max():.4f}, max_v={np.abs(vc).max():.4f}")
        print(f"  Divergence: max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
