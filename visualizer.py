"""
visualizer.py — Smoke Density Viewer
=====================================
Renders the density field with solid cells masked out, stepping the
simulation once per animation frame.

Uses matplotlib FuncAnimation for real-time updates.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.colors import LinearSegmentedColormap

from eulerfluid import SOLID

# Custom smoke colormap: black → orange → white
SMOKE_COLORS = ["#000000", "#1a0a00", "#ff6a00", "#ffffff"]
smoke_cmap = LinearSegmentedColormap.from_list("smoke", SMOKE_COLORS).with_extremes(
    bad="#4a4a4a"   # solid cells
)


class FluidVisualizer:
    """
    Real-time viewer of the 2D smoke simulation.

    Usage (standalone):
        from eulerfluid import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation()
        sim.setup_wind_tunnel()
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, vmax: float = 1.0):
        """
        Args:
            simulation : FluidSimulation instance
            vmax       : Density mapped to the brightest color
        """
        self.sim = simulation
        self.vmax = vmax
        self._setup_figure()

    def _setup_figure(self):
        """Initialize the matplotlib figure."""
        self.fig, self.ax = plt.subplots(figsize=(10, 5))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            self._get_frame(), cmap=smoke_cmap,
            vmin=0, vmax=self.vmax,
            interpolation='bilinear',
            origin='lower',
            aspect='equal'
        )
        self.title_text = self.fig.suptitle(
            "Smoke Sim — Frame 0 | 0.0 FPS",
            color='#cccccc', fontsize=10, fontfamily='monospace'
        )
        plt.tight_layout()

    def _get_frame(self) -> np.ma.MaskedArray:
        """Density as an image: transpose so x is horizontal, mask solids."""
        g = self.sim.grid
        return np.ma.masked_where(g.s2d.T == SOLID, g.m2d.T)

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates plot."""
        metrics = self.sim.step()
        self.img.set_data(self._get_frame())
        self.title_text.set_text(
            f"Smoke Sim — Frame {metrics['frame']} | "
            f"{metrics['fps']:.1f} FPS | "
            f"div_max={metrics['divergence_max']:.5f}"
        )
        return [self.img, self.title_text]

    def run(self, fps: int = 30, frames: int = 500):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=False
        )
        plt.show()

    def save_gif(self, path: str = "smoke_sim.gif", fps: int = 30, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=1000 // fps, blit=False
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")
