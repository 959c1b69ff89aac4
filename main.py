"""
main.py — Entry Point
======================
Runs the 2D smoke solver in one of three modes.

Usage:
    python main.py                          # Headless run, prints stats
    python main.py --mode benchmark         # Per-stage timing breakdown
    python main.py --mode live              # matplotlib window
    python main.py --scene tank --nx 60     # Different scene / resolution
"""

import argparse
import numpy as np


def build_simulation(nx: int, ny: int, h: float, scene: str, iterations: int):
    from eulerfluid import FluidSimulation

    sim = FluidSimulation(num_x=nx, num_y=ny, h=h, iterations=iterations, verbose=True)
    if scene == "tank":
        sim.setup_tank()
    else:
        sim.setup_wind_tunnel()
    return sim


def run_live(sim, frames: int):
    """Live visualization."""
    from visualizer import FluidVisualizer

    print("Close the window to exit.\n")
    viz = FluidVisualizer(sim)
    viz.run(fps=30, frames=frames)


def run_headless(sim, frames: int = 100):
    """Run simulation without display — prints stats every 10 frames."""
    g = sim.grid
    print(f"\nHeadless simulation | {g.width}x{g.height} | {frames} frames")
    print(f"{'─'*60}")

    total_times = []
    for f in range(frames):
        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(sim, frames: int = 50):
    """Detailed performance breakdown of each pipeline stage."""
    g = sim.grid
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {g.width}x{g.height} | {frames} frames | "
          f"{sim.iterations} iterations")
    print(f"{'='*60}")

    # Warm up
    for _ in range(5):
        sim.step()

    logs = [sim.step() for _ in range(frames)]

    keys = ["forces_ms", "project_ms", "boundary_ms",
            "advect_vel_ms", "advect_smoke_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Eulerian Smoke Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--scene", choices=["tunnel", "tank"], default="tunnel",
                        help="Scene preset (default: tunnel)")
    parser.add_argument("--nx",     type=int,   default=100,  help="Interior cells along x")
    parser.add_argument("--ny",     type=int,   default=50,   help="Interior cells along y")
    parser.add_argument("--h",      type=float, default=0.02, help="Cell size")
    parser.add_argument("--frames", type=int,   default=100,  help="Number of frames")
    parser.add_argument("--iterations", type=int, default=40,
                        help="Divergence correction sweeps per frame")

    args = parser.parse_args()
    sim = build_simulation(args.nx, args.ny, args.h, args.scene, args.iterations)

    if args.mode == "live":
        run_live(sim, frames=args.frames)
    elif args.mode == "headless":
        run_headless(sim, frames=args.frames)
    elif args.mode == "benchmark":
        run_benchmark(sim, frames=args.frames)
