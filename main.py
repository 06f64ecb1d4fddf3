"""
2D robot motion testbed: interactive entry point.

Usage
-----
    pip install -e .
    python main.py [config.yaml]

Controls
--------
    Right click in the plot  → append a waypoint to the robot's trajectory.
    Left drag / toolbar      → pan and zoom (matplotlib navigation).
    "Clear" button           → empty the trajectory and reset the robot.
"""
import logging
import math
import sys
import time

import matplotlib
# Select an interactive backend before importing pyplot.
# TkAgg ships with standard Python on most platforms.
# If you see a backend error, try 'Qt5Agg' or 'macosx' instead.
matplotlib.use("TkAgg")

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.patches import Circle, Rectangle
from matplotlib.widgets import Button

from config import load_config
from sensors import SensorArray
from simulation import Simulation
from world import Scene

logger = logging.getLogger(__name__)

VIEW_HALF_WIDTH = 400.0
VIEW_HALF_HEIGHT = 320.0
ROBOT_RADIUS = 10.0

BG_DARK  = "#1a1a2e"
BG_PANEL = "#16213e"
ACCENT   = "#0f3460"


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    config = load_config(sys.argv[1] if len(sys.argv) > 1 else None)
    sim = Simulation(config, Scene.demo())
    robot = sim.robot

    # ─── Figure setup ─────────────────────────────────────────────────────────
    fig, ax = plt.subplots(figsize=(8, 7.2))   # extra height for button row
    fig.patch.set_facecolor(BG_PANEL)
    fig.subplots_adjust(left=0.07, right=0.97, top=0.95, bottom=0.11)

    ax.set_facecolor(BG_DARK)
    ax.set_xlim(-VIEW_HALF_WIDTH, VIEW_HALF_WIDTH)
    ax.set_ylim(-VIEW_HALF_HEIGHT, VIEW_HALF_HEIGHT)
    ax.set_aspect("equal")
    ax.set_title("Robot Motion Testbed  |  Right click to add a waypoint", color="white", fontsize=12)
    ax.tick_params(colors="gray")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444")

    for cx, cy, hw, hh in sim.scene.boxes:
        ax.add_patch(Rectangle((cx - hw, cy - hh), 2 * hw, 2 * hh, color="#7bd389", alpha=0.85, zorder=3))
    for cx, cy, r in sim.scene.circles:
        ax.add_patch(Circle((cx, cy), r, color="#e94560", alpha=0.85, zorder=3))

    # ─── Dynamic artists (updated every frame) ────────────────────────────────
    (trail_line,) = ax.plot([], [], "-", color=ACCENT, lw=1.5, alpha=0.7, zorder=2)
    (path_line,)  = ax.plot([], [], "--o", color="#e2d96e", lw=1.2, ms=4, alpha=0.8, zorder=4)

    robot_patch = Circle(robot.position, ROBOT_RADIUS, color="#9d4edd", zorder=5)
    ax.add_patch(robot_patch)
    (heading_line,) = ax.plot([], [], "-", color="white", lw=2, zorder=6)

    ray_lines = [
        ax.plot([], [], "-", color="#a8dadc", lw=0.6, alpha=0.5, zorder=2)[0]
        for _ in range(sim.sensors.ray_count)
    ]

    status_text = ax.text(
        0.02, 0.97, "",
        transform=ax.transAxes,
        color="white", fontsize=8.5, va="top",
        fontfamily="monospace",
    )

    fps = {"last": time.perf_counter(), "value": 0.0}

    # ─── Callbacks ────────────────────────────────────────────────────────────
    def on_click(event) -> None:
        """Append the clicked point to the trajectory (right button only)."""
        if event.inaxes is not ax or event.xdata is None or event.button != 3:
            return
        sim.add_waypoint((event.xdata, event.ydata))

    def on_clear(_event) -> None:
        sim.reset()

    fig.canvas.mpl_connect("button_press_event", on_click)

    btn_ax = fig.add_axes([0.40, 0.015, 0.20, 0.055])
    btn_ax.set_navigate(False)
    clear_btn = Button(btn_ax, "Clear", color=ACCENT, hovercolor="#e94560")
    clear_btn.label.set_color("white")
    clear_btn.on_clicked(on_clear)

    # ─── Animation step ───────────────────────────────────────────────────────
    def sim_step(_frame):
        state = sim.step()

        now = time.perf_counter()
        elapsed = now - fps["last"]
        fps["last"] = now
        if elapsed > 0.0:
            # Smooth the frame-rate readout so it is legible
            fps["value"] = 0.9 * fps["value"] + 0.1 * (1.0 / elapsed)

        robot_patch.center = robot.position
        hl = ROBOT_RADIUS * 2.0
        heading_line.set_data(
            [robot.x, robot.x + hl * math.cos(robot.orientation)],
            [robot.y, robot.y + hl * math.sin(robot.orientation)],
        )
        trail_line.set_data(robot.trail_x, robot.trail_y)

        pending = list(sim.trajectory)
        if pending:
            px, py = zip(robot.position, *pending)
            path_line.set_data(px, py)
        else:
            path_line.set_data([], [])

        for ray_line, (ex, ey) in zip(ray_lines, SensorArray.endpoints(robot)):
            ray_line.set_data([robot.x, ex], [robot.y, ey])

        status_text.set_text(
            f"x={robot.x:7.1f}  y={robot.y:7.1f}  θ={math.degrees(robot.orientation):+6.1f}°\n"
            f"v={robot.velocity:6.1f}   ω={robot.angular_velocity:5.2f} rad/s\n"
            f"{state.value:<11s} waypoints={len(pending)}   nearest={SensorArray.ranges(robot).min():6.1f}\n"
            f"{fps['value']:5.1f} fps"
        )

        return (robot_patch, heading_line, trail_line, path_line, status_text, *ray_lines)

    # Keep a reference so the animation is not garbage collected
    anim = FuncAnimation(
        fig, sim_step,
        interval=int(config.dt * 1000),
        blit=True,
        cache_frame_data=False,
    )
    logger.info("Viewer started (dt=%.4f s, %d sensor rays)", config.dt, config.ray_count)
    plt.show()


if __name__ == "__main__":
    main()
