"""
Gradio demo app for the robot motion testbed.

Runs a scripted waypoint list headless and renders the run as an animated
GIF, reusing the same Simulation the interactive viewer drives.
"""
from __future__ import annotations

import logging
import math
import tempfile
from typing import List, Tuple

import gradio as gr
import matplotlib

# Use a headless backend for cloud runtime environments.
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

from config import SimConfig
from sensors import SensorArray
from simulation import Simulation
from world import Scene

logger = logging.getLogger(__name__)

ROBOT_RADIUS = 10.0

def parse_waypoints(text: str) -> List[Tuple[float, float]]:
    """Parse ``"x1,y1; x2,y2; ..."`` (semicolons or newlines between points)."""
    points: List[Tuple[float, float]] = []
    for chunk in text.replace("\n", ";").split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = [p.strip() for p in chunk.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'x,y' but got {chunk!r}")
        try:
            points.append((float(parts[0]), float(parts[1])))
        except ValueError as exc:
            raise ValueError(f"Non-numeric waypoint {chunk!r}") from exc
    return points


def _create_scene(sim: Simulation):
    """Build matplotlib artists and return figure + artist handles."""
    bg_dark = "#1a1a2e"
    bg_panel = "#16213e"
    accent = "#0f3460"

    fig, ax = plt.subplots(figsize=(5.6, 4.8), dpi=110)
    fig.patch.set_facecolor(bg_panel)
    ax.set_facecolor(bg_dark)
    ax.set_xlim(-400, 400)
    ax.set_ylim(-300, 300)
    ax.set_aspect("equal")
    ax.set_title("Robot Motion Testbed Replay", color="white", fontsize=11)
    ax.tick_params(colors="gray")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444")

    for cx, cy, hw, hh in sim.scene.boxes:
        ax.add_patch(plt.Rectangle((cx - hw, cy - hh), 2 * hw, 2 * hh, color="#7bd389", alpha=0.85, zorder=3))
    for cx, cy, r in sim.scene.circles:
        ax.add_patch(plt.Circle((cx, cy), r, color="#e94560", alpha=0.85, zorder=3))

    (trail_line,) = ax.plot([], [], "-", color=accent, lw=1.4, alpha=0.75, zorder=2)
    (path_line,) = ax.plot([], [], "--o", color="#e2d96e", lw=1.2, ms=4, alpha=0.9, zorder=4)
    robot_patch = plt.Circle(sim.robot.position, ROBOT_RADIUS, color="#9d4edd", zorder=5)
    ax.add_patch(robot_patch)
    (heading_line,) = ax.plot([], [], "-", color="white", lw=2, zorder=6)

    ray_lines = [
        ax.plot([], [], "-", color="#a8dadc", lw=0.5, alpha=0.5, zorder=2)[0]
        for _ in range(sim.sensors.ray_count)
    ]
    status_text = ax.text(
        0.02,
        0.98,
        "",
        transform=ax.transAxes,
        color="white",
        fontsize=8.0,
        va="top",
        fontfamily="monospace",
    )

    artists = {
        "trail_line": trail_line,
        "path_line": path_line,
        "robot_patch": robot_patch,
        "heading_line": heading_line,
        "ray_lines": ray_lines,
        "status_text": status_text,
    }
    return fig, artists


def _render_frame(fig, artists, sim: Simulation) -> Image.Image:
    """Render the current simulation state and return it as a PIL image."""
    robot = sim.robot
    artists["robot_patch"].center = robot.position

    hl = ROBOT_RADIUS * 2.0
    artists["heading_line"].set_data(
        [robot.x, robot.x + hl * math.cos(robot.orientation)],
        [robot.y, robot.y + hl * math.sin(robot.orientation)],
    )
    artists["trail_line"].set_data(robot.trail_x, robot.trail_y)

    pending = list(sim.trajectory)
    if pending:
        px, py = zip(robot.position, *pending)
        artists["path_line"].set_data(px, py)
    else:
        artists["path_line"].set_data([], [])

    for ray_line, (ex, ey) in zip(artists["ray_lines"], SensorArray.endpoints(robot)):
        ray_line.set_data([robot.x, ex], [robot.y, ey])

    artists["status_text"].set_text(
        f"t={sim.time:6.2f}s  {sim.state.value}\n"
        f"x={robot.x:7.1f} y={robot.y:7.1f} th={math.degrees(robot.orientation):+6.1f}\n"
        f"v={robot.velocity:6.1f} w={robot.angular_velocity:5.2f}\n"
        f"waypoints left={len(pending)} nearest={SensorArray.ranges(robot).min():6.1f}"
    )

    fig.canvas.draw()
    rgba = np.asarray(fig.canvas.buffer_rgba(), dtype=np.uint8)
    return Image.fromarray(np.ascontiguousarray(rgba[:, :, :3]))


def run_simulation(
    waypoint_text: str,
    max_velocity: float,
    acceleration: float,
    max_steps: float,
    frame_stride: float,
):
    """Run the simulator and return an animated GIF path and summary text."""
    try:
        waypoints = parse_waypoints(waypoint_text or "")
        config = SimConfig(max_velocity=float(max_velocity), acceleration=float(acceleration))
    except ValueError as exc:
        raise gr.Error(str(exc)) from exc
    if not waypoints:
        raise gr.Error("Enter at least one waypoint as 'x,y'.")

    sim = Simulation(config, Scene.demo())
    for point in waypoints:
        sim.add_waypoint(point)

    fig, artists = _create_scene(sim)
    frames: List[Image.Image] = []
    effective_stride = max(int(frame_stride), max(1, int(max_steps) // 120))
    frames.append(_render_frame(fig, artists, sim))

    for step in range(1, int(max_steps) + 1):
        sim.step()
        if step % effective_stride == 0 or sim.is_idle or step == int(max_steps):
            frames.append(_render_frame(fig, artists, sim))
        if sim.is_idle:
            break

    plt.close(fig)

    tmp = tempfile.NamedTemporaryFile(prefix="robot_testbed_", suffix=".gif", delete=False)
    tmp.close()
    duration_ms = max(20, int(1000 * config.dt * effective_stride))
    frames[0].save(
        tmp.name,
        save_all=True,
        append_images=frames[1:],
        duration=duration_ms,
        loop=0,
        optimize=True,
    )
    logger.info("Rendered %d frames to %s", len(frames), tmp.name)

    robot = sim.robot
    status = (
        f"Waypoints: {len(waypoints)} queued, {len(waypoints) - len(sim.trajectory)} reached\n"
        f"Steps: {sim.tick} ({sim.time:.2f} s simulated)\n"
        f"Final pose: ({robot.x:.2f}, {robot.y:.2f}), {math.degrees(robot.orientation):+.1f} deg\n"
        f"Nearest obstacle seen: {SensorArray.ranges(robot).min():.1f}\n"
        f"Finished: {'yes' if sim.is_idle else 'no (step limit)'}"
    )
    return tmp.name, status


def build_demo() -> gr.Blocks:
    """Build the Gradio UI."""
    with gr.Blocks(title="Robot Motion Testbed") as demo:
        gr.Markdown(
            """
            # Robot Motion Testbed
            Queue waypoints, watch the robot turn on the spot and then drive each leg
            with a trapezoidal speed profile while its sensor fan sweeps the scene.
            """
        )

        with gr.Row():
            with gr.Column(scale=1):
                waypoint_text = gr.Textbox(
                    value="0,100; 150,100; 150,-100",
                    lines=3,
                    label="Waypoints (x,y; x,y; ...)",
                )
                max_velocity = gr.Slider(20, 400, value=200, step=10, label="Max velocity")
                acceleration = gr.Slider(10, 400, value=150, step=10, label="Acceleration")
                max_steps = gr.Slider(100, 3000, value=1500, step=50, label="Max Simulation Steps")
                frame_stride = gr.Slider(1, 10, value=4, step=1, label="Render Every N Steps")
                run_btn = gr.Button("Run Simulation", variant="primary")

            with gr.Column(scale=1):
                gif_output = gr.Image(type="filepath", label="Simulation Replay (GIF)")
                status_output = gr.Textbox(label="Run Summary", lines=5)

        run_btn.click(
            fn=run_simulation,
            inputs=[waypoint_text, max_velocity, acceleration, max_steps, frame_stride],
            outputs=[gif_output, status_output],
        )

        gr.Examples(
            examples=[
                ["0,100", 200, 150, 1500, 4],
                ["0,100; 150,100; 150,-100", 200, 150, 1500, 4],
                ["-200,50; 200,50; 0,250", 300, 250, 2000, 5],
            ],
            inputs=[waypoint_text, max_velocity, acceleration, max_steps, frame_stride],
        )

    return demo


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    app = build_demo()
    app.launch()
