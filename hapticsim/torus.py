"""A tool sphere pushing a free-spinning torus, rendered as a spring force."""

from __future__ import annotations

import argparse
import math
import threading
from typing import Sequence, Tuple

import numpy as np

from hapticsim.device import DeviceError, SimulatedDevice
from hapticsim.sphere import SafetyGate

STIFFNESS = 1000.0
MASS = 1000.0
KV = 1.0
TORUS_OUTER_RADIUS = 0.05
TORUS_INNER_RADIUS = 0.027
TOOL_RADIUS = 0.005
INITIAL_ROTATION_ANGLE = math.pi * 45.0 / 180.0
INITIAL_ROTATION_AXIS = (0.0, 1.0, -1.0)

_MIN_SQUARED_DISTANCE = 1e-10
_MIN_CONTACT_DISTANCE = 0.001
_MIN_ANGULAR_SPEED = 1e-10


def _as_vector(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected 3 components, got {vector.size}")
    return vector


def _normalized(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    return vector / norm if norm > 0.0 else vector.copy()


def axis_angle_matrix(angle: float, axis: Sequence[float]) -> np.ndarray:
    """Return the rotation matrix for ``angle`` radians about ``axis``."""
    direction = _as_vector(axis)
    norm = float(np.linalg.norm(direction))
    if norm == 0.0:
        raise ValueError("rotation axis must not be zero")
    x, y, z = direction / norm
    cosine = math.cos(angle)
    sine = math.sin(angle)
    outer = np.outer((x, y, z), (x, y, z))
    cross = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    return cosine * np.eye(3) + sine * cross + (1.0 - cosine) * outer


def torus_contact(
    local_position,
    outer_radius=TORUS_OUTER_RADIUS,
    inner_radius=TORUS_INNER_RADIUS,
    tool_radius=TOOL_RADIUS,
    stiffness=STIFFNESS,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return the contact force and the constrained tool position, in torus coordinates.

    The torus lies in its local z = 0 plane. When the tool penetrates it, the
    force pushes the tool away from the medial circle and the returned
    position is moved back onto the torus surface.
    """
    position = _as_vector(local_position)
    if float(position @ position) <= _MIN_SQUARED_DISTANCE:
        return np.zeros(3), position.copy()

    projection = position.copy()
    projection[2] = 0.0
    axis_point = outer_radius * _normalized(projection)

    offset = position - axis_point
    distance = float(np.linalg.norm(offset))
    reach = inner_radius + tool_radius
    if _MIN_CONTACT_DISTANCE < distance < reach:
        direction = offset / distance
        force = (reach - distance) * stiffness * direction
        return force, axis_point + reach * direction
    return np.zeros(3), position.copy()


def torus_mesh(outer_radius, inner_radius, major_segments, minor_segments):
    """Return ``(positions, normals, tex_coords)`` of a torus as triangle strips.

    Each array has one row per strip around the major circle; a strip holds
    ``2 * (minor_segments + 1)`` vertices, alternating between the two edges
    of its segment.
    """
    if major_segments < 1 or minor_segments < 1:
        raise ValueError("segment counts must be at least 1")
    if inner_radius == 0:
        raise ValueError("inner radius must not be zero")

    major_step = 2.0 * math.pi / major_segments
    minor_step = 2.0 * math.pi / minor_segments

    major = np.arange(major_segments + 1)
    major_x = np.cos(major * major_step)
    major_y = np.sin(major * major_step)

    minor = np.arange(minor_segments + 1)
    angles = minor * minor_step
    cosines = np.cos(angles)
    radii = inner_radius * cosines + outer_radius
    heights = inner_radius * np.sin(angles)

    def edge(index: np.ndarray):
        x = major_x[index][:, None]
        y = major_y[index][:, None]
        shape = (len(index), minor_segments + 1)
        positions = np.stack(
            [x * radii, y * radii, np.broadcast_to(heights, shape)], axis=-1
        )
        normals = np.stack(
            [x * cosines, y * cosines, np.broadcast_to(heights / inner_radius, shape)],
            axis=-1,
        )
        tex = np.stack(
            [
                np.broadcast_to((index / major_segments)[:, None], shape),
                np.broadcast_to(minor / minor_segments, shape),
            ],
            axis=-1,
        )
        return positions, normals, tex

    strips = np.arange(major_segments)
    first = edge(strips)
    second = edge(strips + 1)

    def interleave(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        joined = np.stack([a, b], axis=2)
        return joined.reshape(major_segments, 2 * (minor_segments + 1), a.shape[-1])

    return tuple(interleave(a, b) for a, b in zip(first, second))


class TorusSimulation:
    """The haptic loop of the torus scene, driving one device."""

    def __init__(self, device):
        self.device = device
        self.gate = SafetyGate()
        self.torus_position = np.zeros(3)
        self.torus_rotation = axis_angle_matrix(INITIAL_ROTATION_ANGLE, INITIAL_ROTATION_AXIS)
        self.angular_velocity = np.zeros(3)
        self.tool_position = np.zeros(3)
        self.tool_rotation = np.eye(3)
        self.force = np.zeros(3)
        self.finished = False
        self._lock = threading.Lock()

    def step(self, time_step: float) -> np.ndarray:
        """Advance the scene by ``time_step`` seconds.

        Returns the force actually rendered on the device.
        """
        tool_rotation = np.asarray(self.device.get_orientation_frame(), dtype=float).reshape(3, 3)
        position = _as_vector(self.device.get_position())

        with self._lock:
            rotation = self.torus_rotation.copy()

        local = rotation.T @ (position - self.torus_position)
        force_local, local = torus_contact(local)
        force = rotation @ force_local
        tool_position = rotation @ local + self.torus_position

        angular_velocity = self.angular_velocity - time_step / MASS * np.cross(
            tool_position - self.torus_position, force
        )

        rendered = self.gate.filter(force)
        self.device.set_force_and_gripper_force(rendered, 0.0)

        if self.device.get_button(0):
            angular_velocity = np.zeros(3)

        angular_velocity = angular_velocity * (1.0 - KV * time_step)

        speed = float(np.linalg.norm(angular_velocity))
        if speed > _MIN_ANGULAR_SPEED:
            rotation = axis_angle_matrix(speed, angular_velocity) @ rotation

        with self._lock:
            self.angular_velocity = angular_velocity
            self.torus_rotation = rotation
            self.tool_position = tool_position
            self.tool_rotation = tool_rotation
            self.force = force
        return rendered

    def snapshot(self) -> tuple:
        """Return copies of the torus rotation, tool position and tool force."""
        with self._lock:
            return self.torus_rotation.copy(), self.tool_position.copy(), self.force.copy()

    def run(self, stop_event: threading.Event) -> None:
        """Run the haptic loop until ``stop_event`` is set or the device fails."""
        self.finished = False
        self.device.enable_force(True)
        try:
            previous = self.device.get_time()
            while not stop_event.is_set():
                now = self.device.get_time()
                time_step = now - previous
                previous = now
                try:
                    self.step(time_step)
                except DeviceError as error:
                    print()
                    print(f"error: failed to read position ({error})")
                    break
        finally:
            self.finished = True


def main(argv=None) -> int:
    """Run the torus scene on a simulated device."""
    parser = argparse.ArgumentParser(prog="hapticsim-torus", description=__doc__)
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to run before stopping (default: until interrupted)",
    )
    args = parser.parse_args(argv)

    device = SimulatedDevice()
    print(f"Torus Example {device.sdk_version()}")
    print()

    device.open()
    print(f"{device.system_name()} device detected")

    simulation = TorusSimulation(device)
    stop_event = threading.Event()
    thread = threading.Thread(target=simulation.run, args=(stop_event,), daemon=True)
    thread.start()

    print()
    print("press Ctrl+C to quit")
    print()

    try:
        if args.duration is None:
            while thread.is_alive():
                thread.join(0.1)
        else:
            stop_event.wait(args.duration)
    except KeyboardInterrupt:
        pass
    finally:
        stop_event.set()
        thread.join()
        device.close()
        print("connection closed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())