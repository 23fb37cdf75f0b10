"""A tool sphere in contact with a fixed sphere, rendered as a spring force."""

from __future__ import annotations

import argparse
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from hapticsim.arrow import ForceArrow, force_arrow
from hapticsim.device import DeviceError, SimulatedDevice

SPHERE_POSITION = np.zeros(3)
SPHERE_RADIUS = 0.03
TOOL_RADIUS = 0.005
LINEAR_STIFFNESS = 1000.0
# The arrow drawn on the tool shows the force divided by this factor.
ARROW_SCALE = 0.01


def _as_vector(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected 3 components, got {vector.size}")
    return vector


def sphere_contact_force(
    tool_position,
    sphere_position=SPHERE_POSITION,
    sphere_radius=SPHERE_RADIUS,
    tool_radius=TOOL_RADIUS,
    stiffness=LINEAR_STIFFNESS,
) -> np.ndarray:
    """Return the spring force pushing a tool sphere out of a fixed sphere."""
    offset = _as_vector(tool_position) - _as_vector(sphere_position)
    distance = float(np.linalg.norm(offset))
    penetration = distance - sphere_radius - tool_radius
    if penetration >= 0.0 or distance == 0.0:
        return np.zeros(3)
    return -penetration * stiffness * (offset / distance)


@dataclass
class SafetyGate:
    """Holds forces at zero until the tool has once been in free space."""

    safe: bool = False

    def filter(self, force) -> np.ndarray:
        """Return the force to render, or zero while the gate is still closed."""
        vector = _as_vector(force)
        if not self.safe:
            if np.linalg.norm(vector) == 0.0:
                self.safe = True
            else:
                return np.zeros(3)
        return vector.copy()


class SphereSimulation:
    """The haptic loop of the sphere scene, driving one device."""

    def __init__(self, device):
        self.device = device
        self.gate = SafetyGate()
        self.tool_position = np.zeros(3)
        self.force = np.zeros(3)
        self.finished = False
        self._lock = threading.Lock()

    def step(self) -> np.ndarray:
        """Read the tool, compute the contact force and send it to the device.

        Returns the force actually rendered on the device.
        """
        position = _as_vector(self.device.get_position())
        force = sphere_contact_force(position)
        with self._lock:
            self.tool_position = position
            self.force = force
        rendered = self.gate.filter(force)
        self.device.set_force(rendered)
        return rendered

    def snapshot(self) -> tuple:
        """Return copies of the current tool position and force."""
        with self._lock:
            return self.tool_position.copy(), self.force.copy()

    def arrow(self) -> Optional[ForceArrow]:
        """Return the arrow that shows the current force, if any."""
        _, force = self.snapshot()
        return force_arrow(force, ARROW_SCALE)

    def run(self, stop_event: threading.Event) -> None:
        """Run the haptic loop until ``stop_event`` is set or the device fails."""
        self.finished = False
        self.device.enable_force(True)
        try:
            while not stop_event.is_set():
                try:
                    self.step()
                except DeviceError:
                    break
        finally:
            self.finished = True


def main(argv=None) -> int:
    """Run the sphere scene on a simulated device."""
    parser = argparse.ArgumentParser(prog="hapticsim-sphere", description=__doc__)
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to run before stopping (default: until interrupted)",
    )
    args = parser.parse_args(argv)

    device = SimulatedDevice()
    print(f"Sphere Example {device.sdk_version()}")
    print()

    device.open()
    simulation = SphereSimulation(device)
    stop_event = threading.Event()
    thread = threading.Thread(target=simulation.run, args=(stop_event,), daemon=True)
    thread.start()

    print(f"{device.system_name()} device detected")
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