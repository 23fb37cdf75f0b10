"""Read a haptic tool, render the sphere contact force and stream it over UDP."""

from __future__ import annotations

import argparse
import socket
import threading
from typing import Sequence, Tuple

import numpy as np

from hapticsim.device import DeviceError, SimulatedDevice
from hapticsim.sphere import LINEAR_STIFFNESS, SPHERE_POSITION, SPHERE_RADIUS, TOOL_RADIUS

DEFAULT_ADDRESS = ("127.0.0.1", 9999)
DEFAULT_PERIOD = 0.05
# The streamed force is the contact force divided by this factor.
FORCE_DIVISOR = 10.0

_MIN_DISTANCE = 1e-6


def _as_vector(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected 3 components, got {vector.size}")
    return vector


def format_message(position, force) -> str:
    """Encode a tool position and force as six space-separated numbers."""
    values = (*_as_vector(position), *_as_vector(force))
    return " ".join(f"{value:.4f}" for value in values)


def processor_force(tool_position) -> np.ndarray:
    """Return the damped spring force pushing the tool out of the fixed sphere."""
    offset = _as_vector(tool_position) - SPHERE_POSITION
    distance = float(np.linalg.norm(offset))
    penetration = distance - SPHERE_RADIUS - TOOL_RADIUS
    if penetration < 0.0 and distance > _MIN_DISTANCE:
        force = -penetration * LINEAR_STIFFNESS * (offset / distance)
        return force / FORCE_DIVISOR
    return np.zeros(3)


class HapticProcessor:
    """Drives one device and sends its tool state to a UDP address."""

    def __init__(self, device, address: Tuple[str, int] = DEFAULT_ADDRESS):
        self.device = device
        self.address = address
        self.tool_position = np.zeros(3)
        self.force = np.zeros(3)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def close(self) -> None:
        """Close the UDP socket."""
        self._socket.close()

    def __enter__(self) -> "HapticProcessor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def step(self) -> str:
        """Read the tool, apply the force and send one message; return the message."""
        try:
            position = _as_vector(self.device.get_position())
        except DeviceError:
            position = np.zeros(3)
        force = processor_force(position)
        self.tool_position = position
        self.force = force
        self.device.set_force(force)
        message = format_message(position, force)
        self._socket.sendto(message.encode("ascii"), self.address)
        return message

    def run(self, stop_event: threading.Event, period: float = DEFAULT_PERIOD) -> None:
        """Send a message every ``period`` seconds until ``stop_event`` is set."""
        while not stop_event.is_set():
            self.step()
            if period > 0:
                stop_event.wait(period)


def main(argv=None) -> int:
    """Stream the tool state of a simulated device over UDP."""
    parser = argparse.ArgumentParser(prog="hapticsim-processor", description=__doc__)
    parser.add_argument("--host", default=DEFAULT_ADDRESS[0], help="destination host")
    parser.add_argument("--port", type=int, default=DEFAULT_ADDRESS[1], help="destination port")
    parser.add_argument(
        "--period", type=float, default=DEFAULT_PERIOD, help="seconds between messages"
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to run before stopping (default: until interrupted)",
    )
    args = parser.parse_args(argv)

    print("Sending haptic tool data over UDP...")
    device = SimulatedDevice()
    device.open()
    device.enable_force(True)

    stop_event = threading.Event()
    with HapticProcessor(device, (args.host, args.port)) as processor:
        thread = threading.Thread(
            target=processor.run, args=(stop_event, args.period), daemon=True
        )
        thread.start()
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
    return 0


if __name__ == "__main__":
    raise SystemExit(main())