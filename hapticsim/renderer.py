"""Receive tool state over UDP for display of the sphere scene."""

from __future__ import annotations

import argparse
import socket
import sys
import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from hapticsim.arrow import force_arrow

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9999
BUFFER_SIZE = 1024
# The arrow drawn on the tool shows the force multiplied by this factor.
ARROW_SCALE = 0.1


@dataclass
class ToolState:
    """Position of the tool and force acting on it."""

    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    force: np.ndarray = field(default_factory=lambda: np.zeros(3))


def parse_message(data) -> ToolState:
    """Decode six space-separated numbers into a tool state.

    Anything after the sixth number is ignored. Raises ``ValueError`` when
    fewer than six numbers can be read.
    """
    text = data.decode("ascii", errors="replace") if isinstance(data, (bytes, bytearray)) else str(data)
    fields = text.split()
    if len(fields) < 6:
        raise ValueError(f"Invalid message: {text}")
    try:
        values = [float(item) for item in fields[:6]]
    except ValueError as error:
        raise ValueError(f"Invalid message: {text}") from error
    return ToolState(position=np.array(values[:3]), force=np.array(values[3:]))


class UdpListener:
    """A non-blocking UDP socket that keeps the latest received tool state."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            self._socket.bind((host, port))
        except OSError:
            self._socket.close()
            raise
        self._socket.setblocking(False)
        self.address = self._socket.getsockname()
        self.state = ToolState()

    def poll(self) -> Optional[ToolState]:
        """Read one pending message; return the new state, or None if there was none."""
        try:
            data, _ = self._socket.recvfrom(BUFFER_SIZE - 1)
        except (BlockingIOError, InterruptedError):
            return None
        if not data:
            return None
        try:
            state = parse_message(data)
        except ValueError as error:
            print(error, file=sys.stderr)
            return None
        self.state = state
        return state

    def close(self) -> None:
        """Close the socket."""
        self._socket.close()

    def __enter__(self) -> "UdpListener":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def main(argv=None) -> int:
    """Listen for tool state and report each update."""
    parser = argparse.ArgumentParser(prog="hapticsim-renderer", description=__doc__)
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="seconds to run before stopping (default: until interrupted)",
    )
    args = parser.parse_args(argv)

    print("Display without a haptic device")
    try:
        listener = UdpListener(args.host, args.port)
    except OSError:
        print(f"error: cannot bind port {args.port}", file=sys.stderr)
        return 1

    deadline = None if args.duration is None else time.monotonic() + args.duration
    with listener:
        try:
            while deadline is None or time.monotonic() < deadline:
                state = listener.poll()
                if state is None:
                    time.sleep(0.01)
                    continue
                arrow = force_arrow(state.force, ARROW_SCALE)
                tip = "none" if arrow is None else " ".join(f"{v:.4f}" for v in arrow.end)
                position = " ".join(f"{v:.4f}" for v in state.position)
                print(f"tool {position} arrow tip {tip}")
        except KeyboardInterrupt:
            pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())