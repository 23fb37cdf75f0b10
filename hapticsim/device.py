"""A simulated haptic device driven by a pointer and a keyboard."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Sequence, Set, Tuple

import numpy as np

SDK_VERSION = "3.17.6"
SYSTEM_NAME = "SystemName"
COM_FREQUENCY = 1000.0

# Depth change applied per position query while W or S is held.
DEPTH_INCREMENT = 0.0000003

_POSITION_SCALE = 2.9
_CURSOR_DIVISOR = 10000.0
_VERTICAL_OFFSET = 0.053
_HORIZONTAL_OFFSET = -0.095

PointerSource = Callable[[], Optional[Tuple[float, float]]]
KeySource = Callable[[str], bool]


class DeviceError(Exception):
    """Raised when the simulated device cannot complete a request."""


def cursor_to_position(cursor_x, cursor_y, depth):
    """Map screen cursor coordinates and a keyboard depth to a tool position."""
    vertical = _POSITION_SCALE * (-float(cursor_y) / _CURSOR_DIVISOR + _VERTICAL_OFFSET)
    horizontal = _POSITION_SCALE * (float(cursor_x) / _CURSOR_DIVISOR + _HORIZONTAL_OFFSET)
    return np.array([float(depth), horizontal, vertical])


def _origin_pointer() -> Tuple[float, float]:
    return (0.0, 0.0)


def _as_vector(values: Sequence[float]) -> np.ndarray:
    vector = np.asarray(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"expected 3 components, got {vector.size}")
    return vector


class SimulatedDevice:
    """A stand-in for a 3-DOF haptic device.

    ``pointer`` returns the current cursor position as ``(x, y)``, or ``None``
    (or raises ``OSError``) when it cannot be read. ``keys`` tells whether a
    key, given by its upper-case letter, is currently held down. When no key
    source is given, no key is ever held.

    ``pressed_buttons`` holds the indices of buttons currently held down;
    it starts empty.
    """

    def __init__(self, pointer: Optional[PointerSource] = None, keys: Optional[KeySource] = None):
        self._pointer = pointer or _origin_pointer
        self._keys = keys or frozenset().__contains__
        self._lock = threading.Lock()
        self._depth = 0.0
        self._start: Optional[float] = None
        self.is_open = False
        self.force_enabled = False
        self.force = np.zeros(3)
        self.gripper_force = 0.0
        self.pressed_buttons: Set[int] = set()

    def open(self) -> None:
        """Open the connection to the device."""
        self.is_open = True

    def close(self) -> None:
        """Close the connection to the device."""
        self.is_open = False

    def __enter__(self) -> "SimulatedDevice":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def enable_force(self, enabled: bool) -> None:
        """Turn force rendering on or off."""
        self.force_enabled = bool(enabled)

    def get_position(self) -> np.ndarray:
        """Return the tool position, updating the depth from the W/S keys."""
        with self._lock:
            if self._keys("W"):
                self._depth += DEPTH_INCREMENT
            if self._keys("S"):
                self._depth -= DEPTH_INCREMENT
            depth = self._depth
        try:
            cursor = self._pointer()
        except OSError as error:
            raise DeviceError("Cannot get cursor position.") from error
        if cursor is None:
            raise DeviceError("Cannot get cursor position.")
        cursor_x, cursor_y = cursor
        return cursor_to_position(cursor_x, cursor_y, depth)

    def set_force(self, force: Sequence[float]) -> None:
        """Apply a force to the tool."""
        self.force = _as_vector(force)

    def set_force_and_gripper_force(self, force: Sequence[float], gripper: float) -> None:
        """Apply a force to the tool and a force to the gripper."""
        self.force = _as_vector(force)
        self.gripper_force = float(gripper)

    def get_orientation_frame(self) -> np.ndarray:
        """Return the device orientation; always the identity for this device."""
        return np.eye(3)

    def get_time(self) -> float:
        """Return seconds elapsed since the first call."""
        now = time.monotonic()
        with self._lock:
            if self._start is None:
                self._start = now
            return now - self._start

    def get_button(self, index: int) -> bool:
        """Return whether the button with the given index is held down."""
        return int(index) in self.pressed_buttons

    def com_frequency(self) -> float:
        return COM_FREQUENCY

    def is_left_handed(self) -> bool:
        return True

    def has_active_gripper(self) -> bool:
        return False

    def system_name(self) -> str:
        return SYSTEM_NAME

    def sdk_version(self) -> str:
        return SDK_VERSION