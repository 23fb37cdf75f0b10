import threading

import numpy as np
import pytest

from hapticsim.device import SimulatedDevice
from hapticsim.sphere import (
    ARROW_SCALE,
    LINEAR_STIFFNESS,
    SPHERE_RADIUS,
    TOOL_RADIUS,
    SafetyGate,
    SphereSimulation,
    main,
    sphere_contact_force,
)


class ScriptedDevice:
    """A device that reports positions from a list."""

    def __init__(self, positions, stop_event=None):
        self.positions = [np.asarray(p, dtype=float) for p in positions]
        self.calls = 0
        self.applied = []
        self.force_enabled = False
        self.stop_event = stop_event

    def enable_force(self, enabled):
        self.force_enabled = enabled

    def get_position(self):
        position = self.positions[min(self.calls, len(self.positions) - 1)]
        self.calls += 1
        if self.stop_event is not None and self.calls >= len(self.positions):
            self.stop_event.set()
        return position

    def set_force(self, force):
        self.applied.append(np.asarray(force, dtype=float))


def test_force_zero_outside_sphere():
    force = sphere_contact_force([0.1, 0.0, 0.0])
    assert np.array_equal(force, np.zeros(3))


def test_force_zero_at_contact_boundary():
    force = sphere_contact_force([SPHERE_RADIUS + TOOL_RADIUS + 1e-9, 0.0, 0.0])
    assert np.array_equal(force, np.zeros(3))


def test_force_zero_at_centre():
    assert np.array_equal(sphere_contact_force([0.0, 0.0, 0.0]), np.zeros(3))


def test_force_inside_along_x():
    force = sphere_contact_force([0.02, 0.0, 0.0])
    assert force == pytest.approx([15.0, 0.0, 0.0])


def test_force_points_away_from_centre():
    position = np.array([0.01, -0.01, 0.005])
    force = sphere_contact_force(position)
    direction = position / np.linalg.norm(position)
    assert np.linalg.norm(force) > 0
    assert force / np.linalg.norm(force) == pytest.approx(direction)


def test_force_scales_with_stiffness():
    position = [0.0, 0.02, 0.0]
    single = sphere_contact_force(position, stiffness=LINEAR_STIFFNESS)
    double = sphere_contact_force(position, stiffness=2 * LINEAR_STIFFNESS)
    assert double == pytest.approx(2 * single)


def test_force_relative_to_sphere_position():
    centre = np.array([1.0, 2.0, 3.0])
    shifted = sphere_contact_force(centre + [0.02, 0.0, 0.0], sphere_position=centre)
    assert shifted == pytest.approx(sphere_contact_force([0.02, 0.0, 0.0]))


def test_force_rejects_wrong_shape():
    with pytest.raises(ValueError):
        sphere_contact_force([0.0, 0.0])


def test_gate_blocks_until_free_space():
    gate = SafetyGate()
    assert np.array_equal(gate.filter([1.0, 2.0, 3.0]), np.zeros(3))
    assert gate.safe is False
    assert np.array_equal(gate.filter([0.0, 0.0, 0.0]), np.zeros(3))
    assert gate.safe is True
    assert np.array_equal(gate.filter([1.0, 2.0, 3.0]), np.array([1.0, 2.0, 3.0]))


def test_gate_stays_open():
    gate = SafetyGate(safe=True)
    assert np.array_equal(gate.filter([4.0, 0.0, 0.0]), np.array([4.0, 0.0, 0.0]))
    assert gate.safe is True


def test_step_gates_initial_contact():
    inside = [0.02, 0.0, 0.0]
    device = ScriptedDevice([inside, [0.1, 0.0, 0.0], inside])
    simulation = SphereSimulation(device)

    rendered = simulation.step()
    assert np.array_equal(rendered, np.zeros(3))
    assert np.linalg.norm(simulation.force) > 0
    assert simulation.tool_position == pytest.approx(inside)

    simulation.step()
    assert np.array_equal(device.applied[-1], np.zeros(3))

    rendered = simulation.step()
    assert rendered == pytest.approx(sphere_contact_force(inside))
    assert device.applied[-1] == pytest.approx(simulation.force)


def test_arrow_follows_force():
    device = ScriptedDevice([[0.0, 0.02, 0.0]])
    simulation = SphereSimulation(device)
    assert simulation.arrow() is None
    simulation.step()
    arrow = simulation.arrow()
    assert arrow.end == pytest.approx(simulation.force * ARROW_SCALE)
    assert arrow.direction == pytest.approx([0.0, 1.0, 0.0])


def test_run_until_stopped():
    stop_event = threading.Event()
    device = ScriptedDevice([[0.1, 0.0, 0.0]] * 3, stop_event=stop_event)
    simulation = SphereSimulation(device)
    simulation.run(stop_event)
    assert simulation.finished is True
    assert device.force_enabled is True
    assert device.calls == 3
    assert len(device.applied) == 3


def test_run_stops_on_device_error():
    device = SimulatedDevice(pointer=lambda: None)
    simulation = SphereSimulation(device)
    simulation.run(threading.Event())
    assert simulation.finished is True
    assert device.force_enabled is True


def test_main_runs_for_duration(capsys):
    assert main(["--duration", "0.05"]) == 0
    output = capsys.readouterr().out
    assert "3.17.6" in output
    assert "SystemName device detected" in output
    assert output.rstrip().endswith("connection closed")