# hapticsim

Small haptic contact simulations driven by a simulated force-feedback device.

A tool (a small sphere) is moved by a pointing device and touches virtual
objects. When the tool penetrates an object, a spring force proportional to the
penetration depth pushes it back out. Forces are only sent to the device once
the tool has been seen in free space, so a simulation never starts with a jolt.

## Modules

- `hapticsim.device`: `SimulatedDevice`, a stand-in for a 3-DOF force-feedback
  device. It takes a `pointer` callable that returns the cursor as `(x, y)`
  (or `None`, or raises `OSError`, when it cannot be read) and a `keys`
  callable that tells whether an upper-case key is held. Holding `W` or `S`
  moves the tool in depth a little on every position query;
  `cursor_to_position` holds the cursor-to-position mapping. Without a
  pointer the cursor stays at `(0, 0)`; without a key source no key is ever
  held. The device works as a context manager (`open`/`close`), records the
  last force sent with `set_force` or `set_force_and_gripper_force`, reports
  buttons listed in `pressed_buttons`, always has an identity orientation
  frame, and raises `DeviceError` when the position cannot be read.
- `hapticsim.sphere`: `sphere_contact_force` and `SphereSimulation`, a tool
  touching a fixed sphere. `SafetyGate` holds forces at zero until the tool has
  first been in free space.
- `hapticsim.torus`: `torus_contact`, `torus_mesh`, `axis_angle_matrix` and
  `TorusSimulation`, a torus that the tool can push into rotation. Damping slows
  the rotation over time, and holding button 0 stops it.
- `hapticsim.arrow`: `force_arrow` and `ForceArrow`, the geometry of an arrow
  (line plus cone tip) showing the force acting on the tool.
- `hapticsim.processor`: `HapticProcessor`, which reads the device, computes
  the contact force against the sphere (scaled down by ten), applies it and
  sends tool position and force as a UDP datagram; `format_message` and
  `processor_force` are the building blocks.
- `hapticsim.renderer`: `UdpListener` and `parse_message`, which receive those
  datagrams on a non-blocking socket and turn them into `ToolState` values.

## Installing

```
pip install .
```

For the tests:

```
pip install .[test]
pytest
```

## Commands

```
hapticsim-sphere [--duration SECONDS]
hapticsim-torus [--duration SECONDS]
hapticsim-processor [--host HOST] [--port PORT] [--period SECONDS] [--duration SECONDS]
hapticsim-renderer [--host HOST] [--port PORT] [--duration SECONDS]
```

Each command runs until interrupted with Ctrl+C, or for `--duration` seconds.

The processor sends to `127.0.0.1:9999` every 0.05 seconds by default; the
renderer listens on `0.0.0.0:9999` and prints each received tool position and
the tip of its force arrow. Each message is plain text: six numbers separated
by spaces, the tool position `x y z` followed by the force `fx fy fz`, each
written with four decimal places.

## Using the library

```python
import numpy as np
from hapticsim.sphere import sphere_contact_force

force = sphere_contact_force(
    np.array([0.03, 0.0, 0.0]),  # tool position
    np.zeros(3),                 # sphere centre
    0.03,                        # sphere radius
    0.005,                       # tool radius
    1000.0,                      # stiffness
)
```

A tool outside the sphere gets a zero force; a tool inside it is pushed out
along the line from the sphere centre.

## What it does not do

- There is no graphical display. The scenes are computed but not drawn in a
  window; `force_arrow` and `torus_mesh` give the geometry a drawing layer would
  need, and `hapticsim-renderer` prints the received state as text.
- There is no driver for physical haptic hardware; only `SimulatedDevice`.
- The commands do not read the real screen cursor or keyboard: they use a
  `SimulatedDevice` whose pointer stays at `(0, 0)` and with no keys held. To
  move the tool, give `SimulatedDevice` your own `pointer` and `keys` callables
  and drive the simulation classes from your code.