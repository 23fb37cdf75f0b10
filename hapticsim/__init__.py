"""Haptic sphere and torus contact simulations, a simulated force-feedback device and a UDP tool-state link."""

__version__ = "0.1.0"