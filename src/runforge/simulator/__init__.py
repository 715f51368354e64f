"""Desktop pygame host for RUNFORGE."""

from runforge.simulator.window import SimulatorWindow, WindowConfig

__all__ = ["SimulatorWindow", "WindowConfig"]
