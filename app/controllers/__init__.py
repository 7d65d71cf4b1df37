"""
Controllers for the netlist viewer.

This package contains Qt-free controller classes that orchestrate
operations between models and views using an observer pattern.
"""

from .circuit_controller import CircuitController
from .settings import SettingsManager, ViewerSettings

__all__ = [
    "CircuitController",
    "SettingsManager",
    "ViewerSettings",
]
