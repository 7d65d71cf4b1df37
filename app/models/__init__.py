"""
Pure Python data models for the netlist viewer.

This package contains GUI-free data classes for devices, circuits and
grid geometry.
"""

from .circuit import Circuit, ConnectivityGraph
from .device import (
    BJT,
    GROUND_NODE,
    JFET,
    MOSFET,
    VCCS,
    VCVS,
    Capacitor,
    CurrentSource,
    DependentSource,
    Device,
    Diode,
    ExternalPin,
    IndependentSource,
    Inductor,
    PassiveDevice,
    Resistor,
    TransistorDevice,
    VoltageSource,
)
from .geometry import GridRect
from .registry import DeviceRegistry

__all__ = [
    "Circuit",
    "ConnectivityGraph",
    "Device",
    "DeviceRegistry",
    "GridRect",
    "GROUND_NODE",
    "PassiveDevice",
    "Resistor",
    "Capacitor",
    "Inductor",
    "Diode",
    "TransistorDevice",
    "MOSFET",
    "BJT",
    "JFET",
    "IndependentSource",
    "CurrentSource",
    "VoltageSource",
    "DependentSource",
    "VCVS",
    "VCCS",
    "ExternalPin",
]
