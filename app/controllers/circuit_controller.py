"""
CircuitController - Orchestrates loading, placing and editing a circuit.

This module contains no Qt dependencies. It owns the Circuit being viewed
and notifies views of changes through an observer pattern.
"""

import logging
import math
from pathlib import Path
from typing import Any, Callable, Optional, Union

from layout.placement import PlacementStrategy, place_devices
from models.circuit import Circuit
from models.device import Device
from models.geometry import GridPoint, GridRect
from netlist.errors import NetlistParseError
from netlist.spice_parser import load_netlist, parse_netlist

from .settings import ViewerSettings

logger = logging.getLogger(__name__)


class CircuitController:
    """
    Controller for the circuit shown by a schematic view.

    Views register callbacks to stay in sync.

    Observer events:
        circuit_loaded (Circuit) - A netlist was loaded and a subcircuit selected
        devices_placed (GridRect) - All devices were (re)placed
        device_moved (Device) - A device was moved
        device_rotated (Device) - A device was rotated
        bounding_box_updated (GridRect) - The circuit bounding box changed
    """

    def __init__(self, circuit: Optional[Circuit] = None, settings: Optional[ViewerSettings] = None):
        self.circuit = circuit or Circuit()
        self.settings = settings or ViewerSettings()
        self.circuits: list[Circuit] = [self.circuit] if circuit is not None else []
        self._observers: list[Callable[[str, Any], None]] = []

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for circuit change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        """Notify all observers of a circuit change."""
        for observer in self._observers:
            try:
                observer(event, data)
            except (TypeError, AttributeError, RuntimeError) as e:
                logger.error("Error notifying observer: %s", e)

    # --- Loading ---

    def load_netlist(self, path: Union[str, Path], subcircuit: Optional[str] = None) -> Circuit:
        """
        Load a netlist file and select one of its subcircuits.

        Raises:
            FileNotFoundError: If the file does not exist.
            NetlistParseError: If the netlist is malformed.
            ValueError: If the requested subcircuit is not in the file.
        """
        try:
            circuits = load_netlist(path)
        except NetlistParseError as e:
            logger.error("Failed to parse %s: %s", path, e)
            raise
        return self._select(circuits, subcircuit, str(path))

    def load_text(self, text: str, subcircuit: Optional[str] = None) -> Circuit:
        """Same as load_netlist() for netlist text already in memory."""
        try:
            circuits = parse_netlist(text)
        except NetlistParseError as e:
            logger.error("Failed to parse netlist: %s", e)
            raise
        return self._select(circuits, subcircuit, "<text>")

    def _select(self, circuits: list[Circuit], name: Optional[str], source: str) -> Circuit:
        if not circuits:
            raise ValueError(f"No .SUBCKT definition found in {source}")

        if name is None:
            if len(circuits) > 1:
                logger.warning(
                    "%s defines %d subcircuits; showing %s", source, len(circuits), circuits[0].name
                )
            selected = circuits[0]
        else:
            matches = [c for c in circuits if c.name.lower() == name.lower()]
            if not matches:
                available = ", ".join(c.name for c in circuits)
                raise ValueError(f"Subcircuit {name!r} not found in {source} (available: {available})")
            selected = matches[0]

        self.circuits = circuits
        self.circuit = selected
        self._notify("circuit_loaded", selected)
        return selected

    # --- Layout ---

    def place(self, strategy: Optional[PlacementStrategy] = None) -> GridRect:
        """Place all devices with *strategy* (default from the settings)."""
        if strategy is None:
            strategy = self.settings.placement_strategy
        bbox = place_devices(self.circuit, strategy)
        self._notify("devices_placed", bbox)
        return bbox

    def update_bounding_box(self) -> GridRect:
        bbox = self.circuit.update_bounding_box()
        self._notify("bounding_box_updated", bbox)
        return bbox

    # --- Device operations ---

    def _device(self, index: int) -> Optional[Device]:
        if 0 <= index < len(self.circuit.devices):
            return self.circuit.devices[index]
        return None

    def move_device(self, index: int, position: GridPoint) -> None:
        """Move a device to a grid position and refresh the bounding box."""
        device = self._device(index)
        if device is None:
            return
        self.circuit.move_device(index, position)
        self._notify("device_moved", device)
        self.update_bounding_box()

    def drag_device(self, index: int, pixel_point: tuple[float, float],
                    pixel_offset: tuple[float, float] = (0.0, 0.0)) -> bool:
        """
        Follow a mouse drag of a device.

        *pixel_offset* is where the device was grabbed relative to its
        node 0. The device snaps to the nearest grid point once the pointer
        is more than half a grid unit away from its current position.

        Returns:
            True if the device moved.
        """
        device = self._device(index)
        if device is None:
            return False

        spacing = self.settings.grid_spacing
        gx = (pixel_point[0] - pixel_offset[0]) / spacing
        gy = (pixel_point[1] - pixel_offset[1]) / spacing
        if abs(gx - device.position[0]) <= 0.5 and abs(gy - device.position[1]) <= 0.5:
            return False

        self.move_device(index, (math.floor(gx + 0.5), math.floor(gy + 0.5)))
        return True

    def rotate_device(self, index: int, clockwise: bool = True) -> None:
        """Rotate a device 90 degrees."""
        device = self._device(index)
        if device is None:
            return
        if clockwise:
            device.rotate_clockwise()
        else:
            device.rotate_counterclockwise()
        self._notify("device_rotated", device)
        self.update_bounding_box()

    def device_at(self, pixel_point: tuple[float, float]) -> Optional[int]:
        """Return the index of the device under *pixel_point*, or None."""
        return self.circuit.hit_test(
            pixel_point, self.settings.grid_spacing, self.settings.effective_hit_tolerance
        )
