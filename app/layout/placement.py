"""
layout/placement.py

Assigns integer grid positions to the devices of a Circuit and normalises
the result so the drawing starts at grid point (2, 2).
"""

import logging
from enum import Enum
from typing import Callable

from models.circuit import Circuit
from models.device import GROUND_NODE
from models.geometry import GridRect

logger = logging.getLogger(__name__)

# top-left corner of the normalised drawing, in grid units
PLACEMENT_MARGIN = (2, 2)


class PlacementStrategy(Enum):
    """Available placement algorithms."""

    LINEAR = "linear"
    HEURISTIC = "heuristic"
    SPRING = "spring"

    @classmethod
    def from_name(cls, name: str) -> "PlacementStrategy":
        """Look up a strategy by its (case-insensitive) name."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown placement strategy {name!r} (expected one of: {choices})") from None


def _place_linear(circuit: Circuit) -> None:
    """Lay every device out left to right on row 0, one free column between neighbours."""
    first = circuit.devices[0]
    first.position = (0, 0)
    cursor = first.local_bounding_extents()[1] + 1

    for device in circuit.devices[1:]:
        left, right, _, _ = device.local_bounding_extents()
        device.position = (cursor - left, 0)
        cursor += (right - left) + 1


def _place_heuristic(circuit: Circuit) -> None:
    """
    Stack everything on the origin, then pull the first device sharing a
    node with device 0 next to it so the shared pins sit on the same row.

    Only device 0's first non-ground node is considered.
    """
    for device in circuit.devices:
        device.position = (0, 0)

    anchor = circuit.devices[0]
    for anchor_pin, node in enumerate(anchor.nodes):
        if node == GROUND_NODE:
            continue

        for device in circuit.devices[1:]:
            pin = device.is_connected_to(node)
            if pin is None:
                continue

            anchor_right = anchor.local_bounding_extents()[1]
            left = device.local_bounding_extents()[0]
            anchor_offset = anchor.rotated_node_offset(anchor_pin)
            offset = device.rotated_node_offset(pin)
            device.position = (
                anchor.position[0] + anchor_right + 1 - left,
                anchor.position[1] + anchor_offset[1] - offset[1],
            )
            logger.debug("Placed %s beside %s on node %s", device.reference, anchor.reference, node)
            break
        break


def _place_spring(circuit: Circuit) -> None:
    raise NotImplementedError("Spring placement is not implemented")


_STRATEGIES: dict[PlacementStrategy, Callable[[Circuit], None]] = {
    PlacementStrategy.LINEAR: _place_linear,
    PlacementStrategy.HEURISTIC: _place_heuristic,
    PlacementStrategy.SPRING: _place_spring,
}


def normalize_positions(circuit: Circuit) -> tuple[int, int]:
    """Translate all devices so the topmost/leftmost extent lands on PLACEMENT_MARGIN.

    Returns:
        The (dx, dy) offset applied.
    """
    min_left = min(d.position[0] + d.local_bounding_extents()[0] for d in circuit.devices)
    min_top = min(d.position[1] + d.local_bounding_extents()[2] for d in circuit.devices)
    dx = PLACEMENT_MARGIN[0] - min_left
    dy = PLACEMENT_MARGIN[1] - min_top

    for device in circuit.devices:
        device.position = (device.position[0] + dx, device.position[1] + dy)
    return dx, dy


def place_devices(circuit: Circuit, strategy: PlacementStrategy = PlacementStrategy.LINEAR) -> GridRect:
    """
    Position every device of *circuit* and refresh its bounding box.

    Args:
        circuit: The circuit to lay out; device positions are overwritten.
        strategy: Placement algorithm to use.

    Returns:
        The circuit's updated bounding box (empty for a circuit without devices).

    Raises:
        NotImplementedError: For PlacementStrategy.SPRING.
    """
    if not circuit.devices:
        logger.debug("Circuit %r has no devices; nothing to place", circuit.name)
        return circuit.update_bounding_box()

    _STRATEGIES[strategy](circuit)
    normalize_positions(circuit)
    bbox = circuit.update_bounding_box()
    logger.debug("Placed %d devices of %r with %s: %s", len(circuit.devices), circuit.name, strategy.value, bbox)
    return bbox
