"""
Circuit - Central data store for one SPICE subcircuit.

This module contains no GUI dependencies. It holds the node set, the
devices in declaration order and the grid bounding box, and derives the
node connectivity graph used as input by layout strategies.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .device import GROUND_NODE, Device, ExternalPin
from .geometry import GridPoint, GridRect


@dataclass
class ConnectivityGraph:
    """
    Undirected graph over the non-ground nodes of a circuit.

    Vertices are numbered in sorted node-name order. Every device connects
    all of its non-ground nodes pairwise.
    """

    nodes: list[str] = field(default_factory=list)
    adjacency: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=bool))

    @property
    def vertex_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(np.triu(self.adjacency, k=1)))

    def index_of(self, node: str) -> int:
        return self.nodes.index(node)

    def has_edge(self, node_a: str, node_b: str) -> bool:
        if node_a not in self.nodes or node_b not in self.nodes:
            return False
        return bool(self.adjacency[self.index_of(node_a), self.index_of(node_b)])

    def neighbors(self, node: str) -> list[str]:
        row = self.adjacency[self.index_of(node)]
        return [self.nodes[i] for i in np.flatnonzero(row)]

    def edges(self) -> list[tuple[str, str]]:
        """Return each edge once as (lower ordinal, higher ordinal) node names."""
        rows, cols = np.nonzero(np.triu(self.adjacency, k=1))
        return [(self.nodes[i], self.nodes[j]) for i, j in zip(rows.tolist(), cols.tolist())]


@dataclass
class Circuit:
    """
    A named subcircuit: its nodes, its devices and their grid bounding box.

    The bounding box is only refreshed by update_bounding_box(); it is
    stale after any device moves until that call.
    """

    name: str = ""
    nodes: set[str] = field(default_factory=set)
    devices: list[Device] = field(default_factory=list)
    bounding_box: GridRect = field(default_factory=GridRect)

    # --- Node & device management ---

    def add_node(self, node: str) -> None:
        """Add a node (no-op if it already exists)."""
        self.nodes.add(node)

    def add_device(self, device: Device) -> None:
        """Append a device; the circuit takes ownership of it."""
        self.devices.append(device)

    def add_external_node(self, node: str) -> ExternalPin:
        """Add a subcircuit port: the node plus a one-pin device bound to it."""
        self.add_node(node)
        pin = ExternalPin(name=node)
        pin.add_node(node)
        self.add_device(pin)
        return pin

    def external_nodes(self) -> list[str]:
        """Return the subcircuit ports in declaration order."""
        return [dev.nodes[0] for dev in self.devices if isinstance(dev, ExternalPin)]

    def devices_connected_to(self, node: str) -> list[tuple[int, int]]:
        """Return (device index, pin index) for every pin attached to *node*."""
        connections = []
        for dev_idx, device in enumerate(self.devices):
            for pin_idx, dev_node in enumerate(device.nodes):
                if dev_node == node:
                    connections.append((dev_idx, pin_idx))
        return connections

    def connected_node_positions(self, node: str) -> list[GridPoint]:
        """Return the grid positions of all pins attached to *node* (airwire endpoints)."""
        return [self.devices[dev_idx].grid_node_position(pin_idx) for dev_idx, pin_idx in self.devices_connected_to(node)]

    # --- Graph ---

    def build_connectivity_graph(self) -> ConnectivityGraph:
        """Build the node graph; ground is left out."""
        vertices = sorted(node for node in self.nodes if node != GROUND_NODE)
        ordinal = {node: i for i, node in enumerate(vertices)}
        adjacency = np.zeros((len(vertices), len(vertices)), dtype=bool)

        for device in self.devices:
            indexes = sorted({ordinal[node] for node in device.nodes if node in ordinal})
            for i in indexes:
                for j in indexes:
                    if i != j:
                        adjacency[i, j] = True

        return ConnectivityGraph(nodes=vertices, adjacency=adjacency)

    # --- Geometry ---

    def move_device(self, index: int, position: GridPoint) -> None:
        """Set the grid position of a device. The bounding box is not refreshed."""
        self.devices[index].position = (int(position[0]), int(position[1]))

    def update_bounding_box(self) -> GridRect:
        """Recompute the bounding box as the union of all device boxes."""
        if not self.devices:
            self.bounding_box = GridRect()
            return self.bounding_box

        boxes = [device.grid_bounding_box() for device in self.devices]
        self.bounding_box = GridRect.from_edges(
            min(box.x for box in boxes),
            min(box.y for box in boxes),
            max(box.right for box in boxes),
            max(box.bottom for box in boxes),
        )
        return self.bounding_box

    def hit_test(self, point: tuple[float, float], grid_spacing: int = 1, tolerance: int = 0) -> Optional[int]:
        """
        Return the index of the first device whose pixel box contains *point*.

        Args:
            point: Pixel coordinates of the query point.
            grid_spacing: Pixels per grid unit.
            tolerance: Pixels added on every side of each device box.

        Returns:
            The lowest matching device index, or None.
        """
        for index, device in enumerate(self.devices):
            box = device.grid_bounding_box().scaled(grid_spacing).inflated(tolerance)
            if box.contains(point):
                return index
        return None

    # --- Misc ---

    def copy(self) -> "Circuit":
        """Return a deep copy; every device is cloned."""
        bb = self.bounding_box
        return Circuit(
            name=self.name,
            nodes=set(self.nodes),
            devices=[device.clone() for device in self.devices],
            bounding_box=GridRect(bb.x, bb.y, bb.width, bb.height),
        )

    def to_dict(self) -> dict:
        """Serialize the circuit to a JSON-ready dictionary."""
        return {
            "name": self.name,
            "nodes": sorted(self.nodes),
            "devices": [device.to_dict() for device in self.devices],
            "bounding_box": self.bounding_box.to_dict(),
        }

    def __repr__(self) -> str:
        return f"Circuit({self.name!r}, nodes={len(self.nodes)}, devices={len(self.devices)})"
