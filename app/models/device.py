"""
Device - Pure Python data model for netlist devices.

This module contains no GUI dependencies. Every device keeps its SPICE
nodes, its grid position (the position of node 0) and its rotation.
Node offsets and bounding extents are given for the default (unrotated,
vertical) orientation with node 0 as the topmost reference node; rotated
values are derived with integer permutations only.

Device kinds:
    Passive: Resistor, Capacitor, Inductor, Diode
    Transistor: MOSFET, BJT, JFET
    Independent source: CurrentSource, VoltageSource
    Dependent source: VCVS, VCCS
    ExternalPin: a subcircuit port
"""

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from netlist.errors import InvalidPropertyToken, NumericFormatError
from netlist.values import format_value, parse_value, try_parse_value

from .geometry import Extents, GridPoint, GridRect, rotate_extents, rotate_point

# SPICE conventional name for ground
GROUND_NODE = "0"


@dataclass
class Device:
    """
    Base class for every device kind.

    Subclasses declare their SPICE letter, a human readable description,
    the unrotated node offsets and the unrotated (left, right, top, bottom)
    extents, and implement parse_spice_property().
    """

    spice_id: ClassVar[str] = ""
    description: ClassVar[str] = ""
    unit: ClassVar[str] = ""
    NODE_OFFSETS: ClassVar[tuple[GridPoint, ...]] = ()
    EXTENTS: ClassVar[Extents] = (0, 0, 0, 0)

    name: str = ""
    nodes: list[str] = field(default_factory=list)
    position: GridPoint = (0, 0)
    rotation: int = 0  # degrees clockwise: 0, 90, 180, 270

    # --- Node management ---

    def node_count(self) -> int:
        """Return the number of pins of this device."""
        return len(self.NODE_OFFSETS)

    @property
    def is_complete(self) -> bool:
        return len(self.nodes) == self.node_count()

    def add_node(self, node: str) -> None:
        """Connect the next pin of this device to *node*."""
        if len(self.nodes) >= self.node_count():
            raise ValueError(
                f"{self.description} {self.reference} already has {self.node_count()} nodes; cannot add {node!r}"
            )
        self.nodes.append(node)

    def is_connected_to(self, node: str) -> Optional[int]:
        """Return the index of the first pin attached to *node*, or None."""
        try:
            return self.nodes.index(node)
        except ValueError:
            return None

    # --- Geometry ---

    def relative_node_offset(self, index: int) -> GridPoint:
        """
        Return the grid offset of pin *index* relative to node 0.

        The offset is given in the default orientation; the device rotation
        is not applied here.
        """
        if not 0 <= index < self.node_count():
            raise IndexError(f"{self.description} has no node #{index}")
        return self.NODE_OFFSETS[index]

    def rotated_node_offset(self, index: int) -> GridPoint:
        """Return the pin offset with the device rotation applied."""
        return rotate_point(self.relative_node_offset(index), self.rotation)

    def grid_node_position(self, index: int) -> GridPoint:
        """Return the absolute grid position of pin *index*."""
        dx, dy = self.rotated_node_offset(index)
        return (self.position[0] + dx, self.position[1] + dy)

    def local_bounding_extents(self) -> Extents:
        """Return (left, right, top, bottom) relative to node 0 for the current rotation."""
        return rotate_extents(self.EXTENTS, self.rotation)

    def grid_bounding_box(self) -> GridRect:
        """Return the device bounding box in absolute grid coordinates."""
        left, right, top, bottom = self.local_bounding_extents()
        x, y = self.position
        return GridRect.from_edges(x + left, y + top, x + right, y + bottom)

    def rotate_clockwise(self) -> None:
        self.rotation = (self.rotation + 90) % 360

    def rotate_counterclockwise(self) -> None:
        self.rotation = (self.rotation - 90) % 360

    # --- SPICE parsing ---

    def parse_spice_property(self, index: int, token: str) -> None:
        """
        Parse *token*, the index-th token after the node list of a SPICE line.

        Raises:
            InvalidPropertyToken: If this device does not accept the token.
        """
        raise InvalidPropertyToken(f"Invalid value for {self.description}: {token!r}")

    # --- Misc ---

    @property
    def reference(self) -> str:
        """The SPICE reference designator, e.g. "R1"."""
        return f"{self.spice_id}{self.name}"

    def clone(self) -> "Device":
        """Return a fully independent copy of this device."""
        return copy.deepcopy(self)

    def label(self) -> str:
        """Return the formatted value shown next to the device symbol."""
        return ""

    def _properties(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        """Serialize the device to a JSON-ready dictionary."""
        data = {
            "type": type(self).__name__,
            "id": self.reference,
            "nodes": list(self.nodes),
            "pos": {"x": self.position[0], "y": self.position[1]},
            "rotation": self.rotation,
            "label": self.label(),
        }
        data.update(self._properties())
        return data

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.reference!r}, nodes={self.nodes}, "
            f"pos={self.position}, rot={self.rotation})"
        )


# ----------------------------------------------------------------------------
# passive devices
# ----------------------------------------------------------------------------


@dataclass(repr=False)
class PassiveDevice(Device):
    """Resistors, capacitors, inductors and diodes.

    SPICE line: ``L|C|R|D{name} {+node} {-node} [model] {value} [IC={initial}]``
    """

    NODE_OFFSETS = ((0, 0), (0, 1))
    EXTENTS = (0, 0, 0, 1)

    value: float = 0.0
    initial_condition: float = 0.0
    model_name: str = ""

    def parse_spice_property(self, index: int, token: str) -> None:
        number = try_parse_value(token)
        if number is not None:
            self.value = number
            return

        if token.upper().startswith("IC="):
            try:
                self.initial_condition = parse_value(token[3:])
            except NumericFormatError:
                raise InvalidPropertyToken(
                    f"Invalid initial condition for {self.description}: {token[3:]!r}"
                ) from None
            return

        # only the first token after the nodes may name a model
        if index == 0:
            self.model_name = token
            return

        raise InvalidPropertyToken(f"Invalid value for {self.description}: {token!r}")

    def label(self) -> str:
        if self.model_name and not self.value:
            return self.model_name
        return format_value(self.value, unit=self.unit)

    def _properties(self) -> dict:
        return {"value": self.value, "ic": self.initial_condition, "model": self.model_name}


class Resistor(PassiveDevice):
    spice_id = "R"
    description = "RESISTOR"
    unit = "Ω"


class Capacitor(PassiveDevice):
    spice_id = "C"
    description = "CAPACITOR"
    unit = "F"


class Inductor(PassiveDevice):
    spice_id = "L"
    description = "INDUCTOR"
    unit = "H"


class Diode(PassiveDevice):
    spice_id = "D"
    description = "DIODE"


# ----------------------------------------------------------------------------
# transistors
# ----------------------------------------------------------------------------


@dataclass(repr=False)
class TransistorDevice(Device):
    """MOSFETs, BJTs and JFETs.

    Node 0 is drain/collector, node 1 gate/base, node 2 source/emitter.

    SPICE lines::

        J{name} {d} {g} {s} {model} [{area}]
        M{name} {d} {g} {s} {sub} {model} [L={value}] [W={value}]
        Q{name} {c} {b} {e} [{subs}] {model} [{area}]
    """

    NODE_OFFSETS = ((0, 0), (-1, 1), (0, 2))
    EXTENTS = (-1, 0, 0, 2)

    # .MODEL type -> True for n-channel / NPN
    CHANNEL_TYPES: ClassVar[dict[str, bool]] = {}

    model_name: str = ""
    n_channel: bool = True
    area: Optional[float] = None
    parameters: dict[str, str] = field(default_factory=dict)

    def parse_spice_property(self, index: int, token: str) -> None:
        if "=" in token:
            key, _, value = token.partition("=")
            self.parameters[key.upper()] = value
            return

        number = try_parse_value(token)
        if number is not None and self.model_name:
            self.area = number
            return

        # substrate nodes come before the model name; the last one wins
        self.model_name = token

    def apply_model_type(self, model_type: str) -> bool:
        """Set the channel polarity from a .MODEL type. Returns True if recognised."""
        polarity = self.CHANNEL_TYPES.get(model_type.upper())
        if polarity is None:
            return False
        self.n_channel = polarity
        return True

    def label(self) -> str:
        return self.model_name

    def _properties(self) -> dict:
        data = {"model": self.model_name, "n_channel": self.n_channel}
        if self.area is not None:
            data["area"] = self.area
        if self.parameters:
            data["params"] = dict(self.parameters)
        return data


class MOSFET(TransistorDevice):
    spice_id = "M"
    description = "MOSFET"
    CHANNEL_TYPES = {"NMOS": True, "PMOS": False}


class BJT(TransistorDevice):
    spice_id = "Q"
    description = "BJT"
    CHANNEL_TYPES = {"NPN": True, "PNP": False}


class JFET(TransistorDevice):
    spice_id = "J"
    description = "JFET"
    CHANNEL_TYPES = {"NJF": True, "PJF": False}


# ----------------------------------------------------------------------------
# sources
# ----------------------------------------------------------------------------


@dataclass(repr=False)
class SourceDevice(Device):
    """Two-pin source; node 0 is plus (or the current output)."""

    NODE_OFFSETS = ((0, 0), (0, 1))
    EXTENTS = (0, 0, 0, 1)


@dataclass(repr=False)
class IndependentSource(SourceDevice):
    """SPICE line: ``I|V{name} {+node} {-node} [{value} | DC={value}]``"""

    value: float = 0.0

    def parse_spice_property(self, index: int, token: str) -> None:
        number = try_parse_value(token)
        if number is not None:
            self.value = number
            return

        if token.upper().startswith("DC="):
            try:
                self.value = parse_value(token[3:])
            except NumericFormatError:
                raise InvalidPropertyToken(f"Invalid DC value for {self.description}: {token[3:]!r}") from None
            return

        raise InvalidPropertyToken(f"Invalid value for {self.description}: {token!r}")

    def label(self) -> str:
        return format_value(self.value, unit=self.unit)

    def _properties(self) -> dict:
        return {"value": self.value}


class CurrentSource(IndependentSource):
    spice_id = "I"
    description = "CURRENT SOURCE"
    unit = "A"


class VoltageSource(IndependentSource):
    spice_id = "V"
    description = "VOLTAGE SOURCE"
    unit = "V"


@dataclass(repr=False)
class DependentSource(SourceDevice):
    """
    Voltage-controlled sources.

    SPICE lines::

        E|G{name} {+node} {-node} {+cntrl} {-cntrl} {gain}
        E|G{name} {+node} {-node} VALUE {expression}

    A VALUE-defined source keeps the text following the keyword and ignores
    every later token.
    """

    control_nodes: list[str] = field(default_factory=list)
    gain: float = 0.0
    expression: Optional[str] = None

    def parse_spice_property(self, index: int, token: str) -> None:
        if self.expression is not None:
            return

        if token.upper().startswith("VALUE"):
            self.expression = token[5:]
            return

        if index in (0, 1) and len(self.control_nodes) == index:
            self.control_nodes.append(token.lower())
            return

        if index == 2 and len(self.control_nodes) == 2:
            try:
                self.gain = parse_value(token)
            except NumericFormatError:
                raise InvalidPropertyToken(f"Invalid gain for {self.description}: {token!r}") from None
            return

        raise InvalidPropertyToken(f"Invalid value for {self.description}: {token!r}")

    @property
    def is_expression_defined(self) -> bool:
        return self.expression is not None

    def label(self) -> str:
        if self.expression is not None:
            return f"VALUE{self.expression}"
        return format_value(self.gain)

    def _properties(self) -> dict:
        data = {"control_nodes": list(self.control_nodes), "gain": self.gain}
        if self.expression is not None:
            data["expression"] = self.expression
        return data


class VCVS(DependentSource):
    spice_id = "E"
    description = "VOLTAGE-CONTROLLED VOLTAGE SOURCE"


class VCCS(DependentSource):
    spice_id = "G"
    description = "VOLTAGE-CONTROLLED CURRENT SOURCE"


# ----------------------------------------------------------------------------
# subcircuit ports
# ----------------------------------------------------------------------------


@dataclass(repr=False)
class ExternalPin(Device):
    """A node of a subcircuit exposed to the outside world."""

    description = "EXTERNAL PIN"
    NODE_OFFSETS = ((0, 0),)
    EXTENTS = (0, 0, 0, 0)

    def label(self) -> str:
        return self.nodes[0] if self.nodes else self.name


# Devices selectable by their first letter in a SPICE line
SPICE_DEVICE_CLASSES = [
    Capacitor,
    Resistor,
    Inductor,
    Diode,
    CurrentSource,
    VoltageSource,
    MOSFET,
    BJT,
    JFET,
    VCCS,
    VCVS,
]
