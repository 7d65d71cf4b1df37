"""
netlist/spice_parser.py

Parses SPICE netlist files (.net, .cir, .ckt) into Circuit objects, one per
.SUBCKT ... .ENDS block.

Line numbers attached to errors are the physical line where the offending
logical line starts; a device spread over continuation lines reports its
first line.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from models.circuit import Circuit
from models.device import TransistorDevice
from models.registry import DeviceRegistry

from .errors import (
    InvalidPropertyToken,
    MissingNodeTokens,
    NetlistParseError,
    NumericRangeError,
    UnknownDeviceIdentifier,
    UnterminatedSubcircuit,
)

logger = logging.getLogger(__name__)


@dataclass
class LogicalLine:
    """A netlist statement after comment stripping and continuation merging."""

    number: int  # 1-based physical line where the statement starts
    text: str


def split_logical_lines(text: str) -> list[LogicalLine]:
    """
    Split netlist text into logical lines.

    Blank lines and '*' comments are dropped, ';' starts an inline comment,
    and a line starting with '+' continues the previous statement.
    """
    lines: list[LogicalLine] = []

    for number, raw in enumerate(text.split("\n"), start=1):
        stripped = raw.strip()

        if ";" in stripped:
            stripped = stripped[: stripped.index(";")].strip()

        if not stripped or stripped.startswith("*"):
            continue

        if stripped.startswith("+"):
            continuation = stripped[1:].strip()
            if lines:
                if continuation:
                    lines[-1].text = f"{lines[-1].text} {continuation}"
                continue
            logger.warning("Line %d: continuation line with no statement to continue", number)
            stripped = continuation
            if not stripped:
                continue

        lines.append(LogicalLine(number, stripped))

    return lines


def _tokenize_spice_line(line: str) -> list[str]:
    """Tokenize a SPICE line, keeping parenthesized expressions as single tokens.

    E.g. 'EAMP 13 0 POLY(1) 26 0 500' -> ['EAMP', '13', '0', 'POLY(1)', '26', '0', '500']
    """
    tokens = []
    current = ""
    paren_depth = 0

    for ch in line:
        if ch == "(":
            paren_depth += 1
            current += ch
        elif ch == ")":
            paren_depth -= 1
            current += ch
        elif ch in (" ", "\t") and paren_depth <= 0:
            if current:
                tokens.append(current)
                current = ""
        else:
            current += ch

    if current:
        tokens.append(current)

    return tokens


def _collect_models(lines: list[LogicalLine]) -> dict[str, str]:
    """Return MODEL_NAME -> MODEL_TYPE for every .MODEL statement."""
    models = {}
    for line in lines:
        tokens = line.text.split()
        if tokens[0].upper() != ".MODEL" or len(tokens) < 3:
            continue
        # ".model QN NPN(BF=100)" -> NPN
        model_type = tokens[2].split("(", 1)[0].upper()
        models[tokens[1].upper()] = model_type
    return models


def _find_ends(lines: list[LogicalLine], start: int) -> Optional[int]:
    for idx in range(start, len(lines)):
        if lines[idx].text.split()[0].upper() == ".ENDS":
            return idx
    return None


def _parse_device_line(circuit: Circuit, line: LogicalLine, registry: DeviceRegistry, models: dict[str, str]) -> None:
    tokens = _tokenize_spice_line(line.text)
    head = tokens[0]

    # first letter of the component identifies it
    device = registry.create(head[0])
    if device is None:
        raise UnknownDeviceIdentifier(f"Unknown component type for {head!r}", line.number)

    device.name = head[1:]
    rest = tokens[1:]
    node_count = device.node_count()

    if len(rest) < node_count:
        raise MissingNodeTokens(
            f"Device {head!r} ({device.description}) needs {node_count} nodes but only {len(rest)} given",
            line.number,
        )

    for node in rest[:node_count]:
        node = node.lower()
        circuit.add_node(node)
        device.add_node(node)

    for index, token in enumerate(rest[node_count:]):
        try:
            device.parse_spice_property(index, token)
        except (InvalidPropertyToken, NumericRangeError) as e:
            raise InvalidPropertyToken(
                f"Error parsing argument {token!r} of {head!r}: {e.message}", line.number
            ) from e

    if isinstance(device, TransistorDevice) and device.model_name:
        model_type = models.get(device.model_name.upper())
        if model_type and not device.apply_model_type(model_type):
            logger.warning("Model %s has type %s, unexpected for %s %s", device.model_name, model_type,
                           device.description, head)

    circuit.add_device(device)
    logger.debug("Parsed %r on line %d", device, line.number)


def _parse_subcircuit(header: LogicalLine, body: list[LogicalLine], registry: DeviceRegistry,
                      models: dict[str, str]) -> Circuit:
    tokens = header.text.split()
    circuit = Circuit(name=tokens[1])

    for node in tokens[2:]:
        circuit.add_external_node(node.lower())

    for line in body:
        tokens = line.text.split()
        if len(tokens) <= 1:
            continue
        if tokens[0].upper() == ".MODEL":
            # collected up front by _collect_models
            continue
        _parse_device_line(circuit, line, registry, models)

    return circuit


def parse_netlist(text: str, registry: Optional[DeviceRegistry] = None) -> list[Circuit]:
    """Parse SPICE netlist text into one Circuit per .SUBCKT block.

    Args:
        text: The full text content of a netlist file.
        registry: Device prototypes to instantiate; defaults to every
            built-in device.

    Returns:
        The parsed subcircuits in file order (possibly empty). Devices
        outside any .SUBCKT block are ignored.

    Raises:
        NetlistParseError: On the first malformed statement. Nothing is
            returned for a netlist with any error.
    """
    if registry is None:
        registry = DeviceRegistry.with_default_devices()

    lines = split_logical_lines(text)
    models = _collect_models(lines)
    circuits = []

    for idx, line in enumerate(lines):
        tokens = line.text.split()
        if tokens[0].upper() != ".SUBCKT":
            continue

        if len(tokens) < 2:
            raise NetlistParseError(".SUBCKT statement without a subcircuit name", line.number)

        end_idx = _find_ends(lines, idx + 1)
        if end_idx is None:
            raise UnterminatedSubcircuit(
                f"Could not find the .ENDS statement for .SUBCKT {tokens[1]}", line.number
            )

        circuit = _parse_subcircuit(line, lines[idx + 1 : end_idx], registry, models)
        logger.debug("Parsed subcircuit %r", circuit)
        circuits.append(circuit)

    return circuits


def load_netlist(path: Union[str, Path], registry: Optional[DeviceRegistry] = None) -> list[Circuit]:
    """Read a netlist file and parse it.

    Raises:
        FileNotFoundError: If the file does not exist.
        NetlistParseError: If parsing fails.
    """
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_netlist(text, registry)
