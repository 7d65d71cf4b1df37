"""
Command-line interface for the netlist viewer.

Parse SPICE netlists, place their devices on the schematic grid and print
the result without a GUI.

Usage::

    python -m cli show amp.cir
    python -m cli show amp.cir --subckt opamp --strategy heuristic --json
    python -m cli list amp.cir
    python -m cli graph amp.cir
    python -m cli value 2.3nF 1MEG 99.9pFaraD
    cat amp.cir | python -m cli show -
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from controllers.circuit_controller import CircuitController
from controllers.settings import SettingsManager
from layout.placement import PlacementStrategy
from models.circuit import Circuit
from netlist.errors import NetlistParseError, NumericFormatError
from netlist.values import format_value, parse_value

__version__ = "0.3.0"


def try_load_circuit(controller: CircuitController, source: str,
                     subcircuit: Optional[str] = None) -> tuple[Optional[Circuit], str]:
    """Load a netlist into *controller* without exiting.

    Args:
        controller: Controller receiving the circuit.
        source: Path to the netlist file, or "-" for stdin.
        subcircuit: Name of the subcircuit to select (default: the first).

    Returns:
        (circuit, "") on success, or (None, error_message) on failure.
    """
    try:
        if source == "-":
            return controller.load_text(sys.stdin.read(), subcircuit), ""
        return controller.load_netlist(source, subcircuit), ""
    except FileNotFoundError:
        return None, f"file not found: {source}"
    except OSError as e:
        return None, f"cannot read {source}: {e}"
    except NetlistParseError as e:
        return None, f"invalid netlist {source}: {e}"
    except ValueError as e:
        return None, str(e)


def _make_controller(args: argparse.Namespace) -> CircuitController:
    return CircuitController(settings=getattr(args, "settings", None))


def _load_or_report(args: argparse.Namespace) -> Optional[CircuitController]:
    controller = _make_controller(args)
    circuit, error = try_load_circuit(controller, args.netlist, getattr(args, "subckt", None))
    if circuit is None:
        print(f"Error: {error}", file=sys.stderr)
        return None
    return controller


def _format_device(device) -> str:
    x, y = device.position
    nodes = ",".join(device.nodes)
    label = device.label()
    return f"  {device.reference:<8} {device.description:<34} ({x:>3},{y:>3}) rot={device.rotation:<3} [{nodes}] {label}".rstrip()


def cmd_show(args: argparse.Namespace) -> int:
    """Place a subcircuit and print its devices."""
    controller = _load_or_report(args)
    if controller is None:
        return 1

    strategy = PlacementStrategy.from_name(args.strategy) if args.strategy else None
    try:
        bbox = controller.place(strategy)
    except NotImplementedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    circuit = controller.circuit
    if args.json:
        print(json.dumps(circuit.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print(f"Subcircuit {circuit.name}: {len(circuit.devices)} devices, {len(circuit.nodes)} nodes")
    for device in circuit.devices:
        print(_format_device(device))
    print(f"Bounding box: x={bbox.x} y={bbox.y} width={bbox.width} height={bbox.height}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List the subcircuits defined in a netlist."""
    controller = _load_or_report(args)
    if controller is None:
        return 1

    for circuit in controller.circuits:
        ports = " ".join(circuit.external_nodes())
        print(f"{circuit.name}: {len(circuit.devices)} devices, ports: {ports}")
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    """Print the node connectivity graph of a subcircuit."""
    controller = _load_or_report(args)
    if controller is None:
        return 1

    graph = controller.circuit.build_connectivity_graph()
    print(f"Nodes ({graph.vertex_count}): {' '.join(graph.nodes)}")
    print(f"Edges ({graph.edge_count}):")
    for node_a, node_b in graph.edges():
        print(f"  {node_a} -- {node_b}")
    return 0


def cmd_value(args: argparse.Namespace) -> int:
    """Parse engineering-notation literals and print them back."""
    code = 0
    for literal in args.literals:
        try:
            value = parse_value(literal)
        except NumericFormatError as e:
            print(f"Error: {e}", file=sys.stderr)
            code = 1
            continue
        print(f"{literal}\t{value!r}\t{format_value(value, digits=args.digits)}")
    return code


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="netlist-viewer",
        description="Parse SPICE netlists and lay out their subcircuits on a schematic grid.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", help="Settings file (default: ~/.netlist-viewer/settings.json)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    strategies = [s.value for s in PlacementStrategy]

    # show
    show_parser = subparsers.add_parser("show", help="Place a subcircuit and print its devices")
    show_parser.add_argument("netlist", help="Path to SPICE netlist file (.cir, .net, .ckt), or - for stdin")
    show_parser.add_argument("--subckt", "-s", help="Subcircuit to show (default: the first one)")
    show_parser.add_argument("--strategy", choices=strategies, help="Placement strategy (default: from settings)")
    show_parser.add_argument("--json", action="store_true", help="Print the placed circuit as JSON")

    # list
    list_parser = subparsers.add_parser("list", help="List the subcircuits of a netlist")
    list_parser.add_argument("netlist", help="Path to SPICE netlist file, or - for stdin")

    # graph
    graph_parser = subparsers.add_parser("graph", help="Print the node connectivity graph")
    graph_parser.add_argument("netlist", help="Path to SPICE netlist file, or - for stdin")
    graph_parser.add_argument("--subckt", "-s", help="Subcircuit to use (default: the first one)")

    # value
    value_parser = subparsers.add_parser("value", help="Parse engineering-notation values")
    value_parser.add_argument("literals", nargs="+", help="Values such as 2.3nF or 1MEG")
    value_parser.add_argument("--digits", type=int, default=3, help="Significant digits to print (default: 3)")

    return parser


def main(argv=None) -> int:
    """CLI entry point. Returns exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    manager = SettingsManager(Path(args.config) if args.config else None)
    args.settings = manager.settings

    level = logging.DEBUG if args.verbose else getattr(logging, args.settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "show": cmd_show,
        "list": cmd_list,
        "graph": cmd_graph,
        "value": cmd_value,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
