"""
Shared test fixtures for the netlist viewer test suite.

All fixtures build pure-Python model objects (no GUI dependencies).
"""

import sys
from pathlib import Path

# Ensure app/ is on sys.path so bare imports (models, netlist, layout, controllers)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import pytest
from models.circuit import Circuit
from models.device import BJT, Resistor
from models.registry import DeviceRegistry

# Two subcircuits: a two-transistor amplifier and a unity-gain buffer.
AMPLIFIER_NETLIST = """\
* amplifier test netlist
.model QN NPN(BF=100)
.model QP PNP
.SUBCKT amp in out vcc
R1 vcc b 10k
R2 b 0 2.2k
Q1 c b e QN
Q2 out c vcc QP 2
RC vcc c 4.7k ; collector load
RE e 0 1k
C1 in b 1u IC=0
.ENDS amp

.subckt buf a y
E1 y 0 a 0 1
.ends buf
"""


def make_device(device_class, name, nodes, position=(0, 0), rotation=0):
    """Helper to create a device with its nodes already attached."""
    device = device_class(name=name, position=position, rotation=rotation)
    for node in nodes:
        device.add_node(node)
    return device


def make_circuit(*devices, name="test"):
    """Helper to build a Circuit from ready-made devices."""
    circuit = Circuit(name=name)
    for device in devices:
        for node in device.nodes:
            circuit.add_node(node)
        circuit.add_device(device)
    return circuit


@pytest.fixture
def registry():
    return DeviceRegistry.with_default_devices()


@pytest.fixture
def amplifier_text():
    return AMPLIFIER_NETLIST


@pytest.fixture
def amplifier_file(tmp_path):
    """Write the amplifier netlist to a temporary .cir file."""
    path = tmp_path / "amp.cir"
    path.write_text(AMPLIFIER_NETLIST, encoding="utf-8")
    return path


@pytest.fixture
def divider_circuit():
    """
    in -- R1 -- mid -- R2 -- GND

    Two resistors sharing node "mid".
    """
    return make_circuit(
        make_device(Resistor, "1", ["in", "mid"]),
        make_device(Resistor, "2", ["mid", "0"]),
        name="divider",
    )


@pytest.fixture
def mixed_circuit():
    """A resistor, a BJT and another resistor, all unplaced."""
    return make_circuit(
        make_device(Resistor, "1", ["vcc", "c"]),
        make_device(BJT, "1", ["c", "b", "e"]),
        make_device(Resistor, "2", ["e", "0"]),
        name="mixed",
    )


@pytest.fixture
def events():
    """Fixture that returns a list and a callback that appends events to it."""
    recorded = []

    def callback(event, data):
        recorded.append((event, data))

    return recorded, callback
