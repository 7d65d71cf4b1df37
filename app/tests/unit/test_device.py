"""Tests for the device hierarchy: nodes, geometry, rotation and SPICE properties."""

import pytest
from models.device import (
    BJT,
    JFET,
    MOSFET,
    SPICE_DEVICE_CLASSES,
    VCCS,
    VCVS,
    Capacitor,
    CurrentSource,
    Diode,
    ExternalPin,
    Inductor,
    Resistor,
    VoltageSource,
)
from netlist.errors import InvalidPropertyToken
from tests.conftest import make_device


class TestNodes:
    @pytest.mark.parametrize(
        "device_class, count",
        [(Resistor, 2), (Capacitor, 2), (Inductor, 2), (Diode, 2), (CurrentSource, 2),
         (VoltageSource, 2), (VCVS, 2), (VCCS, 2), (MOSFET, 3), (BJT, 3), (JFET, 3), (ExternalPin, 1)],
    )
    def test_node_count(self, device_class, count):
        assert device_class().node_count() == count

    def test_add_node_until_complete(self):
        r = Resistor(name="1")
        assert not r.is_complete
        r.add_node("a")
        r.add_node("b")
        assert r.is_complete
        assert r.nodes == ["a", "b"]

    def test_add_node_when_full_raises(self):
        r = make_device(Resistor, "1", ["a", "b"])
        with pytest.raises(ValueError):
            r.add_node("c")
        assert r.nodes == ["a", "b"]

    def test_is_connected_to(self):
        q = make_device(BJT, "1", ["c", "b", "e"])
        assert q.is_connected_to("b") == 1
        assert q.is_connected_to("e") == 2
        assert q.is_connected_to("x") is None

    def test_is_connected_to_returns_first_pin(self):
        r = make_device(Resistor, "1", ["a", "a"])
        assert r.is_connected_to("a") == 0


class TestGeometry:
    def test_passive_offsets(self):
        r = Resistor()
        assert r.relative_node_offset(0) == (0, 0)
        assert r.relative_node_offset(1) == (0, 1)

    def test_transistor_offsets(self):
        m = MOSFET()
        assert [m.relative_node_offset(i) for i in range(3)] == [(0, 0), (-1, 1), (0, 2)]

    def test_pin_offset(self):
        assert ExternalPin().relative_node_offset(0) == (0, 0)

    def test_offset_out_of_range(self):
        with pytest.raises(IndexError):
            Resistor().relative_node_offset(2)

    def test_relative_offset_ignores_rotation(self):
        q = BJT(rotation=90)
        assert q.relative_node_offset(1) == (-1, 1)

    @pytest.mark.parametrize(
        "rotation, offsets",
        [
            (0, [(0, 0), (-1, 1), (0, 2)]),
            (90, [(0, 0), (-1, -1), (-2, 0)]),
            (180, [(0, 0), (1, -1), (0, -2)]),
            (270, [(0, 0), (1, 1), (2, 0)]),
        ],
    )
    def test_rotated_transistor_offsets(self, rotation, offsets):
        q = BJT(rotation=rotation)
        assert [q.rotated_node_offset(i) for i in range(3)] == offsets

    @pytest.mark.parametrize(
        "rotation, extents",
        [(0, (-1, 0, 0, 2)), (90, (-2, 0, -1, 0)), (180, (0, 1, -2, 0)), (270, (0, 2, 0, 1))],
    )
    def test_transistor_extents(self, rotation, extents):
        assert JFET(rotation=rotation).local_bounding_extents() == extents

    @pytest.mark.parametrize(
        "rotation, extents",
        [(0, (0, 0, 0, 1)), (90, (-1, 0, 0, 0)), (180, (0, 0, -1, 0)), (270, (0, 1, 0, 0))],
    )
    def test_passive_extents(self, rotation, extents):
        assert Capacitor(rotation=rotation).local_bounding_extents() == extents

    @pytest.mark.parametrize("device_class", [Resistor, BJT, VoltageSource, ExternalPin])
    @pytest.mark.parametrize("rotation", [0, 90, 180, 270])
    def test_pins_inside_extents(self, device_class, rotation):
        device = device_class(rotation=rotation)
        left, right, top, bottom = device.local_bounding_extents()
        for i in range(device.node_count()):
            x, y = device.rotated_node_offset(i)
            assert left <= x <= right
            assert top <= y <= bottom

    def test_grid_node_position(self):
        q = BJT(position=(5, 3), rotation=90)
        assert q.grid_node_position(2) == (3, 3)

    def test_grid_bounding_box(self):
        q = BJT(position=(5, 3))
        box = q.grid_bounding_box()
        assert (box.x, box.y, box.width, box.height) == (4, 3, 1, 2)


class TestRotation:
    def test_clockwise_cycle(self):
        r = Resistor()
        seen = []
        for _ in range(4):
            r.rotate_clockwise()
            seen.append(r.rotation)
        assert seen == [90, 180, 270, 0]

    def test_counterclockwise_cycle(self):
        r = Resistor()
        seen = []
        for _ in range(4):
            r.rotate_counterclockwise()
            seen.append(r.rotation)
        assert seen == [270, 180, 90, 0]


class TestPassiveProperties:
    def test_value(self):
        r = Resistor()
        r.parse_spice_property(0, "4.7k")
        assert r.value == pytest.approx(4700.0)

    def test_model_at_first_position(self):
        d = Diode()
        d.parse_spice_property(0, "D1N4148")
        assert d.model_name == "D1N4148"

    def test_model_then_value(self):
        r = Resistor()
        r.parse_spice_property(0, "RMOD")
        r.parse_spice_property(1, "10k")
        assert r.model_name == "RMOD"
        assert r.value == pytest.approx(10e3)

    def test_initial_condition(self):
        c = Capacitor()
        c.parse_spice_property(0, "1u")
        c.parse_spice_property(1, "ic=2.5")
        assert c.initial_condition == pytest.approx(2.5)

    def test_bad_initial_condition(self):
        with pytest.raises(InvalidPropertyToken):
            Capacitor().parse_spice_property(1, "IC=2.5x")

    def test_word_after_first_position_rejected(self):
        with pytest.raises(InvalidPropertyToken):
            Inductor().parse_spice_property(1, "foo")

    def test_label(self):
        r = Resistor(value=4700.0)
        assert r.label() == "4.70 kΩ"


class TestTransistorProperties:
    def test_mosfet_line(self):
        m = MOSFET()
        for i, token in enumerate(["sub", "NMOD", "L=1u", "w=2u"]):
            m.parse_spice_property(i, token)
        assert m.model_name == "NMOD"
        assert m.parameters == {"L": "1u", "W": "2u"}
        assert m.area is None

    def test_bjt_area(self):
        q = BJT()
        q.parse_spice_property(0, "QN")
        q.parse_spice_property(1, "2")
        assert q.model_name == "QN"
        assert q.area == pytest.approx(2.0)

    def test_defaults_to_n_channel(self):
        assert JFET().n_channel is True

    @pytest.mark.parametrize(
        "device_class, model_type, n_channel",
        [(BJT, "PNP", False), (BJT, "npn", True), (MOSFET, "PMOS", False), (JFET, "PJF", False)],
    )
    def test_apply_model_type(self, device_class, model_type, n_channel):
        device = device_class()
        assert device.apply_model_type(model_type)
        assert device.n_channel is n_channel

    def test_apply_foreign_model_type(self):
        q = BJT()
        assert not q.apply_model_type("PMOS")
        assert q.n_channel is True


class TestSourceProperties:
    def test_value(self):
        v = VoltageSource()
        v.parse_spice_property(0, "5")
        assert v.value == 5.0

    def test_dc_assignment(self):
        i = CurrentSource()
        i.parse_spice_property(0, "DC=3m")
        assert i.value == pytest.approx(3e-3)

    @pytest.mark.parametrize("token", ["DC", "AC", "DC=x", "SIN(0 1 1k)"])
    def test_rejected_tokens(self, token):
        with pytest.raises(InvalidPropertyToken):
            VoltageSource().parse_spice_property(0, token)

    def test_controlled_gain(self):
        e = VCVS()
        for i, token in enumerate(["A", "b", "10"]):
            e.parse_spice_property(i, token)
        assert e.control_nodes == ["a", "b"]
        assert e.gain == pytest.approx(10.0)
        assert not e.is_expression_defined

    def test_value_expression_discards_rest(self):
        g = VCCS()
        g.parse_spice_property(0, "VALUE={V(a)*2}")
        g.parse_spice_property(1, "junk")
        g.parse_spice_property(2, "more")
        assert g.is_expression_defined
        assert g.expression == "={V(a)*2}"
        assert g.control_nodes == []

    def test_bad_gain(self):
        e = VCVS()
        e.parse_spice_property(0, "a")
        e.parse_spice_property(1, "b")
        with pytest.raises(InvalidPropertyToken):
            e.parse_spice_property(2, "big")

    def test_too_many_tokens(self):
        e = VCVS()
        for i, token in enumerate(["a", "b", "1"]):
            e.parse_spice_property(i, token)
        with pytest.raises(InvalidPropertyToken):
            e.parse_spice_property(3, "2")

    def test_external_pin_accepts_nothing(self):
        with pytest.raises(InvalidPropertyToken):
            ExternalPin().parse_spice_property(0, "1")


class TestMisc:
    def test_clone_is_independent(self):
        m = make_device(MOSFET, "1", ["d", "g", "s"])
        m.parameters["L"] = "1u"
        clone = m.clone()
        clone.parameters["L"] = "2u"
        clone.nodes[0] = "x"
        assert m.parameters["L"] == "1u"
        assert m.nodes[0] == "d"

    def test_descriptions_are_upper_case(self):
        for device_class in SPICE_DEVICE_CLASSES:
            assert device_class.description == device_class.description.upper()

    def test_reference(self):
        assert Resistor(name="load").reference == "Rload"

    @pytest.mark.parametrize("device_class", [*SPICE_DEVICE_CLASSES, ExternalPin])
    def test_repr_is_compact(self, device_class):
        device = make_device(device_class, "7", [], position=(3, 4), rotation=180)
        assert repr(device) == f"{device_class.__name__}(id={device.reference!r}, nodes=[], pos=(3, 4), rot=180)"

    def test_to_dict(self):
        r = make_device(Resistor, "1", ["a", "b"], position=(3, 4), rotation=90)
        r.value = 1000.0
        data = r.to_dict()
        assert data["type"] == "Resistor"
        assert data["id"] == "R1"
        assert data["nodes"] == ["a", "b"]
        assert data["pos"] == {"x": 3, "y": 4}
        assert data["rotation"] == 90
        assert data["value"] == 1000.0
