"""Tests for the component registry and the system document."""

import math
import threading

import pytest

from system_model import (
    Branch, Bus, BusType, Component, DuplicateNameError, Generator, InvalidReferenceError,
    Line, NotFoundError, ParameterRangeError, ReferentialIntegrityError, StaticInjection,
    SystemDocument, Transformer2W, TypeMismatchError,
)


class TestUniqueness:

    def test_second_add_with_same_name_fails(self, two_bus_system):
        size = len(two_bus_system)
        with pytest.raises(DuplicateNameError, match="bus1"):
            two_bus_system.add_component(Bus(name="bus1", number=9))
        assert len(two_bus_system) == size

    def test_names_are_unique_across_kinds(self, two_bus_system):
        size = len(two_bus_system)
        with pytest.raises(DuplicateNameError, match="line12"):
            two_bus_system.add_component(Bus(name="line12", number=3))
        assert len(two_bus_system) == size

    def test_bus_numbers_are_unique(self, two_bus_system):
        with pytest.raises(DuplicateNameError) as exc_info:
            two_bus_system.add_component(Bus(name="bus3", number=2))
        assert exc_info.value.field == "number"
        assert "bus3" not in two_bus_system

    @pytest.mark.parametrize("first, second", [(1, 2), (2, 1)])
    def test_either_order_fails_the_second_call(self, first, second):
        system = SystemDocument()
        system.add_component(Bus(name="x", number=first))
        with pytest.raises(DuplicateNameError, match="x"):
            system.add_component(Bus(name="x", number=second))
        assert len(system) == 1
        assert system.get_component(Bus, "x").number == first


class TestReferences:

    def test_dangling_branch_endpoint_is_rejected(self, two_bus_system):
        with pytest.raises(InvalidReferenceError, match="nowhere") as exc_info:
            two_bus_system.add_component(Line(name="line13", from_bus="bus1", to_bus="nowhere"))
        assert exc_info.value.field == "to_bus"
        assert "line13" not in two_bus_system

    def test_reference_to_wrong_kind_is_rejected(self, two_bus_system):
        with pytest.raises(InvalidReferenceError, match="expected a Bus"):
            two_bus_system.add_component(Generator(name="gen-bad", bus="line12"))

    def test_branch_endpoints_must_differ(self, two_bus_system):
        with pytest.raises(InvalidReferenceError, match="same bus"):
            two_bus_system.add_component(Line(name="loop", from_bus="bus1", to_bus="bus1"))

    def test_remove_referenced_bus_fails_and_keeps_contents(self, two_bus_system):
        before = two_bus_system.registry.names()
        with pytest.raises(ReferentialIntegrityError) as exc_info:
            two_bus_system.remove_component("bus1")
        assert exc_info.value.referrers == ["InfBus", "line12"]
        assert two_bus_system.registry.names() == before

    def test_remove_unreferenced_component(self, two_bus_system):
        two_bus_system.remove_component("line12")
        assert "line12" not in two_bus_system
        assert two_bus_system.registry.referrers("bus1") == ["InfBus"]

    def test_remove_missing_component(self, two_bus_system):
        with pytest.raises(NotFoundError, match="ghost"):
            two_bus_system.remove_component("ghost")


class TestParameters:

    def test_non_finite_value_is_rejected(self, two_bus_system):
        with pytest.raises(ParameterRangeError) as exc_info:
            two_bus_system.add_component(Line(name="line-nan", from_bus="bus1", to_bus="bus2", r=math.nan))
        assert exc_info.value.field == "r"
        assert exc_info.value.component == "line-nan"

    def test_base_voltage_must_be_positive(self):
        system = SystemDocument()
        with pytest.raises(ParameterRangeError, match="base_voltage"):
            system.add_component(Bus(name="b", number=1, base_voltage=0.0))

    def test_limits_must_be_ordered(self, two_bus_system):
        with pytest.raises(ParameterRangeError) as exc_info:
            two_bus_system.add_component(Generator(
                name="gen-bad", bus="bus2", active_power_min=1.0, active_power_max=0.5,
            ))
        assert exc_info.value.field == "active_power_min"

    def test_tap_must_be_positive(self, two_bus_system):
        with pytest.raises(ParameterRangeError, match="tap"):
            two_bus_system.add_component(Transformer2W(name="t", from_bus="bus1", to_bus="bus2", tap=0.0))

    def test_bool_is_not_a_number(self, two_bus_system):
        with pytest.raises(ParameterRangeError) as exc_info:
            two_bus_system.add_component(Line(name="line-bool", from_bus="bus1", to_bus="bus2", x=True))
        assert exc_info.value.field == "x"

    def test_bus_type_accepts_string_values(self):
        assert Bus(name="b", number=1, bus_type="PV").bus_type is BusType.PV

    def test_unknown_bus_type(self):
        with pytest.raises(ParameterRangeError, match="bus_type"):
            Bus(name="b", number=1, bus_type="SLACK")

    def test_empty_name_is_rejected(self):
        with pytest.raises(ParameterRangeError, match="name"):
            Bus(name="  ", number=1)

    def test_document_scalars_must_be_positive(self):
        with pytest.raises(ParameterRangeError, match="base_power"):
            SystemDocument(base_power=0.0)
        with pytest.raises(ParameterRangeError, match="base_frequency"):
            SystemDocument(base_frequency=math.inf)


class TestLookup:

    def test_get_returns_component_of_requested_type(self, two_bus_system):
        gen = two_bus_system.get_component(Generator, "gen-2-1")
        assert gen.active_power == 0.5
        assert two_bus_system.get_component(StaticInjection, "gen-2-1") is gen

    def test_get_with_wrong_type_is_not_found(self, two_bus_system):
        with pytest.raises(NotFoundError, match="gen-2-1"):
            two_bus_system.get_component(Branch, "gen-2-1")

    def test_get_missing(self, two_bus_system):
        with pytest.raises(NotFoundError):
            two_bus_system.get_component(Bus, "bus99")


class TestIterate:

    def test_insertion_order(self, two_bus_system):
        assert two_bus_system.get_components(Bus).names() == ["bus1", "bus2"]
        assert [c.name for c in two_bus_system.get_components()] == [
            "bus1", "bus2", "line12", "InfBus", "gen-2-1", "load2",
        ]

    def test_predicate_filters(self, two_bus_system):
        view = two_bus_system.get_components(Bus, lambda b: b.bus_type is BusType.REF)
        assert view.names() == ["bus1"]

    def test_view_is_a_snapshot(self, two_bus_system):
        view = two_bus_system.get_components(Bus)
        two_bus_system.add_component(Bus(name="bus3", number=3))
        assert view.names() == ["bus1", "bus2"]
        assert two_bus_system.get_components(Bus).names() == ["bus1", "bus2", "bus3"]

    def test_view_is_restartable(self, two_bus_system):
        view = two_bus_system.get_components(StaticInjection)
        first = list(view)
        second = list(view)
        assert first == second
        assert len(view) == 3

    def test_traversal_survives_removal_during_iteration(self, two_bus_system):
        seen = []
        for component in two_bus_system.get_components(StaticInjection):
            seen.append(component.name)
            two_bus_system.remove_component(component.name)
        assert seen == ["InfBus", "gen-2-1", "load2"]
        assert len(two_bus_system.get_components(StaticInjection)) == 0


class TestReplace:

    def test_replace_keeps_position(self, two_bus_system):
        old = two_bus_system.get_component(Generator, "gen-2-1")
        two_bus_system.replace_component(Generator(name="gen-2-1", bus="bus2", active_power=0.8,
                                                   active_power_max=1.0))
        assert two_bus_system.get_component(Generator, "gen-2-1").active_power == 0.8
        assert two_bus_system.registry.names().index("gen-2-1") == 4
        assert old.active_power == 0.5

    def test_replace_with_other_kind_fails(self, two_bus_system):
        with pytest.raises(TypeMismatchError):
            two_bus_system.replace_component(Bus(name="gen-2-1", number=7))
        assert isinstance(two_bus_system.get_component(Component, "gen-2-1"), Generator)

    def test_replace_updates_references(self, two_bus_system):
        two_bus_system.add_component(Bus(name="bus3", number=3))
        two_bus_system.replace_component(Line(name="line12", from_bus="bus1", to_bus="bus3"))
        assert two_bus_system.registry.referrers("bus2") == ["gen-2-1", "load2"]
        assert two_bus_system.registry.referrers("bus3") == ["line12"]

    def test_replace_missing(self, two_bus_system):
        with pytest.raises(NotFoundError):
            two_bus_system.replace_component(Bus(name="bus9", number=9))


class TestSnapshot:

    def test_snapshot_is_independent(self, two_bus_system):
        snap = two_bus_system.snapshot()
        assert snap == two_bus_system
        two_bus_system.add_component(Bus(name="bus3", number=3))
        assert "bus3" not in snap
        assert snap != two_bus_system

    def test_snapshot_keeps_integrity_indexes(self, two_bus_system):
        snap = two_bus_system.snapshot()
        with pytest.raises(ReferentialIntegrityError):
            snap.remove_component("bus2")

    def test_equality_ignores_insertion_order(self):
        a = SystemDocument()
        b = SystemDocument()
        a.add_component(Bus(name="x", number=1))
        a.add_component(Bus(name="y", number=2))
        b.add_component(Bus(name="y", number=2))
        b.add_component(Bus(name="x", number=1))
        assert a == b


class TestConcurrency:

    def test_parallel_adds_all_land(self):
        system = SystemDocument()

        def worker(offset):
            for i in range(50):
                system.add_component(Bus(name=f"bus{offset + i}", number=offset + i + 1))

        threads = [threading.Thread(target=worker, args=(n * 1000,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(system) == 200

    def test_parallel_duplicate_adds_admit_exactly_one(self):
        system = SystemDocument()
        errors = []

        def worker(number):
            try:
                system.add_component(Bus(name="shared", number=number))
            except DuplicateNameError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n + 1,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(system) == 1
        assert len(errors) == 7
