"""Tests for connectivity queries and the advisory connectivity check."""

import pytest

from system_model import Bus, BusType, Line, NotFoundError, Source, SystemDocument, TopologyAnalyzer


class TestConnectivityQueries:

    def test_degree_and_branch_lists(self, two_bus_system):
        analyzer = TopologyAnalyzer(two_bus_system)
        assert analyzer.bus_degree("bus1") == 1
        assert analyzer.branches_at("bus2") == ["line12"]
        assert analyzer.injections_at("bus2") == ["gen-2-1", "load2"]

    def test_parallel_branches_are_counted(self, two_bus_system):
        two_bus_system.add_component(Line(name="line12b", from_bus="bus1", to_bus="bus2", x=0.2))
        analyzer = TopologyAnalyzer(two_bus_system)
        assert analyzer.bus_degree("bus1") == 2
        assert sorted(analyzer.branches_at("bus1")) == ["line12", "line12b"]

    def test_orphan_buses(self, two_bus_system):
        two_bus_system.add_component(Bus(name="bus3", number=3))
        analyzer = TopologyAnalyzer(two_bus_system)
        assert analyzer.orphan_buses() == ["bus3"]
        assert len(analyzer.islands()) == 2

    def test_unavailable_branch_splits_the_network(self, two_bus_system):
        two_bus_system.replace_component(
            Line(name="line12", from_bus="bus1", to_bus="bus2", x=0.1, available=False)
        )
        analyzer = TopologyAnalyzer(two_bus_system)
        assert analyzer.bus_degree("bus1") == 0
        assert analyzer.islands() == [{"bus1"}, {"bus2"}]

    def test_unknown_bus(self, two_bus_system):
        with pytest.raises(NotFoundError, match="bus9"):
            TopologyAnalyzer(two_bus_system).bus_degree("bus9")

    def test_analyzer_does_not_follow_later_edits(self, two_bus_system):
        analyzer = TopologyAnalyzer(two_bus_system)
        two_bus_system.add_component(Bus(name="bus3", number=3))
        assert analyzer.orphan_buses() == []


class TestValidateConnectivity:

    def test_valid_network(self, two_bus_system):
        result = TopologyAnalyzer(two_bus_system).validate_connectivity()
        assert result.is_valid
        assert result.get_summary() == {"errors": 0, "warnings": 0, "infos": 0}
        assert result.details["islands"] == 1

    def test_island_without_reference_bus(self, two_bus_system):
        two_bus_system.add_component(Bus(name="bus3", number=3, bus_type=BusType.PQ))
        result = TopologyAnalyzer(two_bus_system).validate_connectivity()
        assert not result.is_valid
        assert [e.location for e in result.errors] == ["bus3"]
        assert [i.location for i in result.infos] == ["bus3"]

    def test_island_with_two_reference_buses(self):
        system = SystemDocument()
        system.add_component(Bus(name="a", number=1, bus_type=BusType.REF))
        system.add_component(Bus(name="b", number=2, bus_type=BusType.REF))
        system.add_component(Line(name="ab", from_bus="a", to_bus="b", x=0.1))
        system.add_component(Source(name="sa", bus="a"))
        system.add_component(Source(name="sb", bus="b"))
        result = TopologyAnalyzer(system).validate_connectivity()
        assert len(result.errors) == 1
        assert "2 reference buses" in result.errors[0].message

    def test_reference_bus_without_source_is_only_a_warning(self):
        # Legal intermediate state while a network is being built
        system = SystemDocument()
        system.add_component(Bus(name="a", number=1, bus_type=BusType.REF))
        result = TopologyAnalyzer(system).validate_connectivity()
        assert result.is_valid
        assert [w.location for w in result.warnings] == ["a"]

    def test_report(self, two_bus_system):
        report = TopologyAnalyzer(two_bus_system).get_connectivity_report()
        assert "Islands: 1" in report
        assert "Status: VALID" in report
