"""Shared fixtures for the system model test suite."""

import pytest

from system_model import (
    Bus, BusType, Generator, Line, PowerLoad, Source, SystemDocument,
    compose, make_block,
)


@pytest.fixture
def generator_blocks():
    """Five valid generator blocks whose states sum to 6."""
    return {
        "Machine": make_block("BaseMachine"),
        "Shaft": make_block("SingleMass", H=3.148, D=2.0),
        "AVR": make_block("AVRTypeI"),
        "Governor": make_block("TGFixed"),
        "PSS": make_block("PSSFixed"),
    }


@pytest.fixture
def inverter_blocks():
    return {
        "Converter": make_block("AverageConverter"),
        "OuterControl": make_block("VirtualInertiaQDroop"),
        "InnerControl": make_block("VoltageModeControl"),
        "DCSource": make_block("FixedDCSource"),
        "FrequencyEstimator": make_block("KauraPLL"),
        "Filter": make_block("LCLFilter"),
    }


@pytest.fixture
def dynamic_generator(generator_blocks):
    return compose("Generator", "gen-2-1-dyn", 60.0, generator_blocks)


@pytest.fixture
def dynamic_inverter(inverter_blocks):
    return compose("Inverter", "inv-2-1-dyn", 60.0, inverter_blocks)


@pytest.fixture
def two_bus_system():
    """
    Reference bus with an infinite-bus source, PV bus with a generator and a
    PQ load, joined by one line.
    """
    system = SystemDocument(base_power=100.0, base_frequency=60.0, name="two-bus")
    system.add_component(Bus(name="bus1", number=1, bus_type=BusType.REF, base_voltage=230.0))
    system.add_component(Bus(name="bus2", number=2, bus_type=BusType.PV, base_voltage=230.0))
    system.add_component(Line(name="line12", from_bus="bus1", to_bus="bus2", r=0.01, x=0.1, b=0.02, rating=2.0))
    system.add_component(Source(name="InfBus", bus="bus1", r_th=0.0, x_th=5e-6))
    system.add_component(Generator(
        name="gen-2-1", bus="bus2", active_power=0.5, reactive_power=0.1,
        rating=1.0, active_power_min=0.0, active_power_max=1.0,
        reactive_power_min=-0.5, reactive_power_max=0.5,
    ))
    system.add_component(PowerLoad(name="load2", bus="bus2", active_power=0.3, reactive_power=0.05,
                                   max_active_power=0.3, max_reactive_power=0.05))
    return system
