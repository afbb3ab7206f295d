"""Tests for logging setup and the rich system summary."""

import logging

from rich.console import Console

from system_model import attach
from system_model.utils import print_system_summary, setup_logging


def test_setup_logging_configures_package_logger():
    logger = logging.getLogger("system_model")
    handlers = list(logger.handlers)
    try:
        setup_logging("debug")
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == len(handlers) + 1
    finally:
        logger.handlers = handlers
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


def test_summary_lists_counts_and_devices(two_bus_system, dynamic_generator):
    attach(two_bus_system, dynamic_generator, "gen-2-1")
    console = Console(record=True, width=140)
    print_system_summary(two_bus_system, console=console)
    text = console.export_text()
    assert "two-bus" in text
    assert "Generator" in text
    assert "gen-2-1-dyn" in text
    assert "AVRTypeI" in text


def test_summary_without_devices(two_bus_system):
    console = Console(record=True, width=140)
    print_system_summary(two_bus_system, console=console)
    text = console.export_text()
    assert "PowerLoad" in text
    assert "Dynamic devices" not in text
