import logging
import sys
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..dynamics.composer import DynamicInjection


def setup_logging(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
) -> None:
    """
    Setup basic logging configuration for the system_model package.

    Args:
        level: The logging level to use. Defaults to "INFO".
        log_format: Custom log format string. If None, uses default format.
        date_format: Custom date format string. If None, uses default format.
    """
    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    if date_format is None:
        date_format = "%Y-%m-%d %H:%M:%S"

    # Create a StreamHandler that writes to stderr
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=log_format, datefmt=date_format))

    logger = logging.getLogger("system_model")
    logger.setLevel(level.upper())
    logger.addHandler(handler)

    # Prevent the logger from propagating messages to the root logger
    logger.propagate = False


def print_system_summary(document, console: Optional[Console] = None) -> None:
    """
    Print component counts and the dynamic devices of ``document``.

    Works on a snapshot, so it is safe to call while other threads edit the
    document.
    """
    console = console or Console()
    snapshot = document.snapshot()

    counts = Table(show_header=True, header_style="bold white", expand=True)
    counts.add_column("Variant", style="bright_yellow")
    counts.add_column("Count", style="bold cyan", justify="right")
    for variant, count in snapshot.component_counts().items():
        counts.add_row(variant, str(count))

    devices = Table(show_header=True, header_style="bold white", expand=True)
    devices.add_column("Device", style="bright_green")
    devices.add_column("Attached to", style="bright_magenta")
    devices.add_column("States", style="bold cyan", justify="right")
    devices.add_column("Blocks")
    for device in snapshot.get_components(DynamicInjection):
        blocks = Text(", ".join(block.variant for block in device.blocks.values()))
        devices.add_row(
            device.name,
            device.static_injection or "-",
            str(device.state_dimension()),
            blocks,
        )

    title = (f"{snapshot.name or 'System'} - base {snapshot.base_power:g} MVA, "
             f"{snapshot.base_frequency:g} Hz")
    console.print(Panel(counts, expand=False, title=title, border_style="bold white"))
    if devices.row_count:
        console.print(Panel(devices, expand=False, title="Dynamic devices", border_style="bold white"))
