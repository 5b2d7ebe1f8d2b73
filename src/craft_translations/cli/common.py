"""Shared CLI utilities - colors, console, helpers.

SilkCircuit Design Language for consistent terminal output.
"""

from rich import box
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

# SilkCircuit color palette
ELECTRIC_PURPLE = "#e135ff"
NEON_CYAN = "#80ffea"
CORAL = "#ff6ac1"
ELECTRIC_YELLOW = "#f1fa8c"
SUCCESS_GREEN = "#50fa7b"
ERROR_RED = "#ff6363"

# Shared console instance (for styled output only, NOT for catalog content)
console = Console()


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[{SUCCESS_GREEN}]✓[/{SUCCESS_GREEN}] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[{ERROR_RED}]✗[/{ERROR_RED}] {message}")


def warn(message: str) -> None:
    """Print a warning message."""
    console.print(f"[{ELECTRIC_YELLOW}]![/{ELECTRIC_YELLOW}] {message}")


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[{NEON_CYAN}]→[/{NEON_CYAN}] {message}")


def create_table(title: str | None = None, *columns: str) -> Table:
    """Create a styled table with SilkCircuit colors.

    Uses SIMPLE_HEAD box style - just a header underline, no heavy frames.
    """
    table = Table(title=title, box=box.SIMPLE_HEAD, header_style=f"bold {NEON_CYAN}")
    for i, col in enumerate(columns):
        style = ELECTRIC_PURPLE if i == 0 else None
        justify = "right" if col.lower() in ("count", "messages", "files") else "left"
        table.add_column(col, style=style, justify=justify)
    return table


def spinner() -> Progress:
    """Create a spinner progress indicator."""
    return Progress(
        SpinnerColumn(style=NEON_CYAN),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )
