"""Logging with rich console output."""

import logging
import os
from contextlib import contextmanager
from datetime import datetime

from rich.console import Console
from rich.table import Table

console = Console()


def setup_logger(name: str = "swapcycle", log_dir: str = "data") -> logging.Logger:
    """Configure logger with file + console output."""
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    # File handler
    log_file = os.path.join(log_dir, f"swapcycle_{datetime.now():%Y%m%d}.log")
    fh = logging.FileHandler(log_file)
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    logger.addHandler(fh)

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    logger.addHandler(ch)

    return logger


def print_banner(accounts, cycle):
    """Print the startup banner with the account pool and the swap cycle."""
    console.print(f"\n[bold magenta]{'='*60}[/]")
    console.print(f"[bold magenta]  SWAPCYCLE — started with {len(accounts)} wallet(s)[/]")
    console.print(f"[bold magenta]{'='*60}[/]\n")

    table = Table(title="Swap Cycle")
    table.add_column("#", style="dim")
    table.add_column("From", style="cyan")
    table.add_column("To", style="cyan")
    table.add_column("Amount (base units)", style="green", justify="right")
    for i, step in enumerate(cycle):
        table.add_row(str(i), step.source.symbol, step.destination.symbol, str(step.amount))
    console.print(table)


@contextmanager
def countdown(seconds: float):
    """Show a spinner while waiting, when attached to a terminal."""
    if console.is_terminal:
        with console.status(
            f"[bold green]Next action in {seconds:.0f}s...[/]", spinner="dots"
        ):
            yield
    else:
        yield
