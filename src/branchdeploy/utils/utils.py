"""
Utilities for the branchdeploy CLI application.

This module provides utility functions for display and logging.
"""

import logging
import os
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.text import Text

from branchdeploy.core.constants import LOG_DIR_VAR

# Create a shared console instance for consistent output
console = Console()


name = "branchdeploy"
version = "Version 1.0.0"

def info(text: Text) -> None:
    """
    Display an information message in a styled panel.

    Args:
        text (Text): The text to display
    """
    panel = Panel(text, title=name, title_align="left", subtitle=f"{version}", subtitle_align="left")
    console.print(panel)
    return None

def create_progress() -> Progress:
    """
    Create and return a Progress object for directory uploads.

    The bar counts files; the size column is filled by the caller.

    Returns:
        Progress: The configured Progress object
    """
    return Progress(
        SpinnerColumn(style="cyan"),
        TextColumn("{task.description}", justify="right"),
        BarColumn(bar_width=40),
        "[progress.percentage]{task.percentage:>3.0f}%",
        "•",
        TextColumn("{task.fields[size]}", justify="right"),
        "•",
        TimeElapsedColumn(),
        refresh_per_second=10,
        transient=True,  # Use the same line for updates
        console=console  # Use the shared console instance
    )

def log_folder() -> Path:
    """Directory the log files are written to."""
    configured = os.environ.get(LOG_DIR_VAR)
    if configured:
        return Path(configured)
    return Path.home() / ".branchdeploy" / "log"

def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure and return a logger for the application.

    Args:
        verbose (bool, optional): If True, display debug messages in the console. Defaults to False.

    Returns:
        logging.Logger: The configured logger
    """
    folder = log_folder()
    os.makedirs(folder, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = folder / f"log_{timestamp}.log"

    # Remove all handlers for root logger
    logger = logging.getLogger()
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(logging.DEBUG)

    # File handler (DEBUG level) with UTF-8 encoding
    fh = logging.FileHandler(log_filename, encoding='utf-8')
    fh.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    fh.setFormatter(file_formatter)
    logger.addHandler(fh)

    # Rich console handler (INFO or DEBUG level based on verbose)
    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
        level=logging.DEBUG if verbose else logging.INFO
    )
    logger.addHandler(rich_handler)

    # boto3 and GitPython are chatty at DEBUG level
    for noisy in ("botocore", "boto3", "s3transfer", "urllib3", "git"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
