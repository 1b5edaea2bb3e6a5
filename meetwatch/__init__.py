"""
Meetwatch - Video meeting extraction and calendar synchronization

Scans calendar events for embedded Zoom and Google Meet links, turns the
qualifying events into immutable meeting records, and keeps that list fresh
on a timer that follows host sleep/wake signals.

Components:
    calendar/: Classifier, extractor, record builder, sync coordinator
    config.py: YAML configuration validated with pydantic
    logging_config.py: structlog setup shared by every module
    cli.py: `meetwatch` command line entry point
"""

from pathlib import Path


# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
CONFIG_PATH = ARGS_DIR / "meetwatch.yaml"

__version__ = "0.1.0"

__all__ = [
    "ARGS_DIR",
    "CONFIG_PATH",
    "PROJECT_ROOT",
    "__version__",
]
