"""
Integration test fixtures for meetwatch.

Provides fixtures specific to integration testing:
- A coordinator wired to a real .ics file and a lifecycle hub
- A config file on disk pointing at that calendar
"""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from meetwatch.calendar.coordinator import SyncCoordinator
from meetwatch.calendar.lifecycle import HostLifecycle
from meetwatch.calendar.providers import get_source
from meetwatch.config import MeetwatchConfig


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent.parent


# ─────────────────────────────────────────────────────────────────────────────
# Coordinator Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def ics_config(ics_file: Path) -> MeetwatchConfig:
    """Config reading the sample calendar in UTC with a one-hour timer."""
    return MeetwatchConfig.model_validate(
        {
            "refresh": {"interval_seconds": 3600, "wake_refresh_delay_seconds": 0},
            "source": {"ics_path": str(ics_file)},
            "display": {"timezone": "UTC"},
        }
    )


@pytest.fixture
def config_file(tmp_path: Path, ics_file: Path) -> Path:
    """Write a meetwatch.yaml pointing at the sample calendar.

    Returns:
        Path to the YAML file
    """
    path = tmp_path / "meetwatch.yaml"
    path.write_text(
        "source:\n"
        f"  ics_path: {ics_file}\n"
        "display:\n"
        "  timezone: UTC\n"
        "logging:\n"
        "  level: WARNING\n"
    )
    return path


@pytest.fixture
def ics_clock() -> Callable[[], datetime]:
    """Clock fixed at 2024-03-15 10:00 UTC, matching the sample calendar."""
    return lambda: datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def lifecycle() -> HostLifecycle:
    return HostLifecycle()


@pytest_asyncio.fixture
async def ics_coordinator(
    ics_config: MeetwatchConfig,
    lifecycle: HostLifecycle,
    ics_clock: Callable[[], datetime],
) -> AsyncGenerator[SyncCoordinator, None]:
    """Coordinator over the sample .ics file, closed after the test."""
    coordinator = SyncCoordinator(
        get_source(ics_config),
        config=ics_config,
        lifecycle=lifecycle,
        clock=ics_clock,
    )

    yield coordinator

    await coordinator.close()
