"""Root conftest.py for the labswitch monorepo.

Puts every package's ``src`` directory on ``sys.path`` so the suite runs from
a plain checkout, and registers the markers shared by all packages.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from _pytest.config import Config


# Add all package src directories to path for imports
PROJECT_ROOT = Path(__file__).parent
for pkg_dir in PROJECT_ROOT.glob("labswitch-*/src"):
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "integration: Integration test requiring real hardware",
    )
    config.addinivalue_line(
        "markers",
        "slow: Slow-running test",
    )


def pytest_report_header(config: Config) -> list[str]:
    """Report which switch, if any, the integration tests will drive.

    Args:
        config: pytest configuration object.

    Returns:
        List of header lines.
    """
    lines = ["labswitch monorepo test suite"]
    address = os.environ.get("LABSWITCH_SWITCH_ADDRESS")
    if address:
        lines.append(f"34980A integration target: {address}")
    return lines
