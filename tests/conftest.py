"""
Shared fixtures: deterministic catalog, in-memory storage, fixed clock.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from pytzline.catalog import TimeZoneCatalog  # noqa: E402
from pytzline.projection import TimeProjector  # noqa: E402
from pytzline.storage import MemoryStore  # noqa: E402

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog():
    """Catalog whose system zone is pinned to UTC."""
    return TimeZoneCatalog(local_zone_id="UTC")


@pytest.fixture
def projector(catalog):
    return TimeProjector(catalog)


@pytest.fixture
def backend():
    return MemoryStore()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
