"""
conftest.py — shared fixtures for all tests.

Strategy:
- The app runs against a throwaway SQLite file created for the test session;
  DATABASE_URL is set before anything from ``shiftlock`` is imported.
- The remote public-holiday calendar is disabled so the local one is used.
- Every API test starts from an empty store (``clean_db`` autouse fixture).
"""

from __future__ import annotations

import os
import tempfile
from datetime import date
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="shiftlock-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'test.db'}"
os.environ["PUBLIC_HOLIDAYS_API_ENABLED"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from shiftlock.db.repository import clear_state  # noqa: E402
from shiftlock.db.session import AsyncSessionLocal, init_db  # noqa: E402
from shiftlock.main import app  # noqa: E402
from shiftlock.schemas.shift import OffDay, Pause, WorkedDay  # noqa: E402

FIXTURES_DIR = _TMP_DIR / "fixtures"
FIXTURES_DIR.mkdir(exist_ok=True)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def clean_db():
    """Tables exist and are empty before the test."""
    await init_db()
    async with AsyncSessionLocal() as session:
        await clear_state(session)
    yield


# ---------------------------------------------------------------------------
# HTTP client fixture
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(clean_db) -> AsyncClient:
    """Fresh HTTPX async client per test function, on an empty store."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Day record builders
# ---------------------------------------------------------------------------


def worked(
    day: date,
    start: str,
    end: str,
    pauses: list[tuple[str, str] | tuple[str, str, str]] | None = None,
    is_night: bool = False,
) -> WorkedDay:
    """WorkedDay shorthand: pauses as (start, end[, location]) tuples."""
    return WorkedDay(
        date=day,
        start=start,
        end=end,
        pauses=[
            Pause(start=p[0], end=p[1], location=p[2] if len(p) > 2 else "ON_SITE")
            for p in pauses or []
        ],
        is_night=is_night,
    )


def off(day: date, status: str = "REST") -> OffDay:
    return OffDay(date=day, status=status)


@pytest.fixture
def monday() -> date:
    """Root Monday of the first fortnight (2026-01-19)."""
    return date(2026, 1, 19)
