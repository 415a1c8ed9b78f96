"""Demo mode configuration and data for running without a cleaner.

Provides a hardcoded device snapshot, ML batches and schedule so the
dashboard can be exercised on any machine against the in-memory backend
in :mod:`.demo_server`.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone

from .config import DashboardConfig

# ---------------------------------------------------------------------------
# Demo ML batches; the first five mirror what the device typically reports
# ---------------------------------------------------------------------------

DEMO_BATCHES: list[dict] = [
    {
        "id": "1",
        "name": "Batch 2023-05-01",
        "date": "2023-05-01",
        "damageCount": 5,
        "images": [
            {"id": "1a", "url": "https://example.com/batch1-image1.jpg", "damageCount": 2},
            {"id": "1b", "url": "https://example.com/batch1-image2.jpg", "damageCount": 3},
        ],
    },
    {
        "id": "2",
        "name": "Batch 2023-05-02",
        "date": "2023-05-02",
        "damageCount": 3,
        "images": [
            {"id": "2a", "url": "https://example.com/batch2-image1.jpg", "damageCount": 3},
        ],
    },
    {
        "id": "3",
        "name": "Batch 2023-05-03",
        "date": "2023-05-03",
        "damageCount": 7,
        "images": [
            {"id": "3a", "url": "https://example.com/batch3-image1.jpg", "damageCount": 2},
            {"id": "3b", "url": "https://example.com/batch3-image2.jpg", "damageCount": 3},
            {"id": "3c", "url": "https://example.com/batch3-image3.jpg", "damageCount": 2},
        ],
    },
    {
        "id": "4",
        "name": "Batch 2023-05-04",
        "date": "2023-05-04",
        "damageCount": 2,
        "images": [{"id": "4a", "url": "https://example.com/placeholder4.jpg", "damageCount": 2}],
    },
    {
        "id": "5",
        "name": "Batch 2023-05-05",
        "date": "2023-05-05",
        "damageCount": 4,
        "images": [{"id": "5a", "url": "https://example.com/placeholder5.jpg", "damageCount": 4}],
    },
] + [
    # A second page's worth so pagination has something to do
    {
        "id": str(n),
        "name": f"Batch 2023-05-{n:02d}",
        "date": f"2023-05-{n:02d}",
        "damageCount": n % 4,
        "images": [
            {
                "id": f"{n}a",
                "url": f"https://example.com/placeholder{n}.jpg",
                "damageCount": n % 4,
            },
        ],
    }
    for n in range(6, 13)
]

DEMO_SCHEDULE: list[dict] = [
    {"day": "Monday", "time": "08:00"},
    {"day": "Wednesday", "time": "08:00"},
    {"day": "Saturday", "time": "10:30"},
]


def create_demo_config(port: int = 5050) -> DashboardConfig:
    """Create a DashboardConfig pointing at the local demo backend."""
    return DashboardConfig(server_url=f"http://127.0.0.1:{port}", demo_port=port)


def get_demo_status() -> dict:
    """Return a fresh device snapshot with five alternating on/off events."""
    now = datetime.now(timezone.utc)
    history = [
        {"state": bool(i % 2), "time": (now - timedelta(hours=4 - i)).isoformat()}
        for i in range(5)
    ]
    return {
        "isCleanerOn": False,
        "isActive": False,
        "onOffHistory": history,
        "lastCleaningTime": "2 hours ago",
        "imagesCaptured": sum(len(b["images"]) for b in DEMO_BATCHES),
    }


def get_demo_batches() -> list[dict]:
    """Return a fresh copy of the demo batches."""
    return copy.deepcopy(DEMO_BATCHES)


def get_demo_schedule() -> list[dict]:
    """Return a fresh copy of the demo schedule."""
    return copy.deepcopy(DEMO_SCHEDULE)
