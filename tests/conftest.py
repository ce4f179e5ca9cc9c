from __future__ import annotations

import os

import pytest

# Set env before any ebird_alerts imports (settings/engine are created at import time).
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./.ebird_alerts_test.db")
os.environ.setdefault("MAIL_BACKEND", "local")
os.environ.setdefault("LOCAL_MAILBOX_PATH", ".tmp_mailbox_test")

SECTION_START = "visit: https://ebird.org/news/please-bird-mindfully\r\n\r\n"


@pytest.fixture(autouse=True)
def _reset_db() -> None:
    import ebird_alerts.models  # noqa: F401
    from ebird_alerts.core.db import engine
    from ebird_alerts.core.models import Base

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield


@pytest.fixture
def make_block():
    def _make(
        name: str = "Mottled Duck (Anas fulvigula) (1)",
        *,
        reported: str = "Jan 03, 2023 08:12",
        reporter: str = "Jane Doe",
        location: str = "Huguenot Memorial Park, Duval, Florida, US",
        lat: str = "30.123",
        lng: str = "-81.456",
        checklist: str = "https://ebird.org/checklist/S123456789",
        include_checklist: bool = True,
    ) -> str:
        lines = [
            name,
            f"- Reported {reported} by {reporter}",
            f"- {location}",
            f"- Map: http://maps.google.com/?ie=UTF8&t=p&z=13&q={lat},{lng}&ll={lat},{lng}",
        ]
        if include_checklist:
            lines.append(f"- Checklist: {checklist}")
        return "\r\n".join(lines)

    return _make


@pytest.fixture
def make_digest():
    def _make(blocks: list[str], *, title: str = "eBird Needs Alert for Southern Florida") -> str:
        header = (
            f"*** Species Summary:\r\n\r\n{title}\r\n\r\n"
            "Thank you for birding responsibly. For guidance on sharing sightings, "
            f"please {SECTION_START}"
        )
        footer = (
            "\r\n\r\n***********\r\n\r\n"
            "You received this message because you are subscribed to eBird alerts.\r\n"
        )
        return header + "\r\n\r\n".join(blocks) + footer

    return _make
