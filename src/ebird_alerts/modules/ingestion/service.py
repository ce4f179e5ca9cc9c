from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field

from sqlalchemy.orm import Session

from ebird_alerts.core.config import settings
from ebird_alerts.core.db import SessionLocal
from ebird_alerts.core.logging import (
    get_logger,
    log_event,
    log_exception,
    monotonic_ms,
    reset_message_context,
    set_message_context,
)
from ebird_alerts.modules.extraction.errors import MalformedDigest
from ebird_alerts.modules.extraction.parsers.ebird_digest import DigestKind, parse_digest
from ebird_alerts.modules.mailbox.sources import MailSource
from ebird_alerts.modules.sightings.service import insert_sighting

logger = get_logger(__name__)


class MessageStatus(str, enum.Enum):
    INGESTED = "INGESTED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass
class MessageOutcome:
    message_id: str
    status: MessageStatus
    kind: DigestKind | None = None
    created: int = 0
    duplicates: int = 0
    dropped_blocks: int = 0
    marked_read: bool = False
    error: str | None = None


@dataclass
class IngestionSummary:
    outcomes: list[MessageOutcome] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return all(o.status is not MessageStatus.FAILED for o in self.outcomes)

    def count(self, status: MessageStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "message_count": len(self.outcomes),
            "ingested": self.count(MessageStatus.INGESTED),
            "skipped": self.count(MessageStatus.SKIPPED),
            "failed": self.count(MessageStatus.FAILED),
            "created": sum(o.created for o in self.outcomes),
            "duplicates": sum(o.duplicates for o in self.outcomes),
            "dropped_blocks": sum(o.dropped_blocks for o in self.outcomes),
            "duration_ms": self.duration_ms,
            "outcomes": [
                {**asdict(o), "status": o.status.value, "kind": o.kind.value if o.kind else None}
                for o in self.outcomes
            ],
        }


def ingest_message(
    mail: MailSource,
    message_id: str,
    *,
    session_factory: Callable[[], Session] = SessionLocal,
) -> MessageOutcome:
    """
    One unit of work: fetch, parse, persist every record, commit, then mark read.

    Never raises. A message is marked read only after its records are committed,
    so a crash in between is recovered by reprocessing; the natural-key
    constraint makes that reprocessing a no-op.
    """
    token = set_message_context(message_id)
    start = time.monotonic()
    outcome = MessageOutcome(message_id=message_id, status=MessageStatus.FAILED)
    try:
        _run_unit(mail, message_id, outcome=outcome, session_factory=session_factory)
    except MalformedDigest as e:
        outcome.error = f"MalformedDigest: {e}"
        log_event(logger, "ingestion.message.malformed", level=logging.WARNING, error=str(e))
    except Exception as e:  # noqa: BLE001
        outcome.error = f"{type(e).__name__}: {e}"
        log_exception(logger, "ingestion.message.error", error_type=type(e).__name__)
    finally:
        log_event(
            logger,
            "ingestion.message.finish",
            status=outcome.status.value,
            kind=outcome.kind.value if outcome.kind else None,
            created=outcome.created,
            duplicates=outcome.duplicates,
            dropped_blocks=outcome.dropped_blocks,
            marked_read=outcome.marked_read,
            duration_ms=monotonic_ms(start),
        )
        reset_message_context(token)
    return outcome


def _run_unit(
    mail: MailSource,
    message_id: str,
    *,
    outcome: MessageOutcome,
    session_factory: Callable[[], Session],
) -> None:
    digest = mail.fetch(message_id)
    if not digest.is_unread:
        outcome.status = MessageStatus.SKIPPED
        return

    parsed = parse_digest(digest.body_text)
    outcome.kind = parsed.kind
    if parsed.kind is DigestKind.IRRELEVANT:
        # Not ours: leave it unread for whoever reads the mailbox.
        outcome.status = MessageStatus.SKIPPED
        return
    outcome.dropped_blocks = len(parsed.failures)

    with session_factory() as session:
        try:
            for record in parsed.records:
                if insert_sighting(session, record):
                    outcome.created += 1
                else:
                    outcome.duplicates += 1
            session.commit()
        except Exception:
            session.rollback()
            raise

    mail.mark_read(message_id)
    outcome.marked_read = True
    outcome.status = MessageStatus.INGESTED


def run_ingestion(
    mail: MailSource,
    *,
    max_workers: int | None = None,
    session_factory: Callable[[], Session] = SessionLocal,
) -> IngestionSummary:
    """One batch pass over the currently unread messages."""
    start = time.monotonic()
    workers = max(1, max_workers or settings.ingest_max_workers)
    message_ids = mail.list_unread_ids()
    log_event(logger, "ingestion.run.start", message_count=len(message_ids), max_workers=workers)

    summary = IngestionSummary()
    if message_ids:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ingest") as pool:
            summary.outcomes = list(
                pool.map(
                    lambda mid: ingest_message(mail, mid, session_factory=session_factory),
                    message_ids,
                )
            )
    summary.duration_ms = monotonic_ms(start)

    log_event(
        logger,
        "ingestion.run.finish",
        level=logging.INFO if summary.ok else logging.WARNING,
        **{k: v for k, v in summary.as_dict().items() if k != "outcomes"},
    )
    return summary
