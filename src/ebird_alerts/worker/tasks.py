from __future__ import annotations

# Ensure all models are registered before any task runs
# isort: off
import ebird_alerts.models  # noqa: F401
# isort: on

import time

from ebird_alerts.core.logging import (
    get_logger,
    log_event,
    log_exception,
    monotonic_ms,
    reset_task_context,
    set_task_context,
)
from ebird_alerts.worker.celery_app import celery_app

logger = get_logger(__name__)


@celery_app.task(name="ingest_mailbox", bind=True)
def ingest_mailbox_task(self, max_workers: int | None = None) -> dict:
    from ebird_alerts.modules.ingestion.service import run_ingestion
    from ebird_alerts.modules.mailbox.sources import get_mail_source

    task_id = getattr(self.request, "id", None)
    token = set_task_context(task_id)
    start = time.monotonic()
    log_event(
        logger,
        "celery.task.start",
        task_name="ingest_mailbox",
        celery_task_id=task_id,
    )
    try:
        with get_mail_source() as mail:
            summary = run_ingestion(mail, max_workers=max_workers)
        log_event(
            logger,
            "celery.task.finish",
            task_name="ingest_mailbox",
            celery_task_id=task_id,
            ok=summary.ok,
            duration_ms=monotonic_ms(start),
        )
        return summary.as_dict()
    except Exception:
        log_exception(
            logger,
            "celery.task.error",
            task_name="ingest_mailbox",
            celery_task_id=task_id,
            duration_ms=monotonic_ms(start),
        )
        raise
    finally:
        reset_task_context(token)
