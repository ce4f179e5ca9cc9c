from __future__ import annotations

from celery import Celery

from ebird_alerts.core.config import settings


def make_celery() -> Celery:
    app = Celery("ebird_alerts", broker=settings.redis_url, backend=settings.redis_url)
    app.conf.update(
        task_always_eager=settings.environment in {"dev", "test"},
        task_eager_propagates=True,
        task_track_started=True,
    )
    if settings.ingest_interval_seconds:
        app.conf.beat_schedule = {
            "ingest-mailbox": {
                "task": "ingest_mailbox",
                "schedule": float(settings.ingest_interval_seconds),
            }
        }
    app.autodiscover_tasks(["ebird_alerts.worker.tasks"])
    return app


celery_app = make_celery()
