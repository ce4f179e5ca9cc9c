from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ebird_alerts.core.logging import get_logger, log_event
from ebird_alerts.modules.extraction.parsers.ebird_digest import ParsedSighting
from ebird_alerts.modules.sightings.models import Sighting

logger = get_logger(__name__)


class PersistenceError(RuntimeError):
    pass


def list_sightings(session: Session) -> list[Sighting]:
    return list(
        session.scalars(
            select(Sighting).order_by(Sighting.date_reported, Sighting.common_name, Sighting.id)
        )
    )


def insert_sighting(session: Session, parsed: ParsedSighting) -> bool:
    """
    Insert one parsed sighting. Returns False when the natural key already exists.

    The uniqueness constraint is the only dedupe mechanism, so concurrent runs
    over the same message need no locking. The caller owns the commit.
    """
    sighting = Sighting(
        rare=parsed.rare,
        common_name=parsed.common_name,
        scientific_name=parsed.scientific_name,
        date_reported=parsed.date_reported,
        reported_by=parsed.reported_by,
        location_name=parsed.location_name,
        lat=parsed.lat,
        lng=parsed.lng,
        map_link=parsed.map_link,
        checklist_link=parsed.checklist_link,
    )
    try:
        with session.begin_nested():
            session.add(sighting)
            session.flush()
    except IntegrityError:
        log_event(
            logger,
            "sighting.duplicate",
            common_name=parsed.common_name,
            date_reported=parsed.date_reported,
            reported_by=parsed.reported_by,
        )
        return False
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to store sighting {parsed.common_name!r}") from e

    log_event(
        logger,
        "sighting.insert",
        sighting_id=str(sighting.id),
        common_name=parsed.common_name,
        scientific_name=parsed.scientific_name,
        date_reported=parsed.date_reported,
        rare=parsed.rare,
    )
    return True
