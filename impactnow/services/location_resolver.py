"""
Map free-text "venue, address" strings onto the location catalog.

Events are created from a form where the location is typed or picked as
text, so the resolver tries an exact venue match first and then falls back
to a substring match before giving up.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from impactnow.models import Location, db

logger = logging.getLogger(__name__)


def extract_venue(location_text: str | None) -> str | None:
    """Return the trimmed text before the first comma, or ``None`` for blank input."""
    if location_text is None or not isinstance(location_text, str):
        return None
    venue = location_text.split(",", 1)[0].strip()
    return venue or None


class LocationResolver:
    """Exact-then-partial venue lookup. Storage errors propagate to the caller."""

    def __init__(self, session: Session | None = None):
        self.session = session or db.session

    def resolve(self, location_text: str | None) -> int | None:
        venue = extract_venue(location_text)
        if venue is None:
            return None

        location_id = self.session.scalar(
            select(Location.id).where(Location.venue_name == venue).order_by(Location.id).limit(1)
        )
        if location_id is not None:
            return location_id

        location_id = self.session.scalar(
            select(Location.id)
            .where(Location.venue_name.contains(venue, autoescape=True))
            .order_by(Location.id)
            .limit(1)
        )
        if location_id is None:
            logger.info("No location matches venue %r", venue)
        return location_id


def resolve_location(location_text: str | None, session: Session | None = None) -> int | None:
    return LocationResolver(session).resolve(location_text)
