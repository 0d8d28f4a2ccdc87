# impactnow/models/location.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db


class Location(BaseModel):
    """Catalog of venues an event can take place at"""

    __tablename__ = "locations"

    id = db.Column(db.Integer, primary_key=True)
    venue_name = db.Column(db.String(200), nullable=False, index=True)
    address = db.Column(db.String(255), nullable=True)

    events = db.relationship("Event", back_populates="location")

    def __repr__(self):
        return f"<Location {self.venue_name}>"

    @property
    def display_name(self):
        """``venue, address`` as shown on event listings"""
        if self.address:
            return f"{self.venue_name}, {self.address}"
        return self.venue_name

    def to_dict(self):
        return {
            "id": self.id,
            "venue_name": self.venue_name,
            "address": self.address,
            "name": self.display_name,
        }

    @staticmethod
    def find_by_venue(venue_name):
        """Find a location by exact venue name with error handling"""
        try:
            return Location.query.filter_by(venue_name=venue_name).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding location {venue_name}: {str(e)}")
            return None
