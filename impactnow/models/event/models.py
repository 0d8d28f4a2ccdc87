# impactnow/models/event/models.py

from sqlalchemy import Index

from ..base import BaseModel, db

DEFAULT_URGENCY = "Medium"


class Event(BaseModel):
    """Volunteering opportunity held at a catalog location"""

    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    max_volunteers = db.Column(db.Integer, nullable=False, default=0)
    # Free-form label (Low/Medium/High by convention)
    urgency = db.Column(db.String(50), nullable=False, default=DEFAULT_URGENCY, index=True)
    location_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=False, index=True)

    location = db.relationship("Location", back_populates="events")

    __table_args__ = (Index("idx_event_date_urgency", "date", "urgency"),)

    def __repr__(self):
        return f"<Event {self.name}>"


class EventSkill(BaseModel):
    """Junction table for the many-to-many relationship between events and skills"""

    __tablename__ = "event_skills"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey("skills.id"), nullable=False)

    skill = db.relationship("Skill")

    __table_args__ = (
        Index("idx_event_skill", "event_id", "skill_id"),
        db.UniqueConstraint("event_id", "skill_id", name="_event_skill_uc"),
    )

    def __repr__(self):
        return f"<EventSkill event={self.event_id} skill={self.skill_id}>"


class VolunteeringHistory(BaseModel):
    """A volunteer matched to (or signed up for) an event; checkin marks attendance"""

    __tablename__ = "volunteering_history"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    checkin = db.Column(db.Boolean, default=False, nullable=False)

    event = db.relationship("Event")
    user = db.relationship("User")

    __table_args__ = (
        Index("idx_history_event_checkin", "event_id", "checkin"),
        db.UniqueConstraint("event_id", "user_id", name="_event_history_uc"),
    )

    def __repr__(self):
        return f"<VolunteeringHistory event={self.event_id} user={self.user_id}>"
