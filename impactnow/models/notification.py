# impactnow/models/notification.py

from datetime import datetime, timezone

from sqlalchemy import Index

from .base import BaseModel, db


class Notification(BaseModel):
    """Message sent to a volunteer, always tied to an event"""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    message = db.Column(db.String(200), nullable=False)
    sent_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    user = db.relationship("User")
    event = db.relationship("Event")

    __table_args__ = (Index("idx_notification_user_sent", "user_id", "sent_at"),)

    def __repr__(self):
        return f"<Notification user={self.user_id} event={self.event_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "eventId": self.event_id,
            "eventName": self.event.name if self.event else None,
            "username": self.user.username if self.user else None,
            "email": self.user.email if self.user else None,
            "message": self.message,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
        }
