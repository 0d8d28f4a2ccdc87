# impactnow/models/user.py

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseModel, db

ROLE_VOLUNTEER = "volunteer"
ROLE_ADMIN = "admin"


class User(BaseModel):
    """Application user with profile fields; volunteers are users with the volunteer role"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    phone_number = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), default=ROLE_VOLUNTEER, nullable=False, index=True)

    # Profile
    first_name = db.Column(db.String(50), nullable=True)
    last_name = db.Column(db.String(50), nullable=True)
    location = db.Column(db.String(200), nullable=True)

    skill_links = db.relationship("UserSkill", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.username}>"

    @property
    def is_volunteer(self):
        return self.role == ROLE_VOLUNTEER

    def get_full_name(self):
        """Full name from the profile, falling back to the username"""
        parts = [part for part in (self.first_name, self.last_name) if part]
        if parts:
            return " ".join(parts)
        return self.username

    def skill_names(self):
        return sorted(link.skill.name for link in self.skill_links if link.skill is not None)

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "phone": self.phone_number,
            "role": self.role,
            "fullName": self.get_full_name(),
            "location": self.location,
            "skills": self.skill_names(),
        }

    @staticmethod
    def find_by_username(username):
        """Find user by username with error handling"""
        try:
            return User.query.filter_by(username=username).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by username {username}: {str(e)}")
            return None

    @staticmethod
    def find_by_email(email):
        """Find user by email with error handling"""
        try:
            return User.query.filter_by(email=email).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by email {email}: {str(e)}")
            return None
