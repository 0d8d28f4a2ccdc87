# impactnow/models/skill.py

from sqlalchemy import Index

from .base import BaseModel, db


class Skill(BaseModel):
    """Skill catalog entry that events can require and volunteers can offer"""

    __tablename__ = "skills"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.String(255), nullable=True)

    def __repr__(self):
        return f"<Skill {self.name}>"

    def to_dict(self):
        return {"id": self.id, "name": self.name, "description": self.description}


class UserSkill(BaseModel):
    """Junction table linking a volunteer to the skills they offer"""

    __tablename__ = "user_skills"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    skill_id = db.Column(db.Integer, db.ForeignKey("skills.id"), nullable=False)
    proficiency_level = db.Column(db.String(20), nullable=True)

    user = db.relationship("User", back_populates="skill_links")
    skill = db.relationship("Skill")

    __table_args__ = (
        Index("idx_user_skill", "user_id", "skill_id"),
        db.UniqueConstraint("user_id", "skill_id", name="_user_skill_uc"),
    )

    def __repr__(self):
        return f"<UserSkill user={self.user_id} skill={self.skill_id}>"
